"""
Pipeline Configuration -- settings and per-run context
========================================================

``PipelineSettings`` is read once from the environment at process start and
is immutable for the rest of the run.  ``RunContext`` carries the state a
single pipeline invocation accumulates: today's date, the slugs already
published or generated, and which content providers have failed and must be
skipped for the remainder of the run.

Usage:
    from clawseo.config import PipelineSettings, RunContext

    settings = PipelineSettings.from_env()
    ctx = RunContext.create(settings)
    if ctx.is_available("gemini"):
        ...
"""

from __future__ import annotations

import logging
import os
import uuid
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Set

logger = logging.getLogger("config")

if not logger.handlers:
    _handler = logging.StreamHandler()
    _handler.setFormatter(
        logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(_handler)
    logger.setLevel(logging.INFO)

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_CONTENT_DIR = Path("src") / "content" / "articles"
DEFAULT_DATA_DIR = Path("data") / "knowledge-base"
DEFAULT_MODEL = "gemini-3-flash-preview"
DEFAULT_MAX_ARTICLES = 3
DEFAULT_TIMEOUT = 15.0
DEFAULT_RETRIES = 2

# Bounds for network tuning; out-of-range env values are clamped, not rejected
TIMEOUT_BOUNDS = (10.0, 20.0)
RETRY_BOUNDS = (1, 2)


# ---------------------------------------------------------------------------
# Env parsing helpers
# ---------------------------------------------------------------------------


def _env_str(env: Mapping[str, str], *names: str, default: str = "") -> str:
    for name in names:
        value = env.get(name, "").strip()
        if value:
            return value
    return default


def _env_flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


def _parse_count(raw: str, fallback: int) -> int:
    """Parse a non-negative integer count, returning *fallback* on garbage."""
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return fallback
    return value if value >= 0 else fallback


def _parse_float(raw: str, fallback: float) -> float:
    try:
        return float(raw)
    except (TypeError, ValueError):
        return fallback


def _split_csv(raw: str) -> List[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PipelineSettings:
    """Recognized options for a pipeline run."""

    content_dir: Path = DEFAULT_CONTENT_DIR
    data_dir: Path = DEFAULT_DATA_DIR

    # Primary provider (Anthropic-compatible /v1/messages endpoint)
    aicodecat_api_url: str = ""
    aicodecat_api_key: str = ""
    aicodecat_model: str = DEFAULT_MODEL

    # Secondary provider
    gemini_api_key: str = ""
    gemini_model: str = DEFAULT_MODEL

    # Idea selection
    max_articles: int = DEFAULT_MAX_ARTICLES
    min_articles: int = 0
    offline_only: bool = False
    use_cases_only: bool = False
    include_use_cases: bool = True

    # Rewrite targeting
    rewrite_slugs: List[str] = field(default_factory=list)
    rewrite_date: str = ""

    # Network and rate limiting
    request_timeout: float = DEFAULT_TIMEOUT
    max_retries: int = DEFAULT_RETRIES
    retry_backoff: float = 1.0
    generate_delay: float = 2.0
    rewrite_delay: float = 3.0

    # Publication gating
    quality_gate: bool = True

    def __post_init__(self) -> None:
        if self.max_articles < 0 or self.min_articles < 0:
            raise ValueError("article counts must be non-negative")
        lo, hi = TIMEOUT_BOUNDS
        if not lo <= self.request_timeout <= hi:
            raise ValueError(f"request_timeout must be within {lo}-{hi} seconds")
        lo_r, hi_r = RETRY_BOUNDS
        if not lo_r <= self.max_retries <= hi_r:
            raise ValueError(f"max_retries must be within {lo_r}-{hi_r}")
        if self.generate_delay < 0 or self.rewrite_delay < 0 or self.retry_backoff < 0:
            raise ValueError("delays must be non-negative")

    # -- derived ----------------------------------------------------------

    @property
    def effective_max_articles(self) -> int:
        return max(self.max_articles, self.min_articles)

    @property
    def has_primary_provider(self) -> bool:
        return bool(self.aicodecat_api_url and self.aicodecat_api_key)

    @property
    def has_secondary_provider(self) -> bool:
        return bool(self.gemini_api_key)

    @property
    def collected_file(self) -> Path:
        return self.data_dir / "collected-articles.json"

    @property
    def summary_file(self) -> Path:
        return self.data_dir / "collection-summary.json"

    @property
    def generated_log_file(self) -> Path:
        return self.data_dir / "generated-articles.json"

    @property
    def image_sources_file(self) -> Path:
        return self.data_dir / "image-sources.json"

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["content_dir"] = str(self.content_dir)
        data["data_dir"] = str(self.data_dir)
        if data["aicodecat_api_key"]:
            data["aicodecat_api_key"] = "***"
        if data["gemini_api_key"]:
            data["gemini_api_key"] = "***"
        return data

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> PipelineSettings:
        """Build settings from *environ* (defaults to ``os.environ``)."""
        env = os.environ if environ is None else environ

        timeout = _parse_float(env.get("SEO_REQUEST_TIMEOUT", ""), DEFAULT_TIMEOUT)
        timeout = max(TIMEOUT_BOUNDS[0], min(TIMEOUT_BOUNDS[1], timeout))
        retries = _parse_count(env.get("SEO_MAX_RETRIES", ""), DEFAULT_RETRIES)
        retries = max(RETRY_BOUNDS[0], min(RETRY_BOUNDS[1], retries))

        return cls(
            content_dir=Path(_env_str(env, "SEO_CONTENT_DIR", default=str(DEFAULT_CONTENT_DIR))),
            data_dir=Path(_env_str(env, "SEO_DATA_DIR", default=str(DEFAULT_DATA_DIR))),
            aicodecat_api_url=_env_str(env, "AICODECAT_API_URL").rstrip("/"),
            aicodecat_api_key=_env_str(env, "AICODECAT_API_KEY"),
            aicodecat_model=_env_str(env, "AICODECAT_MODEL", default=DEFAULT_MODEL),
            gemini_api_key=_env_str(env, "GEMINI_API_KEY"),
            gemini_model=_env_str(env, "GEMINI_MODEL", default=DEFAULT_MODEL),
            max_articles=_parse_count(
                _env_str(env, "MAX_ARTICLES", "SEO_MAX_ARTICLES"), DEFAULT_MAX_ARTICLES,
            ),
            min_articles=_parse_count(_env_str(env, "MIN_ARTICLES", "SEO_MIN_ARTICLES"), 0),
            offline_only=_env_flag(env, "OFFLINE_ARTICLE_GENERATION", False),
            use_cases_only=_env_flag(env, "SEO_USE_CASES_ONLY", False),
            include_use_cases=_env_flag(env, "SEO_INCLUDE_USE_CASES", True),
            rewrite_slugs=_split_csv(env.get("REWRITE_SLUGS", "")),
            rewrite_date=_env_str(env, "REWRITE_DATE", "SEO_DATE", "ANALYTICS_DATE"),
            request_timeout=timeout,
            max_retries=retries,
            generate_delay=max(0.0, _parse_float(env.get("SEO_GENERATE_DELAY", ""), 2.0)),
            rewrite_delay=max(0.0, _parse_float(env.get("SEO_REWRITE_DELAY", ""), 3.0)),
            quality_gate=_env_flag(env, "SEO_QUALITY_GATE", True),
        )


# ---------------------------------------------------------------------------
# Run context
# ---------------------------------------------------------------------------


@dataclass
class RunContext:
    """Mutable state scoped to one pipeline invocation.

    Provider availability lives here rather than in module globals so two
    runs in the same process (tests, notebooks) never leak a "forced offline"
    decision into each other.
    """

    settings: PipelineSettings
    today: date
    run_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    existing_slugs: Set[str] = field(default_factory=set)
    generated_slugs: List[str] = field(default_factory=list)
    unavailable_providers: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        settings: PipelineSettings,
        today: Optional[date] = None,
        existing_slugs: Optional[Set[str]] = None,
        generated_slugs: Optional[List[str]] = None,
    ) -> RunContext:
        return cls(
            settings=settings,
            today=today or datetime.now(timezone.utc).date(),
            existing_slugs=set(existing_slugs or ()),
            generated_slugs=list(generated_slugs or ()),
        )

    @property
    def today_iso(self) -> str:
        return self.today.isoformat()

    def known_slugs(self) -> Set[str]:
        return set(self.existing_slugs) | set(self.generated_slugs)

    def is_available(self, provider: str) -> bool:
        return provider not in self.unavailable_providers

    def mark_unavailable(self, provider: str, reason: str) -> None:
        if provider in self.unavailable_providers:
            return
        self.unavailable_providers[provider] = reason
        logger.warning(
            "Provider %s disabled for run %s: %s", provider, self.run_id, reason[:120],
        )
