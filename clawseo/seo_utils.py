"""
SEO Utilities -- slugs, titles, descriptions, word counts
==========================================================

Pure string helpers shared by the ranker, the offline template and the
publisher.  Nothing in here touches the network or the filesystem.

Usage:
    from clawseo.seo_utils import title_to_slug, normalize_title, build_description

    slug = title_to_slug("Openclaw on VPS in 2026: A Fast Start Guide")
    title = normalize_title("Memory Tips", "Guide")
"""

from __future__ import annotations

import math
import re
from typing import Dict, Iterable, List, Optional

from clawseo.knowledge_base import BRAND_NAMES, PRIMARY_BRAND, SITE_URL

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

TITLE_MAX = 60
DESCRIPTION_MIN = 120
DESCRIPTION_MAX = 160
SLUG_MAX = 60

CATEGORY_TITLE_SUFFIXES: Dict[str, List[str]] = {
    "Tutorial": ["Step-by-Step Guide", "Quick Start Guide"],
    "Guide": ["Practical Guide", "Complete Guide"],
    "Comparison": ["Comparison Guide", "Complete Comparison"],
    "Best Practices": ["Best Practices Guide", "Field Guide"],
    "News": ["News Update", "Update Guide"],
    "Advanced": ["Advanced Guide", "Deep Dive"],
}

POWER_WORDS = (
    "guide", "tutorial", "how", "best", "complete",
    "ultimate", "step", "easy", "quick", "free",
)

KEYWORD_EXTRAS = (
    "clawdbot", "self-hosted ai", "ai assistant",
    "automation", "productivity", "ai workflow",
)

STOP_WORDS = frozenset("""
a an the is are was were be been being have has had do does did will would
could should may might must shall can need dare ought used to of in for on
with at by from as into through during before after above below between under
again further then once here there when where why how all each few more most
other some such no nor not only own same so than too very just and but if or
because until while about against what which who whom this that these those
am your yours yourself yourselves he him his himself she her hers herself it
its itself they them their theirs themselves i me my mine myself we our ours
ourselves you
""".split())

KEEP_WORDS = frozenset({
    "setup", "how", "vs", "best", "top", "new", "free", "guide", "tutorial",
    "2026", "2025", "2024",
})

SLUG_KEYWORDS = ("openclaw", "moltbot", "clawdbot", "setup", "guide", "tutorial", "install")

_WS_RE = re.compile(r"\s+")
_NON_SLUG_RE = re.compile(r"[^a-z0-9]+")


# ---------------------------------------------------------------------------
# Numbers & words
# ---------------------------------------------------------------------------


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (``round`` is banker's)."""
    return int(math.floor(value + 0.5))


def count_words(text: str) -> int:
    return len(text.split())


def reading_time(text: str, wpm: int = 180, lo: int = 5, hi: int = 15) -> int:
    return int(clamp(round_half_up(count_words(text) / wpm), lo, hi))


# ---------------------------------------------------------------------------
# Slugs
# ---------------------------------------------------------------------------


def title_to_slug(title: str, max_length: int = SLUG_MAX) -> str:
    """Lower-case, collapse non-alphanumerics to ``-``, trim, cut to *max_length*."""
    slug = _NON_SLUG_RE.sub("-", title.lower()).strip("-")
    return slug[:max_length]


def slug_to_title(slug: str) -> str:
    return " ".join(part[:1].upper() + part[1:] for part in slug.split("-") if part)


def generate_seo_slug(
    title: str,
    max_length: int = SLUG_MAX,
    include_keyword: Optional[str] = None,
    remove_stop_words: bool = True,
) -> str:
    """Build a keyword-first slug with stop words removed.

    Unlike :func:`title_to_slug` (which the ranker uses so slugs stay stable
    across runs), this variant is for hand-authored pages.
    """
    text = title.lower().strip()
    text = text.replace("&", "and")
    text = re.sub(r"'s\b", "s", text)
    text = re.sub(r"n't\b", "not", text)
    text = re.sub(r"[^a-z0-9\s-]", "", text)
    words = _WS_RE.sub(" ", text).strip().split(" ")

    if remove_stop_words:
        words = [w for w in words if w not in STOP_WORDS or w in KEEP_WORDS]

    if include_keyword:
        kw = include_keyword.lower()
        if kw in words:
            words.remove(kw)
        words.insert(0, kw)

    slug = "-".join(w for w in words if w)
    if len(slug) > max_length:
        slug = slug[:max_length]
        cut = slug.rfind("-")
        if cut > max_length * 0.5:
            slug = slug[:cut]
    return slug.rstrip("-")


def validate_slug(slug: str) -> Dict[str, object]:
    """Return ``{"valid", "issues", "suggestions"}`` for *slug*."""
    issues: List[str] = []
    suggestions: List[str] = []

    if len(slug) > SLUG_MAX:
        issues.append(f"Slug is {len(slug)} characters (recommended: under {SLUG_MAX})")
        suggestions.append("Shorten the slug by removing unnecessary words")
    if "_" in slug:
        issues.append("Slug contains underscores (use hyphens instead)")
        suggestions.append(f"Replace underscores: {slug.replace('_', '-')}")
    if slug != slug.lower():
        issues.append("Slug contains uppercase letters")
        suggestions.append(f"Use lowercase: {slug.lower()}")
    if re.search(r"-{2,}", slug):
        issues.append("Slug contains consecutive hyphens")
        suggestions.append(f"Remove extra hyphens: {re.sub(r'-+', '-', slug)}")
    if re.fullmatch(r"[0-9-]+", slug):
        issues.append("Slug is numbers-only (add descriptive words)")
    if not re.fullmatch(r"[a-z0-9-]+", slug):
        issues.append("Slug contains special characters")
        suggestions.append("Remove special characters")
    if not any(kw in slug for kw in SLUG_KEYWORDS):
        suggestions.append(
            'Consider adding a brand keyword like "Openclaw", "Moltbot", or "Clawdbot" to the slug'
        )

    return {"valid": not issues, "issues": issues, "suggestions": suggestions}


def canonical_url(slug: str, base_url: str = SITE_URL) -> str:
    return f"{base_url.rstrip('/')}/articles/{slug.lstrip('/')}"


# ---------------------------------------------------------------------------
# Titles & descriptions
# ---------------------------------------------------------------------------


def trim_to_length(text: str, max_length: int) -> str:
    """Cut *text* to at most *max_length* chars, backing off to a word boundary."""
    if len(text) <= max_length:
        return text
    truncated = text[:max_length]
    return re.sub(r"\s+\S*$", "", truncated).strip()


def has_brand(text: str) -> bool:
    lowered = text.lower()
    return any(brand.lower() in lowered for brand in BRAND_NAMES)


def normalize_title(base_title: str, category: str) -> str:
    """Fit *base_title* to the 60-char display limit with a brand token.

    Short titles are padded with category suffixes, long ones lose their
    subtitle and parentheticals and are then cut at a word boundary.
    """
    suffixes = CATEGORY_TITLE_SUFFIXES.get(category, ["Guide", "Complete Guide"])
    title = _WS_RE.sub(" ", base_title.strip())
    if not has_brand(title):
        title = f"{PRIMARY_BRAND} {title}"

    if len(title) < 30:
        title = f"{title} {suffixes[0]}"

    if len(title) < 40:
        candidate = f"{title} {suffixes[1]}"
        if len(candidate) <= TITLE_MAX:
            title = candidate

    if len(title) > TITLE_MAX:
        title = re.sub(r"\s*:\s*.*$", "", title)
        title = re.sub(r"\s*\([^)]*\)\s*", "", title).strip()

    if len(title) > TITLE_MAX:
        title = trim_to_length(title, TITLE_MAX)

    if not any(word in title.lower() for word in POWER_WORDS):
        candidate = f"{title} Guide"
        if len(candidate) <= TITLE_MAX:
            title = candidate

    return title


def unique_list(items: Iterable[str]) -> List[str]:
    """Strip, drop blanks and dedupe case-insensitively, keeping first spelling."""
    seen = set()
    result: List[str] = []
    for item in items:
        cleaned = item.strip()
        key = cleaned.lower()
        if not cleaned or key in seen:
            continue
        seen.add(key)
        result.append(cleaned)
    return result


def build_keywords(keywords: Iterable[str], slug: str, limit: int = 10) -> List[str]:
    return unique_list([*keywords, slug.replace("-", " "), *KEYWORD_EXTRAS])[:limit]


def build_description(title: str) -> str:
    description = (
        f"Learn {title} with verified steps, security tips, and real commands for "
        "Clawdbot. Includes setup checks, troubleshooting, and next steps. See "
        "official docs and GitHub sources."
    )
    if len(description) > DESCRIPTION_MAX:
        description = trim_to_length(description, DESCRIPTION_MAX)
    if len(description) < DESCRIPTION_MIN:
        description = f"{description} Practical setup guidance included."
        if len(description) > DESCRIPTION_MAX:
            description = trim_to_length(description, DESCRIPTION_MAX)
    return description


def generate_meta_title(title: str, site_name: str = "Openclaw", max_length: int = 60) -> str:
    separator = " | "
    full = f"{title}{separator}{site_name}"
    if len(full) <= max_length:
        return full
    room = max_length - len(separator) - len(site_name)
    if room > 20:
        return f"{title[:room - 3]}...{separator}{site_name}"
    return title[:max_length - 3] + "..."


def generate_meta_description(
    description: str,
    min_length: int = DESCRIPTION_MIN,
    max_length: int = DESCRIPTION_MAX,
) -> str:
    """Collapse whitespace and shorten to *max_length* at a sentence or word end.

    Descriptions that are already too short are returned unchanged.
    """
    desc = _WS_RE.sub(" ", description).strip()
    if len(desc) <= max_length:
        return desc

    desc = desc[:max_length]
    last_period = desc.rfind(".")
    if last_period > min_length:
        return desc[:last_period + 1]
    last_space = desc.rfind(" ")
    if last_space > min_length - 10:
        return desc[:last_space] + "..."
    return desc[:max_length - 3] + "..."


def map_article_type(category: str) -> str:
    if category == "Tutorial":
        return "HowTo"
    if category == "News":
        return "NewsArticle"
    return "TechArticle"


def map_difficulty(category: str) -> str:
    if category == "Advanced":
        return "advanced"
    if category == "Tutorial":
        return "beginner"
    return "intermediate"
