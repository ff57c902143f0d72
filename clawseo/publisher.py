"""
Publisher -- flat-file article store and run logs
===================================================

Persists accepted documents as ``<content_dir>/<slug>.mdx`` (overwrite
semantics) and keeps two JSON side files in the data directory:

    generated-articles.json  -- every slug this pipeline has produced,
                                append-only and deduplicated
    image-sources.json       -- image attribution keyed by slug, replaced
                                whenever an image is fetched for that slug

Rewrites and the install-service repair pass copy the current file to
``<slug>.mdx.bak`` before changing it.

The three writes are independent.  A crash between writing an article and
updating the log leaves the slug looking "new" to the next run, which then
regenerates and overwrites it.

Usage:
    from clawseo.publisher import Publisher

    pub = Publisher(settings)
    pub.publish(document_text, "openclaw-on-vps-in-2026-a-fast-start-guide")
    pub.record_generated(["openclaw-on-vps-in-2026-a-fast-start-guide"])
"""

from __future__ import annotations

import logging
import re
import shutil
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set

from clawseo.config import PipelineSettings
from clawseo.frontmatter import (
    FrontmatterError,
    load_frontmatter_mapping,
    parse_document,
    split_document,
)
from clawseo.jsonstore import load_json, now_iso, save_json
from clawseo.knowledge_base import INSTALL_SERVICE_HEADING, INSTALL_SERVICE_RE, INSTALL_SERVICE_TEXT

logger = logging.getLogger("publisher")

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

ARTICLE_SUFFIX = ".mdx"
BACKUP_SUFFIX = ".bak"

CONCLUSION_RE = re.compile(r"\n##\s+Conclusion\b")


def add_install_service_section(text: str) -> str:
    """Insert the install service section before ``## Conclusion`` (or at the end).

    Text that already mentions the service is returned unchanged.
    """
    if INSTALL_SERVICE_RE.search(text):
        return text
    section = f"\n{INSTALL_SERVICE_HEADING}\n\n{INSTALL_SERVICE_TEXT}\n"
    match = CONCLUSION_RE.search(text)
    if match:
        return text[:match.start()] + section + text[match.start():]
    return text.rstrip() + "\n" + section


class Publisher:
    """Writes articles and maintains the generated-slug and image logs."""

    def __init__(self, settings: PipelineSettings) -> None:
        self.settings = settings
        self.content_dir = Path(settings.content_dir)

    # ------------------------------------------------------------------
    # Articles
    # ------------------------------------------------------------------

    def article_path(self, slug: str) -> Path:
        return self.content_dir / f"{slug}{ARTICLE_SUFFIX}"

    def existing_slugs(self) -> Set[str]:
        if not self.content_dir.is_dir():
            return set()
        return {p.stem for p in self.content_dir.glob(f"*{ARTICLE_SUFFIX}")}

    def read_article(self, slug: str) -> Optional[str]:
        path = self.article_path(slug)
        try:
            with open(path, "r", encoding="utf-8") as fh:
                return fh.read()
        except FileNotFoundError:
            return None

    def _write(self, path: Path, text: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        if not text.endswith("\n"):
            text += "\n"
        with open(path, "w", encoding="utf-8") as fh:
            fh.write(text)

    def publish(self, document_text: str, slug: str) -> Path:
        """Write a schema-valid document; raises ``FrontmatterError`` otherwise."""
        doc = parse_document(document_text)
        path = self.article_path(slug)
        self._write(path, document_text)
        logger.info("Saved %s (%s, %d min read)", path.name, doc.frontmatter.category.value,
                    doc.frontmatter.reading_time)
        return path

    def _backup(self, path: Path) -> None:
        if path.exists():
            backup = path.with_name(path.name + BACKUP_SUFFIX)
            shutil.copyfile(path, backup)
            logger.debug("Backed up %s to %s", path.name, backup.name)

    def rewrite_in_place(self, slug: str, new_text: str) -> Path:
        """Back up the current file to ``<slug>.mdx.bak`` then overwrite it.

        *new_text* must pass the frontmatter schema; ``FrontmatterError`` is
        raised before anything on disk changes.
        """
        parse_document(new_text)
        path = self.article_path(slug)
        self._backup(path)
        self._write(path, new_text)
        logger.info("Rewrote %s", path.name)
        return path

    def ensure_install_service(self, slugs: Optional[Iterable[str]] = None) -> List[str]:
        """Add the free installation service section where it is missing.

        Covers *slugs* (default: every article).  Each changed file is backed
        up first.  Returns the slugs that changed; a second pass changes none.
        """
        targets = sorted(slugs) if slugs is not None else sorted(self.existing_slugs())
        repaired: List[str] = []
        for slug in targets:
            text = self.read_article(slug)
            if text is None:
                logger.warning("Article %s not found, skipping", slug)
                continue
            updated = add_install_service_section(text)
            if updated == text:
                continue
            path = self.article_path(slug)
            self._backup(path)
            self._write(path, updated)
            repaired.append(slug)
        logger.info("Install service section: %d of %d articles updated", len(repaired), len(targets))
        return repaired

    def article_dates(self, slug: str) -> Dict[str, str]:
        """``pubDate``/``modifiedDate`` of an article as ISO strings (may be empty)."""
        text = self.read_article(slug)
        if text is None:
            return {}
        parts = split_document(text)
        if parts is None:
            return {}
        try:
            meta = load_frontmatter_mapping(parts[0])
        except FrontmatterError:
            return {}
        return {
            key: str(meta[key])
            for key in ("pubDate", "modifiedDate")
            if meta.get(key) is not None
        }

    def slugs_for_date(self, target: str, candidates: Optional[Iterable[str]] = None) -> List[str]:
        """Slugs from *candidates* (default: the generated log) dated *target*."""
        slugs = list(candidates) if candidates is not None else self.load_generated_log()
        return [s for s in slugs if target in self.article_dates(s).values()]

    # ------------------------------------------------------------------
    # Generated log
    # ------------------------------------------------------------------

    def load_generated_log(self) -> List[str]:
        data = load_json(self.settings.generated_log_file, default=[])
        if isinstance(data, dict):
            data = data.get("articles", [])
        if not isinstance(data, list):
            return []
        return [s for s in data if isinstance(s, str)]

    def record_generated(self, slugs: Iterable[str]) -> List[str]:
        log = self.load_generated_log()
        seen = set(log)
        added = 0
        for slug in slugs:
            if slug not in seen:
                seen.add(slug)
                log.append(slug)
                added += 1
        save_json(self.settings.generated_log_file, log)
        logger.info("Generated log: +%d (%d total)", added, len(log))
        return log

    # ------------------------------------------------------------------
    # Image attribution
    # ------------------------------------------------------------------

    def load_image_sources(self) -> Dict[str, Any]:
        data = load_json(self.settings.image_sources_file, default={})
        return data if isinstance(data, dict) else {}

    def record_image_attribution(
        self,
        slug: str,
        source: str,
        photo_id: Optional[str] = None,
        seed: Optional[str] = None,
        query: str = "",
        **extra: Any,
    ) -> Dict[str, Any]:
        sources = self.load_image_sources()
        entry: Dict[str, Any] = {"source": source, "query": query}
        if photo_id is not None:
            entry["photoId"] = photo_id
        if seed is not None:
            entry["seed"] = seed
        entry.update(extra)
        entry["fetchedAt"] = now_iso()
        sources[slug] = entry
        save_json(self.settings.image_sources_file, sources)
        logger.info("Recorded %s image attribution for %s", source, slug)
        return entry
