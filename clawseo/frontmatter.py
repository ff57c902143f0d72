"""
Article Frontmatter -- strict schema parse/serialize pair
===========================================================

Every ``.mdx`` article starts with a YAML frontmatter block delimited by
``---`` lines.  This module owns the single source of truth for that block:

    * ``ArticleFrontmatter`` -- pydantic model mirroring the site's content
      collection schema (unknown keys are rejected).
    * ``parse_document`` / ``parse_frontmatter`` -- text -> typed record,
      raising ``FrontmatterError`` on anything missing or malformed.
    * ``serialize_frontmatter`` / ``render_document`` -- typed record -> text,
      in the exact layout the site build expects.

Usage:
    from clawseo.frontmatter import parse_document, render_document

    doc = parse_document(Path("src/content/articles/foo.mdx").read_text())
    doc.frontmatter.title
    text = render_document(doc.frontmatter, doc.body)
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from clawseo.knowledge_base import DEFAULT_AUTHOR, DEFAULT_OG_IMAGE

FRONTMATTER_RE = re.compile(r"^---\n([\s\S]*?)\n---\n([\s\S]*)$")
_URL_RE = re.compile(r"^https?://\S+$")


class FrontmatterError(ValueError):
    """Raised when a frontmatter block is missing, unparseable or off-schema."""

    def __init__(self, message: str, errors: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.errors = errors or []


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Category(str, Enum):
    TUTORIAL = "Tutorial"
    GUIDE = "Guide"
    COMPARISON = "Comparison"
    BEST_PRACTICES = "Best Practices"
    NEWS = "News"
    ADVANCED = "Advanced"


class ArticleType(str, Enum):
    ARTICLE = "Article"
    TECH_ARTICLE = "TechArticle"
    HOW_TO = "HowTo"
    FAQ_PAGE = "FAQPage"
    NEWS_ARTICLE = "NewsArticle"


class Difficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------


class ArticleFrontmatter(BaseModel):
    """Typed frontmatter record. Field names are snake_case, keys camelCase."""

    model_config = ConfigDict(
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
        str_strip_whitespace=True,
    )

    title: str = Field(min_length=1, max_length=60)
    description: str = Field(min_length=120, max_length=160)
    pub_date: date
    modified_date: Optional[date] = None
    category: Category
    tags: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    reading_time: int = Field(gt=0)
    featured: bool = False
    author: str = DEFAULT_AUTHOR
    author_url: Optional[str] = None
    image: str = DEFAULT_OG_IMAGE
    image_alt: Optional[str] = None
    article_type: ArticleType = ArticleType.TECH_ARTICLE
    difficulty: Optional[Difficulty] = None
    sources: List[str] = Field(default_factory=list)
    related_articles: Optional[List[str]] = None
    canonical_url: Optional[str] = None
    noindex: bool = False
    last_verified: Optional[date] = None
    audience: Optional[List[str]] = None

    @field_validator("sources")
    @classmethod
    def _sources_are_urls(cls, value: List[str]) -> List[str]:
        bad = [v for v in value if not _URL_RE.match(v)]
        if bad:
            raise ValueError(f"sources must be http(s) URLs: {bad}")
        return value

    @field_validator("canonical_url", "author_url")
    @classmethod
    def _optional_url(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not _URL_RE.match(value):
            raise ValueError("must be an http(s) URL")
        return value


@dataclass
class ArticleDocument:
    """A parsed article: typed frontmatter plus the raw MDX body."""

    frontmatter: ArticleFrontmatter
    body: str

    def render(self) -> str:
        return render_document(self.frontmatter, self.body)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def split_document(text: str) -> Optional[Tuple[str, str]]:
    """Return ``(frontmatter_block, body)`` or None if no block is present."""
    match = FRONTMATTER_RE.match(text.replace("\r\n", "\n"))
    if not match:
        return None
    return match.group(1), match.group(2)


def load_frontmatter_mapping(block: str) -> Dict[str, Any]:
    """YAML-load a frontmatter block without applying the schema."""
    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as exc:
        raise FrontmatterError(f"Frontmatter is not valid YAML: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise FrontmatterError("Frontmatter must be a mapping")
    return data


def _format_errors(exc: ValidationError) -> List[str]:
    out = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        out.append(f"{loc}: {err.get('msg', 'invalid')}")
    return out


def parse_frontmatter(block: str) -> ArticleFrontmatter:
    data = load_frontmatter_mapping(block)
    try:
        return ArticleFrontmatter.model_validate(data)
    except ValidationError as exc:
        errors = _format_errors(exc)
        raise FrontmatterError(
            f"Frontmatter failed schema validation ({len(errors)} errors)", errors,
        ) from exc


def parse_document(text: str) -> ArticleDocument:
    parts = split_document(text)
    if parts is None:
        raise FrontmatterError("Document has no frontmatter block")
    block, body = parts
    return ArticleDocument(frontmatter=parse_frontmatter(block), body=body)


def try_parse_document(text: str) -> Optional[ArticleDocument]:
    try:
        return parse_document(text)
    except FrontmatterError:
        return None


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def _q(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def _inline_list(values: List[str]) -> str:
    return json.dumps(list(values), ensure_ascii=False)


def serialize_frontmatter(fm: ArticleFrontmatter) -> str:
    """Render *fm* as a ``---`` delimited block ending with a newline."""
    lines = ["---"]
    lines.append(f"title: {_q(fm.title)}")
    lines.append(f"description: {_q(fm.description)}")
    lines.append(f"pubDate: {fm.pub_date.isoformat()}")
    if fm.modified_date:
        lines.append(f"modifiedDate: {fm.modified_date.isoformat()}")
    lines.append(f"category: {_q(fm.category.value)}")
    lines.append(f"tags: {_inline_list(fm.tags)}")
    lines.append(f"keywords: {_inline_list(fm.keywords)}")
    lines.append(f"readingTime: {fm.reading_time}")
    lines.append(f"featured: {'true' if fm.featured else 'false'}")
    lines.append(f"author: {_q(fm.author)}")
    if fm.author_url:
        lines.append(f"authorUrl: {_q(fm.author_url)}")
    lines.append(f"image: {_q(fm.image)}")
    if fm.image_alt:
        lines.append(f"imageAlt: {_q(fm.image_alt)}")
    lines.append(f"articleType: {_q(fm.article_type.value)}")
    if fm.difficulty:
        lines.append(f"difficulty: {_q(fm.difficulty.value)}")
    if fm.sources:
        lines.append("sources:")
        lines.extend(f"  - {_q(src)}" for src in fm.sources)
    if fm.related_articles:
        lines.append("relatedArticles:")
        lines.extend(f"  - {_q(slug)}" for slug in fm.related_articles)
    if fm.canonical_url:
        lines.append(f"canonicalUrl: {_q(fm.canonical_url)}")
    if fm.noindex:
        lines.append("noindex: true")
    if fm.last_verified:
        lines.append(f"lastVerified: {fm.last_verified.isoformat()}")
    if fm.audience:
        lines.append(f"audience: {_inline_list(fm.audience)}")
    lines.append("---")
    return "\n".join(lines) + "\n"


def render_document(fm: ArticleFrontmatter, body: str) -> str:
    text = serialize_frontmatter(fm) + body
    return text if text.endswith("\n") else text + "\n"
