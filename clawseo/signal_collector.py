"""
Signal Collector -- trending items from public feeds
======================================================

Fetches recent stories from Hacker News (Algolia search), Dev.to and Reddit,
scores each one for relevance to the self-hosted AI assistant niche, and
merges the survivors into the rolling knowledge store
(``collected-articles.json``).

Sources are fetched concurrently (fan out, then join).  Every request has a
bounded timeout and a small, linearly backed-off retry budget; a source that
keeps failing is logged, recorded in the report, and skipped so the rest of
the run still produces results.

Store invariants after every merge:
    * no two items share a normalized URL or a stable id
    * every item was collected within the last 30 days
    * at most 500 items, sorted by (relevanceScore desc, publishedAt desc)

Usage:
    from clawseo.signal_collector import SignalCollector

    collector = SignalCollector(settings)
    report = await collector.run()

CLI:
    python -m clawseo.signal_collector collect
    python -m clawseo.signal_collector stats
"""

from __future__ import annotations

import argparse
import asyncio
import hashlib
import json
import logging
import re
import sys
from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple
from urllib.parse import parse_qsl, quote_plus, urlencode, urlsplit, urlunsplit

import aiohttp

from clawseo.config import PipelineSettings
from clawseo.jsonstore import load_json, run_sync, save_json

logger = logging.getLogger("signal_collector")

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
# Constants
# ---------------------------------------------------------------------------

RELEVANCE_THRESHOLD = 20
RETENTION_DAYS = 30
MAX_STORE_ITEMS = 500
SUMMARY_MAX = 300
RETRY_STATUS_CODES = {429, 500, 502, 503, 504}
USER_AGENT = "SEO-Collector/1.0"

RELEVANT_KEYWORDS = [
    "ai assistant", "chatbot", "claude", "gpt", "llm",
    "automation", "telegram bot", "discord bot", "slack bot",
    "self-hosted", "open source ai", "personal assistant",
    "rag", "embeddings", "langchain", "ai agent",
]

# Order matters only for the order topics appear on an item.
TOPIC_MAP: List[Tuple[str, str]] = [
    ("openclaw", "brand"),
    ("moltbot", "brand"),
    ("clawdbot", "brand"),
    ("telegram", "messaging"),
    ("discord", "messaging"),
    ("slack", "messaging"),
    ("docker", "deployment"),
    ("kubernetes", "deployment"),
    ("self-hosted", "self-hosting"),
    ("rag", "rag"),
    ("embeddings", "ai-techniques"),
    ("langchain", "frameworks"),
    ("automation", "automation"),
    ("api", "integration"),
    ("agent", "agents"),
    ("ollama", "local-llm"),
    ("local llm", "local-llm"),
    ("tutorial", "tutorials"),
    ("open source", "open-source"),
    ("workflow", "workflows"),
    ("assistant", "assistants"),
    ("privacy", "ai-privacy"),
    ("voice", "ai-voice"),
]

# Short tokens that would otherwise match inside unrelated words ("storage", "rapid").
_WORD_BOUNDARY_TERMS = {"rag", "api"}

TRACKING_PARAMS = {
    "ref", "ref_src", "fbclid", "gclid", "mc_cid", "mc_eid", "igshid", "si",
}


# ---------------------------------------------------------------------------
# Scoring helpers
# ---------------------------------------------------------------------------


def _mentions(text: str, term: str) -> bool:
    if term in _WORD_BOUNDARY_TERMS:
        return re.search(rf"\b{re.escape(term)}\b", text) is not None
    return term in text


def calculate_relevance(title: str, content: Optional[str] = None) -> int:
    """Keyword-weighted relevance in [0, 100]."""
    text = f"{title} {content or ''}".lower()
    score = sum(10 for kw in RELEVANT_KEYWORDS if _mentions(text, kw))

    if "self-hosted" in text:
        score += 15
    if "telegram" in text or "discord" in text:
        score += 10
    if "tutorial" in text or "guide" in text:
        score += 5

    return max(0, min(100, score))


def extract_topics(title: str, content: Optional[str] = None) -> List[str]:
    text = f"{title} {content or ''}".lower()
    topics: List[str] = []
    for keyword, topic in TOPIC_MAP:
        if topic not in topics and _mentions(text, keyword):
            topics.append(topic)
    return topics


def normalize_url(url: str) -> str:
    """Canonical form used as the dedup key.

    Lower-cases scheme and host, drops the fragment and tracking parameters,
    sorts the remaining query and removes a trailing slash from non-root paths.
    """
    raw = (url or "").strip()
    if not raw:
        return ""
    parts = urlsplit(raw)
    scheme = parts.scheme.lower()
    netloc = parts.netloc.lower()
    if netloc.startswith("www."):
        netloc = netloc[4:]
    path = parts.path or "/"
    if len(path) > 1:
        path = path.rstrip("/")
    query = sorted(
        (k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True)
        if not k.lower().startswith("utm_") and k.lower() not in TRACKING_PARAMS
    )
    return urlunsplit((scheme, netloc, path, urlencode(query), ""))


def stable_item_id(source: str, guid: str, title: str, link: str, published: str) -> str:
    digest = hashlib.sha256(
        "|".join([str(guid), title, link, published]).encode("utf-8")
    ).hexdigest()
    return f"{source}-{digest[:16]}"


def _parse_ts(value: str) -> datetime:
    """Parse an ISO timestamp; unparseable values sort as the epoch."""
    try:
        ts = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return datetime.fromtimestamp(0, tz=timezone.utc)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class CollectedItem:
    """One scored feed entry in the knowledge store."""

    id: str
    title: str
    url: str
    source: str
    content_type: str = "article"
    summary: str = ""
    published_at: str = ""
    collected_at: str = ""
    relevance_score: int = 0
    topics: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "source": self.source,
            "contentType": self.content_type,
            "summary": self.summary,
            "publishedAt": self.published_at,
            "collectedAt": self.collected_at,
            "relevanceScore": self.relevance_score,
            "topics": list(self.topics),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> CollectedItem:
        return cls(
            id=str(data.get("id", "")),
            title=data.get("title", ""),
            url=data.get("url", ""),
            source=data.get("source", ""),
            content_type=data.get("contentType", "article"),
            summary=data.get("summary") or "",
            published_at=data.get("publishedAt", ""),
            collected_at=data.get("collectedAt", ""),
            relevance_score=int(data.get("relevanceScore", 0) or 0),
            topics=list(data.get("topics") or []),
        )


@dataclass
class RawEntry:
    """Source-specific fields extracted before scoring."""

    guid: str
    title: str
    link: str
    summary: str
    published_at: str
    scoring_text: str = ""


@dataclass
class FeedRequest:
    url: str
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class SourceResult:
    source: str
    items: List[CollectedItem] = field(default_factory=list)
    attempted: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def all_failed(self) -> bool:
        return self.attempted > 0 and self.failed == self.attempted


@dataclass
class CollectionReport:
    date: str
    new_items: int
    total_items: int
    by_source: Dict[str, int]
    top_topics: Dict[str, int]
    fetched: Dict[str, int] = field(default_factory=dict)
    failed_sources: Dict[str, str] = field(default_factory=dict)

    def to_summary(self) -> Dict[str, Any]:
        """Shape persisted as ``collection-summary.json``."""
        return {
            "date": self.date,
            "newItems": self.new_items,
            "totalItems": self.total_items,
            "bySource": dict(self.by_source),
            "topTopics": dict(self.top_topics),
            "failedSources": dict(self.failed_sources),
        }


class SourceFetchError(Exception):
    """A single feed request failed after its retry budget."""

    def __init__(self, message: str, status_code: int = 0) -> None:
        super().__init__(message)
        self.status_code = status_code


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------


class FeedSource(ABC):
    """A public endpoint family that yields candidate items."""

    name: str = ""
    content_type: str = "article"

    @abstractmethod
    def requests(self) -> List[FeedRequest]:
        ...

    @abstractmethod
    def parse(self, payload: Any) -> List[RawEntry]:
        ...


class HackerNewsSource(FeedSource):
    name = "hackernews"
    content_type = "story"
    SEARCH_TERMS = ("ai assistant", "chatbot", "self-hosted ai")

    def requests(self) -> List[FeedRequest]:
        return [
            FeedRequest(
                "https://hn.algolia.com/api/v1/search"
                f"?query={quote_plus(term)}&tags=story&hitsPerPage=10"
            )
            for term in self.SEARCH_TERMS
        ]

    def parse(self, payload: Any) -> List[RawEntry]:
        entries = []
        for hit in (payload or {}).get("hits") or []:
            title = hit.get("title") or ""
            if not title:
                continue
            object_id = str(hit.get("objectID", ""))
            story = hit.get("story_text") or ""
            entries.append(RawEntry(
                guid=object_id,
                title=title,
                link=hit.get("url") or f"https://news.ycombinator.com/item?id={object_id}",
                summary=story[:SUMMARY_MAX],
                published_at=hit.get("created_at") or "",
                scoring_text=story,
            ))
        return entries


class DevToSource(FeedSource):
    name = "devto"
    content_type = "article"
    TAGS = ("ai", "chatbot", "automation", "selfhosted")

    def requests(self) -> List[FeedRequest]:
        return [
            FeedRequest(f"https://dev.to/api/articles?tag={tag}&per_page=10")
            for tag in self.TAGS
        ]

    def parse(self, payload: Any) -> List[RawEntry]:
        entries = []
        for article in payload if isinstance(payload, list) else []:
            title = article.get("title") or ""
            link = article.get("url") or ""
            if not title or not link:
                continue
            description = article.get("description") or ""
            entries.append(RawEntry(
                guid=str(article.get("id", "")),
                title=title,
                link=link,
                summary=description[:SUMMARY_MAX],
                published_at=article.get("published_at") or "",
                scoring_text=description,
            ))
        return entries


class RedditSource(FeedSource):
    name = "reddit"
    content_type = "discussion"
    SUBREDDITS = ("selfhosted", "ChatGPT", "LocalLLaMA", "artificial")

    def requests(self) -> List[FeedRequest]:
        return [
            FeedRequest(
                f"https://www.reddit.com/r/{sub}/hot.json?limit=20",
                headers={"User-Agent": USER_AGENT},
            )
            for sub in self.SUBREDDITS
        ]

    def parse(self, payload: Any) -> List[RawEntry]:
        entries = []
        children = ((payload or {}).get("data") or {}).get("children") or []
        for child in children:
            post = child.get("data") or {}
            if post.get("over_18") or not post.get("title"):
                continue
            created = post.get("created_utc")
            published = (
                datetime.fromtimestamp(float(created), tz=timezone.utc).isoformat()
                if created is not None else ""
            )
            selftext = post.get("selftext") or ""
            entries.append(RawEntry(
                guid=str(post.get("id", "")),
                title=post["title"],
                link=f"https://reddit.com{post.get('permalink', '')}",
                summary=selftext[:SUMMARY_MAX],
                published_at=published,
                scoring_text=selftext,
            ))
        return entries


DEFAULT_SOURCES: Tuple[type, ...] = (HackerNewsSource, DevToSource, RedditSource)


# ---------------------------------------------------------------------------
# Store maintenance
# ---------------------------------------------------------------------------


def sort_items(items: List[CollectedItem]) -> List[CollectedItem]:
    return sorted(
        items,
        key=lambda i: (-i.relevance_score, -_parse_ts(i.published_at).timestamp()),
    )


def merge_items(
    existing: Iterable[CollectedItem],
    new_items: Iterable[CollectedItem],
    now: datetime,
    retention_days: int = RETENTION_DAYS,
    max_items: int = MAX_STORE_ITEMS,
) -> Tuple[List[CollectedItem], List[CollectedItem]]:
    """Merge *new_items* into *existing*.

    Returns ``(store, accepted)`` where *accepted* are the genuinely new items.
    Dedup applies within the new batch as well as against the store.
    """
    seen_ids = set()
    seen_urls = set()
    kept_existing: List[CollectedItem] = []
    for item in existing:
        key = normalize_url(item.url)
        if item.id in seen_ids or (key and key in seen_urls):
            continue
        seen_ids.add(item.id)
        if key:
            seen_urls.add(key)
        kept_existing.append(item)

    accepted: List[CollectedItem] = []
    for item in new_items:
        key = normalize_url(item.url)
        if item.id in seen_ids or (key and key in seen_urls):
            continue
        seen_ids.add(item.id)
        if key:
            seen_urls.add(key)
        accepted.append(item)

    cutoff = now - timedelta(days=retention_days)
    merged = [i for i in accepted + kept_existing if _parse_ts(i.collected_at) > cutoff]
    return sort_items(merged)[:max_items], accepted


def top_topics(items: Iterable[CollectedItem], limit: int = 10) -> Dict[str, int]:
    counts: Counter = Counter()
    for item in items:
        counts.update(item.topics)
    return dict(counts.most_common(limit))


# ---------------------------------------------------------------------------
# Collector
# ---------------------------------------------------------------------------


class SignalCollector:
    """Fetch, score and merge trending items into the knowledge store."""

    def __init__(
        self,
        settings: PipelineSettings,
        sources: Optional[List[FeedSource]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.settings = settings
        self.sources = sources if sources is not None else [cls() for cls in DEFAULT_SOURCES]
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    # -- HTTP ---------------------------------------------------------------

    async def _fetch_json(self, session: aiohttp.ClientSession, request: FeedRequest) -> Any:
        """GET *request* with timeout and linear-backoff retries."""
        retries = self.settings.max_retries
        timeout = aiohttp.ClientTimeout(total=self.settings.request_timeout)
        last_error = ""

        for attempt in range(retries + 1):
            try:
                async with session.get(request.url, headers=request.headers, timeout=timeout) as resp:
                    status = resp.status
                    if 200 <= status < 300:
                        try:
                            return await resp.json(content_type=None)
                        except (json.JSONDecodeError, ValueError) as exc:
                            raise SourceFetchError(
                                f"Malformed JSON from {request.url}: {exc}", status,
                            ) from exc
                    last_error = f"HTTP {status} from {request.url}"
                    if status not in RETRY_STATUS_CODES:
                        raise SourceFetchError(last_error, status)
            except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
                last_error = f"{type(exc).__name__} for {request.url}: {exc}"

            if attempt < retries:
                delay = self.settings.retry_backoff * (attempt + 1)
                logger.warning("%s, retrying in %.1fs", last_error, delay)
                await asyncio.sleep(delay)

        raise SourceFetchError(last_error or f"Request failed: {request.url}")

    async def _collect_source(self, session: aiohttp.ClientSession, source: FeedSource) -> SourceResult:
        result = SourceResult(source=source.name)
        collected_at = self._clock().isoformat()

        for request in source.requests():
            result.attempted += 1
            try:
                payload = await self._fetch_json(session, request)
                entries = source.parse(payload)
            except SourceFetchError as exc:
                result.failed += 1
                result.errors.append(str(exc))
                logger.warning("[%s] %s", source.name, exc)
                continue
            except (AttributeError, KeyError, TypeError, ValueError) as exc:
                result.failed += 1
                result.errors.append(f"Unexpected payload shape: {exc}")
                logger.warning("[%s] unexpected payload from %s: %s", source.name, request.url, exc)
                continue

            for entry in entries:
                relevance = calculate_relevance(entry.title, entry.scoring_text)
                if relevance < RELEVANCE_THRESHOLD:
                    continue
                url = normalize_url(entry.link)
                result.items.append(CollectedItem(
                    id=stable_item_id(source.name, entry.guid, entry.title, url, entry.published_at),
                    title=entry.title,
                    url=url,
                    source=source.name,
                    content_type=source.content_type,
                    summary=entry.summary,
                    published_at=entry.published_at,
                    collected_at=collected_at,
                    relevance_score=relevance,
                    topics=extract_topics(entry.title, entry.scoring_text),
                ))

        logger.info(
            "[%s] %d relevant items (%d/%d requests failed)",
            source.name, len(result.items), result.failed, result.attempted,
        )
        return result

    async def collect(self) -> List[SourceResult]:
        """Fan out over every source and join. Never raises for a source failure."""
        timeout = aiohttp.ClientTimeout(total=self.settings.request_timeout * (self.settings.max_retries + 2))
        async with aiohttp.ClientSession(timeout=timeout) as session:
            results = await asyncio.gather(
                *(self._collect_source(session, src) for src in self.sources),
                return_exceptions=True,
            )

        out: List[SourceResult] = []
        for source, res in zip(self.sources, results):
            if isinstance(res, BaseException):
                if not isinstance(res, Exception):
                    raise res
                logger.error("[%s] source crashed: %s", source.name, res)
                out.append(SourceResult(source=source.name, attempted=1, failed=1, errors=[str(res)]))
            else:
                out.append(res)
        return out

    # -- Store --------------------------------------------------------------

    def load_store(self) -> List[CollectedItem]:
        raw = load_json(self.settings.collected_file, default={"lastUpdated": "", "items": []})
        items = raw.get("items", []) if isinstance(raw, dict) else []
        return [CollectedItem.from_dict(i) for i in items if isinstance(i, dict)]

    def save_store(self, items: List[CollectedItem]) -> None:
        save_json(self.settings.collected_file, {
            "lastUpdated": self._clock().isoformat(),
            "items": [i.to_dict() for i in items],
        })

    async def run(self) -> CollectionReport:
        """Collect, merge into the store, persist the store and summary."""
        now = self._clock()
        logger.info("Starting collection across %d sources", len(self.sources))
        results = await self.collect()

        fresh = [item for res in results for item in res.items]
        store, accepted = merge_items(self.load_store(), fresh, now)
        self.save_store(store)

        report = CollectionReport(
            date=now.date().isoformat(),
            new_items=len(accepted),
            total_items=len(store),
            by_source={
                src.name: sum(1 for i in store if i.source == src.name) for src in self.sources
            },
            top_topics=top_topics(store),
            fetched={res.source: len(res.items) for res in results},
            failed_sources={
                res.source: "; ".join(res.errors)[:300] for res in results if res.all_failed
            },
        )
        save_json(self.settings.summary_file, report.to_summary())
        logger.info(
            "Collection done: %d new, %d total, %d failed sources",
            report.new_items, report.total_items, len(report.failed_sources),
        )
        return report


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def _cli_collect(args: argparse.Namespace) -> None:
    report = run_sync(SignalCollector(PipelineSettings.from_env()).run())
    print(json.dumps(report.to_summary(), indent=2))


def _cli_stats(args: argparse.Namespace) -> None:
    collector = SignalCollector(PipelineSettings.from_env())
    items = collector.load_store()
    print(f"Items in store: {len(items)}")
    for topic, count in top_topics(items).items():
        print(f"  {topic:<20} {count}")


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="signal_collector", description="Collect trending signals into the knowledge store",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")
    sub.add_parser("collect", help="Fetch all sources and merge into the store")
    sub.add_parser("stats", help="Show store size and top topics")
    args = parser.parse_args()

    if args.verbose:
        logger.setLevel(logging.DEBUG)

    handlers = {"collect": _cli_collect, "stats": _cli_stats}
    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        sys.exit(1)
    handler(args)


if __name__ == "__main__":
    main()
