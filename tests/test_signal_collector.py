"""Test signal_collector -- clawseo."""
from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import aiohttp
import pytest

from clawseo.signal_collector import (
    CollectedItem,
    DevToSource,
    HackerNewsSource,
    RedditSource,
    SignalCollector,
    calculate_relevance,
    extract_topics,
    merge_items,
    normalize_url,
    sort_items,
    stable_item_id,
    top_topics,
)

NOW = datetime(2026, 3, 14, 12, 0, tzinfo=timezone.utc)

HN_PAYLOAD = {
    "hits": [
        {
            "objectID": "101",
            "title": "Self-hosted AI assistant with a Telegram bot tutorial",
            "url": "https://blog.example.com/selfhosted-assistant/?utm_source=hn",
            "created_at": "2026-03-13T08:00:00Z",
            "story_text": None,
        },
        {
            "objectID": "102",
            "title": "Rust compiler internals",
            "url": "https://rust.example.com/internals",
            "created_at": "2026-03-13T09:00:00Z",
        },
        {"objectID": "103", "title": ""},
    ],
}

REDDIT_PAYLOAD = {
    "data": {
        "children": [
            {"data": {
                "id": "abc",
                "title": "My LLM chatbot setup on Discord",
                "permalink": "/r/selfhosted/comments/abc/my_llm/",
                "created_utc": 1773400000,
                "selftext": "Running it with docker.",
                "over_18": False,
            }},
            {"data": {
                "id": "nsfw",
                "title": "LLM chatbot (nsfw)",
                "permalink": "/r/x/comments/nsfw/",
                "created_utc": 1773400000,
                "over_18": True,
            }},
        ],
    },
}


def _item(id_, url, score=30, collected=NOW, published="2026-03-13T00:00:00+00:00", topics=None):
    return CollectedItem(
        id=id_, title=id_, url=url, source="hackernews",
        published_at=published, collected_at=collected.isoformat(),
        relevance_score=score, topics=topics or [],
    )


# ===========================================================================
# SCORING
# ===========================================================================


class TestRelevance:
    """Keyword scoring and topic extraction."""

    def test_keywords_and_bonuses(self):
        score = calculate_relevance("Self-hosted AI assistant with a Telegram bot tutorial")
        # ai assistant, telegram bot, self-hosted = 30; bonuses 15 + 10 + 5
        assert score == 60

    def test_irrelevant_title_scores_zero(self):
        assert calculate_relevance("Rust compiler internals") == 0

    def test_score_is_capped(self):
        text = " ".join([
            "ai assistant chatbot claude gpt llm automation telegram bot discord bot",
            "slack bot self-hosted open source ai personal assistant rag embeddings",
            "langchain ai agent tutorial",
        ])
        assert calculate_relevance(text) == 100

    def test_short_terms_need_word_boundary(self):
        assert "rag" not in extract_topics("Cheap storage for your homelab")
        assert "rag" in extract_topics("Building RAG pipelines")
        assert "integration" not in extract_topics("A rapid prototype")

    def test_topics_in_map_order_without_duplicates(self):
        topics = extract_topics("Openclaw and Clawdbot on Telegram via Docker")
        assert topics == ["brand", "messaging", "deployment"]


# ===========================================================================
# URL NORMALIZATION & IDS
# ===========================================================================


class TestNormalizeUrl:
    """The dedup key ignores cosmetic URL differences."""

    @pytest.mark.parametrize("url", [
        "https://www.Example.com/post/",
        "https://example.com/post?utm_source=x",
        "HTTPS://example.com/post#comments",
        "https://example.com/post?ref=hn",
    ])
    def test_equivalent_urls(self, url):
        assert normalize_url(url) == "https://example.com/post"

    def test_query_is_sorted(self):
        assert normalize_url("https://e.com/a?b=2&a=1") == "https://e.com/a?a=1&b=2"

    def test_empty(self):
        assert normalize_url("") == ""

    def test_stable_id_is_deterministic(self):
        a = stable_item_id("devto", "1", "T", "https://e.com", "2026")
        b = stable_item_id("devto", "1", "T", "https://e.com", "2026")
        assert a == b
        assert a.startswith("devto-")
        assert a != stable_item_id("devto", "2", "T", "https://e.com", "2026")


# ===========================================================================
# SOURCE PARSERS
# ===========================================================================


class TestSourceParsers:
    """Each source turns its payload into raw entries."""

    def test_hackernews_skips_untitled(self):
        entries = HackerNewsSource().parse(HN_PAYLOAD)
        assert [e.guid for e in entries] == ["101", "102"]

    def test_hackernews_falls_back_to_item_link(self):
        entries = HackerNewsSource().parse({"hits": [{"objectID": "9", "title": "x"}]})
        assert entries[0].link == "https://news.ycombinator.com/item?id=9"

    def test_devto_requires_url(self):
        payload = [
            {"id": 1, "title": "AI agents", "url": "https://dev.to/a", "description": "d"},
            {"id": 2, "title": "No url"},
        ]
        assert len(DevToSource().parse(payload)) == 1
        assert DevToSource().parse({"error": "bad"}) == []

    def test_reddit_skips_nsfw(self):
        entries = RedditSource().parse(REDDIT_PAYLOAD)
        assert len(entries) == 1
        assert entries[0].link.startswith("https://reddit.com/r/selfhosted/")
        assert entries[0].published_at.endswith("+00:00")

    def test_reddit_requests_send_user_agent(self):
        assert all("User-Agent" in r.headers for r in RedditSource().requests())


# ===========================================================================
# MERGE
# ===========================================================================


class TestMerge:
    """Store invariants hold after every merge."""

    def test_dedup_by_url_and_id(self):
        existing = [_item("a", "https://e.com/1")]
        new = [
            _item("b", "https://www.e.com/1/"),
            _item("a", "https://e.com/2"),
            _item("c", "https://e.com/3"),
            _item("d", "https://e.com/3?utm_medium=x"),
        ]
        store, accepted = merge_items(existing, new, NOW)
        assert [i.id for i in accepted] == ["c"]
        assert {i.id for i in store} == {"a", "c"}

    def test_retention_window(self):
        old = _item("old", "https://e.com/old", collected=NOW - timedelta(days=31))
        fresh = _item("fresh", "https://e.com/fresh", collected=NOW - timedelta(days=2))
        store, _ = merge_items([old, fresh], [], NOW)
        assert [i.id for i in store] == ["fresh"]

    def test_cap_keeps_most_relevant(self):
        items = [_item(f"i{n}", f"https://e.com/{n}", score=n * 10) for n in range(5)]
        store, _ = merge_items([], items, NOW, max_items=2)
        assert [i.id for i in store] == ["i4", "i3"]

    def test_sort_ties_break_on_recency(self):
        older = _item("older", "https://e.com/o", published="2026-03-01T00:00:00Z")
        newer = _item("newer", "https://e.com/n", published="2026-03-10T00:00:00Z")
        assert [i.id for i in sort_items([older, newer])] == ["newer", "older"]

    def test_top_topics(self):
        items = [
            _item("a", "https://e.com/a", topics=["rag", "agents"]),
            _item("b", "https://e.com/b", topics=["agents"]),
        ]
        assert top_topics(items) == {"agents": 2, "rag": 1}

    def test_item_dict_uses_camel_case(self):
        data = _item("a", "https://e.com/a").to_dict()
        assert "relevanceScore" in data and "collectedAt" in data
        assert CollectedItem.from_dict(data) == _item("a", "https://e.com/a")


# ===========================================================================
# COLLECTOR (mocked HTTP)
# ===========================================================================


def _routing_session(mock_aiohttp_session, mock_aiohttp_response, devto_status=500):
    """Route GETs by host: HN ok, Dev.to failing, Reddit ok."""

    def _get(url, **kwargs):
        if "hn.algolia.com" in url:
            return mock_aiohttp_response(200, HN_PAYLOAD)
        if "dev.to" in url:
            return mock_aiohttp_response(devto_status, {})
        return mock_aiohttp_response(200, REDDIT_PAYLOAD)

    mock_aiohttp_session.get = MagicMock(side_effect=_get)
    return mock_aiohttp_session


class TestSignalCollector:
    """End-to-end collection with a mocked aiohttp session."""

    @pytest.mark.asyncio
    async def test_failing_source_is_skipped(self, settings, mock_aiohttp_session, mock_aiohttp_response):
        session = _routing_session(mock_aiohttp_session, mock_aiohttp_response)
        collector = SignalCollector(settings, clock=lambda: NOW)

        with patch("clawseo.signal_collector.aiohttp.ClientSession", return_value=session):
            report = await collector.run()

        assert "devto" in report.failed_sources
        assert "HTTP 500" in report.failed_sources["devto"]
        # three HN searches return the same story: deduplicated to one
        assert report.fetched["hackernews"] == 3
        assert report.by_source == {"hackernews": 1, "devto": 0, "reddit": 1}
        assert report.new_items == 2

        store = json.loads(settings.collected_file.read_text())
        assert len(store["items"]) == 2
        assert store["items"][0]["url"] == "https://blog.example.com/selfhosted-assistant"
        summary = json.loads(settings.summary_file.read_text())
        assert summary["newItems"] == 2
        assert summary["date"] == "2026-03-14"

    @pytest.mark.asyncio
    async def test_retryable_status_uses_full_budget(self, make_settings, mock_aiohttp_session,
                                                     mock_aiohttp_response):
        settings = make_settings(max_retries=2)
        session = _routing_session(mock_aiohttp_session, mock_aiohttp_response, devto_status=503)
        collector = SignalCollector(settings, sources=[DevToSource()], clock=lambda: NOW)

        with patch("clawseo.signal_collector.aiohttp.ClientSession", return_value=session):
            results = await collector.collect()

        assert results[0].all_failed
        # 4 tags x (1 try + 2 retries)
        assert session.get.call_count == 12

    @pytest.mark.asyncio
    async def test_client_status_is_not_retried(self, settings, mock_aiohttp_session,
                                                mock_aiohttp_response):
        session = _routing_session(mock_aiohttp_session, mock_aiohttp_response, devto_status=404)
        collector = SignalCollector(settings, sources=[DevToSource()], clock=lambda: NOW)

        with patch("clawseo.signal_collector.aiohttp.ClientSession", return_value=session):
            results = await collector.collect()

        assert session.get.call_count == 4
        assert all("HTTP 404" in e for e in results[0].errors)

    @pytest.mark.asyncio
    async def test_connection_errors_are_recorded(self, settings, mock_aiohttp_session):
        mock_aiohttp_session.get = MagicMock(side_effect=aiohttp.ClientConnectionError("refused"))
        collector = SignalCollector(settings, sources=[HackerNewsSource()], clock=lambda: NOW)

        with patch("clawseo.signal_collector.aiohttp.ClientSession", return_value=mock_aiohttp_session):
            report = await collector.run()

        assert report.new_items == 0
        assert "hackernews" in report.failed_sources
        assert "ClientConnectionError" in report.failed_sources["hackernews"]

    @pytest.mark.asyncio
    async def test_second_run_adds_nothing(self, settings, mock_aiohttp_session, mock_aiohttp_response):
        session = _routing_session(mock_aiohttp_session, mock_aiohttp_response)
        collector = SignalCollector(settings, sources=[HackerNewsSource()], clock=lambda: NOW)

        with patch("clawseo.signal_collector.aiohttp.ClientSession", return_value=session):
            first = await collector.run()
            second = await collector.run()

        assert first.new_items == 1
        assert second.new_items == 0
        assert second.total_items == 1

    def test_load_store_missing_file(self, settings):
        assert SignalCollector(settings).load_store() == []
