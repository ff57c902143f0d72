"""
Shared fixtures for the clawseo test suite.

Provides settings factories, temp content/data directories, sample store
items and reusable HTTP / Anthropic mocks so that all tests run WITHOUT
any external services.
"""

from datetime import date
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from clawseo.config import PipelineSettings, RunContext
from clawseo.signal_collector import CollectedItem
from clawseo.topic_ranker import ArticleIdea

TODAY = date(2026, 3, 14)


# ---------------------------------------------------------------------------
# Directory / settings fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def content_dir(tmp_path):
    path = tmp_path / "src" / "content" / "articles"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def data_dir(tmp_path):
    path = tmp_path / "data" / "knowledge-base"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def make_settings(content_dir, data_dir):
    """Settings factory pointed at the temp directories."""

    def _make(**overrides):
        values = dict(
            content_dir=content_dir,
            data_dir=data_dir,
            generate_delay=0.0,
            rewrite_delay=0.0,
            retry_backoff=0.0,
        )
        values.update(overrides)
        return PipelineSettings(**values)

    return _make


@pytest.fixture
def settings(make_settings):
    return make_settings()


@pytest.fixture
def make_context():
    def _make(settings, existing=None, generated=None):
        return RunContext.create(
            settings, today=TODAY, existing_slugs=existing or set(), generated_slugs=generated or [],
        )

    return _make


# ---------------------------------------------------------------------------
# Domain fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def make_item():
    def _make(title="How to self-host an AI agent with Ollama", topics=None, **kw):
        values = dict(
            id=kw.pop("id", "hackernews-" + title.lower().replace(" ", "-")),
            title=title,
            url=kw.pop("url", "https://example.com/" + title.lower().replace(" ", "-")),
            source=kw.pop("source", "hackernews"),
            summary=kw.pop("summary", "Self-hosted assistants are trending."),
            published_at=kw.pop("published_at", "2026-03-13T10:00:00+00:00"),
            collected_at=kw.pop("collected_at", "2026-03-13T12:00:00+00:00"),
            relevance_score=kw.pop("relevance_score", 40),
            topics=topics if topics is not None else ["agents", "local-llm"],
        )
        values.update(kw)
        return CollectedItem(**values)

    return _make


@pytest.fixture
def sample_idea(make_item):
    return ArticleIdea(
        slug="openclaw-on-vps-in-2026-a-fast-start-guide",
        title="Openclaw on VPS in 2026: A Fast Start Guide",
        category="Tutorial",
        keywords=["openclaw", "vps", "deployment", "ubuntu 22.04", "self-hosted ai"],
        angle="practical-tutorial",
        source_items=[make_item()],
    )


# ---------------------------------------------------------------------------
# HTTP mock fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_aiohttp_response():
    """Create a mock aiohttp response factory."""

    def _make(status=200, json_data=None, text="", headers=None):
        resp = AsyncMock()
        resp.status = status
        resp.json = AsyncMock(return_value=json_data if json_data is not None else {})
        resp.text = AsyncMock(return_value=text)
        resp.headers = headers or {"Content-Type": "application/json"}
        resp.__aenter__ = AsyncMock(return_value=resp)
        resp.__aexit__ = AsyncMock(return_value=False)
        return resp

    return _make


@pytest.fixture
def mock_aiohttp_session(mock_aiohttp_response):
    """Create a mock aiohttp ClientSession."""
    session = AsyncMock()
    default_resp = mock_aiohttp_response(200, {"ok": True})
    session.get = MagicMock(return_value=default_resp)
    session.post = MagicMock(return_value=default_resp)
    session.close = AsyncMock()
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=False)
    return session


# ---------------------------------------------------------------------------
# Anthropic mock fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_anthropic():
    """Mock AsyncAnthropic client factory whose messages.create returns *text*."""

    def _make(text="Generated content here"):
        client = MagicMock()
        response = SimpleNamespace(
            content=[SimpleNamespace(type="text", text=text)],
            usage=SimpleNamespace(input_tokens=100, output_tokens=200),
        )
        client.messages.create = AsyncMock(return_value=response)
        client.close = AsyncMock()
        return client

    return _make


# ---------------------------------------------------------------------------
# Provider stubs
# ---------------------------------------------------------------------------

class StubProvider:
    """Scripted ContentProvider: returns replies in order or raises them."""

    def __init__(self, name, replies, online=True):
        self.name = name
        self.online = online
        self.replies = list(replies)
        self.calls = 0
        self.closed = False

    async def generate(self, prompt):
        self.calls += 1
        reply = self.replies.pop(0) if self.replies else ""
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def close(self):
        self.closed = True


@pytest.fixture
def stub_provider():
    return StubProvider


@pytest.fixture
def write_article():
    """Write raw article text as <slug>.mdx in a directory."""

    def _write(directory: Path, slug: str, text: str) -> Path:
        path = directory / f"{slug}.mdx"
        path.write_text(text, encoding="utf-8")
        return path

    return _write
