"""Test config -- clawseo."""
from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from clawseo.config import (
    DEFAULT_MAX_ARTICLES,
    PipelineSettings,
    RunContext,
)


# ===========================================================================
# SETTINGS FROM ENV
# ===========================================================================


class TestFromEnv:
    """Environment parsing falls back to defaults on bad input."""

    def test_defaults(self):
        settings = PipelineSettings.from_env({})
        assert settings.max_articles == DEFAULT_MAX_ARTICLES
        assert settings.min_articles == 0
        assert settings.offline_only is False
        assert settings.include_use_cases is True
        assert settings.quality_gate is True
        assert settings.content_dir == Path("src/content/articles")
        assert not settings.has_primary_provider
        assert not settings.has_secondary_provider

    def test_provider_keys(self):
        settings = PipelineSettings.from_env({
            "AICODECAT_API_URL": "https://api.example.com/",
            "AICODECAT_API_KEY": "k1",
            "GEMINI_API_KEY": "k2",
        })
        assert settings.aicodecat_api_url == "https://api.example.com"
        assert settings.has_primary_provider
        assert settings.has_secondary_provider

    def test_primary_needs_url_and_key(self):
        settings = PipelineSettings.from_env({"AICODECAT_API_KEY": "k1"})
        assert not settings.has_primary_provider

    @pytest.mark.parametrize("raw,expected", [
        ("5", 5),
        ("0", 0),
        ("-2", DEFAULT_MAX_ARTICLES),
        ("abc", DEFAULT_MAX_ARTICLES),
    ])
    def test_max_articles_parsing(self, raw, expected):
        assert PipelineSettings.from_env({"MAX_ARTICLES": raw}).max_articles == expected

    def test_min_articles_raises_effective_cap(self):
        settings = PipelineSettings.from_env({"MAX_ARTICLES": "1", "MIN_ARTICLES": "4"})
        assert settings.effective_max_articles == 4

    @pytest.mark.parametrize("raw,expected", [
        ("true", True), ("1", True), ("yes", True), ("false", False), ("0", False),
    ])
    def test_offline_flag(self, raw, expected):
        env = {"OFFLINE_ARTICLE_GENERATION": raw}
        assert PipelineSettings.from_env(env).offline_only is expected

    def test_rewrite_targets(self):
        settings = PipelineSettings.from_env({
            "REWRITE_SLUGS": "a, b,,c ",
            "SEO_DATE": "2026-03-01",
        })
        assert settings.rewrite_slugs == ["a", "b", "c"]
        assert settings.rewrite_date == "2026-03-01"

    @pytest.mark.parametrize("env,expected", [
        ({"ANALYTICS_DATE": "2026-03-03"}, "2026-03-03"),
        ({"SEO_DATE": "2026-03-02", "ANALYTICS_DATE": "2026-03-03"}, "2026-03-02"),
        ({"REWRITE_DATE": "2026-03-01", "SEO_DATE": "2026-03-02"}, "2026-03-01"),
    ])
    def test_rewrite_date_fallbacks(self, env, expected):
        assert PipelineSettings.from_env(env).rewrite_date == expected

    def test_network_values_are_clamped(self):
        settings = PipelineSettings.from_env({
            "SEO_REQUEST_TIMEOUT": "90",
            "SEO_MAX_RETRIES": "9",
        })
        assert settings.request_timeout == 20.0
        assert settings.max_retries == 2

    def test_to_dict_masks_keys(self):
        data = PipelineSettings.from_env({"GEMINI_API_KEY": "secret"}).to_dict()
        assert data["gemini_api_key"] == "***"
        assert isinstance(data["data_dir"], str)


# ===========================================================================
# VALIDATION
# ===========================================================================


class TestValidation:
    """Direct construction rejects out-of-range values."""

    def test_negative_counts(self):
        with pytest.raises(ValueError):
            PipelineSettings(max_articles=-1)

    def test_timeout_out_of_range(self):
        with pytest.raises(ValueError):
            PipelineSettings(request_timeout=60)

    def test_data_files(self, tmp_path):
        settings = PipelineSettings(data_dir=tmp_path)
        assert settings.collected_file == tmp_path / "collected-articles.json"
        assert settings.generated_log_file == tmp_path / "generated-articles.json"
        assert settings.image_sources_file == tmp_path / "image-sources.json"


# ===========================================================================
# RUN CONTEXT
# ===========================================================================


class TestRunContext:
    """Provider availability is scoped to one context."""

    def test_known_slugs_union(self):
        ctx = RunContext.create(
            PipelineSettings(), today=date(2026, 3, 14),
            existing_slugs={"a"}, generated_slugs=["b"],
        )
        assert ctx.known_slugs() == {"a", "b"}
        assert ctx.today_iso == "2026-03-14"

    def test_mark_unavailable_is_sticky(self):
        ctx = RunContext.create(PipelineSettings())
        assert ctx.is_available("gemini")
        ctx.mark_unavailable("gemini", "HTTP 429")
        ctx.mark_unavailable("gemini", "second reason")
        assert not ctx.is_available("gemini")
        assert ctx.unavailable_providers["gemini"] == "HTTP 429"

    def test_contexts_do_not_share_state(self):
        a = RunContext.create(PipelineSettings())
        b = RunContext.create(PipelineSettings())
        a.mark_unavailable("aicodecat", "HTTP 401")
        assert b.is_available("aicodecat")
        assert a.run_id != b.run_id
