"""Test seo_utils -- clawseo."""
from __future__ import annotations

import pytest

from clawseo.seo_utils import (
    DESCRIPTION_MAX,
    DESCRIPTION_MIN,
    TITLE_MAX,
    build_description,
    build_keywords,
    canonical_url,
    count_words,
    generate_meta_description,
    generate_meta_title,
    generate_seo_slug,
    has_brand,
    map_article_type,
    map_difficulty,
    normalize_title,
    reading_time,
    round_half_up,
    slug_to_title,
    title_to_slug,
    trim_to_length,
    unique_list,
    validate_slug,
)


# ===========================================================================
# WORDS & READING TIME
# ===========================================================================


class TestReadingTime:
    """Reading time is words / 180 rounded half-up and clamped to [5, 15]."""

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(2.49) == 2

    def test_count_words_splits_on_whitespace(self):
        assert count_words("one  two\nthree\tfour") == 4

    @pytest.mark.parametrize("words,expected", [
        (0, 5),
        (900, 5),
        (1800, 10),
        (1890, 11),
        (5000, 15),
    ])
    def test_reading_time_bounds(self, words, expected):
        assert reading_time("word " * words) == expected


# ===========================================================================
# SLUGS
# ===========================================================================


class TestSlugs:
    """Slug derivation is deterministic and URL-safe."""

    def test_title_to_slug(self):
        slug = title_to_slug("Openclaw on VPS in 2026: A Fast Start Guide")
        assert slug == "openclaw-on-vps-in-2026-a-fast-start-guide"

    def test_title_to_slug_trims_and_caps(self):
        slug = title_to_slug("  --Hello, World!!  " + "x" * 100)
        assert not slug.startswith("-")
        assert len(slug) <= 60

    def test_slug_to_title(self):
        assert slug_to_title("openclaw-memory-tips") == "Openclaw Memory Tips"

    def test_seo_slug_removes_stop_words(self):
        slug = generate_seo_slug("How to Install the Openclaw Gateway on a Pi")
        assert "the" not in slug.split("-")
        assert slug.startswith("how-install")

    def test_seo_slug_keyword_first(self):
        slug = generate_seo_slug("Gateway setup for beginners", include_keyword="openclaw")
        assert slug.startswith("openclaw-")

    def test_validate_slug_clean(self):
        result = validate_slug("openclaw-setup-guide")
        assert result["valid"] is True
        assert result["issues"] == []

    def test_validate_slug_problems(self):
        result = validate_slug("Bad__Slug")
        assert result["valid"] is False
        assert any("underscores" in i for i in result["issues"])
        assert any("uppercase" in i for i in result["issues"])

    def test_canonical_url(self):
        assert canonical_url("abc", "https://site.test/") == "https://site.test/articles/abc"


# ===========================================================================
# TITLES & DESCRIPTIONS
# ===========================================================================


class TestTitles:
    """Titles fit the display limit and carry a brand token."""

    def test_trim_to_length_word_boundary(self):
        assert trim_to_length("alpha beta gamma", 12) == "alpha beta"
        assert trim_to_length("short", 10) == "short"

    def test_has_brand(self):
        assert has_brand("Clawdbot tips")
        assert not has_brand("Generic AI tips")

    def test_short_title_gets_brand_and_suffix(self):
        title = normalize_title("Memory Tips", "Guide")
        assert title.startswith("Openclaw")
        assert "Guide" in title
        assert len(title) <= TITLE_MAX

    def test_long_title_is_trimmed(self):
        title = normalize_title(
            "Openclaw Gateway Deployment: Everything You Need To Know About Running It "
            "On A Very Small Machine (2026 Edition)",
            "Tutorial",
        )
        assert len(title) <= TITLE_MAX
        assert ":" not in title

    @pytest.mark.parametrize("category", ["Tutorial", "Guide", "News", "Unknown"])
    def test_title_always_within_limit(self, category):
        assert len(normalize_title("x " * 80, category)) <= TITLE_MAX

    def test_description_bounds(self):
        description = build_description("Openclaw on VPS in 2026: A Fast Start Guide")
        assert DESCRIPTION_MIN <= len(description) <= DESCRIPTION_MAX

    def test_meta_title_appends_site(self):
        assert generate_meta_title("Short") == "Short | Openclaw"
        assert len(generate_meta_title("y" * 100)) <= 60

    def test_meta_description_sentence_cut(self):
        text = ("A" * 130) + ". " + ("b " * 40)
        result = generate_meta_description(text)
        assert result.endswith(".")
        assert len(result) <= DESCRIPTION_MAX


# ===========================================================================
# KEYWORDS & MAPPINGS
# ===========================================================================


class TestKeywords:
    """Keyword lists are deduplicated case-insensitively and capped."""

    def test_unique_list(self):
        assert unique_list(["A", "a", " b ", "", "B"]) == ["A", "b"]

    def test_build_keywords_includes_slug_phrase(self):
        kws = build_keywords(["openclaw", "Openclaw"], "openclaw-vps-guide")
        assert kws[0] == "openclaw"
        assert "openclaw vps guide" in kws
        assert len(kws) <= 10

    @pytest.mark.parametrize("category,article_type,difficulty", [
        ("Tutorial", "HowTo", "beginner"),
        ("News", "NewsArticle", "intermediate"),
        ("Advanced", "TechArticle", "advanced"),
        ("Guide", "TechArticle", "intermediate"),
    ])
    def test_category_mappings(self, category, article_type, difficulty):
        assert map_article_type(category) == article_type
        assert map_difficulty(category) == difficulty
