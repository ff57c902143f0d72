"""Test quality_validator -- clawseo."""
from __future__ import annotations

from datetime import date

import pytest

from clawseo.content_synthesizer import build_offline_article
from clawseo.quality_validator import (
    CRITICAL_RECOMMENDATION,
    PASS_THRESHOLD,
    WEIGHTS,
    Severity,
    ValidationIssue,
    check_accuracy,
    check_clarity,
    check_completeness,
    check_safety,
    check_value,
    validate_directory,
    validate_file,
    validate_text,
)
from clawseo.topic_ranker import ArticleIdea

TODAY = date(2026, 3, 14)

MINIMAL_FRONTMATTER = '---\ntitle: "Openclaw Demo"\ncategory: "Guide"\n---\n'


def _doc(body: str, frontmatter: str = MINIMAL_FRONTMATTER) -> str:
    return frontmatter + body


def _offline(category="Tutorial", slug="openclaw-demo-guide", title="Openclaw Demo Guide", **kw):
    idea = ArticleIdea(
        slug=slug, title=title, category=category,
        keywords=["openclaw", "demo"], angle="practical-tutorial", **kw,
    )
    return build_offline_article(idea, TODAY)


# ===========================================================================
# OVERALL GATE
# ===========================================================================


class TestGate:
    """An article passes only with score >= 7 and no critical issue."""

    def test_weights_sum_to_one(self):
        assert sum(WEIGHTS.values()) == pytest.approx(1.0)

    @pytest.mark.parametrize("category", ["Tutorial", "Guide", "Comparison", "Best Practices",
                                          "Advanced", "News"])
    def test_offline_template_passes(self, category):
        result = validate_text(_offline(category=category), slug="openclaw-demo-guide")
        assert result.passed, result.summary()
        assert result.scores.overall >= PASS_THRESHOLD
        assert not result.has_critical

    def test_validation_is_deterministic(self):
        text = _offline()
        first = validate_text(text, slug="x").to_dict()
        second = validate_text(text, slug="x").to_dict()
        assert first == second

    def test_missing_frontmatter_is_critical(self):
        result = validate_text("# Just a heading\n\nSome body text.\n")
        assert not result.passed
        assert result.messages() == ["Invalid article structure - missing frontmatter"]
        assert result.scores.overall == 0.0

    def test_short_article_fails_even_with_good_score(self):
        body = "\n".join([
            "# Openclaw Demo",
            "## Introduction",
            "First, read the [docs](https://docs.clawd.bot). For example, see this image.",
            "## Prerequisites",
            "- Node.js 22",
            "## Step 1",
            "Never share your token.",
            "## Troubleshooting",
            "## Conclusion",
        ]) + "\n" + ("word " * 650)
        result = validate_text(_doc(body))
        assert result.has_critical
        assert not result.passed
        assert result.recommendations[0] == CRITICAL_RECOMMENDATION
        assert any(m.startswith("Content too short") for m in result.messages())

    def test_700_word_article_scores_low_completeness(self):
        body = "## Introduction\n\n" + ("plain words " * 350)
        result = validate_text(_doc(body))
        assert result.word_count == 702
        assert result.scores.completeness <= 7
        assert any("Content too short (702 words" in m for m in result.messages())
        assert not result.passed

    def test_file_name_defaults(self):
        assert validate_text("x", slug="abc").file == "abc.mdx"
        assert validate_text("x").file == "<text>"


# ===========================================================================
# DIMENSIONS
# ===========================================================================


class TestAccuracy:
    """Accuracy signals: uncertainty, placeholders, links, commands."""

    def test_placeholder_is_critical(self):
        issues = []
        check_accuracy("Intro [TODO] later", issues)
        assert any(i.severity == Severity.CRITICAL for i in issues)

    def test_coming_soon_alone_allowed(self):
        issues = []
        check_accuracy("| Voice | coming soon |", issues)
        assert not any(i.severity == Severity.CRITICAL for i in issues)

    def test_uncertainty_deducts(self):
        issues = []
        score = check_accuracy("Please verify this. [docs](https://e.com)", issues)
        assert score == 8.5

    def test_unverified_command_in_shell_block(self):
        issues = []
        body = "[docs](https://e.com)\n```bash\nclawdbot frobnicate --now\nclawdbot health\n```\n"
        check_accuracy(body, issues)
        assert any("clawdbot frobnicate" in i.message for i in issues)
        assert not any("clawdbot health" in i.message for i in issues)

    def test_commands_in_non_shell_blocks_ignored(self):
        issues = []
        body = "[docs](https://e.com)\n```yaml\nrun: clawdbot frobnicate\n```\nAnd prose clawdbot frobnicate.\n"
        check_accuracy(body, issues)
        assert not any("unverified" in i.message for i in issues)


class TestCompleteness:
    """Section checks depend on the category."""

    def test_tutorial_messages(self):
        issues = []
        check_completeness("## Introduction\nhello\n", issues, category="Tutorial")
        messages = [i.message for i in issues]
        assert "Tutorial missing Prerequisites section" in messages
        assert "Tutorial missing numbered steps" in messages

    def test_category_sections(self):
        issues = []
        body = "## Overview\n## Key Concepts\n## Getting Started\n## Best Practices\n## Conclusion\n"
        check_completeness(body, issues, category="Guide")
        messages = [i.message for i in issues]
        assert "Guide missing Common Pitfalls section" in messages
        assert "Guide missing Overview section" not in messages

    def test_security_slug_needs_warning(self):
        issues = []
        check_completeness("body", issues, slug="openclaw-api-key-rotation")
        assert "Security-related topic missing security warnings" in [i.message for i in issues]

    def test_how_to_without_code(self):
        issues = []
        check_completeness("Run the install command.", issues)
        assert "Technical content lacks code examples" in [i.message for i in issues]

    def test_score_never_negative(self):
        assert check_completeness("", [], category="Tutorial", slug="security") == 0


class TestClarityValueSafety:
    """Remaining dimensions."""

    def test_code_comments_are_not_headings(self):
        issues = []
        body = "# Title\n- item\n```bash\n# install\nclawdbot onboard\n```\n"
        assert check_clarity(body, issues) == 10

    def test_multiple_h1(self):
        issues = []
        check_clarity("# One\n# Two\n- item\n", issues)
        assert "Multiple H1 headings found (should have only one)" in [i.message for i in issues]

    def test_value_callout_bonus_capped(self):
        body = "Step 1: go\nFor example this.\nTip: here\n![x](/a.png)\n"
        assert check_value(body, []) == 10

    def test_value_missing_everything(self):
        assert check_value("plain", []) == 6.5

    def test_dangerous_command_without_warning(self):
        issues = []
        score = check_safety("```bash\nsudo rm -rf /\n```\n", issues)
        assert score <= 7
        assert any(i.severity == Severity.CRITICAL for i in issues)

    def test_dangerous_command_with_warning(self):
        issues = []
        check_safety("Warning: destructive.\n```bash\nrm -rf /\n```\n", issues)
        assert not any(i.severity == Severity.CRITICAL for i in issues)

    def test_credentials_need_caution(self):
        issues = []
        assert check_safety("Set your token here.", issues) == 9
        assert check_safety("Never commit your token.", []) == 10


# ===========================================================================
# FILES & REPORTS
# ===========================================================================


class TestFiles:
    """File and directory entry points."""

    def test_validate_file_uses_stem_as_slug(self, tmp_path):
        path = tmp_path / "openclaw-security-basics.mdx"
        path.write_text(_doc("## Introduction\nshort\n"), encoding="utf-8")
        result = validate_file(path)
        assert result.file == "openclaw-security-basics.mdx"
        assert "Security-related topic missing security warnings" in result.messages()

    def test_validate_directory(self, tmp_path):
        (tmp_path / "good.mdx").write_text(_offline(), encoding="utf-8")
        (tmp_path / "bad.mdx").write_text("no frontmatter", encoding="utf-8")
        (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")
        summary = validate_directory(tmp_path)
        assert summary.total == 2
        assert summary.passed == 1
        assert summary.failed == 1
        assert "CONTENT QUALITY VALIDATION REPORT" in summary.report()
        assert summary.to_dict()["results"][0]["file"] == "bad.mdx"

    def test_issue_dict(self):
        issue = ValidationIssue(Severity.INFO, "Value", "x")
        assert issue.to_dict() == {"severity": "info", "category": "Value", "message": "x"}
