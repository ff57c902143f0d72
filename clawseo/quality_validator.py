"""
Quality Validator -- five-dimension article scoring
=====================================================

Scores an article body on accuracy, completeness, clarity, value and
safety using fixed regex signals.  Each dimension starts at 10, collects
deductions and bonuses, and is clamped to [0, 10].  The overall score is a
weighted sum rounded to 2 decimals.

An article passes only when the overall score is at least 7.0 *and* no
issue is tagged critical.  One critical issue blocks publication no matter
how high the score is.

The validator is pure: the same text always produces the same scores,
issues and recommendations.

Usage:
    from clawseo.quality_validator import validate_text, validate_directory

    result = validate_text(Path("article.mdx").read_text(), slug="article")
    if not result.passed:
        print(result.summary())

CLI:
    python -m clawseo.quality_validator check src/content/articles/foo.mdx
    python -m clawseo.quality_validator report --path src/content/articles
"""

from __future__ import annotations

import argparse
import logging
import re
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from clawseo.frontmatter import FrontmatterError, load_frontmatter_mapping, split_document
from clawseo.knowledge_base import KNOWLEDGE, VERIFIED_COMMANDS, required_sections
from clawseo.seo_utils import clamp

logger = logging.getLogger("quality_validator")

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

PASS_THRESHOLD = 7.0
RECOMMEND_BELOW = 7.0

WEIGHTS: Dict[str, float] = {
    "accuracy": 0.30,
    "completeness": 0.20,
    "clarity": 0.20,
    "value": 0.20,
    "safety": 0.10,
}


class Severity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


# ---------------------------------------------------------------------------
# Signals
# ---------------------------------------------------------------------------

UNCERTAINTY_PATTERNS = [
    re.compile(r"as of (my knowledge cutoff|my last update)", re.I),
    re.compile(r"I don't have access to", re.I),
    re.compile(r"I cannot verify", re.I),
    re.compile(r"this may not be accurate", re.I),
    re.compile(r"please verify", re.I),
]

# "coming soon" alone is allowed: feature tables use it as a status label.
PLACEHOLDER_PATTERNS = [
    re.compile(r"\[TODO\]", re.I),
    re.compile(r"\[PLACEHOLDER\]", re.I),
    re.compile(r"\[INSERT.*?\]", re.I),
    re.compile(r"content coming soon", re.I),
    re.compile(r"will be added later", re.I),
]

VERSION_RE = re.compile(r"v?\d+\.\d+(\.\d+)?")
EXTERNAL_LINK_RE = re.compile(r"\[.*?\]\(https?://.*?\)")
FENCED_BLOCK_RE = re.compile(r"```(\w*)\n([\s\S]*?)```")
SHELL_LANGUAGES = ("", "bash", "sh", "shell", "console")
ANY_CODE_BLOCK_RE = re.compile(r"```[\s\S]*?```")
PRODUCT_COMMAND_RE = re.compile(r"clawdbot[ \t]+(\w+)")

ESSENTIAL_SECTIONS = {
    "introduction": re.compile(r"##\s*(Introduction|Overview|What is)", re.I),
    "prerequisites": re.compile(r"##\s*(Prerequisites|Requirements|Before|What.*Need)", re.I),
    "steps": re.compile(r"##\s*(Step|Install|Setup|Configure|How to)", re.I),
    "troubleshooting": re.compile(r"##\s*(Troubleshooting|Common Issues|Problems|Errors)", re.I),
    "conclusion": re.compile(r"##\s*(Conclusion|Summary|Next Steps)", re.I),
}

HOW_TO_RE = re.compile(r"install|setup|configure|command", re.I)
TUTORIAL_STEPS_RE = re.compile(r"Step \d|## Step", re.I)
SECURITY_SLUG_TERMS = ("security", "api-key", "authentication", "self-hosting")
SECURITY_WARNING_RE = re.compile(r"⚠️|warning|caution|security risk|be careful", re.I)

HEADING_RE = re.compile(r"^#{1,6}\s+.+$", re.M)
LIST_RE = re.compile(r"^[\s]*[-*+]\s+", re.M)
ORDERED_LIST_RE = re.compile(r"^\d+\.\s+", re.M)
SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
LONG_SENTENCE_WORDS = 30
LONG_SENTENCE_LIMIT = 5
JARGON_TERMS = ("API", "CLI", "SDK", "REST", "JSON", "YAML", "Docker", "Kubernetes")
JARGON_LIMIT = 3

ACTIONABLE_RE = re.compile(r"^(Step \d+|First|Then|Next|Finally)", re.M)
EXAMPLE_RE = re.compile(r"for example|e\.g\.|such as|like this", re.I)
CALLOUT_RE = re.compile(r"tip:|note:|important:|warning:|best practice", re.I)
VISUAL_RE = re.compile(r"!\[.*?\]\(.*?\)|screenshot|image|diagram", re.I)

DANGEROUS_COMMANDS = [
    (re.compile(r"rm\s+-rf\s+/\s*($|&&|\||\n|\")", re.M), "rm -rf /"),
    (re.compile(r"sudo\s+rm\s+-rf\s+/\s*($|&&|\||\n|\")", re.M), "sudo rm -rf /"),
    (re.compile(r"dd\s+if=.*of=/dev/sd[a-z]\s"), "dd to disk"),
    (re.compile(r"mkfs\s+/dev/sd[a-z]"), "mkfs on disk"),
    (re.compile(r"chmod\s+777\s+/\s*($|&&|\||\n)", re.M), "chmod 777 /"),
    (re.compile(r">\s*/dev/sda"), "> /dev/sda"),
]
DANGER_WARNING_RE = re.compile(r"⚠️|warning|caution|careful|dangerous", re.I)
CREDENTIAL_RE = re.compile(r"security|secure|password|token|key|credential", re.I)
CREDENTIAL_CAUTION_RE = re.compile(r"never|don't|avoid.*commit|keep.*secret", re.I)

RECOMMENDATIONS: Dict[str, List[str]] = {
    "accuracy": [
        "Add references to official documentation",
        "Verify all technical details against authoritative sources",
        "Include version numbers for software mentioned",
    ],
    "completeness": [
        "Add missing sections (prerequisites, troubleshooting, conclusion)",
        "Expand content to at least 1500 words",
        "Include more code examples",
    ],
    "clarity": [
        "Break up long sentences",
        "Add more lists and bullet points",
        "Explain technical jargon",
    ],
    "value": [
        "Add more actionable steps",
        "Include practical examples",
        "Add screenshots or diagrams",
    ],
    "safety": [
        "Add warnings for dangerous commands",
        "Include security best practices",
        "Warn about potential risks",
    ],
}
CRITICAL_RECOMMENDATION = "CRITICAL: Fix all critical issues before publication"


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class ValidationIssue:
    severity: Severity
    category: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"severity": self.severity.value, "category": self.category, "message": self.message}


@dataclass
class DimensionScores:
    overall: float = 0.0
    accuracy: float = 0.0
    completeness: float = 0.0
    clarity: float = 0.0
    value: float = 0.0
    safety: float = 0.0

    def dimensions(self) -> Dict[str, float]:
        return {
            "accuracy": self.accuracy,
            "completeness": self.completeness,
            "clarity": self.clarity,
            "value": self.value,
            "safety": self.safety,
        }

    def to_dict(self) -> Dict[str, float]:
        return {"overall": self.overall, **self.dimensions()}


@dataclass
class ValidationResult:
    file: str
    passed: bool = False
    scores: DimensionScores = field(default_factory=DimensionScores)
    issues: List[ValidationIssue] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    word_count: int = 0

    @property
    def critical_issues(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.CRITICAL]

    @property
    def has_critical(self) -> bool:
        return bool(self.critical_issues)

    def messages(self) -> List[str]:
        return [i.message for i in self.issues]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": self.file,
            "passed": self.passed,
            "score": self.scores.to_dict(),
            "issues": [i.to_dict() for i in self.issues],
            "recommendations": list(self.recommendations),
            "wordCount": self.word_count,
        }

    def summary(self) -> str:
        status = "PASS" if self.passed else "FAIL"
        lines = [f"{status} {self.file}", f"Overall Score: {self.scores.overall:.1f}/10"]
        for name, value in self.scores.dimensions().items():
            lines.append(f"  {name.capitalize() + ':':<14}{value:.1f}/10")
        if self.issues:
            lines.append("")
            lines.append("  Issues:")
            for issue in self.issues:
                lines.append(f"    [{issue.severity.value}] [{issue.category}] {issue.message}")
        if self.recommendations:
            lines.append("")
            lines.append("  Recommendations:")
            lines.extend(f"    - {rec}" for rec in self.recommendations)
        return "\n".join(lines)


@dataclass
class ValidationSummary:
    results: List[ValidationResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.passed)

    @property
    def failed(self) -> int:
        return self.total - self.passed

    @property
    def average_score(self) -> float:
        if not self.results:
            return 0.0
        return round(sum(r.scores.overall for r in self.results) / self.total, 2)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "averageScore": self.average_score,
            "results": [r.to_dict() for r in self.results],
        }

    def report(self) -> str:
        rule = "=" * 80
        lines = [
            rule,
            "CONTENT QUALITY VALIDATION REPORT",
            rule,
            f"Total Articles: {self.total}",
            f"Passed: {self.passed}",
            f"Failed: {self.failed}",
            f"Average Score: {self.average_score:.2f}/10",
        ]
        for result in self.results:
            lines.append("")
            lines.append(result.summary())
        lines.append(rule)
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Dimension scorers
# ---------------------------------------------------------------------------


def _issue(issues: List[ValidationIssue], severity: Severity, category: str, message: str) -> None:
    issues.append(ValidationIssue(severity=severity, category=category, message=message))


def check_accuracy(body: str, issues: List[ValidationIssue]) -> float:
    score = 10.0

    for pattern in UNCERTAINTY_PATTERNS:
        if pattern.search(body):
            score -= 2
            _issue(issues, Severity.WARNING, "Accuracy",
                   "Content contains uncertainty phrases suggesting potential inaccuracy")

    for pattern in PLACEHOLDER_PATTERNS:
        if pattern.search(body):
            score -= 3
            _issue(issues, Severity.CRITICAL, "Accuracy",
                   "Content contains placeholders or incomplete information")

    if VERSION_RE.search(body):
        score += 0.5

    if EXTERNAL_LINK_RE.search(body):
        score += 0.5
    else:
        _issue(issues, Severity.WARNING, "Accuracy", "No external references or sources cited")

    unverified: List[str] = []
    for block in FENCED_BLOCK_RE.finditer(body):
        if block.group(1).lower() not in SHELL_LANGUAGES:
            continue
        for match in PRODUCT_COMMAND_RE.finditer(block.group(2)):
            command = f"clawdbot {match.group(1)}"
            if match.group(1) not in VERIFIED_COMMANDS and command not in unverified:
                unverified.append(command)
    if unverified:
        score -= 2
        _issue(issues, Severity.WARNING, "Accuracy",
               f"Potentially unverified commands found: {', '.join(unverified[:3])}")

    install = KNOWLEDGE["installation"]["quick_install"]
    has_install_cmd = install["command"] in body or install["alternative"] in body
    if "install" in body.lower() and not has_install_cmd:
        if re.search(r"install|setup|getting started", body[:500], re.I):
            _issue(issues, Severity.INFO, "Accuracy",
                   "Installation article may not include verified install commands")

    return clamp(score, 0, 10)


def check_completeness(
    body: str,
    issues: List[ValidationIssue],
    category: Optional[str] = None,
    slug: str = "",
) -> float:
    score = 10.0

    missing = [name for name, pattern in ESSENTIAL_SECTIONS.items() if not pattern.search(body)]
    if missing:
        score -= 1.5 * len(missing)
        _issue(issues, Severity.WARNING, "Completeness",
               f"Missing recommended sections: {', '.join(missing)}")

    if category == "Tutorial":
        if "## Prerequisites" not in body and "## What You" not in body:
            score -= 1.5
            _issue(issues, Severity.WARNING, "Completeness", "Tutorial missing Prerequisites section")
        if not TUTORIAL_STEPS_RE.search(body):
            score -= 1.5
            _issue(issues, Severity.WARNING, "Completeness", "Tutorial missing numbered steps")
    elif category:
        headings = [h.lower() for h in HEADING_RE.findall(body)]
        for section in required_sections(category):
            if not any(section.lower() in h for h in headings):
                score -= 0.5
                _issue(issues, Severity.WARNING, "Completeness",
                       f"{category} missing {section} section")

    if any(term in slug for term in SECURITY_SLUG_TERMS) and not SECURITY_WARNING_RE.search(body):
        score -= 1
        _issue(issues, Severity.WARNING, "Completeness",
               "Security-related topic missing security warnings")

    if not ANY_CODE_BLOCK_RE.search(body) and HOW_TO_RE.search(body):
        score -= 2
        _issue(issues, Severity.WARNING, "Completeness", "Technical content lacks code examples")

    words = len(body.split())
    if words < 800:
        score -= 3
        _issue(issues, Severity.CRITICAL, "Completeness",
               f"Content too short ({words} words, recommended 1500+)")
    elif words < 1200:
        score -= 1
        _issue(issues, Severity.INFO, "Completeness",
               f"Content could be more detailed ({words} words, recommended 1500+)")

    return clamp(score, 0, 10)


def check_clarity(body: str, issues: List[ValidationIssue]) -> float:
    score = 10.0

    # Comments inside code blocks look like headings.
    prose = ANY_CODE_BLOCK_RE.sub("", body)
    h1_count = sum(1 for h in HEADING_RE.findall(prose) if h.startswith("# "))
    if h1_count > 1:
        score -= 2
        _issue(issues, Severity.WARNING, "Clarity",
               "Multiple H1 headings found (should have only one)")

    if not LIST_RE.search(body) and not ORDERED_LIST_RE.search(body):
        score -= 1
        _issue(issues, Severity.INFO, "Clarity", "Consider adding lists for better readability")

    long_sentences = [s for s in SENTENCE_SPLIT_RE.split(body) if len(s.split()) > LONG_SENTENCE_WORDS]
    if len(long_sentences) > LONG_SENTENCE_LIMIT:
        score -= 1.5
        _issue(issues, Severity.INFO, "Clarity",
               "Some sentences are too long (>30 words), consider breaking them up")

    unexplained = []
    for term in JARGON_TERMS:
        if not re.search(rf"\b{term}\b", body, re.I):
            continue
        if not re.search(rf"{term}\s+(is|means|refers to|stands for)", body, re.I):
            unexplained.append(term)
    if len(unexplained) > JARGON_LIMIT:
        score -= 1
        _issue(issues, Severity.INFO, "Clarity",
               f"Consider explaining technical terms: {', '.join(unexplained[:3])}")

    return clamp(score, 0, 10)


def check_value(body: str, issues: List[ValidationIssue]) -> float:
    score = 10.0

    if not ACTIONABLE_RE.search(body):
        score -= 2
        _issue(issues, Severity.WARNING, "Value", "Content lacks clear actionable steps")

    if not EXAMPLE_RE.search(body):
        score -= 1
        _issue(issues, Severity.INFO, "Value", "Consider adding more examples")

    if CALLOUT_RE.search(body):
        score += 0.5

    if not VISUAL_RE.search(body):
        score -= 0.5
        _issue(issues, Severity.INFO, "Value", "Consider adding screenshots or diagrams")

    return clamp(score, 0, 10)


def check_safety(body: str, issues: List[ValidationIssue]) -> float:
    score = 10.0

    has_warning = bool(DANGER_WARNING_RE.search(body))
    for pattern, label in DANGEROUS_COMMANDS:
        if pattern.search(body) and not has_warning:
            score -= 3
            _issue(issues, Severity.CRITICAL, "Safety",
                   f'Dangerous command "{label}" without proper warning')

    if CREDENTIAL_RE.search(body) and not CREDENTIAL_CAUTION_RE.search(body):
        score -= 1
        _issue(issues, Severity.WARNING, "Safety", "Security-related content lacks proper warnings")

    return clamp(score, 0, 10)


def build_recommendations(scores: DimensionScores, issues: List[ValidationIssue]) -> List[str]:
    recommendations: List[str] = []
    for name, value in scores.dimensions().items():
        if value < RECOMMEND_BELOW:
            recommendations.extend(RECOMMENDATIONS[name])
    if any(i.severity == Severity.CRITICAL for i in issues):
        recommendations.insert(0, CRITICAL_RECOMMENDATION)
    return recommendations


def overall_score(scores: DimensionScores) -> float:
    total = sum(WEIGHTS[name] * value for name, value in scores.dimensions().items())
    return round(total, 2)


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def _category_from_block(block: str) -> Optional[str]:
    try:
        value = load_frontmatter_mapping(block).get("category")
    except FrontmatterError:
        return None
    return value if isinstance(value, str) else None


def validate_text(
    text: str,
    slug: str = "",
    category: Optional[str] = None,
    file: str = "",
) -> ValidationResult:
    """Score a full document (frontmatter plus body).

    *category* defaults to the frontmatter's ``category`` value when it can
    be read; the category-specific section checks are skipped otherwise.
    """
    result = ValidationResult(file=file or (f"{slug}.mdx" if slug else "<text>"))

    parts = split_document(text)
    if parts is None:
        _issue(result.issues, Severity.CRITICAL, "Structure",
               "Invalid article structure - missing frontmatter")
        return result

    block, body = parts
    if category is None:
        category = _category_from_block(block)

    scores = result.scores
    scores.accuracy = check_accuracy(body, result.issues)
    scores.completeness = check_completeness(body, result.issues, category=category, slug=slug)
    scores.clarity = check_clarity(body, result.issues)
    scores.value = check_value(body, result.issues)
    scores.safety = check_safety(body, result.issues)
    scores.overall = overall_score(scores)

    result.word_count = len(body.split())
    result.recommendations = build_recommendations(scores, result.issues)
    result.passed = scores.overall >= PASS_THRESHOLD and not result.has_critical
    return result


def validate_file(path: Path) -> ValidationResult:
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    return validate_text(text, slug=path.stem, file=path.name)


def validate_directory(directory: Path, pattern: str = "*.mdx") -> ValidationSummary:
    directory = Path(directory)
    summary = ValidationSummary()
    for path in sorted(directory.glob(pattern)):
        result = validate_file(path)
        logger.debug("%s: %.2f (%s)", path.name, result.scores.overall, "pass" if result.passed else "fail")
        summary.results.append(result)
    logger.info(
        "Validated %d articles in %s: %d passed, %d failed",
        summary.total, directory, summary.passed, summary.failed,
    )
    return summary


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def _cli_check(args: argparse.Namespace) -> None:
    result = validate_file(Path(args.file))
    print(result.summary())
    if not result.passed:
        sys.exit(1)


def _cli_report(args: argparse.Namespace) -> None:
    from clawseo.config import PipelineSettings

    directory = Path(args.path) if args.path else PipelineSettings.from_env().content_dir
    summary = validate_directory(directory)
    if not summary.total:
        print("No articles found to validate.")
        return
    print(summary.report())
    if summary.failed:
        print(f"\n{summary.failed} article(s) failed quality validation")
        sys.exit(1)
    print("\nAll articles passed quality validation")


def main() -> None:
    parser = argparse.ArgumentParser(prog="quality_validator", description="Score article quality")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    p_check = sub.add_parser("check", help="Validate one article")
    p_check.add_argument("file")

    p_report = sub.add_parser("report", help="Validate every article in a directory")
    p_report.add_argument("--path", default=None)

    args = parser.parse_args()
    if args.verbose:
        logger.setLevel(logging.DEBUG)

    if args.command == "check":
        _cli_check(args)
    elif args.command == "report":
        _cli_report(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
