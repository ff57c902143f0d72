"""
SEO Pipeline -- collect, plan, generate, validate, publish
============================================================

Sequential batch orchestration of the whole content pipeline:

    collect   -- fetch trending signals into the knowledge store
    plan      -- rank topics and choose this run's article ideas
    generate  -- synthesize each idea, gate it on quality, publish it,
                 then append the new slugs to the generated log
    rewrite   -- AI rewrite of existing articles chosen by slug or date,
                 held to the same schema and quality gate as generate
    validate  -- score every published article
    repair    -- add the free installation service section where missing
    run       -- collect followed by generate

Only network fetches inside ``collect`` run concurrently.  Everything else
runs one article at a time with fixed sleeps between generative calls.

Exit codes: 0 on success (warnings allowed); 1 when the quality gate or the
frontmatter schema rejected a generated or rewritten document, when ``validate`` finds a failing article, when a
rewrite has no online provider, or on an unrecoverable I/O error.

Usage:
    from clawseo.pipeline import SeoPipeline

    pipeline = SeoPipeline(PipelineSettings.from_env())
    report = await pipeline.run()

CLI:
    clawseo collect
    clawseo ideas
    clawseo generate
    clawseo rewrite
    clawseo validate --path src/content/articles
    clawseo repair [SLUG ...]
    clawseo run
    clawseo attribute SLUG --source unsplash --photo-id abc123 --query "ai assistant"
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional

from clawseo.config import PipelineSettings, RunContext
from clawseo.content_synthesizer import ContentProvider, ContentSynthesizer, SynthesisResult
from clawseo.frontmatter import FrontmatterError
from clawseo.jsonstore import now_iso, run_sync
from clawseo.publisher import Publisher
from clawseo.quality_validator import ValidationSummary, validate_directory, validate_text
from clawseo.signal_collector import CollectionReport, SignalCollector
from clawseo.topic_ranker import ArticleIdea, select_ideas

logger = logging.getLogger("pipeline")

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

PACKAGE_LOGGERS = (
    "config",
    "jsonstore",
    "signal_collector",
    "topic_ranker",
    "content_synthesizer",
    "quality_validator",
    "publisher",
    "pipeline",
)


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------


@dataclass
class RunReport:
    command: str
    run_id: str = ""
    started_at: str = field(default_factory=now_iso)
    finished_at: str = ""
    collection: Optional[Dict[str, Any]] = None
    ideas: List[str] = field(default_factory=list)
    published: List[str] = field(default_factory=list)
    providers: Dict[str, str] = field(default_factory=dict)
    rejected: Dict[str, str] = field(default_factory=dict)
    rewritten: List[str] = field(default_factory=list)
    repaired: List[str] = field(default_factory=list)
    skipped: Dict[str, str] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)
    validation: Optional[Dict[str, Any]] = None

    @property
    def exit_code(self) -> int:
        if self.rejected or self.errors:
            return 1
        if self.validation is not None and self.validation.get("failed", 0):
            return 1
        return 0

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "command": self.command,
            "runId": self.run_id,
            "startedAt": self.started_at,
            "finishedAt": self.finished_at,
            "ideas": list(self.ideas),
            "published": list(self.published),
            "providers": dict(self.providers),
            "rejected": dict(self.rejected),
            "rewritten": list(self.rewritten),
            "repaired": list(self.repaired),
            "skipped": dict(self.skipped),
            "errors": list(self.errors),
            "exitCode": self.exit_code,
        }
        if self.collection is not None:
            data["collection"] = self.collection
        if self.validation is not None:
            data["validation"] = {k: v for k, v in self.validation.items() if k != "results"}
        return data


def _gate_failure(result: SynthesisResult) -> str:
    """Log a quality gate rejection and return its one-line reason."""
    score = result.validation.scores.overall if result.validation else 0.0
    critical = result.validation.critical_issues if result.validation else []
    reason = f"quality gate failed (score {score:.2f}, {len(critical)} critical)"
    logger.error("Rejected %s: %s", result.slug, reason)
    for issue in critical:
        logger.error("  [%s] %s", issue.category, issue.message)
    return reason


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class SeoPipeline:
    """Wires collector, ranker, synthesizer, validator and publisher."""

    def __init__(
        self,
        settings: PipelineSettings,
        collector: Optional[SignalCollector] = None,
        publisher: Optional[Publisher] = None,
        providers: Optional[List[ContentProvider]] = None,
        today: Optional[date] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.settings = settings
        self.collector = collector or SignalCollector(settings)
        self.publisher = publisher or Publisher(settings)
        self.providers = providers
        self.today = today
        self._sleep = sleep

    def _context(self) -> RunContext:
        return RunContext.create(
            self.settings,
            today=self.today,
            existing_slugs=self.publisher.existing_slugs(),
            generated_slugs=self.publisher.load_generated_log(),
        )

    def _synthesizer(self, ctx: RunContext) -> ContentSynthesizer:
        return ContentSynthesizer(ctx, providers=self.providers)

    # -- stages --------------------------------------------------------

    async def collect(self) -> CollectionReport:
        return await self.collector.run()

    def plan(self, ctx: Optional[RunContext] = None) -> List[ArticleIdea]:
        ctx = ctx or self._context()
        items = self.collector.load_store()
        if not items:
            logger.warning("Knowledge store is empty; run 'collect' first")
            return []
        return select_ideas(items, ctx.existing_slugs, ctx.generated_slugs, self.settings)

    async def generate(self, report: Optional[RunReport] = None) -> RunReport:
        ctx = self._context()
        report = report or RunReport(command="generate")
        report.run_id = ctx.run_id

        ideas = self.plan(ctx)
        report.ideas = [idea.slug for idea in ideas]
        if not ideas:
            logger.info("No new article ideas for this run")
            report.finished_at = now_iso()
            return report

        synth = self._synthesizer(ctx)
        validator = validate_text if self.settings.quality_gate else None
        new_slugs: List[str] = []

        try:
            for index, idea in enumerate(ideas):
                result = await synth.synthesize(idea, validator=validator)
                report.providers[idea.slug] = result.provider

                if not result.passed:
                    report.rejected[idea.slug] = _gate_failure(result)
                else:
                    try:
                        self.publisher.publish(result.text, idea.slug)
                    except FrontmatterError as exc:
                        logger.error("Rejected %s: %s %s", idea.slug, exc, exc.errors[:3])
                        report.rejected[idea.slug] = str(exc)
                    else:
                        new_slugs.append(idea.slug)
                        ctx.existing_slugs.add(idea.slug)
                        report.published.append(idea.slug)

                if index < len(ideas) - 1 and synth.online_available:
                    await self._sleep(self.settings.generate_delay)
        finally:
            await synth.close()

        if new_slugs:
            self.publisher.record_generated(new_slugs)

        logger.info(
            "Generation done: %d published, %d rejected, providers disabled: %s",
            len(report.published), len(report.rejected),
            ", ".join(sorted(ctx.unavailable_providers)) or "none",
        )
        report.finished_at = now_iso()
        return report

    def rewrite_targets(self) -> List[str]:
        if self.settings.rewrite_slugs:
            return list(self.settings.rewrite_slugs)
        if self.settings.rewrite_date:
            return self.publisher.slugs_for_date(self.settings.rewrite_date)
        return []

    async def rewrite(self) -> RunReport:
        ctx = self._context()
        report = RunReport(command="rewrite", run_id=ctx.run_id)
        synth = self._synthesizer(ctx)

        if not synth.online_available:
            message = "Rewrite needs an online provider (AICODECAT_API_URL/AICODECAT_API_KEY or GEMINI_API_KEY)"
            logger.error(message)
            report.errors.append(message)
            report.finished_at = now_iso()
            return report

        slugs = self.rewrite_targets()
        if not slugs:
            logger.info("No articles matched the rewrite criteria")
            report.finished_at = now_iso()
            return report

        try:
            await self._rewrite_slugs(synth, slugs, report)
        finally:
            await synth.close()

        logger.info("Rewrite done: %d rewritten, %d rejected, %d skipped",
                    len(report.rewritten), len(report.rejected), len(report.skipped))
        report.finished_at = now_iso()
        return report

    async def _rewrite_slugs(self, synth: ContentSynthesizer, slugs: List[str], report: RunReport) -> None:
        validator = validate_text if self.settings.quality_gate else None
        for index, slug in enumerate(slugs):
            original = self.publisher.read_article(slug)
            if original is None:
                logger.warning("Article %s not found, skipping", slug)
                report.skipped[slug] = "not found"
            else:
                result = await synth.rewrite_article(slug, original, validator=validator)
                if result is None:
                    report.skipped[slug] = "no usable output"
                elif not result.passed:
                    report.rejected[slug] = _gate_failure(result)
                else:
                    report.providers[slug] = result.provider
                    try:
                        self.publisher.rewrite_in_place(slug, result.text)
                    except FrontmatterError as exc:
                        logger.error("Rejected %s: %s %s", slug, exc, exc.errors[:3])
                        report.rejected[slug] = str(exc)
                    else:
                        report.rewritten.append(slug)

            if index < len(slugs) - 1:
                if not synth.online_available:
                    for rest in slugs[index + 1:]:
                        report.skipped[rest] = "no online provider left"
                    break
                await self._sleep(self.settings.rewrite_delay)

    def repair(self, slugs: Optional[List[str]] = None) -> RunReport:
        """Add the free installation service section to articles missing it."""
        report = RunReport(command="repair")
        report.repaired = self.publisher.ensure_install_service(slugs or None)
        report.finished_at = now_iso()
        return report

    def validate(self, path: Optional[Path] = None) -> ValidationSummary:
        return validate_directory(Path(path) if path else self.settings.content_dir)

    async def run(self) -> RunReport:
        report = RunReport(command="run")
        collection = await self.collect()
        report.collection = collection.to_summary()
        return await self.generate(report)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def _print_report(report: RunReport) -> int:
    print(json.dumps(report.to_dict(), indent=2))
    return report.exit_code


def _cli_collect(pipeline: SeoPipeline, args: argparse.Namespace) -> int:
    report = run_sync(pipeline.collect())
    print(json.dumps(report.to_summary(), indent=2))
    return 0


def _cli_ideas(pipeline: SeoPipeline, args: argparse.Namespace) -> int:
    for idea in pipeline.plan():
        print(f"{idea.slug}\n    {idea.category} | {idea.angle} | {idea.title}")
    return 0


def _cli_generate(pipeline: SeoPipeline, args: argparse.Namespace) -> int:
    return _print_report(run_sync(pipeline.generate()))


def _cli_rewrite(pipeline: SeoPipeline, args: argparse.Namespace) -> int:
    return _print_report(run_sync(pipeline.rewrite()))


def _cli_run(pipeline: SeoPipeline, args: argparse.Namespace) -> int:
    return _print_report(run_sync(pipeline.run()))


def _cli_validate(pipeline: SeoPipeline, args: argparse.Namespace) -> int:
    summary = pipeline.validate(Path(args.path) if args.path else None)
    if not summary.total:
        print("No articles found to validate.")
        return 0
    print(summary.report())
    return 1 if summary.failed else 0


def _cli_repair(pipeline: SeoPipeline, args: argparse.Namespace) -> int:
    return _print_report(pipeline.repair(args.slugs))


def _cli_attribute(pipeline: SeoPipeline, args: argparse.Namespace) -> int:
    entry = pipeline.publisher.record_image_attribution(
        args.slug, args.source, photo_id=args.photo_id, seed=args.seed, query=args.query,
    )
    print(json.dumps({args.slug: entry}, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="clawseo", description="Trending-topic SEO content pipeline")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("collect", help="Fetch trending signals into the knowledge store")
    sub.add_parser("ideas", help="Show the article ideas the next run would use")
    sub.add_parser("generate", help="Generate, validate and publish new articles")
    sub.add_parser("rewrite", help="AI-rewrite articles by REWRITE_SLUGS or REWRITE_DATE")
    sub.add_parser("run", help="collect + generate")

    p_val = sub.add_parser("validate", help="Score published articles")
    p_val.add_argument("--path", default=None, help="Directory to validate (default: content dir)")

    p_rep = sub.add_parser("repair", help="Add the free installation service section where missing")
    p_rep.add_argument("slugs", nargs="*", help="Articles to repair (default: all)")

    p_attr = sub.add_parser("attribute", help="Record image attribution for a slug")
    p_attr.add_argument("slug")
    p_attr.add_argument("--source", required=True)
    p_attr.add_argument("--photo-id", default=None)
    p_attr.add_argument("--seed", default=None)
    p_attr.add_argument("--query", default="")
    return parser


HANDLERS: Dict[str, Callable[[SeoPipeline, argparse.Namespace], int]] = {
    "collect": _cli_collect,
    "ideas": _cli_ideas,
    "generate": _cli_generate,
    "rewrite": _cli_rewrite,
    "run": _cli_run,
    "validate": _cli_validate,
    "repair": _cli_repair,
    "attribute": _cli_attribute,
}


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        for name in PACKAGE_LOGGERS:
            logging.getLogger(name).setLevel(logging.DEBUG)

    handler = HANDLERS.get(args.command)
    if handler is None:
        parser.print_help()
        sys.exit(1)

    try:
        settings = PipelineSettings.from_env()
        code = handler(SeoPipeline(settings), args)
    except (OSError, ValueError) as exc:
        logger.error("%s failed: %s", args.command, exc)
        sys.exit(1)

    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
