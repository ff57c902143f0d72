"""
Topic Ranker -- trending topics to article ideas
==================================================

Aggregates the knowledge store by topic tag, picks an editorial angle for
each topic from the wording of its recent titles, and maps the most frequent
topics through a fixed topic -> (title, category, keywords) table.  Topics
without a template, or whose slug is already published or was generated in
an earlier run, are skipped.

When trends alone do not fill the run, hand-written use-case ideas (a
scenario plus concrete steps) and evergreen fallback ideas top it up.  The
final list never exceeds ``max(max_articles, min_articles)``.

Usage:
    from clawseo.topic_ranker import analyze_trending_topics, select_ideas

    trends = analyze_trending_topics(items)
    ideas = select_ideas(items, existing_slugs, generated_slugs, settings)

CLI:
    python -m clawseo.topic_ranker trends --limit 10
    python -m clawseo.topic_ranker ideas
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set

from clawseo.config import PipelineSettings
from clawseo.seo_utils import title_to_slug
from clawseo.signal_collector import CollectedItem

logger = logging.getLogger("topic_ranker")

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

MAX_RECENT_ITEMS = 5
TOP_TRENDS = 15


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class TrendingTopic:
    topic: str
    count: int
    recent_items: List[CollectedItem] = field(default_factory=list)
    suggested_angle: str = "comprehensive-guide"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "topic": self.topic,
            "count": self.count,
            "recentItems": [i.to_dict() for i in self.recent_items],
            "suggestedAngle": self.suggested_angle,
        }


@dataclass
class ArticleIdea:
    slug: str
    title: str
    category: str
    keywords: List[str]
    angle: str
    source_items: List[CollectedItem] = field(default_factory=list)
    scenario: Optional[str] = None
    steps: List[str] = field(default_factory=list)

    @property
    def is_use_case(self) -> bool:
        return bool(self.scenario)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "slug": self.slug,
            "title": self.title,
            "category": self.category,
            "keywords": list(self.keywords),
            "angle": self.angle,
            "sourceItems": [i.to_dict() for i in self.source_items],
        }
        if self.scenario:
            data["scenario"] = self.scenario
            data["steps"] = list(self.steps)
        return data


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

TOPIC_TEMPLATES: Dict[str, Dict[str, Any]] = {
    "brand": {
        "title": "Openclaw Weekly: What's New in Self-Hosted AI Assistants",
        "category": "News",
        "keywords": ["openclaw", "moltbot", "clawdbot", "self-hosted ai", "ai assistant news"],
    },
    "agents": {
        "title": "Building AI Agents with Moltbot: Complete Guide",
        "category": "Advanced",
        "keywords": ["ai agents", "moltbot agents", "autonomous ai", "agent workflows", "multi-agent"],
    },
    "rag": {
        "title": "RAG Implementation in Moltbot: Retrieval-Augmented Generation Guide",
        "category": "Advanced",
        "keywords": ["rag", "retrieval augmented generation", "moltbot rag", "knowledge base", "embeddings"],
    },
    "automation": {
        "title": "AI Automation Workflows with Moltbot: Practical Examples",
        "category": "Tutorial",
        "keywords": ["ai automation", "workflow automation", "moltbot automation", "task automation"],
    },
    "integration": {
        "title": "Integrating Moltbot with Your Existing Tools and APIs",
        "category": "Tutorial",
        "keywords": ["moltbot integration", "api integration", "webhook", "tool integration"],
    },
    "local-llm": {
        "title": "Running Local LLMs with Moltbot: Ollama and Open Source Models",
        "category": "Tutorial",
        "keywords": ["local llm", "ollama", "open source llm", "moltbot local models", "private ai"],
    },
    "deployment": {
        "title": "Deploying Moltbot: Docker, Kubernetes, and Cloud Options",
        "category": "Tutorial",
        "keywords": ["moltbot deployment", "docker", "kubernetes", "cloud deployment"],
    },
    "tutorials": {
        "title": "Getting Started with Moltbot: Beginner-Friendly Tutorial",
        "category": "Tutorial",
        "keywords": ["moltbot tutorial", "beginner guide", "getting started", "first steps"],
    },
    "llm-providers": {
        "title": "Comparing LLM Providers for Moltbot: Claude, GPT-4, and More",
        "category": "Comparison",
        "keywords": ["llm providers", "claude vs gpt", "moltbot providers", "ai models comparison"],
    },
    "frameworks": {
        "title": "Moltbot vs LangChain vs LlamaIndex: Framework Comparison",
        "category": "Comparison",
        "keywords": ["langchain", "llamaindex", "ai frameworks", "moltbot comparison"],
    },
    "open-source": {
        "title": "Open Source AI Assistants: Why Moltbot Leads the Pack",
        "category": "Comparison",
        "keywords": ["open source ai", "moltbot open source", "free ai assistant", "community"],
    },
    "self-hosting": {
        "title": "Self-Hosting AI Assistants: Why Moltbot is the Best Choice",
        "category": "Guide",
        "keywords": ["self-hosted ai", "private ai", "moltbot self-hosting", "data privacy", "local ai"],
    },
    "messaging": {
        "title": "Multi-Platform Messaging with Moltbot: Telegram, Discord, Slack",
        "category": "Guide",
        "keywords": ["messaging platforms", "telegram bot", "discord bot", "slack bot", "moltbot messaging"],
    },
    "workflows": {
        "title": "Building Intelligent Workflows with Moltbot AI",
        "category": "Guide",
        "keywords": ["ai workflows", "intelligent automation", "moltbot workflows", "process automation"],
    },
    "assistants": {
        "title": "Creating Personal AI Assistants with Moltbot",
        "category": "Guide",
        "keywords": ["personal assistant", "ai assistant", "moltbot assistant", "custom assistant"],
    },
    "ai-techniques": {
        "title": "Advanced AI Techniques in Moltbot: Embeddings, Fine-tuning, and More",
        "category": "Advanced",
        "keywords": ["embeddings", "fine-tuning", "ai techniques", "moltbot advanced"],
    },
    "ai-trends": {
        "title": "AI Automation Trends in 2026: What Moltbot Users Should Know",
        "category": "News",
        "keywords": ["ai trends 2026", "automation trends", "ai industry", "future of ai", "moltbot insights"],
    },
    "ai-productivity": {
        "title": "How AI Automation is Transforming Personal Productivity",
        "category": "Guide",
        "keywords": ["ai productivity", "personal automation", "ai assistant productivity", "work smarter"],
    },
    "ai-enterprise": {
        "title": "Enterprise AI Automation: Self-Hosted Solutions vs Cloud Services",
        "category": "Comparison",
        "keywords": ["enterprise ai", "self-hosted vs cloud", "ai security", "corporate ai", "data sovereignty"],
    },
    "ai-privacy": {
        "title": "The Privacy Advantage: Why Self-Hosted AI Matters More Than Ever",
        "category": "Guide",
        "keywords": ["ai privacy", "data privacy", "self-hosted privacy", "ai data protection", "gdpr ai"],
    },
    "ai-cost": {
        "title": "AI Automation ROI: Calculating the True Cost of LLM APIs vs Self-Hosting",
        "category": "Comparison",
        "keywords": ["ai cost", "llm pricing", "self-hosted cost", "ai roi", "automation savings"],
    },
    "ai-future": {
        "title": "The Future of Personal AI: From Chatbots to Autonomous Agents",
        "category": "News",
        "keywords": ["future of ai", "ai evolution", "autonomous agents", "ai assistants future", "ai predictions"],
    },
    "ai-security": {
        "title": "AI Security Best Practices: Protecting Your Self-Hosted Assistant",
        "category": "Best Practices",
        "keywords": ["ai security", "llm security", "self-hosted security", "ai vulnerabilities", "secure ai"],
    },
    "ai-voice": {
        "title": "Voice-Enabled AI Assistants: Adding Speech to Your Moltbot Setup",
        "category": "Tutorial",
        "keywords": ["voice ai", "speech recognition", "text to speech", "voice assistant", "voice automation"],
    },
    "ai-ethics": {
        "title": "Responsible AI Automation: Ethics and Best Practices for Personal Assistants",
        "category": "Best Practices",
        "keywords": ["ai ethics", "responsible ai", "ai guidelines", "ethical automation", "ai responsibility"],
    },
    "ai-monitoring": {
        "title": "Monitoring Your AI: Logging, Debugging, and Performance Tracking",
        "category": "Tutorial",
        "keywords": ["ai monitoring", "llm debugging", "ai logging", "performance tracking", "ai observability"],
    },
    "ai-scaling": {
        "title": "Scaling AI Automation: From Personal Use to Team Deployment",
        "category": "Guide",
        "keywords": ["ai scaling", "team ai", "ai deployment", "enterprise scaling", "ai growth"],
    },
}

FALLBACK_IDEAS: List[Dict[str, Any]] = [
    {"title": "Openclaw Weekly: Security and Secrets Management Roundup", "category": "News",
     "keywords": ["openclaw", "secrets management", "api keys", "security", "self-hosted ai"],
     "angle": "news-update"},
    {"title": "Openclaw on VPS in 2026: A Fast Start Guide", "category": "Tutorial",
     "keywords": ["openclaw", "vps", "deployment", "ubuntu 22.04", "self-hosted ai"],
     "angle": "practical-tutorial"},
    {"title": "Openclaw Telegram Bot Hardening Checklist", "category": "Best Practices",
     "keywords": ["openclaw", "telegram bot", "security", "best practices", "bot hardening"],
     "angle": "best-practices"},
    {"title": "Openclaw Memory Architecture: How Persistent Context Actually Works", "category": "Advanced",
     "keywords": ["openclaw", "memory", "context", "architecture", "ai assistant"],
     "angle": "advanced-deep-dive"},
    {"title": "Openclaw vs Cloud AI Assistants: Privacy, Cost, and Control", "category": "Comparison",
     "keywords": ["openclaw", "privacy", "cost", "self-hosted vs cloud", "ai assistant"],
     "angle": "comparison"},
    {"title": "Openclaw Automation Playbooks: 7 Workflows That Save Hours", "category": "Guide",
     "keywords": ["openclaw", "automation", "workflows", "productivity", "ai assistant"],
     "angle": "comprehensive-guide"},
    {"title": "Openclaw Local LLM Mode with Ollama: Step-by-Step", "category": "Tutorial",
     "keywords": ["openclaw", "ollama", "local llm", "offline", "privacy"],
     "angle": "practical-tutorial"},
    {"title": "Openclaw Gateway Security: Reverse Proxy and Auth Best Practices", "category": "Best Practices",
     "keywords": ["openclaw", "gateway security", "reverse proxy", "auth", "self-hosted ai"],
     "angle": "best-practices"},
    {"title": "Openclaw Deployment on Mac Mini: 24/7 Setup and Power Tips", "category": "Tutorial",
     "keywords": ["openclaw", "mac mini", "deployment", "24/7", "self-hosted ai"],
     "angle": "practical-tutorial"},
    {"title": "Openclaw Discord + Slack Multi-Channel Setup", "category": "Guide",
     "keywords": ["openclaw", "discord", "slack", "messaging", "multi-platform"],
     "angle": "comprehensive-guide"},
    {"title": "Openclaw Incident Response: What to Do When Keys Leak", "category": "Best Practices",
     "keywords": ["openclaw", "incident response", "api keys", "security", "self-hosted ai"],
     "angle": "best-practices"},
    {"title": "Openclaw Enterprise Rollout: Team Scaling and Governance", "category": "Guide",
     "keywords": ["openclaw", "enterprise", "scaling", "governance", "ai assistant"],
     "angle": "comprehensive-guide"},
]

USE_CASE_IDEAS: List[Dict[str, Any]] = [
    {
        "title": "Openclaw Use Case: Support Triage + FAQ",
        "keywords": ["customer support", "ticket triage", "faq automation", "helpdesk", "support workflow"],
        "scenario": (
            "A SaaS support team handles 40-80 tickets per day across Slack and email. They want "
            "Openclaw to tag priority, draft FAQ replies, and send a daily summary of unresolved issues."
        ),
        "steps": [
            "Install Openclaw and complete onboarding (`clawdbot onboard`).",
            "Connect the support channel and restrict access to the support team.",
            "Add FAQ, refund, and policy docs to the Openclaw memory folder.",
            "Define a triage checklist (priority, category, owner) and test with sample tickets.",
            "Schedule a daily digest message with top issues and suggested replies.",
        ],
    },
    {
        "title": "Openclaw Use Case: Sales Lead Qualification",
        "keywords": ["sales ops", "lead qualification", "crm notes", "pipeline hygiene", "sales automation"],
        "scenario": (
            "Inbound lead forms arrive in a shared Slack channel. Sales wants Openclaw to qualify "
            "leads, summarize intent, and sync notes into the CRM."
        ),
        "steps": [
            "Install Openclaw and connect the sales Slack channel.",
            "Post lead form payloads into Slack via webhook or email-to-Slack.",
            "Create a qualification checklist (company size, use case, timeline, budget).",
            "Configure a webhook or skill to call your CRM with the summary fields.",
            "Validate with test leads, then switch the workflow to live traffic.",
        ],
    },
    {
        "title": "Openclaw Use Case: DevOps Incident Summaries",
        "keywords": ["incident response", "runbook", "on-call", "alert triage", "devops automation"],
        "scenario": (
            "On-call engineers receive noisy alerts. They want Openclaw to summarize incidents, "
            "surface the right runbook, and capture a post-incident summary."
        ),
        "steps": [
            "Install Openclaw and connect the #incidents channel.",
            "Route alerts from PagerDuty or Grafana to the incident channel.",
            "Store runbooks and SOPs in the Openclaw memory folder.",
            "Define a message template that triggers an incident summary.",
            "Generate a post-incident summary with action items and owners.",
        ],
    },
    {
        "title": "Openclaw Use Case: Marketing Research Briefs",
        "keywords": ["marketing automation", "research briefs", "content outlines", "content workflow", "brand research"],
        "scenario": (
            "A marketing team ships weekly content and needs faster research. Openclaw should "
            "compile sources, extract angles, and produce draft outlines."
        ),
        "steps": [
            "Install Openclaw and add a trusted source list to the workspace.",
            "Create a brief template with target audience, angle, and CTA.",
            "Run a weekly prompt to compile sources and summarize findings.",
            "Generate a draft outline with headings and key points.",
            "Review and refine before handing off to writers.",
        ],
    },
    {
        "title": "Openclaw Use Case: Meeting Notes to Tasks",
        "keywords": ["meeting notes", "task extraction", "follow-ups", "personal productivity", "executive assistant"],
        "scenario": (
            "A founder wants meeting notes turned into tasks, follow-ups, and a weekly summary "
            "without manual copy and paste."
        ),
        "steps": [
            "Install Openclaw and connect Telegram for quick note capture.",
            "Use a meeting-notes template and send notes right after calls.",
            "Ask Openclaw to extract tasks, owners, and due dates.",
            "Generate follow-up drafts for stakeholders.",
            "Compile a weekly summary of completed and pending items.",
        ],
    },
    {
        "title": "Openclaw Use Case: HR Onboarding Assistant",
        "keywords": ["hr onboarding", "employee questions", "policy assistant", "internal handbook", "people ops"],
        "scenario": (
            "HR receives repetitive onboarding questions. Openclaw should answer from the handbook "
            "and capture new hire checklists."
        ),
        "steps": [
            "Install Openclaw and connect an HR channel.",
            "Upload the employee handbook and onboarding checklist to memory.",
            "Create a welcome prompt with key policies and escalation rules.",
            "Test with 5 common onboarding questions.",
            "Set a weekly report for unanswered or escalated issues.",
        ],
    },
    {
        "title": "Openclaw Use Case: Recruiting Resume Triage",
        "keywords": ["recruiting", "resume screening", "candidate summary", "hiring", "talent ops"],
        "scenario": (
            "Recruiters need faster resume screening. Openclaw should summarize candidate fit and "
            "highlight red flags."
        ),
        "steps": [
            "Install Openclaw and connect a recruiting channel.",
            "Drop resumes or summaries into the workspace memory folder.",
            "Define a scorecard (skills, experience, role fit).",
            "Ask Openclaw to produce a 5-bullet summary per candidate.",
            "Route top candidates to a review queue.",
        ],
    },
    {
        "title": "Openclaw Use Case: Invoice Triage",
        "keywords": ["finance ops", "invoice processing", "expense review", "ap workflow", "approvals"],
        "scenario": (
            "Finance receives invoices and expenses via email. Openclaw should extract key fields "
            "and flag anomalies."
        ),
        "steps": [
            "Install Openclaw and connect the finance intake channel.",
            "Add invoice and expense policy docs to memory.",
            "Define required fields (vendor, amount, PO, due date).",
            "Ask Openclaw to extract fields and flag policy violations.",
            "Send a daily summary of pending approvals.",
        ],
    },
    {
        "title": "Openclaw Use Case: IT Helpdesk Automation",
        "keywords": ["it helpdesk", "ticketing", "device setup", "access requests", "internal support"],
        "scenario": (
            "IT receives repetitive access requests. Openclaw should triage requests and auto-reply "
            "with SOPs."
        ),
        "steps": [
            "Install Openclaw and connect the IT support channel.",
            "Upload SOPs for access requests and device setup.",
            "Define a triage template (priority, system, requester).",
            "Auto-reply with SOP links and escalation steps.",
            "Summarize unresolved tickets daily.",
        ],
    },
    {
        "title": "Openclaw Use Case: E-commerce Order Support",
        "keywords": ["ecommerce support", "order status", "returns", "shipping updates", "customer queries"],
        "scenario": (
            "An e-commerce team handles order status questions all day. Openclaw should answer from "
            "shipping policies and order data."
        ),
        "steps": [
            "Install Openclaw and connect the support channel.",
            "Add shipping and return policies to the memory folder.",
            "Define a lookup workflow for order status updates.",
            "Draft replies for common shipping delays.",
            "Provide a daily report on refund requests.",
        ],
    },
    {
        "title": "Openclaw Use Case: Ops Daily Reporting",
        "keywords": ["operations", "daily report", "kpi summary", "sop updates", "team sync"],
        "scenario": "Ops leads need a daily summary of KPIs, blockers, and escalations across teams.",
        "steps": [
            "Install Openclaw and connect the ops channel.",
            "Define KPI sources and a standard daily report format.",
            "Aggregate updates from Slack and Telegram check-ins.",
            "Ask Openclaw to produce a summary with blockers and owners.",
            "Send the report at a fixed time each day.",
        ],
    },
    {
        "title": "Openclaw Use Case: Project Status Summaries",
        "keywords": ["project management", "status updates", "team coordination", "milestones", "weekly sync"],
        "scenario": (
            "Project leads need weekly status updates across multiple teams. Openclaw should "
            "summarize progress and risks."
        ),
        "steps": [
            "Install Openclaw and connect a project status channel.",
            "Capture weekly updates via a simple prompt template.",
            "Store milestone docs in the memory folder.",
            "Ask Openclaw to summarize progress and highlight risks.",
            "Share the summary with stakeholders before the weekly sync.",
        ],
    },
]


# ---------------------------------------------------------------------------
# Trend analysis
# ---------------------------------------------------------------------------


def suggest_angle(items: Iterable[CollectedItem]) -> str:
    """Pick an editorial angle from the joined, lower-cased titles."""
    titles = " ".join(i.title.lower() for i in items)

    if "how to" in titles or "tutorial" in titles:
        return "practical-tutorial"
    if "vs" in titles or "compare" in titles or "alternative" in titles:
        return "comparison"
    if "best" in titles or "top" in titles or "guide" in titles:
        return "best-practices"
    if "new" in titles or "announce" in titles or "release" in titles:
        return "news-update"
    if "advanced" in titles or "deep" in titles or "architecture" in titles:
        return "advanced-deep-dive"
    return "comprehensive-guide"


def analyze_trending_topics(items: Iterable[CollectedItem]) -> List[TrendingTopic]:
    """Count topic occurrences; ties keep first-seen order."""
    counts: Dict[str, int] = {}
    recent: Dict[str, List[CollectedItem]] = {}
    for item in items:
        for topic in item.topics:
            counts[topic] = counts.get(topic, 0) + 1
            bucket = recent.setdefault(topic, [])
            if len(bucket) < MAX_RECENT_ITEMS:
                bucket.append(item)

    trends = [
        TrendingTopic(
            topic=topic,
            count=count,
            recent_items=recent[topic],
            suggested_angle=suggest_angle(recent[topic]),
        )
        for topic, count in counts.items()
    ]
    trends.sort(key=lambda t: t.count, reverse=True)
    return trends


# ---------------------------------------------------------------------------
# Idea builders
# ---------------------------------------------------------------------------


def generate_article_ideas(
    trends: List[TrendingTopic],
    known_slugs: Set[str],
) -> List[ArticleIdea]:
    ideas: List[ArticleIdea] = []
    taken = set(known_slugs)
    for trend in trends[:TOP_TRENDS]:
        template = TOPIC_TEMPLATES.get(trend.topic)
        if not template:
            continue
        slug = title_to_slug(template["title"])
        if slug in taken:
            continue
        taken.add(slug)
        ideas.append(ArticleIdea(
            slug=slug,
            title=template["title"],
            category=template["category"],
            keywords=list(template["keywords"]),
            angle=trend.suggested_angle,
            source_items=list(trend.recent_items),
        ))
    return ideas


def _ideas_from_table(
    table: List[Dict[str, Any]],
    known_slugs: Set[str],
    current: List[ArticleIdea],
    recent_items: List[CollectedItem],
) -> List[ArticleIdea]:
    taken = set(known_slugs) | {idea.slug for idea in current}
    source_items = list(recent_items[:MAX_RECENT_ITEMS])
    ideas: List[ArticleIdea] = []
    for entry in table:
        slug = title_to_slug(entry["title"])
        if slug in taken:
            continue
        taken.add(slug)
        ideas.append(ArticleIdea(
            slug=slug,
            title=entry["title"],
            category=entry.get("category", "Tutorial"),
            keywords=list(entry["keywords"]),
            angle=entry.get("angle", "practical-tutorial"),
            source_items=source_items,
            scenario=entry.get("scenario"),
            steps=list(entry.get("steps", [])),
        ))
    return ideas


def build_use_case_ideas(
    known_slugs: Set[str],
    current: List[ArticleIdea],
    recent_items: List[CollectedItem],
) -> List[ArticleIdea]:
    return _ideas_from_table(USE_CASE_IDEAS, known_slugs, current, recent_items)


def build_fallback_ideas(
    known_slugs: Set[str],
    current: List[ArticleIdea],
    recent_items: List[CollectedItem],
) -> List[ArticleIdea]:
    return _ideas_from_table(FALLBACK_IDEAS, known_slugs, current, recent_items)


def interleave_ideas(
    primary: List[ArticleIdea],
    secondary: List[ArticleIdea],
    max_items: int,
) -> List[ArticleIdea]:
    merged: List[ArticleIdea] = []
    i = j = 0
    while len(merged) < max_items and (i < len(primary) or j < len(secondary)):
        if i < len(primary):
            merged.append(primary[i])
            i += 1
        if len(merged) >= max_items:
            break
        if j < len(secondary):
            merged.append(secondary[j])
            j += 1
    return merged


def select_ideas(
    items: List[CollectedItem],
    existing_slugs: Iterable[str],
    generated_slugs: Iterable[str],
    settings: PipelineSettings,
) -> List[ArticleIdea]:
    """Choose this run's ideas, capped at ``settings.effective_max_articles``."""
    limit = settings.effective_max_articles
    known = set(existing_slugs) | set(generated_slugs)

    if settings.use_cases_only:
        logger.info("Use-case-only mode enabled")
        return build_use_case_ideas(known, [], items)[:limit]

    trends = analyze_trending_topics(items)
    for rank, trend in enumerate(trends[:10], 1):
        logger.debug("%2d. %s: %d mentions (%s)", rank, trend.topic, trend.count, trend.suggested_angle)

    ideas = generate_article_ideas(trends, known)

    if settings.include_use_cases:
        use_cases = build_use_case_ideas(known, ideas, items)
        if use_cases:
            ideas = interleave_ideas(ideas, use_cases, limit)

    if settings.min_articles > 0 and len(ideas) < settings.min_articles:
        if settings.include_use_cases:
            for idea in build_use_case_ideas(known, ideas, items):
                if len(ideas) >= limit:
                    break
                ideas.append(idea)
        for idea in build_fallback_ideas(known, ideas, items):
            if len(ideas) >= limit:
                break
            ideas.append(idea)

    selected = ideas[:limit]
    logger.info("Selected %d article ideas (limit %d)", len(selected), limit)
    return selected


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def _load_items(settings: PipelineSettings) -> List[CollectedItem]:
    from clawseo.signal_collector import SignalCollector

    return SignalCollector(settings).load_store()


def _cli_trends(args: argparse.Namespace) -> None:
    settings = PipelineSettings.from_env()
    for rank, trend in enumerate(analyze_trending_topics(_load_items(settings))[:args.limit], 1):
        print(f"{rank:>2}. {trend.topic:<18} {trend.count:>4}  {trend.suggested_angle}")


def _cli_ideas(args: argparse.Namespace) -> None:
    from clawseo.publisher import Publisher

    settings = PipelineSettings.from_env()
    publisher = Publisher(settings)
    ideas = select_ideas(
        _load_items(settings), publisher.existing_slugs(), publisher.load_generated_log(), settings,
    )
    print(json.dumps([{k: v for k, v in i.to_dict().items() if k != "sourceItems"} for i in ideas], indent=2))


def main() -> None:
    parser = argparse.ArgumentParser(prog="topic_ranker", description="Rank topics and propose article ideas")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")
    p_trends = sub.add_parser("trends", help="Show trending topics")
    p_trends.add_argument("--limit", type=int, default=10)
    sub.add_parser("ideas", help="Show the ideas the next run would generate")
    args = parser.parse_args()

    if args.verbose:
        logger.setLevel(logging.DEBUG)

    if args.command == "trends":
        _cli_trends(args)
    elif args.command == "ideas":
        _cli_ideas(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
