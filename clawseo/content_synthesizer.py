"""
Content Synthesizer -- article ideas to MDX documents
=======================================================

Turns an ``ArticleIdea`` into a complete MDX document (frontmatter plus
body).  Generation walks an ordered provider chain:

    1. AnthropicMessagesProvider -- Anthropic-style ``/v1/messages`` endpoint
       (the AICODECAT gateway) through the ``anthropic`` SDK.
    2. GeminiProvider            -- Gemini ``generateContent`` REST call.
    3. OfflineTemplateProvider   -- deterministic string assembly from the
                                    static knowledge base; never fails.

A provider that raises ``GenerationError`` or returns a malformed article is
disabled for the rest of the run (recorded on the ``RunContext``).  When a
quality validator is supplied, a generated article that fails the gate makes
the chain move on to the next provider.  The offline template always yields
a document, so ``synthesize`` always returns one.

The module also owns the AI rewrite flow for existing articles: frontmatter
from the original is spliced back when the model drops it or returns an
off-schema block, a hero image is inserted when the new body has none, and
the same quality gate applies.

Usage:
    from clawseo.content_synthesizer import ContentSynthesizer
    from clawseo.quality_validator import validate_text

    synth = ContentSynthesizer(ctx)
    result = await synth.synthesize(idea, validator=validate_text)
    result.text, result.provider, result.validation.passed

CLI:
    python -m clawseo.content_synthesizer offline --slug demo --title "Demo Guide"
    python -m clawseo.content_synthesizer providers
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import re
import sys
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple

import aiohttp

from clawseo.config import PipelineSettings, RunContext
from clawseo.frontmatter import (
    ArticleFrontmatter,
    FrontmatterError,
    load_frontmatter_mapping,
    parse_frontmatter,
    serialize_frontmatter,
    split_document,
    try_parse_document,
)
from clawseo.knowledge_base import (
    CTA_IMPORT,
    DOCS_URL,
    GITHUB_URL,
    INSTALL_SERVICE_HEADING,
    INSTALL_SERVICE_TEXT,
    KNOWLEDGE,
    PROMPT_SOURCES,
    WRITING_STYLE,
    cta_tag,
    required_sections,
)
from clawseo.quality_validator import ValidationResult
from clawseo.seo_utils import (
    build_description,
    build_keywords,
    canonical_url,
    count_words,
    map_article_type,
    map_difficulty,
    normalize_title,
    reading_time,
    slug_to_title,
)
from clawseo.topic_ranker import ArticleIdea

logger = logging.getLogger("content_synthesizer")

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

MAX_TOKENS = 8000
ANTHROPIC_VERSION = "2023-06-01"
GENERATION_TIMEOUT = 120.0
GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
REWRITE_ATTEMPTS = 2
MIN_BODY_WORDS = 1500

PROVIDER_ANTHROPIC = "aicodecat"
PROVIDER_GEMINI = "gemini"
PROVIDER_OFFLINE = "offline"

FRONTMATTER_BLOCK_RE = re.compile(r"^---\n[\s\S]*?\n---")
HERO_IMAGE_RE = re.compile(r"!\[[^\]]*\]\(/images/articles/.+?\)")
COMPARISON_TARGET_RE = re.compile(r"(?:Openclaw|Moltbot|Clawdbot) vs ([^:]+)(:|$)", re.I)

Validator = Callable[..., ValidationResult]


class GenerationError(Exception):
    """A provider call failed or returned nothing usable."""

    def __init__(self, message: str, provider: str = "", status_code: int = 0) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class ArticlePrompt:
    """Prompt text plus the frontmatter used when the model drops its own."""

    slug: str
    text: str
    fallback_frontmatter: Optional[ArticleFrontmatter] = None
    idea: Optional[ArticleIdea] = None


@dataclass
class SynthesisResult:
    slug: str
    text: str
    provider: str
    validation: Optional[ValidationResult] = None
    rejected: List[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.validation is None or self.validation.passed


# ---------------------------------------------------------------------------
# Frontmatter helpers
# ---------------------------------------------------------------------------


def _source_urls(idea: ArticleIdea, limit: int = 3) -> List[str]:
    urls: List[str] = []
    for item in idea.source_items:
        if item.url.startswith(("http://", "https://")) and item.url not in urls:
            urls.append(item.url)
        if len(urls) >= limit:
            break
    return urls


def related_slugs(slug: str, existing_slugs: Iterable[str], count: int = 3) -> List[str]:
    return sorted(s for s in set(existing_slugs) if s != slug)[:count]


def build_frontmatter(
    idea: ArticleIdea,
    today: date,
    existing_slugs: Iterable[str] = (),
    body: str = "",
) -> ArticleFrontmatter:
    """Frontmatter for *idea*; ``readingTime`` follows *body* when given."""
    title = normalize_title(idea.title, idea.category)
    keywords = build_keywords(idea.keywords, idea.slug)
    related = related_slugs(idea.slug, existing_slugs)
    sources = [DOCS_URL, GITHUB_URL]
    sources.extend(u for u in _source_urls(idea) if u not in sources)
    return ArticleFrontmatter(
        title=title,
        description=build_description(title),
        pub_date=today,
        modified_date=today,
        category=idea.category,
        tags=keywords[:5],
        keywords=keywords,
        reading_time=reading_time(body) if body else 10,
        image=f"/images/articles/{idea.slug}.jpg",
        image_alt=title,
        article_type=map_article_type(idea.category),
        difficulty=map_difficulty(idea.category),
        sources=sources,
        related_articles=related or None,
        canonical_url=canonical_url(idea.slug),
        last_verified=today,
    )


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------


def _verified_facts() -> str:
    kb = KNOWLEDGE
    install = kb["installation"]
    lines = [
        "## VERIFIED PRODUCT INFORMATION",
        "",
        f"- Name: {kb['product']['name']} (also known as Moltbot, Clawdbot, Openclaw)",
        f"- Type: {kb['product']['type']}",
        f"- Description: {kb['product']['description']}",
        f"- GitHub: {kb['product']['github']}",
        f"- Documentation: {kb['product']['docs']}",
        f"- Mirrors: {', '.join(PROMPT_SOURCES)}",
        "",
        "### Key Features",
        "- Self-hosted AI gateway - your data stays private",
        "- Multi-platform messaging: Telegram, Discord, Slack, WhatsApp",
        "- Works with Claude, GPT-4, and local LLMs via Ollama",
        "- File-based memory persistence",
        "- Extensible skills and plugins",
        "",
        "### Installation (VERIFIED COMMANDS)",
        f"- Quick install: `{install['quick_install']['command']}`",
        f"- Onboarding: `{install['onboarding']['command']}`",
        f"- Health check: `{install['health']['command']}`",
        f"- Gateway: `{install['gateway']['command']}`",
        "",
        "### Security Best Practices",
    ]
    lines.extend(f"- {p}" for p in kb["security"]["best_practices"][:5])
    return "\n".join(lines)


def _cta_block() -> str:
    return "\n".join([
        "## CTA INTEGRATION",
        "",
        "Include these 3 CTA placements:",
        "",
        "```mdx",
        CTA_IMPORT,
        "",
        f"{cta_tag('setup')}  {{/* After introduction */}}",
        f"{cta_tag('inline')} {{/* Mid-article */}}",
        f"{cta_tag('conclusion')} {{/* In conclusion */}}",
        "```",
        "",
        "## FREE SERVICE MENTION",
        "",
        'Include a section mentioning: "We offer a free Moltbot installation service. '
        'Get started at [Contact](/contact)."',
    ])


def build_article_prompt(idea: ArticleIdea, ctx: RunContext) -> ArticlePrompt:
    fm = build_frontmatter(idea, ctx.today, ctx.existing_slugs)

    source_context = "\n".join(
        f'- "{item.title}" ({item.source}): {item.summary or "No summary"}'
        for item in idea.source_items
    ) or "- No recent coverage collected; write an evergreen article."

    use_case = ""
    if idea.scenario:
        steps = "\n".join(f"{i}. {step}" for i, step in enumerate(idea.steps, 1))
        use_case = (
            "## USE CASE REQUIREMENTS\n\n"
            f"**Scenario:** {idea.scenario}\n\n"
            f"**Required Steps:**\n{steps}\n"
        )

    structure = [
        "1. Hook introduction that addresses the trending topic",
        "2. Overview of how Moltbot solves the problem",
        "3. Step-by-step practical guidance (if Tutorial/Guide)",
        "4. Comparison table (if Comparison category)",
        "5. Code examples with verified commands",
        "6. Security considerations",
        "7. Conclusion with next steps",
    ]
    if idea.scenario:
        structure.append("8. Use case scenario section with concrete context")
        structure.append("9. Step-by-step implementation section matching the required steps")

    sections = "\n".join(f"- ## {s}" for s in required_sections(idea.category))
    tone = "\n".join(f"- {g}" for g in WRITING_STYLE["tone"])
    warnings = "\n".join(f"- {w}" for w in WRITING_STYLE["warnings"])

    text = f"""You are an expert technical writer creating a high-quality, SEO-optimized article about Moltbot (also known as Clawdbot/Openclaw).

## CONTEXT: TRENDING TOPICS

This article is inspired by current industry trends. Here are recent relevant articles from the web:

{source_context}

Use these as inspiration for what's trending, but write original content focused on Moltbot.

{_verified_facts()}

## ARTICLE SPECIFICATIONS

**Title:** {fm.title}
**Category:** {idea.category}
**Keywords:** {', '.join(idea.keywords)}
**Angle:** {idea.angle}
**Slug:** {idea.slug}
**Title Constraint:** Keep the title exactly as provided (<= 60 characters)

{use_case}
## REQUIRED STRUCTURE

{chr(10).join(structure)}

## REQUIRED SECTIONS FOR {idea.category.upper()}

{sections}

## WRITING STYLE

{tone}

Always include these warnings where relevant:
{warnings}

Code blocks: {WRITING_STYLE['code_blocks']}

## OUTPUT FORMAT

Write in MDX format with this exact frontmatter:

{serialize_frontmatter(fm)}
## CONTENT REQUIREMENTS

1. **1500-2000 words** (8-12 minute read)
2. **SEO Optimized**: Use keywords naturally, especially in headings
3. **Practical**: Include real code examples and commands
4. **Accurate**: Only use verified commands from the knowledge base
5. **Engaging**: Start with a hook that addresses why this topic matters now
6. **Brand Keywords**: Mention Openclaw, Moltbot, and Clawdbot at least once each

{_cta_block()}

Now write the complete, trending-focused article:"""
    return ArticlePrompt(slug=idea.slug, text=text, fallback_frontmatter=fm, idea=idea)


def build_rewrite_prompt(meta: Dict[str, Any], slug: str, today: date) -> ArticlePrompt:
    """Prompt for rewriting an existing article, keyed off its old frontmatter."""
    title = str(meta.get("title", slug_to_title(slug)))
    category = str(meta.get("category", "Guide"))
    keywords = [str(k) for k in meta.get("keywords") or []]
    tags = [str(t) for t in meta.get("tags") or []]
    difficulty = str(meta.get("difficulty") or "intermediate")
    description = str(meta.get("description") or "") or "[Write 120-160 char description]"

    template_keywords = json.dumps([*keywords[:5], "openclaw", "moltbot", "clawdbot"])
    text = f"""You are an expert technical writer. Your task is to write a complete, high-quality MDX article about Moltbot.

CRITICAL INSTRUCTIONS:
1. Output ONLY the final MDX article content
2. DO NOT include any meta-commentary, planning notes, or thinking process
3. DO NOT explain what you're going to write - just write it
4. Start your response directly with the frontmatter (---)
5. The article must be ready to publish as-is

## ARTICLE SPECIFICATIONS

**Title:** {title}
**Category:** {category}
**Keywords:** {', '.join(keywords)}
**Difficulty:** {difficulty}

{_verified_facts()}

## REQUIREMENTS

1. **Length:** 1500-2500 words
2. **Tone:** Professional yet approachable
3. **SEO:** Use keywords naturally in headings
4. **Brand:** Mention Openclaw, Moltbot, and Clawdbot
5. **Practical:** Include real code examples
6. **Engaging:** Start with a compelling hook

## REQUIRED FORMAT

Your output must start exactly like this:

---
title: {json.dumps(title)}
description: {json.dumps(description)}
pubDate: {today.isoformat()}
modifiedDate: {today.isoformat()}
category: {json.dumps(category)}
tags: {json.dumps(tags[:5])}
keywords: {template_keywords}
readingTime: 12
featured: false
author: "Moltbot Team"
image: "/images/articles/{slug}.jpg"
imageAlt: {json.dumps(title)}
articleType: "{map_article_type(category)}"
difficulty: "{difficulty}"
sources:
  - "{DOCS_URL}"
  - "{GITHUB_URL}"
---

{CTA_IMPORT}

[Then write the full article content...]

## REQUIRED ELEMENTS

1. Include {cta_tag('setup')} after introduction
2. Include {cta_tag('inline')} mid-article
3. Include {cta_tag('conclusion')} at the end
4. Mention free installation service: "We offer a free Moltbot installation service at [Contact](/contact)"

NOW OUTPUT THE COMPLETE MDX ARTICLE (starting with ---):"""
    return ArticlePrompt(slug=slug, text=text)


# ---------------------------------------------------------------------------
# Output normalization
# ---------------------------------------------------------------------------


def extract_completion_text(payload: Any) -> str:
    """Pull the generated text out of an Anthropic, OpenAI or Gemini payload."""
    if not isinstance(payload, dict):
        return ""

    content = payload.get("content")
    if isinstance(content, list) and content and isinstance(content[0], dict):
        text = content[0].get("text")
        if text:
            return str(text)
    if isinstance(content, dict) and content.get("text"):
        return str(content["text"])
    if isinstance(content, str) and content:
        return content

    choices = payload.get("choices")
    if isinstance(choices, list) and choices:
        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        if isinstance(message, dict) and message.get("content"):
            return str(message["content"])

    candidates = payload.get("candidates")
    if isinstance(candidates, list) and candidates and isinstance(candidates[0], dict):
        body = candidates[0].get("content")
        parts = (body.get("parts") or []) if isinstance(body, dict) else []
        return "".join(str(p.get("text", "")) for p in parts if isinstance(p, dict))

    return ""


def normalize_generated_article(raw: str) -> str:
    """Strip a fence wrapped around the whole document and any preamble."""
    text = raw.strip()

    if text.startswith("```mdx"):
        text = re.sub(r"^```mdx\n", "", text)
        text = re.sub(r"\n```$", "", text)
    elif text.startswith("```markdown"):
        text = re.sub(r"^```markdown\n", "", text)
        text = re.sub(r"\n```$", "", text)
    elif text.startswith("```"):
        text = re.sub(r"^```\n?", "", text)
        text = re.sub(r"\n?```$", "", text)

    start = text.find("---\n")
    if start > 0:
        text = text[start:].strip()
    return text


def ensure_frontmatter(text: str, fallback: ArticleFrontmatter) -> str:
    """Keep *text*'s frontmatter when it passes the schema, else splice *fallback*.

    The generated body is never discarded: when the block is missing the
    whole text is treated as body.
    """
    parts = split_document(text)
    if parts is not None:
        block, body = parts
        try:
            parse_frontmatter(block)
            return text if text.endswith("\n") else text + "\n"
        except FrontmatterError as exc:
            logger.info("Generated frontmatter rejected (%s); using template frontmatter", exc)
    else:
        body = text

    body = body.lstrip("\n")
    fm = fallback.model_copy(update={"reading_time": reading_time(body)})
    return serialize_frontmatter(fm) + "\n" + body.rstrip("\n") + "\n"


def is_valid_article(text: str) -> bool:
    if not text.startswith("---\n"):
        return False
    if not re.search(r"title:\s*[\"']", text):
        return False
    if not re.search(r"pubDate:\s*\d{4}-\d{2}-\d{2}", text):
        return False
    if "import HostingCTA" not in text:
        return False
    for context in ("setup", "inline", "conclusion"):
        if not re.search(rf'<HostingCTA\s+context="{context}"\s*/>', text):
            return False
    return True


def insert_hero_image(text: str, slug: str, title: str) -> Tuple[str, bool]:
    """Add ``![title](/images/articles/<slug>.jpg)`` after the H1 or the imports."""
    if re.search(rf"/images/articles/{re.escape(slug)}\.(jpg|jpeg|png)", text):
        return text, False
    if HERO_IMAGE_RE.search(text):
        return text, False

    match = FRONTMATTER_BLOCK_RE.match(text)
    if not match:
        return text, False

    block = match.group(0)
    lines = text[len(block):].split("\n")
    image_lines = ["", f"![{title}](/images/articles/{slug}.jpg)", ""]

    for i, line in enumerate(lines):
        if line.startswith("# "):
            lines[i + 1:i + 1] = image_lines
            return block + "\n".join(lines), True

    insert_at = 0
    for i, line in enumerate(lines):
        stripped = line.strip()
        if stripped.startswith("import ") or stripped == "":
            insert_at = i + 1
            continue
        break
    lines[insert_at:insert_at] = image_lines
    return block + "\n".join(lines), True


# ---------------------------------------------------------------------------
# Offline template
# ---------------------------------------------------------------------------

EXTENDED_NOTES = "\n".join([
    "## Extended Notes",
    "Clawdbot rewards careful iteration. Start with a minimal configuration, validate the gateway, "
    "and expand features one change at a time. This reduces risk and makes troubleshooting faster.",
    "",
    "Operationally, plan for log review, backups, and update windows. For example, schedule a weekly "
    "check of gateway status and a monthly review of API key hygiene.",
    "",
    "If you are deploying for a team, document the onboarding flow and store configuration in version "
    "control without secrets. Keep a backup of clawdbot.json so you can restore quickly.",
    "",
    "Operational checklist:",
    "- Verify the gateway is bound to loopback.",
    "- Confirm dashboard authentication is enabled.",
    "- Review messaging allow-lists and bot tokens.",
    "- Run the doctor command after any major change.",
])


def _comparison_target(title: str) -> str:
    match = COMPARISON_TARGET_RE.search(title)
    return match.group(1).strip() if match else "Other Tools"


def _category_sections(category: str, title: str) -> List[str]:
    kb = KNOWLEDGE
    arch = kb["architecture"]
    install = kb["installation"]
    trouble = kb["troubleshooting"]
    practices = kb["security"]["best_practices"]
    lines: List[str] = []

    if category == "Guide":
        lines += [
            "## Overview",
            f"This guide explains {title} using verified Clawdbot commands and safe defaults. "
            "It focuses on repeatable workflows that work across macOS, Linux, and Windows via WSL2.",
            "",
            "## Key Concepts",
            *(f"- {arch[k]['name']}: {arch[k]['description']}" for k in ("gateway", "agent", "skills", "memory")),
            "",
            "## Getting Started",
            f"Start by confirming Node.js {kb['requirements']['nodejs']['recommended']}+ and running "
            f"{install['onboarding']['command']}. This creates a baseline configuration you can refine later.",
            "",
            "## Best Practices",
            "Follow these practices to keep your setup reliable and secure:",
            *(f"- {p}." for p in practices[:5]),
            "",
            "## Common Pitfalls",
            *(f"- {trouble[k]['issue']}: {trouble[k]['solution']}."
              for k in ("node_version", "permission_denied", "gateway_not_starting")),
            "",
        ]
    elif category == "Comparison":
        target = _comparison_target(title)
        lines += [
            "## Overview",
            f"This comparison outlines where Clawdbot fits against {target}. It focuses on deployment "
            "model, control, and workflow integration instead of vendor marketing claims.",
            "",
            "## Feature Comparison",
            f"| Criteria | Clawdbot | {target} |",
            "| --- | --- | --- |",
            "| Deployment | Self-hosted gateway you control | Check official docs |",
            "| Messaging channels | Telegram, WhatsApp, Discord, Slack | Check official docs |",
            "| Memory | File-based persistence | Check official docs |",
            "| Security controls | Loopback binding, gateway auth | Check official docs |",
            "| Cost control | Run on your own hardware | Check official docs |",
            "",
            "## Clawdbot Strengths",
            "Clawdbot emphasizes self-hosting, transparent configuration, and messaging-first workflows. "
            f"The Gateway on port {arch['gateway']['port']} and the onboarding wizard make it practical "
            "for always-on assistants.",
            "",
            f"## {target} Strengths",
            f"{target} can be a strong choice depending on its hosting model, pricing, and integrations. "
            "Review its official documentation and security posture before committing.",
            "",
            "## When to Choose Each",
            "Choose Clawdbot if you want full control, local data storage, and the ability to run on your "
            f"own hardware. Consider {target} if you prefer a managed service or an existing ecosystem.",
            "",
            "## Verdict",
            "Clawdbot is the better fit when ownership and self-hosting are primary requirements. "
            f"{target} may be the better fit when you want a turnkey service and do not need full local control.",
            "",
        ]
    elif category == "Best Practices":
        lines += [
            "## Why This Matters",
            "Clawdbot can access files, execute commands, and connect to messaging platforms. Small security "
            "mistakes can expose credentials or allow unwanted access, so best practices are not optional.",
            "",
            "## The Practices",
            "Start with these verified practices from the Clawdbot security guidance:",
            *(f"- {p}." for p in practices[:7]),
            "",
            "## Implementation Examples",
            "Use these configuration examples as a starting point:",
            "```yaml",
            "gateway:",
            "  bind: loopback",
            "  auth:",
            '    password: "change-me"',
            "```",
            "",
            "## Common Mistakes",
            *(f"- {r}." for r in kb["security"]["risks"][:5]),
            "",
            "## Summary",
            "Apply these practices before connecting personal accounts, and review the security checklist "
            "whenever you change providers or add new channels.",
            "",
        ]
    elif category == "Advanced":
        lines += [
            "## Architecture Overview",
            "Clawdbot is organized around a Gateway, an Agent, Skills, and Memory. The Gateway handles "
            "message routing and tool execution, while the Agent manages reasoning and model selection.",
            "",
            "## Implementation",
            "For advanced deployments, run the onboarding wizard with daemon installation and configure "
            "the gateway binding for loopback access.",
            "```bash",
            install["onboarding"]["with_daemon"],
            install["gateway"]["command"],
            "```",
            "",
            "## Testing",
            "Use these commands to validate configuration and security before going live:",
            "```bash",
            install["health"]["command"],
            install["doctor"]["command"],
            "```",
            "",
            "## Production Considerations",
            f"{kb['remote_access']['recommendation']}. Consider Tailscale or Cloudflare Tunnel instead of opening ports.",
            "",
        ]
    elif category == "News":
        lines += [
            "## Summary",
            f"This update-oriented article explains how to track changes relevant to {title}. Use the "
            "official docs and GitHub releases as the source of truth so your deployment stays aligned.",
            "",
            "## What's New",
            "For the latest features, review the release notes and documentation. Focus on installation "
            "flow, gateway stability, messaging channels, and security guidance.",
            "",
            "## Impact",
            "Updates typically affect setup commands, configuration defaults, and security recommendations. "
            "Validate each change against your environment before rolling it into production.",
            "",
            "## How to Get Started",
            "When an update is available, use the verified update command and restart the gateway:",
            "```bash",
            install["update"]["command"],
            "```",
            "",
            "## What's Next",
            "Follow the documentation and GitHub repository for announcements, and plan a regular review "
            "cadence so you do not miss critical fixes.",
            "",
        ]
    return lines


def build_offline_body(idea: ArticleIdea, title: str, related: List[str]) -> str:
    kb = KNOWLEDGE
    req = kb["requirements"]
    install = kb["installation"]
    trouble = kb["troubleshooting"]
    security = kb["security"]
    deployment = kb["deployment"]
    channels = kb["channels"]
    image = f"/images/articles/{idea.slug}.jpg"

    lines: List[str] = [
        CTA_IMPORT,
        "",
        f"# {title}",
        "",
        f"![{title}]({image})",
        "",
        "## Introduction",
        " ".join([
            f"{kb['product']['name']} is an {kb['product']['type']} that acts as an AI Gateway and "
            "connects messaging apps to LLM APIs like Claude.",
            f"This article covers {title} with verified commands, safe defaults, and clear steps you can "
            "follow on your own hardware.",
            "API stands for application programming interface, and the Clawdbot CLI (command line "
            "interface) is how you run setup commands from your terminal.",
        ]),
        "",
        cta_tag("setup"),
        "",
        "## What You'll Learn",
        "- Install Clawdbot using verified commands and confirm the gateway is healthy.",
        "- Configure API keys and secure access without exposing the gateway port.",
        "- Connect messaging channels such as Telegram and Discord.",
        "- Apply best practices and troubleshoot common issues.",
        "",
    ]

    if idea.scenario:
        lines += ["## Use Case Scenario", idea.scenario, ""]
        if idea.steps:
            lines.append("### Step-by-Step Implementation")
            lines += [f"{i}. {step}" for i, step in enumerate(idea.steps, 1)]
            lines.append("")

    lines += _category_sections(idea.category, title)

    lines += [
        "## Prerequisites",
        f"- Node.js {req['nodejs']['recommended']}+ ({req['nodejs']['check_command']}).",
        f"- Supported OS: {', '.join(req['os']['supported'])} ({req['os']['recommended_linux']} recommended).",
        f"- Memory: {req['memory']}.",
        f"- Storage: {req['storage']}.",
        "Install Node.js from [nodejs.org](https://nodejs.org) if needed, then confirm your version before continuing.",
        "",
        "## Step 1: Install and Verify Clawdbot",
        "Use the official installer or the npm alternative. For example, the installer script is the "
        "fastest option when you are starting fresh.",
        "> Warning: Piping a script to bash can be risky. Review the script first and never expose the "
        "gateway port to the public internet.",
        "```bash",
        install["quick_install"]["command"],
        install["onboarding"]["command"],
        install["health"]["command"],
        "```",
        f"Step 1: Run the installer and confirm Node.js {req['nodejs']['recommended']}+ is available.",
        "Step 2: Use the onboarding wizard to configure your providers.",
        "Step 3: Run the health check to verify the gateway.",
        "",
        "## Step 2: Configure Secure Access",
        "Keep API keys secret, avoid committing them to git, and store them in environment variables or "
        "secure config files. JSON stands for JavaScript Object Notation, and you can store configuration "
        "there when needed.",
        "```bash",
        'export ANTHROPIC_API_KEY="your-key-here"',
        'export DISCORD_BOT_TOKEN="your-token-here"',
        install["doctor"]["command"],
        "```",
        "If you are using a reverse proxy, configure gateway.auth.password and gateway.trustedProxies for safety.",
        "",
        "## Step 3: Connect Messaging Channels",
        "Telegram is the easiest starting point, and Discord is a popular next step. Follow the verified "
        "setup steps and keep bot tokens private.",
        "```bash",
        "clawdbot configure --section channels.telegram",
        "clawdbot configure --section channels.discord",
        "```",
        "Once channels are connected, test a simple message to ensure routing works end to end.",
        "",
        cta_tag("inline"),
        "",
        "## Verification",
        "Start the gateway and confirm the local dashboard is reachable on the default port.",
        "```bash",
        install["gateway"]["command"],
        install["gateway"]["status"],
        "```",
        "If the dashboard does not load, check the port and validate your API keys.",
        "",
        "## Troubleshooting",
        *(f"- {trouble[k]['issue']}: {trouble[k]['solution']}."
          for k in ("node_version", "permission_denied", "gateway_not_starting", "bot_token_invalid")),
        "If issues persist, run the doctor command again and review the official docs.",
        "",
        "## Security Notes",
        "Clawdbot can have deep system access, so treat it like an admin tool.",
        f"- {security['best_practices'][0]}.",
        f"- {security['best_practices'][2]}.",
        f"- {security['best_practices'][5]}.",
        "Never share API keys or expose the gateway port to the public internet.",
        "",
    ]

    if idea.source_items:
        lines.append("## Trending Resources")
        lines.append("This article was inspired by current industry trends:")
        lines += [f"- [{item.title}]({item.url})" for item in idea.source_items[:3]]
        lines.append("")

    lines += [
        "## Use Cases",
        *(f"- {u}." for u in kb["use_cases"]),
        "",
        "## Deployment Options",
        "Docker is a container runtime that packages the gateway with its dependencies.",
    ]
    for key in ("local", "mac_mini", "raspberry_pi", "vps", "docker"):
        d = deployment[key]
        lines.append(
            f"- {d['name']}: {d['description']}. Pros: {', '.join(d['pros'])}. Cons: {', '.join(d['cons'])}."
        )
    lines += [
        "",
        "## Configuration Checklist",
        f"- Confirm Node.js {req['nodejs']['recommended']}+ and verify with \"{req['nodejs']['check_command']}\".",
        f"- Run \"{install['onboarding']['command']}\" and store configuration in {kb['configuration']['config_file']}.",
        "- Set API keys in environment variables or a secure secret manager.",
        "- Bind the gateway to loopback and set a strong dashboard password.",
        f"- Run \"{install['doctor']['command']}\" and fix any reported issues.",
        "",
        "## Channel Setup Highlights",
        "Telegram essentials:",
        *(f"- {s}." for s in channels["telegram"]["steps"][:4]),
        "Discord essentials:",
        *(f"- {s}." for s in channels["discord"]["steps"][:4]),
        "",
        "## Security Checklist",
        *(f"- {p}." for p in security["best_practices"]),
        *(f"- {r}." for r in security["recommendations"]),
        "Never expose the gateway port to the public internet.",
        "",
    ]

    if related:
        lines.append("## Related Articles")
        lines += [f"- [{slug_to_title(slug)}](/articles/{slug})" for slug in related]
        lines.append("")

    lines += [
        "## Next Steps",
        "First, review the configuration and lock down access controls.",
        "Next, connect one messaging channel and validate end-to-end routing.",
        "Finally, automate a small workflow and monitor logs for stability.",
        "",
        INSTALL_SERVICE_HEADING,
        INSTALL_SERVICE_TEXT,
        "",
        "## Conclusion",
        "You now have a verified path to install, configure, and secure Clawdbot. See the "
        f"[official documentation]({DOCS_URL}) and the [GitHub repository]({GITHUB_URL}) for updates "
        "and deeper guidance.",
        "",
        cta_tag("conclusion"),
    ]

    body = "\n".join(lines)
    while count_words(body) < MIN_BODY_WORDS:
        body = f"{body}\n\n{EXTENDED_NOTES}"
    return body


def build_offline_article(idea: ArticleIdea, today: date, existing_slugs: Iterable[str] = ()) -> str:
    """Deterministic MDX document for *idea*; same inputs give the same bytes."""
    title = normalize_title(idea.title, idea.category)
    related = related_slugs(idea.slug, existing_slugs)
    body = build_offline_body(idea, title, related)
    fm = build_frontmatter(idea, today, existing_slugs, body=body)
    return serialize_frontmatter(fm) + body + "\n"


# ---------------------------------------------------------------------------
# Providers
# ---------------------------------------------------------------------------


class ContentProvider(ABC):
    name: str = ""
    online: bool = True

    @abstractmethod
    async def generate(self, prompt: ArticlePrompt) -> str:
        """Return raw model output for *prompt* or raise ``GenerationError``."""

    async def close(self) -> None:
        """Release any client held across calls."""


class AnthropicMessagesProvider(ContentProvider):
    """Anthropic-style ``/v1/messages`` endpoint behind the AICODECAT gateway."""

    name = PROVIDER_ANTHROPIC

    def __init__(self, settings: PipelineSettings, max_tokens: int = MAX_TOKENS) -> None:
        self.settings = settings
        self.max_tokens = max_tokens
        self._client = None

    def _ensure_client(self) -> Any:
        """Lazily create the async client; reused for every call of the run."""
        if self._client is None:
            import anthropic

            self._client = anthropic.AsyncAnthropic(
                auth_token=self.settings.aicodecat_api_key,
                base_url=self.settings.aicodecat_api_url,
                timeout=GENERATION_TIMEOUT,
                max_retries=self.settings.max_retries,
                default_headers={"anthropic-version": ANTHROPIC_VERSION},
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None

    async def generate(self, prompt: ArticlePrompt) -> str:
        import anthropic

        client = self._ensure_client()
        try:
            response = await client.messages.create(
                model=self.settings.aicodecat_model,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": prompt.text}],
            )
        except anthropic.APIStatusError as exc:
            raise GenerationError(
                f"AICODECAT API error: {exc.status_code} - {str(exc)[:200]}",
                provider=self.name, status_code=exc.status_code,
            ) from exc
        except anthropic.APIError as exc:
            raise GenerationError(f"AICODECAT request failed: {exc}", provider=self.name) from exc

        text = getattr(response.content[0], "text", "") if response.content else ""
        if not text:
            raise GenerationError("AICODECAT returned an empty completion", provider=self.name)
        return text


class GeminiProvider(ContentProvider):
    name = PROVIDER_GEMINI

    def __init__(self, settings: PipelineSettings) -> None:
        self.settings = settings

    async def generate(self, prompt: ArticlePrompt) -> str:
        url = GEMINI_URL.format(model=self.settings.gemini_model)
        headers = {
            "x-goog-api-key": self.settings.gemini_api_key,
            "Content-Type": "application/json",
        }
        body = {"contents": [{"role": "user", "parts": [{"text": prompt.text}]}]}
        timeout = aiohttp.ClientTimeout(total=GENERATION_TIMEOUT)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(url, headers=headers, json=body) as resp:
                    if resp.status != 200:
                        detail = await resp.text()
                        raise GenerationError(
                            f"Gemini API error: {resp.status} - {detail[:200]}",
                            provider=self.name, status_code=resp.status,
                        )
                    data = await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise GenerationError(f"Gemini request failed: {exc!r}", provider=self.name) from exc
        except ValueError as exc:
            raise GenerationError(f"Gemini returned a malformed body: {exc}", provider=self.name) from exc

        text = extract_completion_text(data)
        if not text:
            raise GenerationError("Gemini returned an empty completion", provider=self.name)
        return text


class OfflineTemplateProvider(ContentProvider):
    name = PROVIDER_OFFLINE
    online = False

    def __init__(self, today: date, existing_slugs: Optional[Set[str]] = None) -> None:
        self.today = today
        self.existing_slugs = existing_slugs if existing_slugs is not None else set()

    async def generate(self, prompt: ArticlePrompt) -> str:
        if prompt.idea is None:
            raise GenerationError("Offline template needs an article idea", provider=self.name)
        return build_offline_article(prompt.idea, self.today, self.existing_slugs)


def build_provider_chain(ctx: RunContext) -> List[ContentProvider]:
    """Ordered providers for this run; the offline template is always last."""
    settings = ctx.settings
    chain: List[ContentProvider] = []
    if not settings.offline_only:
        if settings.has_primary_provider:
            chain.append(AnthropicMessagesProvider(settings))
        if settings.has_secondary_provider:
            chain.append(GeminiProvider(settings))
    chain.append(OfflineTemplateProvider(ctx.today, ctx.existing_slugs))
    return chain


# ---------------------------------------------------------------------------
# Synthesizer
# ---------------------------------------------------------------------------


class ContentSynthesizer:
    """Runs the provider chain for ideas and rewrites."""

    def __init__(self, ctx: RunContext, providers: Optional[List[ContentProvider]] = None) -> None:
        self.ctx = ctx
        self.providers = providers if providers is not None else build_provider_chain(ctx)

    async def close(self) -> None:
        for provider in self.providers:
            await provider.close()

    @property
    def online_available(self) -> bool:
        return any(p.online and self.ctx.is_available(p.name) for p in self.providers)

    async def _call(self, provider: ContentProvider, prompt: ArticlePrompt) -> Optional[str]:
        started = time.monotonic()
        try:
            raw = await provider.generate(prompt)
        except GenerationError as exc:
            logger.warning("%s failed for %s after %.1fs: %s",
                           provider.name, prompt.slug, time.monotonic() - started, str(exc)[:120])
            self.ctx.mark_unavailable(provider.name, str(exc))
            return None
        logger.info("%s produced %d chars for %s in %.1fs",
                    provider.name, len(raw), prompt.slug, time.monotonic() - started)
        return raw

    async def synthesize(self, idea: ArticleIdea, validator: Optional[Validator] = None) -> SynthesisResult:
        logger.info("Generating: %s (category=%s, angle=%s, sources=%d)",
                    idea.title, idea.category, idea.angle, len(idea.source_items))
        prompt = build_article_prompt(idea, self.ctx)
        rejected: List[str] = []
        last: Optional[SynthesisResult] = None

        for provider in self.providers:
            if not self.ctx.is_available(provider.name):
                continue

            raw = await self._call(provider, prompt)
            if raw is None:
                continue

            if provider.online:
                text = ensure_frontmatter(normalize_generated_article(raw), prompt.fallback_frontmatter)
                if not is_valid_article(text):
                    self.ctx.mark_unavailable(provider.name, f"invalid article format from {provider.name}")
                    continue
            else:
                text = raw

            validation = validator(text, slug=idea.slug, category=idea.category) if validator else None
            last = SynthesisResult(idea.slug, text, provider.name, validation, list(rejected))
            if validation is not None and not validation.passed:
                logger.warning("%s output for %s failed the quality gate (score %.2f)",
                               provider.name, idea.slug, validation.scores.overall)
                rejected.append(provider.name)
                continue
            return last

        if last is None:
            # Only reachable with a custom provider list that has no offline template.
            raise GenerationError(f"No provider produced an article for {idea.slug}")
        last.rejected = rejected
        return last

    async def rewrite_article(
        self,
        slug: str,
        original_text: str,
        validator: Optional[Validator] = None,
    ) -> Optional[SynthesisResult]:
        """AI rewrite of an existing article; None when no provider delivered.

        The returned text always has schema-valid frontmatter: the model's own
        block when it passes, otherwise the original block stamped with
        today's ``modifiedDate``.  A rewrite that fails *validator* moves on
        to the next online provider; the last such result is returned with
        ``passed`` False.
        """
        parts = split_document(original_text)
        if parts is None:
            logger.warning("Could not parse frontmatter for %s", slug)
            return None
        block = parts[0]
        try:
            meta = load_frontmatter_mapping(block)
        except FrontmatterError as exc:
            logger.warning("Could not parse frontmatter for %s: %s", slug, exc)
            return None

        fallback: Optional[ArticleFrontmatter]
        try:
            fallback = parse_frontmatter(block).model_copy(update={"modified_date": self.ctx.today})
        except FrontmatterError as exc:
            logger.warning("Frontmatter of %s is off-schema (%s); output must bring its own", slug, exc)
            fallback = None

        title = str(meta.get("title") or slug_to_title(slug))
        prompt = build_rewrite_prompt(meta, slug, self.ctx.today)
        logger.info("Rewriting: %s (category=%s)", title, meta.get("category", ""))
        rejected: List[str] = []
        last: Optional[SynthesisResult] = None

        for provider in self.providers:
            if not provider.online or not self.ctx.is_available(provider.name):
                continue
            for attempt in range(1, REWRITE_ATTEMPTS + 1):
                raw = await self._call(provider, prompt)
                if raw is None:
                    break
                text = normalize_generated_article(raw).strip()
                if text and fallback is not None:
                    text = ensure_frontmatter(text, fallback)
                doc = try_parse_document(text) if text else None
                if doc is None:
                    logger.warning("Invalid output format from %s (attempt %d)", provider.name, attempt)
                    continue

                text, _ = insert_hero_image(text, slug, title)
                text = text if text.endswith("\n") else text + "\n"
                category = doc.frontmatter.category.value
                validation = validator(text, slug=slug, category=category) if validator else None
                last = SynthesisResult(slug, text, provider.name, validation, list(rejected))
                if validation is not None and not validation.passed:
                    logger.warning("%s rewrite of %s failed the quality gate (score %.2f)",
                                   provider.name, slug, validation.scores.overall)
                    rejected.append(provider.name)
                    break
                return last

        if last is not None:
            last.rejected = rejected
        return last


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def _cli_offline(args: argparse.Namespace) -> None:
    idea = ArticleIdea(
        slug=args.slug,
        title=args.title,
        category=args.category,
        keywords=[k.strip() for k in args.keywords.split(",") if k.strip()],
        angle="comprehensive-guide",
    )
    print(build_offline_article(idea, date.today()))


def _cli_providers(args: argparse.Namespace) -> None:
    ctx = RunContext.create(PipelineSettings.from_env())
    for provider in build_provider_chain(ctx):
        print(f"{provider.name:<10} {'online' if provider.online else 'offline'}")


def main() -> None:
    parser = argparse.ArgumentParser(prog="content_synthesizer", description="Article generation")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    p_off = sub.add_parser("offline", help="Render the offline template for one idea")
    p_off.add_argument("--slug", required=True)
    p_off.add_argument("--title", required=True)
    p_off.add_argument("--category", default="Guide")
    p_off.add_argument("--keywords", default="openclaw")

    sub.add_parser("providers", help="Show the provider chain for the current environment")

    args = parser.parse_args()
    if args.verbose:
        logger.setLevel(logging.DEBUG)

    if args.command == "offline":
        _cli_offline(args)
    elif args.command == "providers":
        _cli_providers(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
