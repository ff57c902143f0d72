"""
Knowledge Base -- verified Openclaw / Moltbot / Clawdbot facts
================================================================

Static, hand-verified product facts used by every generation path.  The
offline template assembles article bodies exclusively from this module, and
the AI prompts embed the same facts so generated copy stays grounded.

Also holds the verified CLI sub-command allow-list (consumed by the quality
validator), per-category required section headings, the writing style guide,
and the HostingCTA snippets every article must carry.

Usage:
    from clawseo.knowledge_base import KNOWLEDGE, VERIFIED_COMMANDS

    KNOWLEDGE["installation"]["quick_install"]["command"]
    required_sections("Tutorial")
"""

from __future__ import annotations

import re
from typing import Any, Dict, List

# ---------------------------------------------------------------------------
# Brand & URLs
# ---------------------------------------------------------------------------

BRAND_NAMES = ("Openclaw", "Moltbot", "Clawdbot")
PRIMARY_BRAND = "Openclaw"

DOCS_URL = "https://docs.clawd.bot/"
GITHUB_URL = "https://github.com/clawdbot/clawdbot"
PROMPT_SOURCES = ("https://docs.molt.bot/", "https://github.com/moltbot/moltbot")
SITE_URL = "https://clawd-bot.app"

DEFAULT_AUTHOR = "Moltbot Team"
DEFAULT_OG_IMAGE = "/images/articles/default-og.jpg"

CTA_IMPORT = "import HostingCTA from '../../components/CTA/HostingCTA.astro';"
CTA_CONTEXTS = ("setup", "inline", "conclusion")


def cta_tag(context: str) -> str:
    return f'<HostingCTA context="{context}" />'


INSTALL_SERVICE_HEADING = "## Free Installation Service"
INSTALL_SERVICE_TEXT = (
    "We offer a free Moltbot installation service that covers an environment check, a baseline "
    "configuration, and first-run guidance. Book a slot through [Contact](/contact)."
)
INSTALL_SERVICE_RE = re.compile(r"free (?:openclaw|moltbot|clawdbot) installation service", re.I)


# ---------------------------------------------------------------------------
# Product knowledge
# ---------------------------------------------------------------------------

KNOWLEDGE: Dict[str, Any] = {
    "product": {
        "name": "Clawdbot",
        "type": "Open-source, self-hosted personal AI assistant",
        "description": (
            "An AI Gateway that connects chat applications with Large Language "
            "Model APIs like Claude, enabling persistent memory, proactive "
            "automation, and full computer access."
        ),
        "github": GITHUB_URL,
        "docs": DOCS_URL,
        "website": "https://clawd.bot",
    },
    "requirements": {
        "nodejs": {
            "minimum": "22",
            "recommended": "22",
            "check_command": "node --version",
        },
        "os": {
            "supported": ["macOS", "Linux", "Windows (via WSL2)"],
            "not_supported": ["Native Windows"],
            "recommended_linux": "Ubuntu 22.04 LTS",
        },
        "memory": "2GB RAM minimum (4GB+ recommended for browser automation)",
        "storage": "500MB for installation",
        "hardware": [
            "Modern laptop",
            "Mac Mini M4 (recommended for 24/7 operation)",
            "Raspberry Pi 4/5 (low-cost always-on option)",
            "VPS ($5/month minimum, Hetzner CPX11 recommended)",
        ],
    },
    "installation": {
        "quick_install": {
            "command": "curl -fsSL https://clawd.bot/install.sh | bash",
            "alternative": "npm install -g ClawdBot@latest",
        },
        "onboarding": {
            "command": "clawdbot onboard",
            "with_daemon": "clawdbot onboard --install-daemon",
        },
        "gateway": {
            "command": "clawdbot gateway --port 18789 --verbose",
            "dashboard": "http://127.0.0.1:18789/",
            "restart": "clawdbot gateway restart",
            "status": "clawdbot gateway status",
        },
        "health": {"command": "clawdbot health"},
        "doctor": {"command": "clawdbot doctor"},
        "status": {"command": "clawdbot status"},
        "version": {"command": "clawdbot --version"},
        "update": {
            "command": "sudo npm install -g clawdbot@latest && clawdbot gateway restart",
        },
        "cron": {"list": "clawdbot cron list"},
    },
    "architecture": {
        "gateway": {
            "name": "Gateway",
            "description": (
                "Central hub that connects messaging platforms and orchestrates "
                "interactions. Acts as a switchboard channeling messages to the AI."
            ),
            "role": "Message routing, AI inference calls, credential management, tool execution",
            "port": 18789,
        },
        "agent": {
            "name": "Agent",
            "description": (
                "The brain powered by LLMs like Claude or GPT. Responsible for "
                "context, memory, and reasoning."
            ),
            "supported_models": [
                "Claude Opus 4.5 for complex tasks",
                "Claude Sonnet 4.5 for daily tasks",
                "Claude Haiku for fast and cheap tasks",
                "GPT-4",
                "Local Ollama models for offline use",
            ],
        },
        "skills": {
            "name": "Skills",
            "description": (
                "Optional extensions providing capabilities beyond basic chat. "
                "Defined in markdown files under ~/clawd/skills/."
            ),
            "examples": [
                "Web research",
                "Browser automation",
                "Email access through the Gmail integration",
                "Calendar management",
                "Code review",
                "Home automation",
            ],
        },
        "memory": {
            "name": "Memory",
            "description": (
                "Persistent, file-based system storing conversations, "
                "preferences, and context as actual files."
            ),
            "features": [
                "Cross-session persistence",
                "User preference storage",
                "Workflow context",
                "Can be version-controlled",
                "Inspectable files",
            ],
        },
    },
    "channels": {
        "telegram": {
            "name": "Telegram",
            "difficulty": "Easy (recommended for beginners)",
            "steps": [
                "Open Telegram and search for @BotFather",
                "Start a chat and run the /newbot command",
                "Follow the prompts to name your bot",
                "Copy the bot token provided by BotFather",
                "Get your user ID from @useridbot for the allowFrom restriction",
            ],
            "env_var": "TELEGRAM_BOT_TOKEN",
        },
        "discord": {
            "name": "Discord",
            "difficulty": "Medium",
            "steps": [
                "Open the Discord Developer Portal",
                "Create a new application",
                "Add a bot in the Bot section",
                "Reset the token to get your bot token",
                "Enable the Message Content Intent",
            ],
            "env_var": "DISCORD_BOT_TOKEN",
        },
    },
    "security": {
        "risks": [
            "Deep system access (file read/write, shell execution)",
            "Expanded attack surface when connecting LLMs to messaging",
            "Credential management for provider keys and OAuth secrets",
            "No perfectly secure setup is possible",
            "Reverse proxy trust issues when localhost connections are treated as trusted",
            "Potential for prompt injection attacks",
        ],
        "best_practices": [
            'Bind gateway.bind to "loopback" to prevent external exposure',
            'Use "pairing" mode for DM policy to manually approve devices',
            "Configure gateway.auth.password for authentication",
            "Configure gateway.trustedProxies for reverse proxy setups",
            "Sandbox tools for group chats",
            "Use Tailscale or Cloudflare Tunnel for remote access and never expose ports directly",
            "Never share provider keys carelessly",
            "Run in an isolated environment for sensitive use cases",
            "Read the security documentation before connecting personal accounts",
            "Start with a sandboxed environment and the principle of least privilege",
        ],
        "recommendations": [
            "Use a dedicated email account, not a personal or work one",
            "Use a fresh OS installation for sensitive deployments",
            "Run clawdbot doctor to check the security configuration",
        ],
    },
    "use_cases": [
        "Email management and automation with Gmail",
        "Calendar scheduling and reminders",
        "Smart home control for lights, speakers, and thermostats",
        "Code review and development assistance",
        "Web research and information gathering",
        "DevOps monitoring for Sentry, GitHub, and build pipelines",
        "Customer support automation",
        "Meeting notes and transcription",
        "Morning briefings and daily digests",
        "PDF summarization and file organization",
    ],
    "deployment": {
        "local": {
            "name": "Local Machine",
            "description": "Run on your laptop or desktop",
            "pros": ["Easy setup", "Direct access"],
            "cons": ["Not 24/7 unless always on"],
        },
        "mac_mini": {
            "name": "Mac Mini M4",
            "description": "Recommended for 24/7 home operation",
            "pros": ["Always on", "Low power", "Supports iMessage"],
            "cons": ["Hardware cost"],
        },
        "raspberry_pi": {
            "name": "Raspberry Pi 4/5",
            "description": "Low-cost always-on option",
            "pros": ["Very low cost", "Low power"],
            "cons": ["Limited performance"],
        },
        "vps": {
            "name": "VPS/Cloud",
            "description": "Cloud deployment on providers like Hetzner, DigitalOcean, or AWS",
            "pros": ["24/7 availability", "Remote access"],
            "cons": ["Monthly cost", "Requires cloud knowledge"],
        },
        "docker": {
            "name": "Docker",
            "description": "Containerized deployment for self-hosting",
            "pros": ["Isolated", "Portable", "Easy updates"],
            "cons": ["Container knowledge required"],
        },
    },
    "configuration": {
        "config_file": "clawdbot.json",
        "backup_file": "clawdbot.json.bak",
        "workspace_dir": "~/.clawdbot/",
        "env_vars": [
            "ANTHROPIC_API_KEY",
            "OPENAI_API_KEY",
            "TELEGRAM_BOT_TOKEN",
            "DISCORD_BOT_TOKEN",
        ],
    },
    "troubleshooting": {
        "node_version": {
            "issue": "Node.js version too old",
            "solution": "Upgrade to Node.js 22 with nvm install 22 and nvm use 22",
        },
        "permission_denied": {
            "issue": "Permission denied during installation",
            "solution": "Use sudo for the global install or fix npm permissions",
        },
        "gateway_not_starting": {
            "issue": "Gateway fails to start",
            "solution": "Check that port 18789 is free and that provider keys are set",
        },
        "bot_token_invalid": {
            "issue": "Telegram or Discord bot token invalid",
            "solution": "Regenerate the token from BotFather or the Discord Developer Portal",
        },
        "out_of_memory": {
            "issue": "Out of memory on a VPS",
            "solution": "Create a 2GB swap file",
        },
        "config_corrupted": {
            "issue": "Configuration file corrupted",
            "solution": "Restore from the clawdbot.json.bak backup",
        },
    },
    "remote_access": {
        "recommendation": "Never expose the Clawdbot gateway port directly to the public internet",
    },
}

# Sub-commands that may follow ``clawdbot`` inside a shell code block.
VERIFIED_COMMANDS: List[str] = [
    "onboard",
    "gateway",
    "health",
    "doctor",
    "status",
    "configure",
    "login",
    "cron",
    "--version",
    "-v",
]

# ---------------------------------------------------------------------------
# Article templates
# ---------------------------------------------------------------------------

CATEGORIES = ("Tutorial", "Guide", "Comparison", "Best Practices", "News", "Advanced")

CATEGORY_SECTIONS: Dict[str, List[str]] = {
    "Tutorial": [
        "What You'll Learn",
        "Prerequisites",
        "Step 1",
        "Verification",
        "Troubleshooting",
        "Next Steps",
    ],
    "Guide": [
        "Overview",
        "Key Concepts",
        "Getting Started",
        "Best Practices",
        "Common Pitfalls",
        "Conclusion",
    ],
    "Comparison": [
        "Overview",
        "Feature Comparison",
        "When to Choose Each",
        "Verdict",
    ],
    "Best Practices": [
        "Why This Matters",
        "The Practices",
        "Implementation Examples",
        "Common Mistakes",
        "Summary",
    ],
    "Advanced": [
        "Prerequisites",
        "Architecture Overview",
        "Implementation",
        "Testing",
        "Production Considerations",
        "Conclusion",
    ],
    "News": [
        "Summary",
        "What's New",
        "Impact",
        "How to Get Started",
        "What's Next",
    ],
}


def required_sections(category: str) -> List[str]:
    """Return the H2 headings (without ``## ``) a *category* article must carry."""
    return list(CATEGORY_SECTIONS.get(category, []))


WRITING_STYLE: Dict[str, Any] = {
    "tone": [
        "Write as if explaining to a smart friend",
        'Use "you" and "your" frequently',
        "Include personal insights and tips",
        "Acknowledge potential difficulties honestly",
        "Be concise when needed, thorough when it matters",
    ],
    "warnings": [
        "Security implications of full system access",
        "Provider key protection",
        "Not recommended for production without security review",
        "Backup recommendations",
        "Never expose the gateway port to the public internet",
    ],
    "code_blocks": "Use ```bash for shell commands, ```yaml for config, ```json for configuration files",
}
