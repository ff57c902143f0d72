"""clawseo -- trend-driven SEO article pipeline for the Openclaw / Moltbot site."""

__version__ = "0.1.0"
