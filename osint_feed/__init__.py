"""
osint-feed - multi-source conflict news aggregation and cited OSINT reports.

This package gathers articles from news APIs and RSS feeds, deduplicates
and ranks them, and produces a structured report with a Gemini model.

Main entry point is the CLI via the `osint-feed` command.

Example:
    $ osint-feed run --start 2024-05-01 --end 2024-05-07 -q Kharkiv
"""

__all__ = ["__version__", "AppConfig", "load_config", "OsintService", "canonicalize", "identity"]
__version__ = "0.1.0"

from .config import AppConfig, load_config
from .core.urls import canonicalize, identity
from .service import OsintService
