# policy_scout/__init__.py
"""
PolicyScout package initializer.
Defines the package version and exposes the public API and CLI.
"""
__version__ = "0.1.0"

from policy_scout.config import DiscoveryConfig, RequestProfile, load_config
from policy_scout.engine import PolicyDiscovery, discover, discover_relevant_pages, discover_simple
from policy_scout.errors import AccessDeniedError, PolicyNotFoundError, PolicyScoutError, ScrapeError
from policy_scout.models import (
    DiscoveryMethod,
    DiscoveryResult,
    FetchOutcome,
    OutcomeKind,
    RelevantPages,
    ScrapedContent,
    ScrapeStatus,
    SkipReason,
)
from policy_scout.scheduler import batch_discover
from policy_scout.scraper import scrape

# CLI entry point
from policy_scout.cli import cli as main_cli

__all__ = [
    "__version__",
    "main_cli",
    "discover",
    "discover_simple",
    "discover_relevant_pages",
    "scrape",
    "batch_discover",
    "PolicyDiscovery",
    "DiscoveryConfig",
    "RequestProfile",
    "load_config",
    "DiscoveryMethod",
    "DiscoveryResult",
    "FetchOutcome",
    "OutcomeKind",
    "RelevantPages",
    "ScrapedContent",
    "ScrapeStatus",
    "SkipReason",
    "PolicyScoutError",
    "ScrapeError",
    "PolicyNotFoundError",
    "AccessDeniedError",
]
