"""Exceptions raised by PolicyScout.

Discovery never raises these; only :func:`policy_scout.scraper.scrape` does,
once every request profile has been tried.
"""
from __future__ import annotations

from typing import Optional


class PolicyScoutError(Exception):
    """Base class for all PolicyScout errors."""


class ScrapeError(PolicyScoutError):
    """No request profile produced usable content for *url*."""

    def __init__(self, url: str, status: Optional[int] = None, reason: str = "") -> None:
        self.url = url
        self.status = status
        self.reason = reason
        message = f"Failed to scrape privacy policy from {url}"
        if status is not None:
            message += f" (HTTP {status})"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class PolicyNotFoundError(ScrapeError):
    """The page does not exist (HTTP 404/410) or the host does not resolve."""


class AccessDeniedError(ScrapeError):
    """The site refused automated access (HTTP 401/403)."""

    def __init__(self, url: str, status: Optional[int] = 403, reason: str = "") -> None:
        super().__init__(
            url,
            status,
            reason or "website blocks automated access, please review the privacy policy manually",
        )


__all__ = ["PolicyScoutError", "ScrapeError", "PolicyNotFoundError", "AccessDeniedError"]
