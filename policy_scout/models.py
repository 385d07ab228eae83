# policy_scout/models.py
"""
Data models shared by the discovery strategies, the scraper and the reports.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


class DiscoveryMethod(str, Enum):
    """Strategy that produced (or last failed to produce) a discovery result."""

    DIRECT = "direct"
    ROBOTS = "robots"
    SITEMAP = "sitemap"
    CRAWL = "crawl"
    FALLBACK = "fallback"


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    BUDGET_EXCEEDED = "budget_exceeded"


class SkipReason(str, Enum):
    """Why a URL, path or page was passed over."""

    TIMEOUT = "timeout"
    NETWORK = "network"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    HTTP_ERROR = "http_error"
    NOT_HTML = "not_html"
    DISALLOWED = "disallowed"
    INVALID_URL = "invalid_url"
    PARSE_ERROR = "parse_error"
    NOT_A_POLICY = "not_a_policy"


class ScrapeStatus(str, Enum):
    COMPLETE = "complete"
    PARTIAL = "partial"


@dataclass(slots=True)
class HttpResponse:
    """Status, headers and decoded body of one HTTP exchange (after redirects)."""

    url: str
    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    text: str = ""

    @property
    def content_type(self) -> str:
        for key, value in self.headers.items():
            if key.lower() == "content-type":
                return value.split(";", 1)[0].strip().lower()
        return ""

    @property
    def is_html(self) -> bool:
        ctype = self.content_type
        return not ctype or "html" in ctype

    @property
    def last_modified(self) -> Optional[str]:
        for key, value in self.headers.items():
            if key.lower() == "last-modified":
                return value
        return None


@dataclass(slots=True)
class FetchOutcome:
    """Typed result of one fetch or candidate check.

    ``kind`` tells success from a skip; ``reason`` and ``status`` say why a
    URL was skipped so callers and tests never have to guess from a swallowed
    exception.
    """

    kind: OutcomeKind
    url: str
    response: Optional[HttpResponse] = None
    reason: Optional[SkipReason] = None
    status: Optional[int] = None
    detail: str = ""

    @classmethod
    def success(cls, url: str, response: HttpResponse) -> FetchOutcome:
        return cls(OutcomeKind.SUCCESS, url, response=response, status=response.status)

    @classmethod
    def skipped(
        cls,
        url: str,
        reason: SkipReason,
        *,
        status: Optional[int] = None,
        detail: str = "",
        response: Optional[HttpResponse] = None,
    ) -> FetchOutcome:
        return cls(OutcomeKind.SKIPPED, url, response=response, reason=reason, status=status, detail=detail)

    @classmethod
    def budget_exceeded(cls, url: str) -> FetchOutcome:
        return cls(OutcomeKind.BUDGET_EXCEEDED, url, detail="page budget exhausted")

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    def as_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "kind": self.kind.value,
            "reason": self.reason.value if self.reason else None,
            "status": self.status,
            "detail": self.detail,
        }


@dataclass(frozen=True, slots=True)
class CrawlTarget:
    """A URL waiting in the crawl frontier, with its link depth."""

    url: str
    depth: int = 0

    def __post_init__(self) -> None:
        if self.depth < 0:
            raise ValueError("depth must be >= 0")


@dataclass(slots=True)
class DiscoveryResult:
    """Output of one discovery attempt on one base domain."""

    privacy_policy_url: Optional[str] = None
    found_urls: List[str] = field(default_factory=list)
    crawled_pages: int = 0
    method: DiscoveryMethod = DiscoveryMethod.FALLBACK
    outcome: Optional[OutcomeKind] = None
    skipped: List[FetchOutcome] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.privacy_policy_url is not None

    def add_found(self, url: str) -> None:
        if url not in self.found_urls:
            self.found_urls.append(url)

    def merge(self, other: DiscoveryResult) -> None:
        """Fold *other*'s diagnostics into this accumulated result."""
        for url in other.found_urls:
            self.add_found(url)
        self.crawled_pages += other.crawled_pages
        self.skipped.extend(other.skipped)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "privacyPolicyUrl": self.privacy_policy_url,
            "foundUrls": list(self.found_urls),
            "crawledPages": self.crawled_pages,
            "method": self.method.value,
            "outcome": self.outcome.value if self.outcome else None,
        }


@dataclass(slots=True)
class ScrapedContent:
    """Text and metadata retrieved from one policy page."""

    url: str
    title: str
    text: str
    last_modified: Optional[str] = None
    status: ScrapeStatus = ScrapeStatus.COMPLETE
    profile: str = ""

    @property
    def partial(self) -> bool:
        return self.status is ScrapeStatus.PARTIAL

    def as_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "title": self.title,
            "text": self.text,
            "lastModified": self.last_modified,
            "status": self.status.value,
            "profile": self.profile,
        }


@dataclass(slots=True)
class RelevantPages:
    """Same-host links of a homepage, bucketed by what they look like."""

    privacy_pages: List[str] = field(default_factory=list)
    legal_pages: List[str] = field(default_factory=list)
    about_pages: List[str] = field(default_factory=list)
    support_pages: List[str] = field(default_factory=list)
    all_pages: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, List[str]]:
        return {
            "privacyPages": list(self.privacy_pages),
            "legalPages": list(self.legal_pages),
            "aboutPages": list(self.about_pages),
            "supportPages": list(self.support_pages),
            "allPages": list(self.all_pages),
        }


__all__ = [
    "DiscoveryMethod",
    "OutcomeKind",
    "SkipReason",
    "ScrapeStatus",
    "HttpResponse",
    "FetchOutcome",
    "CrawlTarget",
    "DiscoveryResult",
    "ScrapedContent",
    "RelevantPages",
]
