"""Does a block of text read like a privacy policy?"""

from __future__ import annotations

from typing import Optional, Sequence

from policy_scout.crawler.fetcher import Fetcher
from policy_scout.models import FetchOutcome, HttpResponse, SkipReason
from policy_scout.parser.content_extractor import extract_content

__all__: Sequence[str] = (
    "MIN_POLICY_LENGTH",
    "REQUIRED_INDICATORS",
    "OPTIONAL_INDICATORS",
    "is_privacy_policy",
    "validate_response",
    "check_candidate",
)

MIN_POLICY_LENGTH = 500
MIN_OPTIONAL_MATCHES = 2

REQUIRED_INDICATORS: Sequence[str] = ("personal information", "data collection", "privacy")

OPTIONAL_INDICATORS: Sequence[str] = (
    "cookie",
    "third party",
    "third-party",
    "we collect",
    "gdpr",
    "ccpa",
    "consent",
    "data protection",
    "personal data",
    "opt out",
    "opt-out",
    "your rights",
    "retention",
    "data sharing",
    "tracking",
    "analytics",
)


def is_privacy_policy(text: Optional[str]) -> bool:
    """Length above 500, one required indicator and two optional-indicator hits.

    Optional hits are counted as occurrences, so a single indicator that
    appears twice is enough corroboration. Optional indicators must not
    overlap each other or the required ones.
    """
    if not text or len(text) <= MIN_POLICY_LENGTH:
        return False
    lowered = text.lower()
    if not any(ind in lowered for ind in REQUIRED_INDICATORS):
        return False
    hits = 0
    for ind in OPTIONAL_INDICATORS:
        hits += lowered.count(ind)
        if hits >= MIN_OPTIONAL_MATCHES:
            return True
    return False


def validate_response(url: str, response: HttpResponse) -> FetchOutcome:
    """Run extraction and validation over an already fetched page."""
    if not response.is_html:
        return FetchOutcome.skipped(url, SkipReason.NOT_HTML, status=response.status, response=response)
    content = extract_content(response.text, response.url or url)
    if is_privacy_policy(content.text):
        return FetchOutcome.success(url, response)
    return FetchOutcome.skipped(
        url,
        SkipReason.NOT_A_POLICY,
        status=response.status,
        detail=f"{len(content.text)} chars extracted",
        response=response,
    )


async def check_candidate(fetcher: Fetcher, url: str, timeout: Optional[float] = None) -> FetchOutcome:
    """Fetch *url* and validate it; the outcome says why a candidate was rejected."""
    outcome = await fetcher.get(url, timeout=timeout)
    if not outcome.ok or outcome.response is None:
        return outcome
    return validate_response(url, outcome.response)
