# File: policy_scout/scraper.py
"""policy_scout.scraper: full-text retrieval of a chosen policy URL.

The page is requested once per :class:`~policy_scout.config.RequestProfile`
in order; a 403 or 404 on one profile does not stop the next one from
being tried.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from policy_scout.config import DiscoveryConfig, RequestProfile
from policy_scout.crawler.fetcher import Fetcher
from policy_scout.errors import AccessDeniedError, PolicyNotFoundError, ScrapeError
from policy_scout.logger import logger
from policy_scout.models import FetchOutcome, ScrapedContent, ScrapeStatus, SkipReason
from policy_scout.parser.content_extractor import ExtractedContent, extract_content
from policy_scout.parser.validator import is_privacy_policy
from policy_scout.utils import ensure_scheme

__all__: Sequence[str] = ("MIN_SCRAPE_LENGTH", "MIN_PARTIAL_LENGTH", "scrape")

MIN_SCRAPE_LENGTH = 200
MIN_PARTIAL_LENGTH = 100


def _failure_error(url: str, failures: List[FetchOutcome]) -> ScrapeError:
    """A 403 on any profile wins over a 404, which wins over the last failure."""
    if not failures:
        return ScrapeError(url, reason="no usable content was returned")
    for failure in failures:
        if failure.reason is SkipReason.FORBIDDEN:
            return AccessDeniedError(url, failure.status)
    for failure in failures:
        if failure.reason is SkipReason.NOT_FOUND:
            return PolicyNotFoundError(url, failure.status, failure.detail or "page not found")
    failure = failures[-1]
    return ScrapeError(url, failure.status, failure.detail or (failure.reason.value if failure.reason else ""))


async def _scrape_with(
    fetcher: Fetcher,
    config: DiscoveryConfig,
    url: str,
    profiles: Sequence[RequestProfile],
    allow_partial: bool,
) -> ScrapedContent:
    best: Optional[ScrapedContent] = None
    failures: List[FetchOutcome] = []

    for profile in profiles:
        logger.debug("Scraping %s with profile %s", url, profile.name)
        outcome = await fetcher.get(url, headers=profile.headers, timeout=profile.timeout)
        if not outcome.ok or outcome.response is None:
            failures.append(outcome)
            logger.debug("Profile %s failed for %s: %s", profile.name, url, outcome.detail or outcome.reason)
            if outcome.reason is SkipReason.NOT_FOUND and config.stop_on_not_found:
                break
            continue

        response = outcome.response
        extracted: ExtractedContent = extract_content(response.text, response.url or url)
        content = ScrapedContent(
            url=url,
            title=extracted.title,
            text=extracted.text,
            last_modified=response.last_modified,
            status=ScrapeStatus.COMPLETE,
            profile=profile.name,
        )
        if len(extracted.text) > MIN_SCRAPE_LENGTH and is_privacy_policy(extracted.text):
            logger.info("Scraped %s with profile %s (%d chars)", url, profile.name, len(extracted.text))
            return content

        failures.append(
            FetchOutcome.skipped(
                url, SkipReason.NOT_A_POLICY, status=response.status, detail="content does not look like a privacy policy"
            )
        )
        if best is None or len(content.text) > len(best.text):
            best = content

    if allow_partial and best is not None and len(best.text) >= MIN_PARTIAL_LENGTH:
        logger.warning("Returning partial content for %s (%d chars, profile %s)", url, len(best.text), best.profile)
        best.status = ScrapeStatus.PARTIAL
        return best

    raise _failure_error(url, failures)


async def scrape(
    url: str,
    *,
    config: Optional[DiscoveryConfig] = None,
    profiles: Optional[Sequence[RequestProfile]] = None,
    fetcher: Optional[Fetcher] = None,
    allow_partial: bool = True,
) -> ScrapedContent:
    """Fetch *url* and return its policy text.

    Returns a ``complete`` result from the first profile whose text is longer
    than 200 characters and validates, or, with *allow_partial*, the longest
    non-trivial text as a ``partial`` result.

    Raises:
        AccessDeniedError: some profile got HTTP 401/403.
        PolicyNotFoundError: otherwise, some profile got HTTP 404/410 or a DNS error.
        ScrapeError: anything else.
    """
    config = config or DiscoveryConfig()
    chain: List[RequestProfile] = list(profiles if profiles is not None else config.request_profiles)
    if not chain:
        raise ValueError("at least one request profile is required")
    target = ensure_scheme(url)

    if fetcher is not None:
        return await _scrape_with(fetcher, config, target, chain, allow_partial)
    async with Fetcher(config) as owned:
        return await _scrape_with(owned, config, target, chain, allow_partial)
