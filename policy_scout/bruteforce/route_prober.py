# File: policy_scout/bruteforce/route_prober.py
"""Probing of conventional privacy-policy paths directly against a site."""

from __future__ import annotations

from typing import List, Optional, Sequence

from policy_scout.config import DiscoveryConfig
from policy_scout.crawler.fetcher import Fetcher
from policy_scout.logger import logger
from policy_scout.models import DiscoveryMethod, DiscoveryResult, FetchOutcome, OutcomeKind
from policy_scout.parser.validator import check_candidate, validate_response
from policy_scout.utils import read_wordlist, remove_duplicates, site_root

PROBE_PATHS: Sequence[str] = (
    "/privacy",
    "/privacy-policy",
    "/privacy_policy",
    "/privacypolicy",
    "/privacy/",
    "/privacy-policy/",
    "/privacy.html",
    "/privacy-policy.html",
    "/privacy.php",
    "/privacy.aspx",
    "/privacy.htm",
    "/privacy-notice",
    "/privacy-statement",
    "/privacy-center",
    "/legal/privacy",
    "/legal/privacy-policy",
    "/legal/privacy-notice",
    "/legal",
    "/about/privacy",
    "/help/privacy",
    "/support/privacy",
    "/policies/privacy",
    "/policies",
    "/policy/privacy",
    "/company/privacy",
    "/info/privacy",
    "/terms-and-privacy",
    "/data-policy",
    "/data-protection",
    "/cookie-policy",
    "/cookies",
    "/gdpr",
    "/ccpa",
    "/en/privacy",
    "/en/privacy-policy",
    "/en-us/privacy",
    "/us/privacy",
    "/uk/privacy",
    "/de/datenschutz",
    "/datenschutz",
    "/fr/confidentialite",
    "/es/privacidad",
    "/page/privacy",
    "/pages/privacy",
    "/pages/privacy-policy",
    "/p/privacy",
    "/static/privacy",
    "/docs/privacy",
    "/index.php/privacy",
    "/wp/privacy-policy",
)

FALLBACK_PATHS: Sequence[str] = (
    "/privacy",
    "/privacy-policy",
    "/legal/privacy",
    "/privacy.html",
)

_NAME_HINTS: Sequence[str] = (
    "privacy", "privacidad", "confidentialite", "datenschutz",
    "cookie", "data-policy", "data-protection", "gdpr", "ccpa",
)


def looks_like_policy_path(path: str) -> bool:
    """Naming convention check deciding whether a live path is worth a full fetch."""
    lowered = path.lower().replace("_", "-")
    return any(hint in lowered for hint in _NAME_HINTS)


class RouteProber:
    """Tries the fixed path catalog against one site, cheapest request first."""

    def __init__(
        self,
        fetcher: Fetcher,
        config: DiscoveryConfig,
        paths: Optional[Sequence[str]] = None,
    ) -> None:
        self.fetcher = fetcher
        self.config = config
        catalog: List[str] = list(paths if paths is not None else PROBE_PATHS)
        if config.wordlist is not None:
            catalog.extend("/" + word.lstrip("/") for word in read_wordlist(config.wordlist))
        self.paths: List[str] = remove_duplicates(catalog)

    async def probe(self, base_domain: str) -> DiscoveryResult:
        """HEAD every path; privacy-named live paths are fetched and validated."""
        root = site_root(base_domain)
        result = DiscoveryResult(method=DiscoveryMethod.DIRECT)
        for path in self.paths:
            url = root + path
            head = await self.fetcher.head(url, timeout=self.config.probe_timeout)
            if not head.ok:
                result.skipped.append(head)
                continue
            result.add_found(url)
            if not looks_like_policy_path(path):
                continue
            outcome = await check_candidate(self.fetcher, url, timeout=self.config.page_timeout)
            result.crawled_pages += 1
            if outcome.ok:
                logger.info("Privacy policy found by direct probe: %s", url)
                result.privacy_policy_url = url
                result.outcome = OutcomeKind.SUCCESS
                return result
            result.skipped.append(outcome)
        result.outcome = OutcomeKind.SKIPPED
        logger.debug("Direct probe exhausted %d paths on %s", len(self.paths), root)
        return result

    async def fallback_probe(self, base_domain: str, paths: Sequence[str] = FALLBACK_PATHS) -> DiscoveryResult:
        """Last resort: plain GETs with a minimal bot user agent."""
        root = site_root(base_domain)
        result = DiscoveryResult(method=DiscoveryMethod.FALLBACK)
        headers = {"User-Agent": self.config.fallback_user_agent, "Accept": "text/html"}
        for path in paths:
            url = root + path
            outcome = await self._fetch_and_validate(url, headers)
            result.crawled_pages += 1
            if outcome.response is not None and outcome.response.status < 300:
                result.add_found(url)
            if outcome.ok:
                logger.info("Privacy policy found by fallback probe: %s", url)
                result.privacy_policy_url = url
                result.outcome = OutcomeKind.SUCCESS
                return result
            result.skipped.append(outcome)
        result.outcome = OutcomeKind.SKIPPED
        return result

    async def _fetch_and_validate(self, url: str, headers: dict) -> FetchOutcome:
        outcome = await self.fetcher.get(url, headers=headers, timeout=self.config.page_timeout)
        if not outcome.ok or outcome.response is None:
            return outcome
        return validate_response(url, outcome.response)
