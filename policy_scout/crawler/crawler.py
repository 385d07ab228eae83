# === FILE: policy_scout/crawler/crawler.py ===
from __future__ import annotations

import logging
import time
from collections import deque
from typing import Deque, List, Optional, Set
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from policy_scout.config import DiscoveryConfig
from policy_scout.crawler.fetcher import Fetcher
from policy_scout.crawler.link_extractor import extract_crawl_links, extract_privacy_links
from policy_scout.models import (
    CrawlTarget,
    DiscoveryMethod,
    DiscoveryResult,
    FetchOutcome,
    OutcomeKind,
    SkipReason,
)
from policy_scout.parser.robots_parser import RobotsTxt
from policy_scout.parser.validator import check_candidate
from policy_scout.utils import canonical_url, ensure_scheme

__all__ = ("PolicyCrawler",)


class PolicyCrawler:
    """Breadth-first crawl that stops at the first validated privacy policy.

    Pages are fetched strictly in FIFO order. On every page the privacy
    candidates are validated before its other links are enqueued, so a hit on
    one page always ends the crawl before the next page is requested. The
    frontier and the visited set live only for the duration of one
    :meth:`crawl` call.
    """

    def __init__(self, fetcher: Fetcher, config: DiscoveryConfig, robots: Optional[RobotsTxt] = None) -> None:
        self.fetcher = fetcher
        self.config = config
        self.robots = robots
        self.logger = logging.getLogger("PolicyScout")

    async def crawl(self, base_domain: str) -> DiscoveryResult:
        start_url = ensure_scheme(base_domain)
        self.logger.info("Crawl started: %s (max %d pages, depth %d)", start_url, self.config.max_pages, self.config.max_depth)
        start = time.monotonic()
        crawl_delay = self._crawl_delay()
        if crawl_delay:
            self.fetcher.set_host_delay(start_url, crawl_delay)

        result = DiscoveryResult(method=DiscoveryMethod.CRAWL)
        frontier: Deque[CrawlTarget] = deque([CrawlTarget(start_url, 0)])
        visited: Set[str] = set()

        while frontier and result.crawled_pages < self.config.max_pages:
            target = frontier.popleft()
            key = canonical_url(target.url)
            if key in visited or target.depth > self.config.max_depth:
                continue
            if not self._is_allowed(target.url):
                result.skipped.append(FetchOutcome.skipped(target.url, SkipReason.DISALLOWED))
                continue

            visited.add(key)
            outcome = await self.fetcher.get(target.url, timeout=self.config.page_timeout)
            result.crawled_pages += 1
            if not outcome.ok or outcome.response is None:
                result.skipped.append(outcome)
                continue
            response = outcome.response
            if not response.is_html:
                result.skipped.append(FetchOutcome.skipped(target.url, SkipReason.NOT_HTML, status=response.status))
                continue

            page_url = response.url or target.url
            soup = BeautifulSoup(response.text, "html.parser")

            hit = await self._check_privacy_links(soup, page_url, visited, result)
            if hit is not None:
                result.privacy_policy_url = hit
                result.outcome = OutcomeKind.SUCCESS
                self._log_done(result, start)
                return result
            if result.outcome is OutcomeKind.BUDGET_EXCEEDED:
                self._log_done(result, start)
                return result

            if target.depth < self.config.max_depth:
                for link in extract_crawl_links(soup, page_url, limit=self.config.max_links_per_page):
                    if canonical_url(link) not in visited:
                        frontier.append(CrawlTarget(link, target.depth + 1))

        result.outcome = OutcomeKind.SKIPPED if not frontier else OutcomeKind.BUDGET_EXCEEDED
        if result.outcome is OutcomeKind.BUDGET_EXCEEDED:
            result.skipped.append(FetchOutcome.budget_exceeded(frontier[0].url))
        self._log_done(result, start)
        return result

    async def _check_privacy_links(
        self,
        soup: BeautifulSoup,
        page_url: str,
        visited: Set[str],
        result: DiscoveryResult,
    ) -> Optional[str]:
        candidates: List[str] = extract_privacy_links(soup, page_url)
        for url in candidates:
            result.add_found(url)
        for url in candidates:
            key = canonical_url(url)
            if key in visited:
                continue
            if result.crawled_pages >= self.config.max_pages:
                result.outcome = OutcomeKind.BUDGET_EXCEEDED
                result.skipped.append(FetchOutcome.budget_exceeded(url))
                return None
            visited.add(key)
            outcome = await check_candidate(self.fetcher, url, timeout=self.config.page_timeout)
            result.crawled_pages += 1
            if outcome.ok:
                self.logger.info("Privacy policy found by crawl: %s", url)
                return url
            result.skipped.append(outcome)
        return None

    def _crawl_delay(self) -> Optional[float]:
        if self.robots is None or not self.config.respect_robots:
            return None
        return self.robots.crawl_delay(self.config.user_agent)

    def _is_allowed(self, url: str) -> bool:
        if self.robots is None or not self.config.respect_robots:
            return True
        parsed = urlparse(url)
        path = parsed.path or "/"
        if parsed.query:
            path += "?" + parsed.query
        return self.robots.can_fetch(self.config.user_agent, path)

    def _log_done(self, result: DiscoveryResult, start: float) -> None:
        duration = time.monotonic() - start
        self.logger.info(
            "Crawl finished (%s): %d pages in %.2f s, %d candidate URLs",
            result.outcome.value if result.outcome else "unknown",
            result.crawled_pages,
            duration,
            len(result.found_urls),
        )
