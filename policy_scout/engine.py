# File: policy_scout/engine.py
"""policy_scout.engine: the discovery pipeline, from direct probes to the last-resort fallback."""

from __future__ import annotations

from typing import Awaitable, Callable, Optional

from policy_scout.bruteforce.route_prober import RouteProber
from policy_scout.config import DiscoveryConfig, load_config
from policy_scout.crawler.crawler import PolicyCrawler
from policy_scout.crawler.fetcher import Fetcher
from policy_scout.crawler.link_extractor import categorize_links
from policy_scout.harvesters import harvest_robots, harvest_sitemap
from policy_scout.logger import logger
from policy_scout.models import DiscoveryMethod, DiscoveryResult, OutcomeKind, RelevantPages
from policy_scout.parser.robots_parser import RobotsTxt
from policy_scout.utils import ensure_scheme

__all__ = ["PolicyDiscovery", "discover", "discover_simple", "discover_relevant_pages"]


class PolicyDiscovery:
    """Runs the discovery strategies for one site at a time, cheapest first.

    Order: direct path probes, robots.txt, sitemaps, breadth-first crawl and
    finally a bot-UA fallback probe. The first validated hit wins; the
    candidate URLs and page counts of every strategy that ran are merged into
    the returned :class:`DiscoveryResult`.

    Use as an async context manager so the HTTP session is closed::

        async with PolicyDiscovery(config) as discovery:
            result = await discovery.discover("https://example.com")
    """

    @staticmethod
    def load_config(path: Optional[str]) -> DiscoveryConfig:
        """Load settings from YAML/JSON, or the defaults."""
        return load_config(path)

    def __init__(self, config: Optional[DiscoveryConfig] = None, fetcher: Optional[Fetcher] = None) -> None:
        self.config = config or DiscoveryConfig()
        self.fetcher = fetcher if fetcher is not None else Fetcher(self.config)
        self._owns_fetcher = fetcher is None

    async def __aenter__(self) -> PolicyDiscovery:
        if self._owns_fetcher:
            await self.fetcher.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_fetcher:
            await self.fetcher.close()

    async def discover(self, base_domain: str) -> DiscoveryResult:
        """Find the privacy policy of *base_domain*; never raises for network trouble."""
        base = ensure_scheme(base_domain)
        logger.info("Discovering privacy policy for %s", base)
        accumulated = DiscoveryResult(method=DiscoveryMethod.FALLBACK)
        prober = RouteProber(self.fetcher, self.config)

        direct = await self._run("direct probe", base, lambda: prober.probe(base))
        if self._finish(accumulated, direct):
            return accumulated

        robots: Optional[RobotsTxt] = None

        async def _robots() -> DiscoveryResult:
            nonlocal robots
            result, robots = await harvest_robots(self.fetcher, self.config, base)
            return result

        if self._finish(accumulated, await self._run("robots.txt", base, _robots)):
            return accumulated

        declared = robots.sitemaps if robots is not None else []
        sitemap = await self._run("sitemap", base, lambda: harvest_sitemap(self.fetcher, self.config, base, declared))
        if self._finish(accumulated, sitemap):
            return accumulated

        crawler = PolicyCrawler(self.fetcher, self.config, robots=robots)
        if self._finish(accumulated, await self._run("crawl", base, lambda: crawler.crawl(base))):
            return accumulated

        fallback = await self._run("fallback probe", base, lambda: prober.fallback_probe(base))
        if self._finish(accumulated, fallback):
            return accumulated

        logger.info("No privacy policy found for %s (%d pages fetched)", base, accumulated.crawled_pages)
        accumulated.method = DiscoveryMethod.FALLBACK
        accumulated.outcome = OutcomeKind.SKIPPED
        return accumulated

    async def discover_simple(self, base_domain: str) -> Optional[str]:
        """Only the policy URL, or None."""
        return (await self.discover(base_domain)).privacy_policy_url

    async def discover_relevant_pages(self, base_domain: str) -> RelevantPages:
        """Bucket the homepage's same-host links into privacy/legal/about/support pages."""
        base = ensure_scheme(base_domain)
        outcome = await self.fetcher.get(base, timeout=self.config.page_timeout)
        if not outcome.ok or outcome.response is None:
            logger.warning("Cannot load %s for page discovery: %s", base, outcome.detail or outcome.reason)
            return RelevantPages()
        return categorize_links(outcome.response.text, outcome.response.url or base)

    @staticmethod
    def _finish(accumulated: DiscoveryResult, result: DiscoveryResult) -> bool:
        accumulated.merge(result)
        if result.privacy_policy_url is None:
            return False
        accumulated.privacy_policy_url = result.privacy_policy_url
        accumulated.add_found(result.privacy_policy_url)
        accumulated.method = result.method
        accumulated.outcome = OutcomeKind.SUCCESS
        return True

    @staticmethod
    async def _run(
        name: str, base: str, strategy: Callable[[], Awaitable[DiscoveryResult]]
    ) -> DiscoveryResult:
        try:
            return await strategy()
        except Exception as exc:
            logger.warning("%s failed for %s: %s", name, base, exc)
            return DiscoveryResult(outcome=OutcomeKind.SKIPPED)


async def _with_discovery(config: Optional[DiscoveryConfig], call: Callable[[PolicyDiscovery], Awaitable]):
    async with PolicyDiscovery(config) as discovery:
        return await call(discovery)


async def discover(base_domain: str, config: Optional[DiscoveryConfig] = None) -> DiscoveryResult:
    """One-shot :meth:`PolicyDiscovery.discover` with its own HTTP session."""
    return await _with_discovery(config, lambda d: d.discover(base_domain))


async def discover_simple(base_domain: str, config: Optional[DiscoveryConfig] = None) -> Optional[str]:
    return await _with_discovery(config, lambda d: d.discover_simple(base_domain))


async def discover_relevant_pages(base_domain: str, config: Optional[DiscoveryConfig] = None) -> RelevantPages:
    return await _with_discovery(config, lambda d: d.discover_relevant_pages(base_domain))
