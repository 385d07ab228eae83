# File: policy_scout/harvesters.py
"""policy_scout.harvesters: privacy-policy hints from robots.txt and XML sitemaps."""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from policy_scout.config import DiscoveryConfig
from policy_scout.crawler.fetcher import Fetcher
from policy_scout.logger import logger
from policy_scout.models import DiscoveryMethod, DiscoveryResult, FetchOutcome, OutcomeKind, SkipReason
from policy_scout.parser.robots_parser import RobotsTxt
from policy_scout.parser.sitemap_parser import looks_privacy_related, parse_sitemap
from policy_scout.parser.validator import check_candidate
from policy_scout.utils import normalize, remove_duplicates, site_root

__all__: Sequence[str] = ("SITEMAP_LOCATIONS", "harvest_robots", "harvest_sitemap")

SITEMAP_LOCATIONS: Sequence[str] = (
    "/sitemap.xml",
    "/sitemap_index.xml",
    "/sitemap-index.xml",
    "/wp-sitemap.xml",
    "/sitemap/sitemap.xml",
)

MAX_NESTED_SITEMAPS = 5
MAX_SITEMAP_CANDIDATES = 10


async def _validate_candidates(
    fetcher: Fetcher,
    config: DiscoveryConfig,
    candidates: Iterable[str],
    result: DiscoveryResult,
) -> Optional[str]:
    for url in candidates:
        result.add_found(url)
        outcome = await check_candidate(fetcher, url, timeout=config.page_timeout)
        result.crawled_pages += 1
        if outcome.ok:
            return url
        result.skipped.append(outcome)
    return None


async def harvest_robots(
    fetcher: Fetcher, config: DiscoveryConfig, base_domain: str
) -> Tuple[DiscoveryResult, Optional[RobotsTxt]]:
    """Look for privacy/legal URLs mentioned in ``/robots.txt``.

    Returns the discovery result and the parsed robots.txt (None when it is
    missing) so the crawl can honour its Disallow rules.
    """
    root = site_root(base_domain)
    result = DiscoveryResult(method=DiscoveryMethod.ROBOTS, outcome=OutcomeKind.SKIPPED)
    outcome = await fetcher.get(f"{root}/robots.txt", timeout=config.probe_timeout)
    if not outcome.ok or outcome.response is None:
        logger.debug("robots.txt unavailable on %s: %s", root, outcome.reason)
        result.skipped.append(outcome)
        return result, None

    robots = RobotsTxt(outcome.response.text)
    hit = await _validate_candidates(fetcher, config, robots.privacy_hints(root), result)
    if hit:
        logger.info("Privacy policy found via robots.txt: %s", hit)
        result.privacy_policy_url = hit
        result.outcome = OutcomeKind.SUCCESS
    return result, robots


async def _sitemap_locs(fetcher: Fetcher, config: DiscoveryConfig, url: str, result: DiscoveryResult) -> List[str]:
    outcome = await fetcher.get(url, timeout=config.probe_timeout)
    if not outcome.ok or outcome.response is None:
        result.skipped.append(outcome)
        return []
    sitemap = parse_sitemap(outcome.response.text)
    if not sitemap.urls:
        result.skipped.append(FetchOutcome.skipped(url, SkipReason.PARSE_ERROR, status=outcome.status))
        return []
    if not sitemap.is_index:
        return sitemap.urls

    # one level of nesting; child sitemaps named after policies/pages go first
    children = sorted(sitemap.urls, key=lambda u: 0 if looks_privacy_related(u) or "page" in u.lower() else 1)
    locs: List[str] = []
    for child in children[:MAX_NESTED_SITEMAPS]:
        child_outcome = await fetcher.get(child, timeout=config.probe_timeout)
        if not child_outcome.ok or child_outcome.response is None:
            result.skipped.append(child_outcome)
            continue
        nested = parse_sitemap(child_outcome.response.text)
        if not nested.is_index:
            locs.extend(nested.urls)
    return locs


async def harvest_sitemap(
    fetcher: Fetcher,
    config: DiscoveryConfig,
    base_domain: str,
    extra_locations: Sequence[str] = (),
) -> DiscoveryResult:
    """Search conventional (and robots-declared) sitemaps for privacy-named pages."""
    root = site_root(base_domain)
    result = DiscoveryResult(method=DiscoveryMethod.SITEMAP, outcome=OutcomeKind.SKIPPED)
    locations = remove_duplicates([root + path for path in SITEMAP_LOCATIONS] + list(extra_locations))
    seen: List[str] = []
    for location in locations:
        sitemap_url = normalize(location, root)
        if sitemap_url is None:
            continue
        candidates = [
            u for u in remove_duplicates(await _sitemap_locs(fetcher, config, sitemap_url, result))
            if looks_privacy_related(u) and u not in seen
        ][:MAX_SITEMAP_CANDIDATES]
        seen.extend(candidates)
        hit = await _validate_candidates(fetcher, config, candidates, result)
        if hit:
            logger.info("Privacy policy found via sitemap %s: %s", sitemap_url, hit)
            result.privacy_policy_url = hit
            result.outcome = OutcomeKind.SUCCESS
            return result
    return result
