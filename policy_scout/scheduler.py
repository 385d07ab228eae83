# File: policy_scout/scheduler.py
"""
Batch discovery over many sites, a few at a time.
"""
from __future__ import annotations

import asyncio
from typing import Dict, Iterable, List, Optional

from policy_scout.config import DiscoveryConfig
from policy_scout.engine import PolicyDiscovery
from policy_scout.logger import logger
from policy_scout.models import DiscoveryMethod, DiscoveryResult, OutcomeKind


def _chunks(items: List[str], size: int) -> Iterable[List[str]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


async def _run_groups(discovery: PolicyDiscovery, domains: List[str]) -> Dict[str, DiscoveryResult]:
    config = discovery.config
    results: Dict[str, DiscoveryResult] = {domain: DiscoveryResult() for domain in domains}
    groups = list(_chunks(list(results), config.batch_size))

    for index, group in enumerate(groups):
        logger.info("Batch %d/%d: %s", index + 1, len(groups), ", ".join(group))
        outcomes = await asyncio.gather(*(discovery.discover(domain) for domain in group), return_exceptions=True)
        for domain, outcome in zip(group, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning("Discovery failed for %s: %s", domain, outcome)
                results[domain] = DiscoveryResult(method=DiscoveryMethod.FALLBACK, outcome=OutcomeKind.SKIPPED)
            else:
                results[domain] = outcome
        if index < len(groups) - 1 and config.batch_delay > 0:
            await asyncio.sleep(config.batch_delay)
    return results


async def batch_discover(
    domains: Iterable[str],
    *,
    config: Optional[DiscoveryConfig] = None,
    discovery: Optional[PolicyDiscovery] = None,
) -> Dict[str, DiscoveryResult]:
    """
    Run discovery for every domain and map each one to its result.

    Domains are processed in groups of ``config.batch_size`` with
    ``config.batch_delay`` seconds between groups. A failure for one domain
    never affects the others: it is reported as a not-found result.

    Parameters
    ----------
    domains : Iterable[str]
        Base domains or URLs; duplicates are discovered once.
    config : DiscoveryConfig, optional
        Settings for a pipeline created here (ignored when *discovery* is given).
    discovery : PolicyDiscovery, optional
        Already opened pipeline to reuse.

    Returns
    -------
    Dict[str, DiscoveryResult]
        One entry per distinct domain, in input order.
    """
    items = list(domains)
    if not items:
        return {}
    if discovery is not None:
        return await _run_groups(discovery, items)
    async with PolicyDiscovery(config) as owned:
        return await _run_groups(owned, items)


__all__ = ["batch_discover"]
