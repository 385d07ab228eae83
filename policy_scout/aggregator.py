# File: policy_scout/aggregator.py
"""policy_scout.aggregator: turning batch discovery results into one report."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional, TypedDict

from policy_scout.models import DiscoveryMethod, DiscoveryResult


class SiteEntry(TypedDict):
    """One domain's line in the report."""

    domain: str
    privacy_policy_url: Optional[str]
    method: str
    outcome: Optional[str]
    crawled_pages: int
    found_urls: List[str]
    skipped: int


class Summary(TypedDict):
    total: int
    found: int
    not_found: int
    by_method: Dict[str, int]


@dataclass(slots=True)
class DiscoveryReport:
    """Per-domain results of a batch run plus summary counts."""

    sites: List[SiteEntry] = field(default_factory=list)
    summary: Summary = field(
        default_factory=lambda: {"total": 0, "found": 0, "not_found": 0, "by_method": {}}
    )

    raw_results: Optional[Mapping[str, DiscoveryResult]] = None

    def json(self, *, pretty: bool = False) -> str:
        """JSON representation without the raw results."""
        output = {k: v for k, v in asdict(self).items() if k != "raw_results"}
        return json.dumps(output, ensure_ascii=False, indent=2 if pretty else None)

    def as_dict(self) -> Dict[str, Any]:
        return {"sites": list(self.sites), "summary": self.summary}


def _entry(domain: str, result: DiscoveryResult) -> SiteEntry:
    return {
        "domain": domain,
        "privacy_policy_url": result.privacy_policy_url,
        "method": result.method.value,
        "outcome": result.outcome.value if result.outcome else None,
        "crawled_pages": result.crawled_pages,
        "found_urls": list(result.found_urls),
        "skipped": len(result.skipped),
    }


def aggregate_results(results: Mapping[str, DiscoveryResult]) -> DiscoveryReport:
    """Build a :class:`DiscoveryReport` from the map returned by ``batch_discover``."""
    report = DiscoveryReport(raw_results=results)
    by_method: Dict[str, int] = {method.value: 0 for method in DiscoveryMethod}
    found = 0
    for domain, result in results.items():
        report.sites.append(_entry(domain, result))
        if result.found:
            found += 1
            by_method[result.method.value] += 1
    report.summary = {
        "total": len(report.sites),
        "found": found,
        "not_found": len(report.sites) - found,
        "by_method": by_method,
    }
    return report


__all__ = ["DiscoveryReport", "SiteEntry", "Summary", "aggregate_results"]
