# File: tests/test_route_prober.py
import pytest

from policy_scout.bruteforce import route_prober
from policy_scout.bruteforce.route_prober import (
    FALLBACK_PATHS,
    PROBE_PATHS,
    RouteProber,
    looks_like_policy_path,
)
from policy_scout.config import BOT_USER_AGENT
from policy_scout.logger import logger
from policy_scout.models import DiscoveryMethod, OutcomeKind

from conftest import FakeFetcher, plain_html, policy_html

BASE = "https://example.com"


def test_path_catalog():
    assert PROBE_PATHS[:2] == ("/privacy", "/privacy-policy")
    assert len(PROBE_PATHS) == len(set(PROBE_PATHS))
    assert looks_like_policy_path("/de/datenschutz")
    assert looks_like_policy_path("/privacy_policy")
    assert not looks_like_policy_path("/legal")


def test_logs_through_project_logger():
    assert route_prober.logger is logger


@pytest.mark.asyncio()
async def test_direct_hit_costs_one_page(fast_config):
    fetcher = FakeFetcher({f"{BASE}/privacy-policy": policy_html()})
    result = await RouteProber(fetcher, fast_config).probe("example.com")

    assert result.privacy_policy_url == f"{BASE}/privacy-policy"
    assert result.method is DiscoveryMethod.DIRECT
    assert result.outcome is OutcomeKind.SUCCESS
    assert result.crawled_pages == 1
    assert fetcher.heads == [f"{BASE}/privacy", f"{BASE}/privacy-policy"]
    assert fetcher.gets == [f"{BASE}/privacy-policy"]


@pytest.mark.asyncio()
async def test_live_paths_that_are_not_policies(fast_config):
    fetcher = FakeFetcher(
        {
            f"{BASE}/privacy": plain_html(),
            f"{BASE}/legal": plain_html(),
        }
    )
    result = await RouteProber(fetcher, fast_config).probe(BASE)

    assert result.privacy_policy_url is None
    assert result.outcome is OutcomeKind.SKIPPED
    assert f"{BASE}/privacy" in result.found_urls
    assert f"{BASE}/legal" in result.found_urls
    # /legal is live but not named like a policy, so it is never fetched
    assert fetcher.gets == [f"{BASE}/privacy"]
    assert result.crawled_pages == 1
    assert len(fetcher.heads) == len(PROBE_PATHS)


@pytest.mark.asyncio()
async def test_wordlist_paths_are_probed(fast_config, tmp_path):
    wordlist = tmp_path / "extra.txt"
    wordlist.write_text("# custom\nsite/privacy-info\n", encoding="utf-8")
    config = fast_config.model_copy(update={"wordlist": wordlist})
    fetcher = FakeFetcher({f"{BASE}/site/privacy-info": policy_html()})

    result = await RouteProber(fetcher, config).probe(BASE)
    assert result.privacy_policy_url == f"{BASE}/site/privacy-info"


@pytest.mark.asyncio()
async def test_fallback_probe_uses_bot_agent(fast_config):
    fetcher = FakeFetcher({f"{BASE}/legal/privacy": policy_html()})
    result = await RouteProber(fetcher, fast_config).fallback_probe(BASE)

    assert result.privacy_policy_url == f"{BASE}/legal/privacy"
    assert result.method is DiscoveryMethod.FALLBACK
    assert result.crawled_pages == 3
    assert all(headers["User-Agent"] == BOT_USER_AGENT for _, _, headers in fetcher.calls)
    assert fetcher.gets == [BASE + p for p in FALLBACK_PATHS[:3]]


@pytest.mark.asyncio()
async def test_fallback_probe_exhausted(fast_config):
    fetcher = FakeFetcher()
    result = await RouteProber(fetcher, fast_config).fallback_probe(BASE)
    assert result.privacy_policy_url is None
    assert result.crawled_pages == len(FALLBACK_PATHS)
    assert len(result.skipped) == len(FALLBACK_PATHS)
