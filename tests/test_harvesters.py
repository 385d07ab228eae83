# File: tests/test_harvesters.py
import pytest

from policy_scout.harvesters import SITEMAP_LOCATIONS, harvest_robots, harvest_sitemap
from policy_scout.models import DiscoveryMethod, OutcomeKind, SkipReason
from policy_scout.parser.robots_parser import RobotsTxt
from policy_scout.parser.sitemap_parser import looks_privacy_related, parse_sitemap

from conftest import FakeFetcher, plain_html, policy_html

BASE = "https://example.com"

ROBOTS = """\
User-agent: *
Disallow: /admin
Disallow: /*?sessionid=
Allow: /legal/privacy-center
Disallow: /cookie*.php$
# Privacy policy: https://example.com/company/privacy-data
Sitemap: https://example.com/custom-map.xml
"""

URLSET = """<?xml version="1.0" encoding="UTF-8"?>
<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
  <url><loc>https://example.com/</loc></url>
  <url><loc> https://example.com/shop </loc></url>
  <url><loc>https://example.com/help/privacy-notice</loc></url>
</urlset>
"""

INDEX = """<?xml version="1.0" encoding="UTF-8"?>
<sitemapindex xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
  <sitemap><loc>https://example.com/sitemap-products.xml</loc></sitemap>
  <sitemap><loc>https://example.com/sitemap-pages.xml</loc></sitemap>
</sitemapindex>
"""


def test_robots_rules_and_hints():
    robots = RobotsTxt(ROBOTS)
    assert robots.sitemaps == ["https://example.com/custom-map.xml"]
    assert not robots.can_fetch("AnyBot", "/admin/users")
    assert robots.can_fetch("AnyBot", "/legal/privacy-center")
    assert robots.privacy_hints(BASE) == [
        f"{BASE}/legal/privacy-center",
        f"{BASE}/company/privacy-data",
    ]


def test_parse_sitemap_variants():
    sitemap = parse_sitemap(URLSET)
    assert not sitemap.is_index
    assert sitemap.urls == [f"{BASE}/", f"{BASE}/shop", f"{BASE}/help/privacy-notice"]

    index = parse_sitemap(INDEX.encode("utf-8"))
    assert index.is_index
    assert len(index.urls) == 2

    assert parse_sitemap("<html><body>Not found</body></html>").urls == []
    assert parse_sitemap("").urls == []
    assert parse_sitemap("\x00garbage<<<").urls == []


def test_sitemap_name_heuristic():
    assert looks_privacy_related("https://example.com/Data_Protection")
    assert not looks_privacy_related("https://example.com/shop/shoes")


@pytest.mark.asyncio()
async def test_harvest_robots_validates_hints(fast_config):
    fetcher = FakeFetcher(
        {
            f"{BASE}/robots.txt": (200, ROBOTS, {"Content-Type": "text/plain"}),
            f"{BASE}/legal/privacy-center": plain_html(),
            f"{BASE}/company/privacy-data": policy_html(),
        }
    )
    result, robots = await harvest_robots(fetcher, fast_config, BASE)

    assert robots is not None
    assert result.method is DiscoveryMethod.ROBOTS
    assert result.privacy_policy_url == f"{BASE}/company/privacy-data"
    assert result.crawled_pages == 2
    assert [s.reason for s in result.skipped] == [SkipReason.NOT_A_POLICY]


@pytest.mark.asyncio()
async def test_harvest_robots_missing(fast_config):
    result, robots = await harvest_robots(FakeFetcher(), fast_config, BASE)
    assert robots is None
    assert result.privacy_policy_url is None
    assert result.outcome is OutcomeKind.SKIPPED
    assert result.skipped[0].reason is SkipReason.NOT_FOUND


@pytest.mark.asyncio()
async def test_harvest_sitemap_from_urlset(fast_config):
    fetcher = FakeFetcher(
        {
            f"{BASE}/sitemap.xml": (200, URLSET, {"Content-Type": "application/xml"}),
            f"{BASE}/help/privacy-notice": policy_html(),
        }
    )
    result = await harvest_sitemap(fetcher, fast_config, BASE)

    assert result.privacy_policy_url == f"{BASE}/help/privacy-notice"
    assert result.method is DiscoveryMethod.SITEMAP
    assert result.crawled_pages == 1
    assert fetcher.gets == [f"{BASE}/sitemap.xml", f"{BASE}/help/privacy-notice"]


@pytest.mark.asyncio()
async def test_harvest_sitemap_follows_index_and_declared_location(fast_config):
    fetcher = FakeFetcher(
        {
            f"{BASE}/custom-map.xml": (200, INDEX, {"Content-Type": "application/xml"}),
            f"{BASE}/sitemap-pages.xml": (200, URLSET, {"Content-Type": "application/xml"}),
            f"{BASE}/help/privacy-notice": policy_html(),
        }
    )
    result = await harvest_sitemap(fetcher, fast_config, BASE, [f"{BASE}/custom-map.xml"])

    assert result.privacy_policy_url == f"{BASE}/help/privacy-notice"
    for location in SITEMAP_LOCATIONS:
        assert BASE + location in fetcher.gets
    # the pages sitemap is tried before the products one
    assert fetcher.gets.index(f"{BASE}/sitemap-pages.xml") < fetcher.gets.index(f"{BASE}/sitemap-products.xml")


@pytest.mark.asyncio()
async def test_harvest_sitemap_without_sitemaps(fast_config):
    fetcher = FakeFetcher({f"{BASE}/sitemap.xml": "<html><body>Soft 404</body></html>"})
    result = await harvest_sitemap(fetcher, fast_config, BASE)
    assert result.privacy_policy_url is None
    assert result.crawled_pages == 0
    assert any(s.reason is SkipReason.PARSE_ERROR for s in result.skipped)
