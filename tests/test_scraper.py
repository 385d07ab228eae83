# File: tests/test_scraper.py
import pytest
from aiohttp import web

from policy_scout.config import DiscoveryConfig, RequestProfile
from policy_scout.errors import AccessDeniedError, PolicyNotFoundError, ScrapeError
from policy_scout.models import ScrapeStatus
from policy_scout.scraper import scrape

from conftest import FakeFetcher, plain_html, policy_html

URL = "https://example.com/privacy"

PROFILES = [
    RequestProfile(name="desktop", headers={"User-Agent": "Desktop/1.0"}),
    RequestProfile(name="mobile", headers={"User-Agent": "Mobile/1.0"}),
    RequestProfile(name="bot", headers={"User-Agent": "Bot/1.0"}),
]


class ProfileSite(FakeFetcher):
    """Answers by the User-Agent of the request."""

    def __init__(self, by_agent, default=None):
        self.by_agent = by_agent
        super().__init__(lambda url: self.by_agent.get(self._agent, default))
        self._agent = ""

    async def get(self, url, *, headers=None, timeout=None, polite=True):
        self._agent = (headers or {}).get("User-Agent", "")
        return await super().get(url, headers=headers, timeout=timeout, polite=polite)

    @property
    def agents(self):
        return [headers.get("User-Agent") for _, _, headers in self.calls]


@pytest.mark.asyncio()
async def test_first_profile_success(fast_config):
    fetcher = FakeFetcher({URL: (200, policy_html(), {"Content-Type": "text/html", "Last-Modified": "Mon, 02 Sep 2024"})})
    content = await scrape(URL, config=fast_config, profiles=PROFILES, fetcher=fetcher)

    assert content.status is ScrapeStatus.COMPLETE
    assert not content.partial
    assert content.title == "Privacy Policy"
    assert content.profile == "desktop"
    assert content.last_modified == "Mon, 02 Sep 2024"
    assert "third party" in content.text
    assert len(fetcher.calls) == 1


@pytest.mark.asyncio()
async def test_blocked_profile_falls_through(fast_config):
    fetcher = ProfileSite({"Desktop/1.0": (403, "blocked"), "Mobile/1.0": policy_html()})
    content = await scrape(URL, config=fast_config, profiles=PROFILES, fetcher=fetcher)

    assert content.profile == "mobile"
    assert fetcher.agents == ["Desktop/1.0", "Mobile/1.0"]


@pytest.mark.asyncio()
async def test_partial_content(fast_config):
    short = plain_html("<main>" + "<p>We describe how this shop treats the orders you place with us.</p>" * 3 + "</main>")
    fetcher = ProfileSite({"Desktop/1.0": (403, "blocked")}, default=short)
    content = await scrape(URL, config=fast_config, profiles=PROFILES, fetcher=fetcher)

    assert content.status is ScrapeStatus.PARTIAL
    assert content.partial
    assert content.profile == "mobile"
    assert len(fetcher.calls) == 3

    with pytest.raises(ScrapeError) as excinfo:
        await scrape(URL, config=fast_config, profiles=PROFILES, fetcher=ProfileSite({}, default=short), allow_partial=False)
    assert not isinstance(excinfo.value, (AccessDeniedError, PolicyNotFoundError))


@pytest.mark.asyncio()
async def test_access_denied_everywhere(fast_config):
    fetcher = FakeFetcher({URL: (403, "Forbidden")})
    with pytest.raises(AccessDeniedError) as excinfo:
        await scrape(URL, config=fast_config, profiles=PROFILES, fetcher=fetcher)

    assert excinfo.value.status == 403
    assert excinfo.value.url == URL
    assert "manually" in str(excinfo.value)
    assert len(fetcher.calls) == len(PROFILES)


@pytest.mark.asyncio()
async def test_block_page_on_last_profile_keeps_access_denied(fast_config):
    fetcher = ProfileSite(
        {"Desktop/1.0": (403, "Forbidden"), "Mobile/1.0": (404, "gone")},
        default=plain_html("<p>Blocked</p>"),
    )
    with pytest.raises(AccessDeniedError) as excinfo:
        await scrape(URL, config=fast_config, profiles=PROFILES, fetcher=fetcher, allow_partial=False)
    assert excinfo.value.status == 403
    assert fetcher.agents == ["Desktop/1.0", "Mobile/1.0", "Bot/1.0"]


@pytest.mark.asyncio()
async def test_not_found_wins_over_validation_miss(fast_config):
    fetcher = ProfileSite({"Desktop/1.0": (404, "gone")}, default=plain_html("<p>Blocked</p>"))
    with pytest.raises(PolicyNotFoundError):
        await scrape(URL, config=fast_config, profiles=PROFILES, fetcher=fetcher)


@pytest.mark.asyncio()
async def test_not_found_tries_every_profile_by_default(fast_config):
    fetcher = FakeFetcher()
    with pytest.raises(PolicyNotFoundError) as excinfo:
        await scrape(URL, config=fast_config, profiles=PROFILES, fetcher=fetcher)
    assert excinfo.value.status == 404
    assert len(fetcher.calls) == len(PROFILES)


@pytest.mark.asyncio()
async def test_not_found_short_circuit(fast_config):
    config = fast_config.model_copy(update={"stop_on_not_found": True})
    fetcher = FakeFetcher()
    with pytest.raises(PolicyNotFoundError):
        await scrape(URL, config=config, profiles=PROFILES, fetcher=fetcher)
    assert len(fetcher.calls) == 1


@pytest.mark.asyncio()
async def test_default_profile_chain_over_http(serve):
    agents = []

    async def picky(request):
        agent = request.headers.get("User-Agent", "")
        agents.append(agent)
        if "Googlebot" not in agent:
            raise web.HTTPForbidden()
        return web.Response(text=policy_html(), content_type="text/html")

    app = web.Application()
    app.router.add_get("/privacy", picky)
    base = await serve(app)

    config = DiscoveryConfig(delay=0)
    content = await scrape(f"{base}/privacy", config=config)

    assert content.profile == "search-bot"
    assert len(agents) == len(config.request_profiles) == 4
