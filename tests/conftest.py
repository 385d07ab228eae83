# File: tests/conftest.py
from __future__ import annotations

from typing import Callable, Dict, List, Mapping, Optional, Tuple, Union

import pytest
import pytest_asyncio
from aiohttp import web

from policy_scout.config import DiscoveryConfig
from policy_scout.crawler.fetcher import classify_status
from policy_scout.models import FetchOutcome, HttpResponse, SkipReason

POLICY_BODY = """
<p>This Privacy Policy explains how Example Corp handles the personal information
of people who use our website and services.</p>
<p>Information we collect. We collect the details you give us when you create an
account, and we collect technical data such as your IP address and browser type.</p>
<p>Cookies. We use cookie files and similar tracking technologies to remember your
preferences and to run analytics on how the site is used.</p>
<p>Sharing. We do not sell your data. We share it with a third party only when it
processes data on our behalf or when the law requires it.</p>
<p>Your rights. Under the GDPR and the CCPA you may access, correct or delete your
personal data, and you may opt out of data collection for marketing.</p>
<p>Retention. We keep personal data only as long as needed for these purposes.</p>
"""


def policy_html(title: str = "Privacy Policy | Example Corp", extra: str = "") -> str:
    """A page that passes the policy validator."""
    return (
        f"<html><head><title>{title}</title></head><body>"
        f'<nav><a href="/">Home</a></nav>'
        f"<main><h1>Privacy Policy</h1>{POLICY_BODY}</main>"
        f"<footer>{extra}</footer></body></html>"
    )


def plain_html(body: str = "<p>Welcome to our shop.</p>", footer: str = "") -> str:
    return f"<html><head><title>Home</title></head><body>{body}<footer>{footer}</footer></body></html>"


PageSpec = Union[str, Tuple[int, str], Tuple[int, str, Mapping[str, str]]]


class FakeFetcher:
    """In-memory stand-in for :class:`policy_scout.crawler.fetcher.Fetcher`.

    *pages* maps URLs to a body (served as 200 text/html), to ``(status, body)``
    or to ``(status, body, headers)``; it may also be a callable returning one
    of those or None. Unknown URLs answer 404. Every call is logged.
    """

    def __init__(self, pages: Union[Mapping[str, PageSpec], Callable[[str], Optional[PageSpec]], None] = None):
        self.pages = pages if pages is not None else {}
        self.calls: List[Tuple[str, str, Dict[str, str]]] = []
        self.host_delays: Dict[str, float] = {}

    @property
    def gets(self) -> List[str]:
        return [url for method, url, _ in self.calls if method == "GET"]

    @property
    def heads(self) -> List[str]:
        return [url for method, url, _ in self.calls if method == "HEAD"]

    def _lookup(self, url: str) -> Optional[PageSpec]:
        if callable(self.pages):
            return self.pages(url)
        if url in self.pages:
            return self.pages[url]
        if url.endswith("/") and url.count("/") == 3:
            return self.pages.get(url[:-1])
        return None

    def _respond(self, method: str, url: str, headers: Optional[Mapping[str, str]]) -> FetchOutcome:
        self.calls.append((method, url, dict(headers or {})))
        entry = self._lookup(url)
        if entry is None:
            return FetchOutcome.skipped(url, SkipReason.NOT_FOUND, status=404, detail="HTTP 404")
        if isinstance(entry, str):
            status, body, resp_headers = 200, entry, {"Content-Type": "text/html; charset=utf-8"}
        elif len(entry) == 2:
            status, body = entry  # type: ignore[misc]
            resp_headers = {"Content-Type": "text/html; charset=utf-8"}
        else:
            status, body, resp_headers = entry  # type: ignore[misc]
        response = HttpResponse(url=url, status=status, headers=dict(resp_headers), text="" if method == "HEAD" else body)
        reason = classify_status(status)
        if reason is not None:
            return FetchOutcome.skipped(url, reason, status=status, detail=f"HTTP {status}", response=response)
        return FetchOutcome.success(url, response)

    async def get(self, url, *, headers=None, timeout=None, polite=True) -> FetchOutcome:
        return self._respond("GET", url, headers)

    async def head(self, url, *, headers=None, timeout=None, polite=True) -> FetchOutcome:
        return self._respond("HEAD", url, headers)

    def set_host_delay(self, url: str, seconds: float) -> None:
        self.host_delays[url] = seconds

    async def close(self) -> None:
        pass


@pytest.fixture()
def fast_config() -> DiscoveryConfig:
    """Defaults without politeness or batch pauses."""
    return DiscoveryConfig(delay=0, batch_delay=0, probe_timeout=2.0, page_timeout=2.0)


@pytest_asyncio.fixture
async def serve():
    """Start aiohttp applications on free local ports; returns their base URLs."""
    runners: List[web.AppRunner] = []

    async def _serve(app: web.Application) -> str:
        runner = web.AppRunner(app)
        await runner.setup()
        site = web.TCPSite(runner, "127.0.0.1", 0)
        await site.start()
        runners.append(runner)
        port = runner.addresses[0][1]
        return f"http://127.0.0.1:{port}"

    yield _serve
    for runner in runners:
        await runner.cleanup()
