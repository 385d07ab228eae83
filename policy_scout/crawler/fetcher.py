# policy_scout/crawler/fetcher.py
"""
Fetcher module: HTTP requests with per-request headers and timeout, a redirect
cap, per-host politeness delay and retry/backoff on 5xx/429.

Every failure is turned into a skipped :class:`FetchOutcome`; nothing raises
out of :meth:`Fetcher.get` or :meth:`Fetcher.head`.
"""
from __future__ import annotations

import asyncio
import random
import socket
import time
from typing import Dict, Mapping, Optional, Sequence
from urllib.parse import urlparse

from aiohttp import (
    ClientConnectorError,
    ClientError,
    ClientSession,
    ClientTimeout,
    InvalidURL,
    TooManyRedirects,
)

from policy_scout.config import DiscoveryConfig
from policy_scout.logger import logger
from policy_scout.models import FetchOutcome, HttpResponse, SkipReason

__all__ = ("Fetcher", "classify_status")


def classify_status(status: int) -> Optional[SkipReason]:
    """Map an HTTP status to the skip reason it implies (None for 2xx)."""
    if 200 <= status < 300:
        return None
    if status in (404, 410):
        return SkipReason.NOT_FOUND
    if status in (401, 403):
        return SkipReason.FORBIDDEN
    if status == 429:
        return SkipReason.RATE_LIMITED
    if 500 <= status < 600:
        return SkipReason.SERVER_ERROR
    return SkipReason.HTTP_ERROR


class Fetcher:
    """Thin aiohttp wrapper shared by every discovery strategy and the scraper."""

    _RETRY_STATUS: Sequence[int] = tuple(range(500, 600)) + (429,)

    def __init__(self, config: DiscoveryConfig, session: Optional[ClientSession] = None) -> None:
        self.config = config
        self.session = session
        self._owns_session = session is None
        self._host_locks: Dict[str, asyncio.Lock] = {}
        self._last_request: Dict[str, float] = {}
        self._host_delays: Dict[str, float] = {}

    async def __aenter__(self) -> Fetcher:
        if self.session is None:
            self.session = ClientSession(
                timeout=ClientTimeout(total=self.config.page_timeout),
                headers={"User-Agent": self.config.user_agent},
                raise_for_status=False,
            )
            self._owns_session = True
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    async def get(
        self,
        url: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
        polite: bool = True,
    ) -> FetchOutcome:
        """GET *url*; success only for 2xx, with the decoded body."""
        return await self._request("GET", url, headers=headers, timeout=timeout, polite=polite)

    async def head(
        self,
        url: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
        polite: bool = True,
    ) -> FetchOutcome:
        """Existence check; servers refusing HEAD (405/501) get a GET instead."""
        outcome = await self._request(
            "HEAD", url, headers=headers, timeout=timeout or self.config.probe_timeout, polite=polite
        )
        if outcome.status in (405, 501):
            logger.debug("HEAD not supported by %s, retrying with GET", url)
            outcome = await self._request(
                "GET", url, headers=headers, timeout=timeout or self.config.probe_timeout, polite=polite
            )
        return outcome

    async def _request(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Mapping[str, str]],
        timeout: Optional[float],
        polite: bool,
    ) -> FetchOutcome:
        if not self.session:
            raise RuntimeError("Session not initialized")
        host = urlparse(url).netloc.lower()
        if not host:
            return FetchOutcome.skipped(url, SkipReason.INVALID_URL)

        attempts = 0
        client_timeout = ClientTimeout(total=timeout or self.config.page_timeout)
        while True:
            if polite:
                await self._wait_for_host(host)
            try:
                async with self.session.request(
                    method,
                    url,
                    headers=dict(headers) if headers else None,
                    timeout=client_timeout,
                    allow_redirects=True,
                    max_redirects=self.config.max_redirects,
                ) as resp:
                    status = resp.status
                    if status in self._RETRY_STATUS and attempts < self.config.retry_times:
                        raise ClientError(f"retryable status {status}")
                    text = "" if method == "HEAD" else await resp.text(errors="replace")
                    response = HttpResponse(
                        url=str(resp.url),
                        status=status,
                        headers={k: v for k, v in resp.headers.items()},
                        text=text,
                    )
            except asyncio.TimeoutError:
                # no retry on timeout
                logger.debug("%s %s timed out", method, url)
                return FetchOutcome.skipped(url, SkipReason.TIMEOUT, detail="timeout")
            except TooManyRedirects as exc:
                return FetchOutcome.skipped(url, SkipReason.HTTP_ERROR, detail=f"too many redirects: {exc}")
            except (InvalidURL, ValueError) as exc:
                return FetchOutcome.skipped(url, SkipReason.INVALID_URL, detail=str(exc))
            except ClientConnectorError as exc:
                logger.debug("%s %s failed to connect: %s", method, url, exc)
                if isinstance(exc.os_error, socket.gaierror):
                    return FetchOutcome.skipped(url, SkipReason.NOT_FOUND, detail=f"DNS lookup failed: {exc}")
                return FetchOutcome.skipped(url, SkipReason.NETWORK, detail=str(exc))
            except ClientError as exc:
                attempts += 1
                if attempts > self.config.retry_times:
                    logger.debug("%s %s failed: %s", method, url, exc)
                    return FetchOutcome.skipped(url, SkipReason.NETWORK, detail=str(exc))
                backoff = self._backoff(attempts)
                logger.debug("Retry %d/%d for %s after %.2f s", attempts, self.config.retry_times, url, backoff)
                await asyncio.sleep(backoff)
                continue

            reason = classify_status(response.status)
            if reason is not None:
                return FetchOutcome.skipped(
                    url, reason, status=response.status, detail=f"HTTP {response.status}", response=response
                )
            return FetchOutcome.success(url, response)

    @staticmethod
    def _backoff(attempts: int) -> float:
        """Exponential backoff with jitter, capped at 60 s."""
        return min(60, 2**attempts + random.random())

    def set_host_delay(self, url: str, seconds: float) -> None:
        """Raise the politeness delay for the host of *url* (robots.txt Crawl-delay)."""
        host = urlparse(url).netloc.lower()
        if host:
            self._host_delays[host] = seconds

    async def _wait_for_host(self, host: str) -> None:
        """Keep at least ``config.delay`` seconds (or the host's own delay) between two requests to one host."""
        interval = max(self.config.delay, self._host_delays.get(host, 0.0))
        if interval <= 0:
            return
        lock = self._host_locks.setdefault(host, asyncio.Lock())
        async with lock:
            last = self._last_request.get(host)
            if last is not None:
                wait = interval - (time.monotonic() - last)
                if wait > 0:
                    await asyncio.sleep(wait)
            self._last_request[host] = time.monotonic()
