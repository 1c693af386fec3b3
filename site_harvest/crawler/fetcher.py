# site_harvest/crawler/fetcher.py
"""
Fetcher module: raw HTTP downloads (robots.txt, sitemaps, page assets)
with timeout and retry/backoff.
"""
from __future__ import annotations

import asyncio
from typing import Optional, Sequence

from aiohttp import ClientError, ClientSession, ClientTimeout

from site_harvest.config import HarvestConfig
from site_harvest.crawler.models import FetchResult
from site_harvest.logger import logger


class Fetcher:
    """Downloads URLs into :class:`FetchResult`; failures are returned, never raised."""

    RETRY_STATUS: Sequence[int] = tuple(range(500, 600)) + (429,)

    def __init__(
        self,
        config: HarvestConfig,
        session: Optional[ClientSession] = None,
        *,
        backoff: float = 1.0,
    ) -> None:
        self.config = config
        self.session = session
        self.backoff = backoff
        self._owns_session = session is None

    async def __aenter__(self) -> Fetcher:
        if self.session is None:
            self.session = ClientSession(
                timeout=ClientTimeout(total=self.config.fetch_timeout),
                headers={"User-Agent": self.config.user_agent},
                raise_for_status=False,
            )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()
            self.session = None

    async def fetch(self, url: str) -> FetchResult:
        """
        Download *url*.

        5xx/429 answers and transport errors are retried ``retry_times`` times
        with exponential backoff; a timeout ends the attempt immediately.
        """
        if not self.session:
            raise RuntimeError("Session not initialized")

        attempts = 0
        while True:
            try:
                async with self.session.get(url) as resp:
                    body = await resp.read()
                    result = FetchResult(
                        url=url,
                        status=resp.status,
                        content_type=resp.headers.get("Content-Type", "").split(";", 1)[0].strip().lower(),
                        body=body,
                    )
            except asyncio.TimeoutError:
                logger.warning("Timeout fetching %s", url)
                return FetchResult(url=url, status=0, error="timeout")
            except ClientError as exc:
                result = FetchResult(url=url, status=0, error=str(exc) or type(exc).__name__)

            retryable = result.status == 0 or result.status in self.RETRY_STATUS
            if not retryable:
                if not result.ok:
                    logger.debug("GET %s -> HTTP %s", url, result.status)
                return result
            if attempts >= self.config.retry_times:
                logger.warning("Failed %s: %s", url, result.error or f"HTTP {result.status}")
                return result

            attempts += 1
            # exponential backoff, cap at 60s
            delay = min(60.0, self.backoff * 2 ** (attempts - 1))
            logger.debug("Retry %d/%d for %s after %.2f s", attempts, self.config.retry_times, url, delay)
            await asyncio.sleep(delay)
