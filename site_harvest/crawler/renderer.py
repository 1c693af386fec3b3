"""
Page rendering back-ends.

A renderer is an async context manager acquired once per crawl run. Inside it,
:meth:`navigate` opens one page and returns a :class:`RenderedPage` whose
accessors expose the DOM after navigation. Every page must be closed by the
caller. Navigation and extraction problems surface as
:class:`~site_harvest.exceptions.RenderError`.

* :class:`BrowserRenderer` drives headless Chromium through Playwright.
* :class:`StaticRenderer` downloads markup with aiohttp and parses it with
  BeautifulSoup; no JavaScript is executed.
"""
from __future__ import annotations

import asyncio
from typing import Any, List, Optional, Protocol

from aiohttp import ClientError, ClientSession, ClientTimeout
from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from site_harvest.config import HarvestConfig
from site_harvest.crawler.models import Anchor, ImageCandidate, NavigationResult
from site_harvest.exceptions import RenderError
from site_harvest.logger import logger
from site_harvest.parser.html_parser import HIDDEN_ELEMENTS, ParsedPage, parse_html

__all__ = ("RenderedPage", "Renderer", "BrowserRenderer", "StaticRenderer", "create_renderer")


class RenderedPage(Protocol):
    navigation: NavigationResult

    async def title(self) -> str: ...

    async def visible_text(self) -> str: ...

    async def anchors(self) -> List[Anchor]: ...

    async def anchor_hrefs(self) -> List[str]: ...

    async def image_candidates(self) -> List[ImageCandidate]: ...

    async def close(self) -> None: ...


class Renderer(Protocol):
    async def __aenter__(self) -> Renderer: ...

    async def __aexit__(self, exc_type, exc, tb) -> None: ...

    async def navigate(self, url: str) -> RenderedPage: ...


# --------------------------------------------------------------------------- #
#                                  Browser                                    #
# --------------------------------------------------------------------------- #

_TEXT_JS = """(selector) => {
    if (!document.body) return '';
    document.querySelectorAll(selector).forEach(el => el.remove());
    return document.body.innerText || '';
}"""

_ANCHORS_JS = """() => Array.from(document.querySelectorAll('a[href]'))
    .map(a => ({href: a.href, text: (a.innerText || a.textContent || '').trim()}))
    .filter(a => a.href.startsWith('http'))"""

_IMAGES_JS = """() => Array.from(document.querySelectorAll('img'))
    .map(img => ({
        src: img.currentSrc || img.src,
        width: img.naturalWidth || img.width || null,
        height: img.naturalHeight || img.height || null,
    }))
    .filter(img => img.src && img.src.startsWith('http'))"""


class BrowserPage:
    """One Playwright tab after navigation."""

    def __init__(self, page: Page, navigation: NavigationResult) -> None:
        self._page = page
        self.navigation = navigation

    async def _evaluate(self, script: str, arg: Any = None) -> Any:
        try:
            return await self._page.evaluate(script, arg)
        except PlaywrightError as exc:
            raise RenderError(f"DOM extraction failed on {self.navigation.final_url}: {exc}", cause=exc) from exc

    async def title(self) -> str:
        try:
            return await self._page.title()
        except PlaywrightError as exc:
            raise RenderError(f"Cannot read title of {self.navigation.final_url}: {exc}", cause=exc) from exc

    async def visible_text(self) -> str:
        # removes hidden elements from the live DOM, so read anchors first
        return await self._evaluate(_TEXT_JS, ", ".join(HIDDEN_ELEMENTS))

    async def anchors(self) -> List[Anchor]:
        return [Anchor(href=item["href"], text=item.get("text") or "") for item in await self._evaluate(_ANCHORS_JS)]

    async def anchor_hrefs(self) -> List[str]:
        return [a.href for a in await self.anchors()]

    async def image_candidates(self) -> List[ImageCandidate]:
        return [
            ImageCandidate(src=item["src"], width=item.get("width"), height=item.get("height"))
            for item in await self._evaluate(_IMAGES_JS)
        ]

    async def close(self) -> None:
        try:
            await self._page.close()
        except PlaywrightError as exc:
            logger.debug("Error closing page %s: %s", self.navigation.final_url, exc)


class BrowserRenderer:
    """Headless Chromium; one browser context shared by every page of a run."""

    def __init__(self, config: HarvestConfig) -> None:
        self.config = config
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None

    async def __aenter__(self) -> BrowserRenderer:
        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(headless=self.config.headless)
            self._context = await self._browser.new_context(user_agent=self.config.user_agent)
        except BaseException:
            await self._shutdown()
            raise
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self._shutdown()

    async def _shutdown(self) -> None:
        if self._context is not None:
            await self._context.close()
            self._context = None
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def navigate(self, url: str) -> BrowserPage:
        if self._context is None:
            raise RuntimeError("Browser not started")
        try:
            page = await self._context.new_page()
        except PlaywrightError as exc:
            raise RenderError(f"Cannot open a page for {url}: {exc}", cause=exc) from exc
        try:
            response = await page.goto(
                url,
                wait_until="domcontentloaded",
                timeout=self.config.navigation_timeout * 1000,
            )
        except PlaywrightError as exc:
            await BrowserPage(page, NavigationResult(final_url=url, status=0)).close()
            raise RenderError(f"Navigation to {url} failed: {exc}", cause=exc) from exc
        status = response.status if response is not None else 0
        return BrowserPage(page, NavigationResult(final_url=page.url, status=status))


# --------------------------------------------------------------------------- #
#                                   Static                                    #
# --------------------------------------------------------------------------- #


class StaticPage:
    """Server-side markup parsed with BeautifulSoup."""

    def __init__(self, parsed: ParsedPage, navigation: NavigationResult) -> None:
        self._parsed = parsed
        self.navigation = navigation

    async def title(self) -> str:
        return self._parsed.title

    async def visible_text(self) -> str:
        return self._parsed.text

    async def anchors(self) -> List[Anchor]:
        return list(self._parsed.anchors)

    async def anchor_hrefs(self) -> List[str]:
        return self._parsed.links

    async def image_candidates(self) -> List[ImageCandidate]:
        return list(self._parsed.images)

    async def close(self) -> None:
        return None


class StaticRenderer:
    """Plain HTTP rendering for sites that do not need JavaScript."""

    def __init__(self, config: HarvestConfig, session: Optional[ClientSession] = None) -> None:
        self.config = config
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self) -> StaticRenderer:
        if self.session is None:
            self.session = ClientSession(
                timeout=ClientTimeout(total=self.config.navigation_timeout),
                headers={"User-Agent": self.config.user_agent},
                raise_for_status=False,
            )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()
            self.session = None

    async def navigate(self, url: str) -> StaticPage:
        if not self.session:
            raise RuntimeError("Session not initialized")
        try:
            async with self.session.get(url) as resp:
                html = await resp.text(errors="replace")
                navigation = NavigationResult(final_url=str(resp.url), status=resp.status)
        except asyncio.TimeoutError as exc:
            raise RenderError(f"Timeout loading {url}", cause=exc) from exc
        except ClientError as exc:
            raise RenderError(f"Navigation to {url} failed: {exc}", cause=exc) from exc
        return StaticPage(parse_html(html, navigation.final_url), navigation)


def create_renderer(config: HarvestConfig) -> Renderer:
    """Builds the renderer selected by ``config.renderer``."""
    if config.renderer == "static":
        return StaticRenderer(config)
    return BrowserRenderer(config)
