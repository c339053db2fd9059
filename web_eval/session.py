"""Playwright browser lifecycle for evaluation runs."""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence

try:
    from playwright.async_api import async_playwright
except Exception:
    async_playwright = None  # type: ignore

_logger = logging.getLogger(__name__)

DEFAULT_LAUNCH_ARGS = (
    "--no-sandbox",
    "--disable-dev-shm-usage",
)


class ManagedBrowser:
    """A launched browser plus the Playwright driver that owns it."""

    def __init__(self, playwright: Any, browser: Any, logger: Any = None):
        self.playwright = playwright
        self.browser = browser
        self.logger = logger or _logger
        self._closed = False

    async def new_page(self, **options: Any) -> Any:
        """Open a page in a fresh context; ``options`` go to ``Browser.new_page``."""
        return await self.browser.new_page(**options)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self.browser.close()
        finally:
            try:
                await self.playwright.stop()
            except Exception as e:
                self.logger.debug("playwright stop failed: %s", e)


class BrowserSessionManager:
    """Launch (or attach to) a Chromium browser for one run."""

    def __init__(
        self,
        *,
        headless: bool = True,
        cdp_endpoint: Optional[str] = None,
        launch_args: Optional[Sequence[str]] = None,
        logger: Any = None,
    ):
        self.headless = bool(headless)
        self.cdp_endpoint = str(cdp_endpoint or "").strip() or None
        self.launch_args: List[str] = list(launch_args or DEFAULT_LAUNCH_ARGS)
        self.logger = logger or _logger

    async def launch(self) -> ManagedBrowser:
        if async_playwright is None:
            raise ImportError(
                "Playwright is not available. Install with: pip install playwright "
                "and install browser binaries."
            )

        pw = await async_playwright().start()
        try:
            if self.cdp_endpoint:
                self.logger.debug("attaching to remote browser at %s", self.cdp_endpoint)
                browser = await pw.chromium.connect_over_cdp(self.cdp_endpoint)
            else:
                browser = await pw.chromium.launch(
                    headless=self.headless,
                    args=self.launch_args,
                )
        except Exception:
            try:
                await pw.stop()
            except Exception as e:
                self.logger.debug("playwright stop after failed launch: %s", e)
            raise
        return ManagedBrowser(pw, browser, logger=self.logger)
