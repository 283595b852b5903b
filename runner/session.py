"""Browser sessions backed by Playwright."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from functools import partial
from typing import AsyncIterator

from playwright.async_api import ConsoleMessage, Page, async_playwright

from .config import RunConfig
from .orchestrator import SessionFactory

log = logging.getLogger(__name__)


def _forward_console(message: ConsoleMessage) -> None:
    log.debug("PAGE console.%s: %s", message.type, message.text)


@asynccontextmanager
async def playwright_session(config: RunConfig) -> AsyncIterator[Page]:
    """Launch a fresh browser, yield its page and always close it."""

    async with async_playwright() as pw:
        browser_type = getattr(pw, config.browser)
        browser = await browser_type.launch(headless=config.headless)
        try:
            page = await browser.new_page()
            page.set_default_timeout(config.wait_timeout_ms)
            page.set_default_navigation_timeout(config.navigation_timeout_ms)
            if config.verbose:
                page.on("console", _forward_console)
            log.debug("Launched %s (headless=%s)", config.browser, config.headless)
            yield page
        finally:
            await browser.close()


def session_factory(config: RunConfig) -> SessionFactory:
    return partial(playwright_session, config)
