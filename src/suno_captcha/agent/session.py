# -*- coding: utf-8 -*-
# Time       : 2024/10/12 16:10
# Author     : QIN2DIM
# GitHub     : https://github.com/QIN2DIM
# Description:
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from loguru import logger as _logger
from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

from suno_captcha.agent.config import AgentConfig
from suno_captcha.models import Identity

LAUNCH_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--disable-web-security",
    "--no-sandbox",
    "--disable-dev-shm-usage",
    "--disable-features=site-per-process",
    "--disable-features=IsolateOrigins",
    "--disable-extensions",
    "--disable-infobars",
]

DISABLE_GPU_ARGS = ["--enable-unsafe-swiftshader", "--disable-gpu", "--disable-setuid-sandbox"]


def build_launch_args(config: AgentConfig) -> List[str]:
    args = list(LAUNCH_ARGS)
    if config.BROWSER_DISABLE_GPU:
        args.extend(DISABLE_GPU_ARGS)
    return args


@dataclass
class Session:
    playwright: Playwright | None
    browser: Browser | None
    context: BrowserContext
    page: Page
    logger: object = field(default=_logger, repr=False)

    closed: bool = False

    async def close(self):
        """Idempotent, safe to call from every exit path."""
        if self.closed:
            return
        self.closed = True

        try:
            if self.browser:
                await self.browser.close()
            else:
                await self.context.close()
        except Exception as err:
            self.logger.warning(f"Failed to close browser - {err=}")

        if self.playwright:
            try:
                await self.playwright.stop()
            except Exception as err:
                self.logger.warning(f"Failed to stop playwright - {err=}")
        self.logger.debug("Browser session closed")


class SessionManager:

    def __init__(self, config: AgentConfig, *, logger=None):
        self.config = config
        self.logger = logger or _logger

    async def open(self, identity: Identity) -> Session:
        """
        Launch the browser, create a context bound to the identity and open a page.

        Launch failure is fatal, it propagates after the partial resources are released.
        """
        playwright = await async_playwright().start()
        browser = None
        try:
            browser_type = getattr(playwright, self.config.BROWSER)
            browser = await browser_type.launch(
                args=build_launch_args(self.config), headless=self.config.BROWSER_HEADLESS
            )
            context = await browser.new_context(
                user_agent=identity.user_agent,
                locale=identity.locale or self.config.BROWSER_LOCALE,
                no_viewport=True,
            )
            await context.add_cookies(identity.to_browser_cookies())
            page = await context.new_page()
        except Exception:
            if browser:
                await browser.close()
            await playwright.stop()
            raise

        self.logger.debug(f"Browser session opened - browser={self.config.BROWSER}")
        return Session(
            playwright=playwright, browser=browser, context=context, page=page, logger=self.logger
        )
