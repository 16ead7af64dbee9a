# -*- coding: utf-8 -*-
# Time       : 2024/10/14 9:52
# Author     : QIN2DIM
# GitHub     : https://github.com/QIN2DIM
# Description:
from __future__ import annotations

import asyncio
from contextlib import suppress
from typing import Callable

from playwright.async_api import Page, TimeoutError

from suno_captcha.agent.challenger import ChallengeLoop
from suno_captcha.agent.config import AgentConfig
from suno_captcha.agent.interceptor import TokenInterceptor
from suno_captcha.agent.pointer import PointerActuator
from suno_captcha.agent.session import Session, SessionManager
from suno_captcha.agent.signal import CancellationSignal
from suno_captcha.agent.surface import HCaptchaSurface
from suno_captcha.exceptions import TokenNotCaptured
from suno_captcha.models import CaptchaResult, Identity
from suno_captcha.tools.solution_requester import SolutionRequester
from suno_captcha.tools.twocaptcha import TwoCaptchaClient
from suno_captcha.utils import run_logger

SUNO_CREATE_URL = "https://suno.com/create"
PROJECT_RESPONSE_PATTERN = r"**/api/project/**\?**"


async def race_for_token(
    loop: ChallengeLoop, interceptor: TokenInterceptor, signal: CancellationSignal
) -> CaptchaResult:
    """
    Run the challenge loop against the token interceptor and join both.

    A captured token always wins, even when the loop failed after the match.
    """
    loop_task = asyncio.create_task(loop.run(), name="challenge-loop")
    token_task = asyncio.create_task(interceptor.wait(), name="token-interceptor")
    try:
        await asyncio.wait({loop_task, token_task}, return_when=asyncio.FIRST_COMPLETED)

        # A claimed route resolves the token without suspending, it outranks the loop outcome
        if interceptor.matched or interceptor.claimed:
            return await token_task

        # The loop is done and nothing was intercepted
        loop_task.result()
        raise TokenNotCaptured("Challenge loop stopped before the captcha token was intercepted")
    finally:
        signal.set("run finished")
        for task in (loop_task, token_task):
            if not task.done():
                task.cancel()
        await asyncio.gather(loop_task, token_task, return_exceptions=True)


class CaptchaHarvester:

    def __init__(
        self,
        config: AgentConfig,
        *,
        session_manager: SessionManager | None = None,
        logger=None,
    ):
        self.config = config
        self.logger = logger or run_logger()
        self.session_manager = session_manager or SessionManager(config, logger=self.logger)

    def create_requester(self, identity: Identity) -> SolutionRequester:
        client = TwoCaptchaClient(
            self.config.TWOCAPTCHA_KEY.get_secret_value(),
            self.config.TWOCAPTCHA_BASE_URL,
            polling_interval=self.config.POLLING_INTERVAL,
            solve_timeout=self.config.SOLVE_TIMEOUT,
        )
        return SolutionRequester(
            client,
            locale=identity.locale or self.config.BROWSER_LOCALE,
            max_attempts=self.config.SOLVE_ATTEMPTS,
            retry_wait=self.config.SOLVE_RETRY_WAIT,
            drag_instructions_image=self.config.drag_instructions_image,
            logger=self.logger,
        )

    def create_surface(self, page: Page) -> HCaptchaSurface:
        actuator = PointerActuator(
            page,
            humanize=self.config.BROWSER_GHOST_CURSOR,
            drag_hold_seconds=self.config.DRAG_HOLD_SECONDS,
            drag_steps=self.config.DRAG_STEPS,
        )
        return HCaptchaSurface(
            page,
            actuator,
            idle_ms=self.config.NETWORK_IDLE_MS,
            idle_timeout=self.config.NETWORK_IDLE_TIMEOUT,
            screenshot_timeout_ms=self.config.SCREENSHOT_TIMEOUT_MS,
            logger=self.logger,
        )

    async def trigger_challenge(self, page: Page, surface: HCaptchaSurface):
        """Start a generation on the create page, which makes the widget pop up."""
        await page.goto(
            SUNO_CREATE_URL,
            referer="https://www.google.com/",
            wait_until="domcontentloaded",
            timeout=0,
        )

        self.logger.info("Waiting for Suno interface to load")
        await page.wait_for_response(
            PROJECT_RESPONSE_PATTERN, timeout=self.config.BOOTSTRAP_TIMEOUT_MS
        )

        self.logger.info("Triggering the CAPTCHA")
        with suppress(TimeoutError):
            await page.get_by_label("Close").click(timeout=2000)

        textarea = page.locator(".custom-textarea")
        await surface.actuator.click(textarea)
        await textarea.press_sequentially("Lorem ipsum", delay=80)

        await surface.submit_fallback()

    async def harvest(
        self,
        session: Session,
        requester: SolutionRequester,
        on_new_token: Callable[[str], None] | None = None,
    ) -> CaptchaResult:
        signal = CancellationSignal()

        # Routes must be in place before the page can fire the generation request
        interceptor = TokenInterceptor(signal, on_new_token, logger=self.logger)
        await interceptor.attach(session.page)

        surface = self.create_surface(session.page)
        await self.trigger_challenge(session.page, surface)

        loop = ChallengeLoop(surface, requester, signal, logger=self.logger)
        return await race_for_token(loop, interceptor, signal)

    async def get_captcha_token(
        self, identity: Identity, on_new_token: Callable[[str], None] | None = None
    ) -> str:
        """
        Solve the hCaptcha gate of the create page and return its token.

        Args:
            identity: user agent, session token and cookies of the Suno account
            on_new_token: called with the refreshed bearer credential, if the request carried one

        Returns: hCaptcha token taken from the aborted generation request
        """
        self.logger.info("CAPTCHA required. Launching browser...")
        session = await self.session_manager.open(identity)
        requester = self.create_requester(identity)
        try:
            result = await self.harvest(session, requester, on_new_token)
            self.logger.success("Captcha token harvested")
            return result.token
        finally:
            try:
                await requester.aclose()
            finally:
                await session.close()


async def get_captcha_token(
    identity: Identity,
    on_new_token: Callable[[str], None] | None = None,
    config: AgentConfig | None = None,
    *,
    logger=None,
) -> str:
    harvester = CaptchaHarvester(config or AgentConfig(), logger=logger)
    return await harvester.get_captcha_token(identity, on_new_token)
