# -*- coding: utf-8 -*-
# Time       : 2024/10/13 13:40
# Author     : QIN2DIM
# GitHub     : https://github.com/QIN2DIM
# Description: DOM access of the hCaptcha widget embedded in the Suno create page
from __future__ import annotations

import asyncio
import time
from abc import ABC, abstractmethod
from typing import Dict, Tuple

from loguru import logger as _logger
from playwright.async_api import Page, Request

from suno_captcha.agent.pointer import PointerActuator

Offset = Tuple[float, float]

CHALLENGE_FRAME = 'iframe[title*="hCaptcha"]'
CHALLENGE_CONTAINER = ".challenge-container"
PROMPT_TEXT = ".prompt-text"
SUBMIT_BUTTON = ".button-submit"
CREATE_BUTTON = 'button[aria-label="Create"]'


class ChallengeSurface(ABC):
    """What the challenge loop needs from the page, nothing more."""

    @abstractmethod
    async def wait_for_network_idle(self): ...

    @abstractmethod
    async def prompt_text(self) -> str: ...

    @abstractmethod
    async def screenshot(self) -> bytes: ...

    @abstractmethod
    async def container_box(self) -> Dict[str, float] | None: ...

    @abstractmethod
    async def click_in_container(self, offset: Offset): ...

    @abstractmethod
    async def drag(self, start: Offset, end: Offset): ...

    @abstractmethod
    async def submit(self): ...

    @abstractmethod
    async def submit_fallback(self): ...


class NetworkIdleWatcher:
    """Counts in-flight requests of a page and waits for a quiet interval."""

    def __init__(self, page: Page, *, poll_interval: float = 0.1):
        self.page = page
        self.poll_interval = poll_interval
        self.inflight = 0
        self.last_activity = time.monotonic()

        page.on("request", self._on_request)
        page.on("requestfinished", self._on_request_done)
        page.on("requestfailed", self._on_request_done)

    def _on_request(self, request: Request):
        self.inflight += 1
        self.last_activity = time.monotonic()

    def _on_request_done(self, request: Request):
        self.inflight = max(0, self.inflight - 1)
        self.last_activity = time.monotonic()

    def is_idle(self, idle_ms: int) -> bool:
        quiet_for = (time.monotonic() - self.last_activity) * 1000
        return self.inflight == 0 and quiet_for >= idle_ms

    async def wait(self, idle_ms: int = 500, timeout: float = 30) -> bool:
        """
        Returns: False when the timeout elapsed while requests were still in flight
        """
        deadline = time.monotonic() + timeout
        while not self.is_idle(idle_ms):
            if time.monotonic() >= deadline:
                return False
            await asyncio.sleep(self.poll_interval)
        return True


class HCaptchaSurface(ChallengeSurface):

    def __init__(
        self,
        page: Page,
        actuator: PointerActuator,
        *,
        idle_ms: int = 500,
        idle_timeout: float = 30,
        screenshot_timeout_ms: int = 5000,
        logger=None,
    ):
        self.page = page
        self.actuator = actuator
        self.idle_ms = idle_ms
        self.idle_timeout = idle_timeout
        self.screenshot_timeout_ms = screenshot_timeout_ms
        self.logger = logger or _logger

        self.network = NetworkIdleWatcher(page)

        self.frame = page.frame_locator(CHALLENGE_FRAME)
        self.challenge = self.frame.locator(CHALLENGE_CONTAINER)
        self.create_button = page.locator(CREATE_BUTTON).locator("div.flex")

    async def wait_for_network_idle(self):
        if not await self.network.wait(self.idle_ms, self.idle_timeout):
            self.logger.warning(
                f"Network did not settle within {self.idle_timeout}s - inflight={self.network.inflight}"
            )

    async def prompt_text(self) -> str:
        return await self.challenge.locator(PROMPT_TEXT).first.inner_text()

    async def screenshot(self) -> bytes:
        return await self.challenge.screenshot(timeout=self.screenshot_timeout_ms)

    async def container_box(self) -> Dict[str, float] | None:
        return await self.challenge.bounding_box()

    async def click_in_container(self, offset: Offset):
        await self.actuator.click(self.challenge, offset)

    async def drag(self, start: Offset, end: Offset):
        await self.actuator.drag(start, end)

    async def submit(self):
        await self.actuator.click(self.frame.locator(SUBMIT_BUTTON))

    async def submit_fallback(self):
        await self.actuator.click(self.create_button)
