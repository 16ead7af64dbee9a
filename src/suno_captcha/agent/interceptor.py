# -*- coding: utf-8 -*-
# Time       : 2024/10/13 16:47
# Author     : QIN2DIM
# GitHub     : https://github.com/QIN2DIM
# Description:
from __future__ import annotations

import asyncio
from typing import Callable

from loguru import logger as _logger
from playwright.async_api import Page, Route

from suno_captcha.agent.signal import CancellationSignal
from suno_captcha.models import CaptchaResult

GENERATE_URL_PATTERN = "**/api/generate/v2/**"


def extract_bearer(authorization: str | None) -> str | None:
    if not authorization:
        return None
    token = authorization.split("Bearer ").pop().strip()
    return token or None


class TokenInterceptor:
    """
    Catches the generation request fired once the challenge is passed.

    The request is aborted, it carries the hCaptcha token that the caller
    wants to spend elsewhere.
    """

    def __init__(
        self,
        signal: CancellationSignal,
        on_new_token: Callable[[str], None] | None = None,
        *,
        url_pattern: str = GENERATE_URL_PATTERN,
        logger=None,
    ):
        self.signal = signal
        self.on_new_token = on_new_token
        self.url_pattern = url_pattern
        self.logger = logger or _logger

        self._result: asyncio.Future[CaptchaResult] = asyncio.get_running_loop().create_future()
        self._claimed = False

    @property
    def matched(self) -> bool:
        return self._result.done()

    @property
    def claimed(self) -> bool:
        return self._claimed

    async def attach(self, page: Page):
        await page.route(self.url_pattern, self._handle)

    async def _handle(self, route: Route):
        # A second match arrives after the first already decided the run
        if self._claimed:
            await route.abort()
            return
        self._claimed = True

        # Decide the run before the first suspension point, a loop failure cannot overtake it
        try:
            self.logger.info("hCaptcha token received. Closing browser")
            request = route.request
            auth_token = extract_bearer(request.headers.get("authorization"))
            if auth_token and self.on_new_token:
                self.on_new_token(auth_token)

            token = request.post_data_json["token"]
            self._result.set_result(CaptchaResult(token=token, auth_token=auth_token))
        except Exception as err:
            self.logger.error(f"Failed to extract the captcha token - {err=}")
            self._result.set_exception(err)
        finally:
            self.signal.set("token intercepted")

        try:
            await route.abort()
        except Exception as err:
            self.logger.warning(f"Failed to abort the generation request - {err=}")

    async def wait(self) -> CaptchaResult:
        return await asyncio.shield(self._result)
