from __future__ import annotations

import asyncio
import base64
from pathlib import Path
from typing import Any, Dict, Protocol, Set

from loguru import logger as _logger
from tenacity import AsyncRetrying, stop_after_attempt, wait_fixed

from suno_captcha.models import Challenge, ChallengeKind, Solution

DRAG_TEXT_INSTRUCTIONS = (
    "CLICK on the shapes at their edge or center as shown above—please be precise!"
)


class CoordinatesService(Protocol):
    async def coordinates(self, payload: Dict[str, Any]) -> Solution: ...

    async def report_bad(self, task_id: str) -> Any: ...

    async def aclose(self): ...


class SolutionRequester:

    def __init__(
        self,
        service: CoordinatesService,
        *,
        locale: str | None = None,
        max_attempts: int = 3,
        retry_wait: float = 0,
        drag_instructions_image: Path | None = None,
        logger=None,
    ):
        self.service = service
        self.locale = locale
        self.max_attempts = max_attempts
        self.retry_wait = retry_wait
        self.drag_instructions_image = drag_instructions_image
        self.logger = logger or _logger

        self._image_instructions: str | None = None
        self._pending_reports: Set[asyncio.Task] = set()

    def _load_image_instructions(self) -> str | None:
        if self._image_instructions is not None:
            return self._image_instructions

        path = self.drag_instructions_image
        if not path or not Path(path).is_file():
            self.logger.warning(f"Drag instruction image not found - {path=}")
            return None

        self._image_instructions = base64.b64encode(Path(path).read_bytes()).decode()
        return self._image_instructions

    def build_payload(self, challenge: Challenge) -> Dict[str, Any]:
        payload = {"body": base64.b64encode(challenge.snapshot).decode(), "lang": self.locale}
        if challenge.kind == ChallengeKind.DRAG:
            payload["textinstructions"] = DRAG_TEXT_INSTRUCTIONS
            payload["imginstructions"] = self._load_image_instructions()
        return payload

    def _before_sleep(self, retry_state):
        self.logger.info(f"{retry_state.outcome.exception()}")
        self.logger.info(f"Retrying... ({retry_state.attempt_number}/{self.max_attempts})")

    async def solve(self, challenge: Challenge) -> Solution:
        """
        Send the challenge to the solving service.

        Failed calls are retried up to `max_attempts` in total, the last failure
        propagates unchanged.
        """
        payload = self.build_payload(challenge)

        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_fixed(self.retry_wait),
            before_sleep=self._before_sleep,
            reraise=True,
        ):
            with attempt:
                self.logger.info("Sending the CAPTCHA to 2Captcha")
                solution = await self.service.coordinates(payload)
        self.logger.debug(f"Solution received - {solution.log_message}")
        return solution

    def report_bad(self, solution_id: str) -> asyncio.Task:
        """Tell the service to discount a solution without blocking the caller."""
        task = asyncio.create_task(self._report_bad(solution_id))
        self._pending_reports.add(task)
        task.add_done_callback(self._pending_reports.discard)
        return task

    async def _report_bad(self, solution_id: str):
        try:
            await self.service.report_bad(solution_id)
            self.logger.debug(f"Reported bad solution - {solution_id=}")
        except Exception as err:
            self.logger.warning(f"Failed to report bad solution - {solution_id=} {err=}")

    async def aclose(self):
        if self._pending_reports:
            await asyncio.gather(*self._pending_reports, return_exceptions=True)
        await self.service.aclose()
