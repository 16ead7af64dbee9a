# -*- coding: utf-8 -*-
# Time       : 2024/10/13 15:18
# Author     : QIN2DIM
# GitHub     : https://github.com/QIN2DIM
# Description:
from __future__ import annotations

from typing import Awaitable, TypeVar

from loguru import logger as _logger

from suno_captcha.agent.signal import CancellationSignal
from suno_captcha.agent.surface import ChallengeSurface
from suno_captcha.exceptions import ChallengeContainerLost, is_graceful_cancellation
from suno_captcha.models import Challenge, ChallengeKind, LoopState, Solution
from suno_captcha.tools.solution_requester import SolutionRequester

T = TypeVar("T")


class ChallengeLoop:
    """
    Solves challenge rounds until the cancellation signal fires.

    Each round: wait for the view to settle, classify the prompt, request a
    solution, replay it, submit. The loop never ends on its own accord, the
    token interceptor (or a fatal error) ends it.
    """

    def __init__(
        self,
        surface: ChallengeSurface,
        requester: SolutionRequester,
        signal: CancellationSignal,
        *,
        logger=None,
    ):
        self.surface = surface
        self.requester = requester
        self.signal = signal
        self.logger = logger or _logger

        self.state = LoopState.IDLE
        self.rounds = 0

    def _transition(self, state: LoopState):
        self.state = state
        self.logger.trace(f"ChallengeLoop -> {state.value}")

    async def _suspend(self, aw: Awaitable[T]) -> T:
        return await self.signal.race(aw)

    async def run(self) -> LoopState:
        """
        Returns: LoopState.CANCELLED on a clean end

        Raises:
            Any error that is not a cancellation, after setting the signal
        """
        try:
            while True:
                await self._round()
        except Exception as err:
            if self.signal.is_set() or is_graceful_cancellation(err):
                self._transition(LoopState.CANCELLED)
                self.logger.debug(f"Challenge loop stopped - reason={self.signal.reason or err}")
                return self.state

            self._transition(LoopState.FAILED)
            self.signal.set(f"fatal: {err}")
            self.logger.error(f"ChallengeException - rounds={self.rounds} {err=}")
            raise

    async def _round(self):
        self._transition(LoopState.WAITING)
        await self._suspend(self.surface.wait_for_network_idle())

        self._transition(LoopState.DETECTING)
        prompt = await self._suspend(self.surface.prompt_text())
        kind = ChallengeKind.from_prompt(prompt)
        self.logger.debug(f"Start Challenge - kind={kind.value} prompt={prompt!r}")

        solution = await self._solve(kind, prompt)

        self._transition(LoopState.ACTING)
        if kind == ChallengeKind.DRAG:
            await self._act_drag(solution)
        else:
            await self._act_selection(solution)

        self._transition(LoopState.SUBMITTING)
        await self._submit()
        self.rounds += 1

    async def _solve(self, kind: ChallengeKind, prompt: str) -> Solution:
        while True:
            self._transition(LoopState.SOLVING)
            snapshot = await self._suspend(self.surface.screenshot())
            challenge = Challenge(kind=kind, prompt=prompt, snapshot=snapshot)
            solution = await self._suspend(self.requester.solve(challenge))

            if kind == ChallengeKind.DRAG and not solution.is_even:
                self.logger.info(
                    "Solution does not have even amount of points required for dragging. "
                    "Requesting new solution..."
                )
                self.signal.raise_if_set()
                self.requester.report_bad(solution.solution_id)
                continue

            return solution

    async def _act_drag(self, solution: Solution):
        paths = solution.as_paths()

        # The box is read after the solve, the container may be gone by now
        box = await self._suspend(self.surface.container_box())
        if box is None:
            raise ChallengeContainerLost(".challenge-container boundingBox is null!")

        for start, end in paths:
            await self._suspend(
                self.surface.drag(start.shift(box["x"], box["y"]), end.shift(box["x"], box["y"]))
            )

    async def _act_selection(self, solution: Solution):
        for point in solution.points:
            await self._suspend(self.surface.click_in_container((point.x, point.y)))

    async def _submit(self):
        try:
            await self._suspend(self.surface.submit())
        except Exception as err:
            if "viewport" not in f"{err}":
                raise
            self.logger.debug(f"Submit button outside of viewport, using the Create button - {err=}")
            await self._suspend(self.surface.submit_fallback())
