"""Shared test fixtures."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, List
from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import Locator, Page

from suno_captcha.agent.surface import ChallengeSurface
from suno_captcha.models import PointCoordinate, Solution

DRAG_PROMPT = "Please drag the puzzle piece"
SELECTION_PROMPT = "Select all images with X"
CLOSED_MESSAGE = "Target page, context or browser has been closed"


def make_solution(solution_id: str, *points) -> Solution:
    return Solution(
        solution_id=solution_id, points=[PointCoordinate(x=x, y=y) for x, y in points]
    )


class FakeSurface(ChallengeSurface):
    """Records every pointer action, submit errors are replayed in order."""

    def __init__(
        self,
        prompt: str = SELECTION_PROMPT,
        box: Dict[str, float] | None = None,
        submit_errors: List[Exception] | None = None,
        after_submit: Callable[[], Awaitable[Any] | None] | None = None,
    ):
        self.prompt = prompt
        self.box = box if box is not None else {"x": 100, "y": 200, "width": 400, "height": 600}
        self.submit_errors = list(submit_errors or [])
        self.after_submit = after_submit

        self.actions: List[tuple] = []
        self.waits = 0
        self.screenshots = 0
        self.prompt_error: Exception | None = None

    async def _submitted(self):
        if self.after_submit:
            result = self.after_submit()
            if result is not None:
                await result

    async def wait_for_network_idle(self):
        self.waits += 1

    async def prompt_text(self) -> str:
        if self.prompt_error:
            raise self.prompt_error
        return self.prompt

    async def screenshot(self) -> bytes:
        self.screenshots += 1
        return b"fake_png_data"

    async def container_box(self):
        return self.box

    async def click_in_container(self, offset):
        self.actions.append(("click", offset))

    async def drag(self, start, end):
        self.actions.append(("drag", start, end))

    async def submit(self):
        if self.submit_errors:
            raise self.submit_errors.pop(0)
        self.actions.append(("submit",))
        await self._submitted()

    async def submit_fallback(self):
        self.actions.append(("submit_fallback",))
        await self._submitted()

    @property
    def pointer_actions(self) -> List[tuple]:
        return [a for a in self.actions if a[0] in ("click", "drag")]


class FakeService:
    """Solving service double, `responses` holds Solutions or exceptions to raise."""

    def __init__(self, responses: List[Solution | Exception] | None = None):
        self.responses = list(responses or [])
        self.payloads: List[dict] = []
        self.reported: List[str] = []
        self.closed = False

    @property
    def calls(self) -> int:
        return len(self.payloads)

    async def coordinates(self, payload: Dict[str, Any]) -> Solution:
        self.payloads.append(payload)
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    async def report_bad(self, task_id: str):
        self.reported.append(task_id)
        return {"status": 1, "request": "OK_REPORT_RECORDED"}

    async def aclose(self):
        self.closed = True


def make_mock_page() -> MagicMock:
    """Create a mock Playwright Page with the mouse and routing methods."""
    page = MagicMock(spec=Page)
    page.mouse = MagicMock()
    page.mouse.move = AsyncMock()
    page.mouse.down = AsyncMock()
    page.mouse.up = AsyncMock()
    page.mouse.click = AsyncMock()
    page.route = AsyncMock()
    page.on = MagicMock()
    return page


def make_mock_locator(bbox: Dict[str, float] | None = None) -> MagicMock:
    locator = MagicMock(spec=Locator)
    locator.bounding_box = AsyncMock(return_value=bbox)
    locator.click = AsyncMock()
    return locator


def make_mock_route(
    token: str = "xyz", authorization: str | None = "Bearer abc123"
) -> MagicMock:
    route = MagicMock()
    route.abort = AsyncMock()
    route.request.headers = {"authorization": authorization} if authorization else {}
    route.request.post_data_json = {"token": token}
    return route


@pytest.fixture
def mock_page() -> MagicMock:
    return make_mock_page()
