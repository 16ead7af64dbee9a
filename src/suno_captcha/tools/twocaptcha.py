"""
Coordinates API of https://2captcha.com

The worker marks points on the uploaded image and the service hands them back
as a list of {"x", "y"} pairs measured from the top-left corner of that image.
"""
from __future__ import annotations

import asyncio
import time
from typing import Any, Dict, List

import httpx
from loguru import logger

from suno_captcha.exceptions import SolverError
from suno_captcha.models import PointCoordinate, Solution

NOT_READY = "CAPCHA_NOT_READY"


def parse_coordinates(raw: Any) -> List[PointCoordinate]:
    """
    Accepts both shapes the service answers with:
    `[{"x": "12", "y": "34"}, ...]` and the legacy `"x=12,y=34;x=56,y=78"` text.
    """
    if isinstance(raw, list):
        return [PointCoordinate(x=float(p["x"]), y=float(p["y"])) for p in raw]

    if isinstance(raw, str):
        text = raw.removeprefix("coordinates:").strip()
        points = []
        for chunk in filter(None, text.split(";")):
            parts = dict(p.split("=", 1) for p in chunk.split(","))
            points.append(PointCoordinate(x=float(parts["x"]), y=float(parts["y"])))
        return points

    raise SolverError(f"Unexpected coordinates payload: {raw!r}")


class TwoCaptchaClient:

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://2captcha.com",
        *,
        polling_interval: float = 5,
        solve_timeout: float = 120,
        client: httpx.AsyncClient | None = None,
    ):
        self._api_key = api_key
        self.polling_interval = polling_interval
        self.solve_timeout = solve_timeout
        self.client = client or httpx.AsyncClient(base_url=base_url, timeout=30)

    async def _submit(self, payload: Dict[str, Any]) -> str:
        data = {"key": self._api_key, "method": "base64", "coordinatescaptcha": 1, "json": 1}
        data.update({k: v for k, v in payload.items() if v is not None})

        response = await self.client.post("/in.php", data=data)
        response.raise_for_status()
        result = response.json()
        if result.get("status") != 1:
            raise SolverError(f"2Captcha error: {result.get('error_text') or result.get('request')}")
        return f"{result['request']}"

    async def _poll(self, task_id: str) -> Any:
        params = {"key": self._api_key, "action": "get", "id": task_id, "json": 1}
        deadline = time.monotonic() + self.solve_timeout

        while time.monotonic() < deadline:
            await asyncio.sleep(self.polling_interval)
            response = await self.client.get("/res.php", params=params)
            response.raise_for_status()
            result = response.json()
            if result.get("status") == 1:
                return result["request"]
            if result.get("request") != NOT_READY:
                raise SolverError(f"2Captcha error: {result.get('error_text') or result.get('request')}")

        raise SolverError(f"2Captcha task {task_id} timed out after {self.solve_timeout}s")

    async def coordinates(self, payload: Dict[str, Any]) -> Solution:
        """
        Args:
            payload: body (base64 image), lang, textinstructions, imginstructions

        Returns: Solution carrying the task id, used later for reportbad
        """
        task_id = await self._submit(payload)
        logger.debug(f"2Captcha task created - {task_id=}")
        raw = await self._poll(task_id)
        return Solution(solution_id=task_id, points=parse_coordinates(raw))

    async def report_bad(self, task_id: str):
        params = {"key": self._api_key, "action": "reportbad", "id": task_id, "json": 1}
        response = await self.client.get("/res.php", params=params)
        response.raise_for_status()
        return response.json()

    async def aclose(self):
        await self.client.aclose()
