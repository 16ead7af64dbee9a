# -*- coding: utf-8 -*-
# Time       : 2024/10/13 11:02
# Author     : QIN2DIM
# GitHub     : https://github.com/QIN2DIM
# Description:
from __future__ import annotations

import asyncio
from typing import Tuple

from playwright.async_api import Locator, Page

from suno_captcha.agent.cursor import HumanCursor
from suno_captcha.exceptions import ChallengeContainerLost

Offset = Tuple[float, float]


def is_page(target) -> bool:
    return isinstance(target, Page)


class PointerActuator:
    """
    Clicks and drags on the page, either directly or along humanized paths.

    A target is the page itself (viewport coordinates) or a locator
    (coordinates relative to its bounding box).
    """

    def __init__(
        self,
        page: Page,
        *,
        humanize: bool = False,
        drag_hold_seconds: float = 1.1,
        drag_steps: int = 30,
    ):
        self.page = page
        self.humanize = humanize
        self.drag_hold_seconds = drag_hold_seconds
        self.drag_steps = drag_steps
        self.cursor = HumanCursor(page.mouse) if humanize else None

    async def _resolve_absolute(self, target: Page | Locator, offset: Offset | None) -> Offset:
        if is_page(target):
            bbox = {"x": 0, "y": 0, "width": 0, "height": 0}
        else:
            bbox = await target.bounding_box()
            if bbox is None:
                raise ChallengeContainerLost(f"{target} has no bounding box")

        if offset is None:
            return bbox["x"] + bbox["width"] / 2, bbox["y"] + bbox["height"] / 2
        return bbox["x"] + offset[0], bbox["y"] + offset[1]

    async def click(self, target: Page | Locator, offset: Offset | None = None):
        if self.humanize:
            x, y = await self._resolve_absolute(target, offset)
            return await self.cursor.click(x, y)

        if is_page(target):
            x, y = offset or (0, 0)
            return await target.mouse.click(x, y)

        position = {"x": offset[0], "y": offset[1]} if offset else None
        return await target.click(force=True, position=position)

    async def drag(self, start: Offset, end: Offset):
        mouse = self.page.mouse

        await mouse.move(*start)
        await mouse.down()
        await asyncio.sleep(self.drag_hold_seconds)
        await mouse.move(*end, steps=self.drag_steps)
        await mouse.up()

        if self.cursor:
            self.cursor.position = end
