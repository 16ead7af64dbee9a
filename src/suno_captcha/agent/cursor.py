# -*- coding: utf-8 -*-
# Time       : 2024/10/13 10:20
# Author     : QIN2DIM
# GitHub     : https://github.com/QIN2DIM
# Description: Humanized pointer paths
from __future__ import annotations

import asyncio
import math
import random
from typing import List, Tuple

from playwright.async_api import Mouse

Point = Tuple[float, float]


def generate_bezier_trajectory(start: Point, end: Point, steps: int) -> List[Point]:
    """
    Generates a quadratic bezier curve trajectory between start and end points.
    """
    points = []

    distance = math.sqrt((end[0] - start[0]) ** 2 + (end[1] - start[1]) ** 2)

    # For longer distances, we use a higher control point offset
    offset_factor = min(0.3, max(0.1, distance / 1000))

    mid_x = (start[0] + end[0]) / 2
    mid_y = (start[1] + end[1]) / 2

    control_x = mid_x + random.uniform(-1, 1) * distance * offset_factor
    control_y = mid_y + random.uniform(-1, 1) * distance * offset_factor

    for i in range(steps + 1):
        t = i / steps
        x = (1 - t) ** 2 * start[0] + 2 * (1 - t) * t * control_x + t**2 * end[0]
        y = (1 - t) ** 2 * start[1] + 2 * (1 - t) * t * control_y + t**2 * end[1]
        points.append((x, y))

    return points


def generate_dynamic_delays(steps: int, base_delay: float) -> List[float]:
    """
    Ease in-out delays in milliseconds: 1.5x at both ends, 0.6x in the middle, ±10% noise.
    """
    delays = []

    for i in range(steps + 1):
        # 0 at both ends, 1 in the middle
        speed = math.sin(math.pi * i / steps)
        delay_factor = 1.5 - 0.9 * speed
        delays.append(base_delay * delay_factor * random.uniform(0.9, 1.1))

    return delays


class HumanCursor:
    """Moves the mouse along a bezier path instead of teleporting to the target."""

    def __init__(self, mouse: Mouse, start: Point = (0, 0), *, delay_ms: float = 8):
        self.mouse = mouse
        self.position: Point = start
        self.delay_ms = delay_ms

    def _steps_for(self, target: Point) -> int:
        distance = math.dist(self.position, target)
        return max(10, min(40, int(distance / 15)))

    async def move_to(self, x: float, y: float):
        steps = self._steps_for((x, y))
        points = generate_bezier_trajectory(self.position, (x, y), steps)
        delays = generate_dynamic_delays(steps, base_delay=self.delay_ms)

        for i, ((current_x, current_y), delay) in enumerate(zip(points, delays)):
            # Micro-adjustments in the last 30% of the movement
            if i > steps * 0.7:
                noise_factor = 0.5 if i > steps * 0.9 else 0.2
                current_x += random.uniform(-noise_factor, noise_factor)
                current_y += random.uniform(-noise_factor, noise_factor)

            await self.mouse.move(current_x, current_y)
            await asyncio.sleep(delay / 1000)

        await self.mouse.move(x, y)
        self.position = (x, y)

    async def click(self, x: float, y: float):
        await self.move_to(x, y)
        await asyncio.sleep(random.uniform(0.05, 0.15))
        await self.mouse.down()
        await asyncio.sleep(random.uniform(0.05, 0.1))
        await self.mouse.up()
