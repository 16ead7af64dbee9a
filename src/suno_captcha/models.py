# -*- coding: utf-8 -*-
# Time       : 2024/10/12 14:05
# Author     : QIN2DIM
# GitHub     : https://github.com/QIN2DIM
# Description:
from __future__ import annotations

import json
from enum import Enum
from typing import Dict, List, Tuple

from pydantic import BaseModel, Field, field_validator

from suno_captcha.exceptions import InvalidSolution

SESSION_COOKIE = "__session"
COOKIE_DOMAIN = ".suno.com"


class ChallengeKind(str, Enum):
    SELECTION = "selection"
    DRAG = "drag"

    @classmethod
    def from_prompt(cls, prompt: str) -> ChallengeKind:
        return cls.DRAG if "drag" in prompt.lower() else cls.SELECTION


class LoopState(str, Enum):
    """
    Represents the states of the challenge loop.

    Enum Members:
      WAITING: Waiting for the challenge view to settle (network quiescence).
      DETECTING: Reading the prompt text and classifying the challenge.
      SOLVING: Requesting a solution from the solving service.
      ACTING: Replaying the solution as pointer input.
      SUBMITTING: Clicking the verify button.
      CANCELLED: The shared cancellation signal was observed.
      FAILED: A fatal error escaped the iteration.
    """

    IDLE = "idle"
    WAITING = "waiting"
    DETECTING = "detecting"
    SOLVING = "solving"
    ACTING = "acting"
    SUBMITTING = "submitting"
    CANCELLED = "cancelled"
    FAILED = "failed"


class Identity(BaseModel):
    user_agent: str
    session_token: str
    """
    Value of the first-party `__session` cookie
    """

    cookies: Dict[str, str | None] = Field(default_factory=dict)
    locale: str | None = None

    def to_browser_cookies(self) -> List[dict]:
        # Cookies without a value are dropped, `__session` always comes from session_token
        values = {SESSION_COOKIE: self.session_token}
        for name, value in self.cookies.items():
            if value is not None and name != SESSION_COOKIE:
                values[name] = value

        return [
            {"name": name, "value": f"{value}", "domain": COOKIE_DOMAIN, "path": "/", "sameSite": "Lax"}
            for name, value in values.items()
        ]


class PointCoordinate(BaseModel):
    x: float
    y: float

    def shift(self, dx: float, dy: float) -> Tuple[float, float]:
        return self.x + dx, self.y + dy


class Challenge(BaseModel):
    kind: ChallengeKind
    prompt: str
    snapshot: bytes = Field(repr=False)


class Solution(BaseModel):
    solution_id: str
    points: List[PointCoordinate] = Field(default_factory=list)

    @field_validator("solution_id", mode="before")
    @classmethod
    def coerce_solution_id(cls, v):
        return f"{v}"

    @property
    def is_even(self) -> bool:
        return len(self.points) % 2 == 0

    def as_paths(self) -> List[Tuple[PointCoordinate, PointCoordinate]]:
        """
        Pair up the points as (start, end) drag paths.

        Raises:
            InvalidSolution: The point count is odd, the last start point has no end.
        """
        if not self.is_even:
            raise InvalidSolution(
                f"Drag solution {self.solution_id} has {len(self.points)} points, expected an even count"
            )
        return [(self.points[i], self.points[i + 1]) for i in range(0, len(self.points), 2)]

    @property
    def log_message(self) -> str:
        bundle = {"Solution": self.solution_id, "Points": str([(p.x, p.y) for p in self.points])}
        return json.dumps(bundle, ensure_ascii=False)


class CaptchaResult(BaseModel):
    token: str
    """
    hCaptcha response token carried by the generation request
    """

    auth_token: str | None = None
    """
    Bearer credential from the same request. (Optional)
    """
