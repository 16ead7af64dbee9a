from __future__ import annotations

import asyncio
from typing import Optional, Sequence

GRACEFUL_MARKERS = ("been closed", "Target closed", "AbortError")


class CaptchaException(Exception):
    """suno-captcha basic exception"""

    def __init__(self, msg: Optional[str] = None, stacktrace: Optional[Sequence[str]] = None):
        self.msg = msg
        self.stacktrace = stacktrace
        super().__init__(msg)

    def __str__(self) -> str:
        exception_msg = f"{self.msg}"
        if self.stacktrace:
            stacktrace = "\n".join(self.stacktrace)
            exception_msg += f"\nStacktrace:\n{stacktrace}"
        return exception_msg


class SolverError(CaptchaException):
    """The solving service rejected the task or returned an error"""


class InvalidSolution(CaptchaException):
    """The solution is structurally unusable, e.g. an odd number of drag points"""


class ChallengeContainerLost(CaptchaException):
    """The challenge container has no bounding box, it was resolved or torn down"""


class ChallengeCancelled(CaptchaException):
    """The cancellation signal was observed at a suspension point"""


class TokenNotCaptured(CaptchaException):
    """The run ended without the generation request being intercepted"""


def is_graceful_cancellation(err: BaseException) -> bool:
    """
    Errors raised because the page went away or the run was aborted are a clean
    end of the challenge loop, not a failure.
    """
    if isinstance(err, (ChallengeCancelled, asyncio.CancelledError)):
        return True
    message = f"{err}"
    return any(marker in message for marker in GRACEFUL_MARKERS)
