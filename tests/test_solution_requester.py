"""Tests for the bounded-retry solution requester."""

from __future__ import annotations

import base64

import pytest

from conftest import FakeService, make_solution
from suno_captcha.exceptions import SolverError
from suno_captcha.models import Challenge, ChallengeKind
from suno_captcha.tools.solution_requester import DRAG_TEXT_INSTRUCTIONS, SolutionRequester


def make_challenge(kind: ChallengeKind = ChallengeKind.SELECTION) -> Challenge:
    return Challenge(kind=kind, prompt="prompt", snapshot=b"png-bytes")


@pytest.mark.asyncio
async def test_success_returns_immediately():
    service = FakeService([make_solution("1", (1, 2))])
    requester = SolutionRequester(service, locale="en-US")

    solution = await requester.solve(make_challenge())

    assert solution.solution_id == "1"
    assert service.calls == 1
    assert service.payloads[0] == {
        "body": base64.b64encode(b"png-bytes").decode(),
        "lang": "en-US",
    }


@pytest.mark.asyncio
async def test_recovers_on_the_last_attempt():
    service = FakeService(
        [SolverError("ERROR_1"), SolverError("ERROR_2"), make_solution("3", (1, 2))]
    )
    requester = SolutionRequester(service)

    solution = await requester.solve(make_challenge())

    assert solution.solution_id == "3"
    assert service.calls == 3


@pytest.mark.asyncio
async def test_never_more_than_three_calls():
    service = FakeService([SolverError(f"ERROR_{i}") for i in range(5)])
    requester = SolutionRequester(service)

    with pytest.raises(SolverError, match="ERROR_2"):
        await requester.solve(make_challenge())

    assert service.calls == 3


@pytest.mark.asyncio
async def test_drag_payload_carries_instructions(tmp_path):
    image = tmp_path.joinpath("drag-instructions.jpg")
    image.write_bytes(b"jpeg-bytes")
    service = FakeService([make_solution("1", (1, 2), (3, 4))])
    requester = SolutionRequester(service, drag_instructions_image=image)

    await requester.solve(make_challenge(ChallengeKind.DRAG))

    payload = service.payloads[0]
    assert payload["textinstructions"] == DRAG_TEXT_INSTRUCTIONS
    assert payload["imginstructions"] == base64.b64encode(b"jpeg-bytes").decode()


@pytest.mark.asyncio
async def test_missing_instruction_image_is_skipped(tmp_path):
    service = FakeService([make_solution("1", (1, 2), (3, 4))])
    requester = SolutionRequester(
        service, drag_instructions_image=tmp_path.joinpath("missing.jpg")
    )

    await requester.solve(make_challenge(ChallengeKind.DRAG))

    assert service.payloads[0]["imginstructions"] is None


@pytest.mark.asyncio
async def test_report_bad_does_not_block_and_is_drained_on_close():
    service = FakeService()
    requester = SolutionRequester(service)

    task = requester.report_bad("42")
    assert not task.done()

    await requester.aclose()

    assert service.reported == ["42"]
    assert service.closed


@pytest.mark.asyncio
async def test_report_bad_failure_is_swallowed():
    service = FakeService()

    async def _broken(task_id):
        raise SolverError("ERROR_WRONG_CAPTCHA_ID")

    service.report_bad = _broken
    requester = SolutionRequester(service)

    await requester.report_bad("42")
    await requester.aclose()
