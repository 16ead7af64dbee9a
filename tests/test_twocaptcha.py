"""Tests for the 2Captcha coordinates client."""

from __future__ import annotations

from urllib.parse import parse_qs

import httpx
import pytest

from suno_captcha.exceptions import SolverError
from suno_captcha.tools.twocaptcha import TwoCaptchaClient, parse_coordinates


def make_client(handler, **kwargs) -> TwoCaptchaClient:
    transport = httpx.MockTransport(handler)
    client = httpx.AsyncClient(base_url="https://2captcha.test", transport=transport)
    return TwoCaptchaClient("secret", polling_interval=0, client=client, **kwargs)


class TestParseCoordinates:
    def test_json_points(self):
        points = parse_coordinates([{"x": "12", "y": "34"}, {"x": 5, "y": 6}])
        assert [(p.x, p.y) for p in points] == [(12, 34), (5, 6)]

    def test_legacy_text(self):
        points = parse_coordinates("coordinates:x=12,y=34;x=56,y=78")
        assert [(p.x, p.y) for p in points] == [(12, 34), (56, 78)]

    def test_unexpected_payload(self):
        with pytest.raises(SolverError):
            parse_coordinates(None)


@pytest.mark.asyncio
async def test_coordinates_submit_and_poll():
    submitted = {}
    polls = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/in.php":
            submitted.update({k: v[0] for k, v in parse_qs(request.content.decode()).items()})
            return httpx.Response(200, json={"status": 1, "request": "42"})

        polls.append(request.url.params["id"])
        if len(polls) == 1:
            return httpx.Response(200, json={"status": 0, "request": "CAPCHA_NOT_READY"})
        return httpx.Response(
            200, json={"status": 1, "request": [{"x": "10", "y": "20"}, {"x": "30", "y": "40"}]}
        )

    client = make_client(handler)
    solution = await client.coordinates({"body": "aW1n", "lang": "en", "textinstructions": None})

    assert solution.solution_id == "42"
    assert [(p.x, p.y) for p in solution.points] == [(10, 20), (30, 40)]
    assert polls == ["42", "42"]
    assert submitted["key"] == "secret"
    assert submitted["coordinatescaptcha"] == "1"
    assert submitted["method"] == "base64"
    assert "textinstructions" not in submitted

    await client.aclose()


@pytest.mark.asyncio
async def test_submit_error_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, json={"status": 0, "request": "ERROR_ZERO_BALANCE", "error_text": "no money"}
        )

    client = make_client(handler)
    with pytest.raises(SolverError, match="no money"):
        await client.coordinates({"body": "aW1n"})


@pytest.mark.asyncio
async def test_poll_error_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/in.php":
            return httpx.Response(200, json={"status": 1, "request": "42"})
        return httpx.Response(200, json={"status": 0, "request": "ERROR_CAPTCHA_UNSOLVABLE"})

    client = make_client(handler)
    with pytest.raises(SolverError, match="ERROR_CAPTCHA_UNSOLVABLE"):
        await client.coordinates({"body": "aW1n"})


@pytest.mark.asyncio
async def test_poll_timeout_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"status": 1, "request": "42"})

    client = make_client(handler, solve_timeout=0)
    with pytest.raises(SolverError, match="timed out"):
        await client.coordinates({"body": "aW1n"})


@pytest.mark.asyncio
async def test_report_bad():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(request.url.params)
        return httpx.Response(200, json={"status": 1, "request": "OK_REPORT_RECORDED"})

    client = make_client(handler)
    await client.report_bad("42")

    assert seen["action"] == "reportbad"
    assert seen["id"] == "42"
