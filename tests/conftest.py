"""Shared pytest fixtures: scripted HttpClient fakes."""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import pytest


class ScriptedClient:
    """HttpClient fake whose n-th call (1-based) is answered by ``script(n)``.

    ``script`` returns a status code or an exception instance to raise.
    Tracks how many calls are in flight at once.
    """

    def __init__(self, script: Callable[[int], int | BaseException], delay: float = 0.0):
        self.script = script
        self.delay = delay
        self.calls = 0
        self.in_flight = 0
        self.peak_in_flight = 0
        self.urls: list[str] = []

    async def get(self, url: str) -> int:
        self.calls += 1
        call = self.calls
        self.urls.append(url)
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            result = self.script(call)
        finally:
            self.in_flight -= 1
        if isinstance(result, BaseException):
            raise result
        return result


class StallingClient:
    """Answers the first ``fast`` calls with 200, then never returns."""

    def __init__(self, fast: int):
        self.fast = fast
        self.calls = 0

    async def get(self, url: str) -> int:
        self.calls += 1
        if self.calls <= self.fast:
            return 200
        await asyncio.Event().wait()
        return 200


@pytest.fixture
def scripted_client():
    return ScriptedClient


@pytest.fixture
def stalling_client():
    return StallingClient
