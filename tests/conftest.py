"""
Fixtures and test configuration for the nsshards test suite.
"""

import gzip
from typing import List
from unittest.mock import MagicMock

import pytest
import requests

from nsshards.ratelimit import RateGate


class FakeClock:
    """Clock whose sleep advances time instantly, recording each sleep."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    """Create a fake clock starting at an arbitrary time."""
    return FakeClock()


@pytest.fixture
def gate(clock):
    """Create a rate gate driven by the fake clock."""
    return RateGate(clock=clock, sleep=clock.sleep)


def fake_response(body: bytes, status: int = 200) -> MagicMock:
    """Create a stand-in for a streamed requests.Response."""
    response = MagicMock()
    response.__enter__.return_value = response
    response.__exit__.return_value = False
    response.status_code = status
    response.content = body
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(
            f"{status} Error", response=response
        )
    return response


def gzipped(text: str) -> bytes:
    """Compress a document the way the dumps are served."""
    return gzip.compress(text.encode("utf-8"))
