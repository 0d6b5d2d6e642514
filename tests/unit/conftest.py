"""Shared fixtures for Stitch client unit tests."""

from __future__ import annotations

import json
from collections.abc import Callable, Generator
from typing import Any

import pytest
import structlog

from stitch_client.config.models import ClientConfig
from stitch_client.transport import StitchResponse

GATEWAY_URL = "http://gateway.test/push"


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingTransport:
    """In-memory transport that records every batch it is asked to send."""

    def __init__(self) -> None:
        self.requests: list[tuple[bytes, str]] = []
        self.responses: list[StitchResponse | Exception] = []
        self.close_calls = 0

    def send(self, body: bytes, *, content_type: str) -> StitchResponse:
        self.requests.append((body, content_type))
        if self.responses:
            result = self.responses.pop(0)
            if isinstance(result, Exception):
                raise result
            return result
        return StitchResponse(status_code=200, reason="OK", content={"status": "OK"})

    def close(self) -> None:
        self.close_calls += 1

    @property
    def batches(self) -> list[list[dict[str, Any]]]:
        return [json.loads(body) for body, _ in self.requests]


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def make_config() -> Callable[..., ClientConfig]:
    def _make(**overrides: Any) -> ClientConfig:
        fields: dict[str, Any] = {
            "url": GATEWAY_URL,
            "client_id": 42,
            "token": "test-token",
            "namespace": "eventslog",
            "key_names": ["id"],
            "flush_interval_ms": 60_000,
            "buffer_size": 1024 * 1024,
        }
        fields.update(overrides)
        return ClientConfig(**fields)

    return _make


@pytest.fixture(autouse=True)
def _reset_structlog() -> Generator[None, None, None]:
    yield
    structlog.reset_defaults()
