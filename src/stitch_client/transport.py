"""HTTP delivery of encoded batches and validation of the gateway's reply."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

import httpx
import structlog

from stitch_client.config.models import ClientConfig
from stitch_client.errors import StitchRejectedError, StitchTransportError

logger = structlog.get_logger()

_ERROR_STATUSES = frozenset({"error", "failed", "failure"})


@dataclass(slots=True)
class StitchResponse:
    """Status line and parsed JSON body of one gateway reply."""

    status_code: int
    reason: str
    content: dict[str, Any] = field(default_factory=dict)

    @property
    def has_embedded_error(self) -> bool:
        if self.content.get("error") or self.content.get("errors"):
            return True
        status = self.content.get("status")
        return isinstance(status, str) and status.lower() in _ERROR_STATUSES

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300 and not self.has_embedded_error


def validate_response(response: StitchResponse) -> None:
    """Raise :class:`StitchRejectedError` unless the gateway accepted the batch."""
    if not response.ok:
        raise StitchRejectedError(response)


@runtime_checkable
class Transport(Protocol):
    """Protocol for anything that can deliver one encoded batch."""

    def send(self, body: bytes, *, content_type: str) -> StitchResponse:
        """POST *body* and return the parsed reply."""
        ...

    def close(self) -> None:
        """Release network resources."""
        ...


class HttpTransport:
    """Blocking httpx transport posting batches to the configured gateway URL.

    The underlying ``httpx.Client`` is created on first use and pools
    connections until :meth:`close`; sending again after ``close`` opens a
    fresh client.
    """

    def __init__(self, config: ClientConfig) -> None:
        self._config = config
        self._client: httpx.Client | None = None

    def _build_client(self) -> httpx.Client:
        headers: dict[str, str] = dict(self._config.headers)
        headers["Authorization"] = f"Bearer {self._config.token.get_secret_value()}"
        return httpx.Client(
            headers=headers,
            timeout=httpx.Timeout(
                self._config.read_timeout_seconds,
                connect=self._config.connect_timeout_seconds,
            ),
        )

    def send(self, body: bytes, *, content_type: str) -> StitchResponse:
        if self._client is None:
            self._client = self._build_client()
        try:
            resp = self._client.post(
                self._config.url,
                content=body,
                headers={"Content-Type": content_type},
            )
        except httpx.HTTPError as exc:
            logger.warning(
                "stitch_transport.request_failed",
                url=self._config.url,
                error=str(exc),
            )
            msg = f"POST {self._config.url} failed: {exc}"
            raise StitchTransportError(msg) from exc
        return StitchResponse(
            status_code=resp.status_code,
            reason=resp.reason_phrase,
            content=_parse_body(resp),
        )

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None


def _parse_body(resp: httpx.Response) -> dict[str, Any]:
    # The gateway returns a JSON object for both accepted and rejected batches
    if not resp.content.strip():
        return {}
    try:
        data = resp.json()
    except ValueError as exc:
        msg = (
            f"Malformed response from gateway ({resp.status_code}): "
            f"{resp.text[:256]}"
        )
        raise StitchTransportError(msg) from exc
    if not isinstance(data, dict):
        msg = (
            f"Malformed response from gateway ({resp.status_code}): "
            f"expected a JSON object, got {type(data).__name__}"
        )
        raise StitchTransportError(msg)
    return data
