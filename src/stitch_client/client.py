"""Buffered Stitch client.

Callers hand :class:`StitchClient` one :class:`StitchMessage` at a time.
Messages are encoded into an in-memory buffer and shipped to the gateway
as a single batch once the buffer reaches ``buffer_size`` bytes or
``flush_interval_ms`` has elapsed since the last successful flush.  Both
triggers are only evaluated on ``push``; there is no background timer.

Flushing blocks the calling thread.  A reentrant lock serializes
``push``/``flush``/``close`` so the client can be shared between threads,
but a slow gateway will stall every caller waiting on that lock.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

import structlog

from stitch_client.buffer import FlushPolicy, MessageBuffer
from stitch_client.codec import Codec, JsonCodec
from stitch_client.config.loader import load_client_config
from stitch_client.config.models import ClientConfig
from stitch_client.errors import (
    BufferCorruptionError,
    ClientClosedError,
    CodecError,
    StitchError,
)
from stitch_client.message import StitchMessage
from stitch_client.transport import HttpTransport, Transport, validate_response
from stitch_client.wire import message_to_map

logger = structlog.get_logger()


class StitchClient:
    """Accumulates messages and pushes them to Stitch in batches."""

    def __init__(
        self,
        config: ClientConfig,
        *,
        codec: Codec | None = None,
        transport: Transport | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._config = config
        self._codec: Codec = codec or JsonCodec()
        self._transport: Transport = transport or HttpTransport(config)
        self._clock = clock or time.monotonic
        self._policy = FlushPolicy(
            buffer_size=config.buffer_size,
            flush_interval_seconds=config.flush_interval_seconds,
        )
        self._buffer = MessageBuffer(now=self._clock())
        self._lock = threading.RLock()
        self._closed = False

    @classmethod
    def from_config_file(cls, path: str | Path, **kwargs: Any) -> StitchClient:
        """Build a client from a YAML config file."""
        return cls(load_client_config(path), **kwargs)

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def buffer_size_in_bytes(self) -> int:
        return self._buffer.size_in_bytes

    @property
    def buffered_count(self) -> int:
        return self._buffer.count

    @property
    def last_flush_time(self) -> float:
        return self._buffer.last_flush_time

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> StitchClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def push(self, message: StitchMessage) -> None:
        """Buffer *message*, flushing first if a flush trigger has fired.

        Raises :class:`MessageValidationError` or :class:`CodecError` without
        touching the buffer when the message cannot be encoded, and propagates
        any error from the flush it triggers.  In the latter case the message
        stays buffered.
        """
        with self._lock:
            if self._closed:
                msg = "StitchClient is closed"
                raise ClientClosedError(msg)

            encoded = self._codec.encode(message_to_map(message, self._config))
            self._buffer.append(encoded)
            logger.debug(
                "stitch_client.pushed",
                table_name=message.table_name or self._config.table_name,
                bytes=len(encoded),
                buffered_bytes=self._buffer.size_in_bytes,
            )

            if self._policy.should_flush(self._buffer, self._clock()):
                self.flush()

    def flush(self) -> None:
        """Send everything currently buffered as one batch.

        An empty buffer is a no-op: nothing is sent and the flush-interval
        clock is not reset.  On any failure the buffer and the last-flush
        time are left exactly as they were.
        """
        with self._lock:
            if not self._buffer:
                logger.debug("stitch_client.flush_skipped", reason="empty_buffer")
                return

            batch = self._decode_buffer()
            body = self._codec.encode(batch)

            t0 = time.monotonic()
            try:
                response = self._transport.send(
                    body, content_type=self._codec.content_type
                )
                validate_response(response)
            except StitchError as exc:
                logger.warning(
                    "stitch_client.flush_failed",
                    messages=len(batch),
                    bytes=len(body),
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
                raise
            elapsed_ms = (time.monotonic() - t0) * 1000

            self._buffer.reset()
            self._buffer.mark_flushed(self._clock())
            logger.info(
                "stitch_client.flushed",
                messages=len(batch),
                bytes=len(body),
                status_code=response.status_code,
                latency_ms=round(elapsed_ms, 2),
            )

    def close(self) -> None:
        """Flush what is left and release the transport.

        If the final flush fails the client stays open so the caller can
        retry ``close`` (or ``flush``) without losing data.
        """
        with self._lock:
            if self._closed:
                return
            self.flush()
            self._transport.close()
            self._closed = True
            logger.info("stitch_client.closed", namespace=self._config.namespace)

    def _decode_buffer(self) -> list[Any]:
        try:
            return list(self._codec.iter_decode(self._buffer.getvalue()))
        except CodecError as exc:
            logger.error(
                "stitch_client.buffer_corrupted",
                buffered_bytes=self._buffer.size_in_bytes,
                buffered_messages=self._buffer.count,
                error=str(exc),
            )
            msg = (
                f"Buffered messages could not be decoded; "
                f"{self._buffer.count} buffered message(s) at risk: {exc}"
            )
            raise BufferCorruptionError(msg) from exc
