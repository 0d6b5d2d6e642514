"""In-memory message buffer and the policy deciding when to drain it."""

from __future__ import annotations

from dataclasses import dataclass


class MessageBuffer:
    """Append-only accumulator of encoded messages.

    ``last_flush_time`` starts at the construction time and only moves when
    a flush actually delivered data (see :meth:`mark_flushed`).
    """

    def __init__(self, now: float) -> None:
        self._data = bytearray()
        self._count = 0
        self._last_flush_time = now

    def __len__(self) -> int:
        return len(self._data)

    def __bool__(self) -> bool:
        return bool(self._data)

    @property
    def size_in_bytes(self) -> int:
        return len(self._data)

    @property
    def count(self) -> int:
        """Number of values appended since the last reset."""
        return self._count

    @property
    def last_flush_time(self) -> float:
        return self._last_flush_time

    def append(self, encoded: bytes) -> None:
        self._data += encoded
        self._count += 1

    def getvalue(self) -> bytes:
        return bytes(self._data)

    def reset(self) -> None:
        self._data = bytearray()
        self._count = 0

    def mark_flushed(self, now: float) -> None:
        self._last_flush_time = now


@dataclass(frozen=True, slots=True)
class FlushPolicy:
    """Size- and age-based flush triggers, both inclusive."""

    buffer_size: int
    flush_interval_seconds: float

    def should_flush(self, buffer: MessageBuffer, now: float) -> bool:
        if buffer.size_in_bytes >= self.buffer_size:
            return True
        return (now - buffer.last_flush_time) >= self.flush_interval_seconds
