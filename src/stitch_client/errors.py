"""Exception hierarchy raised by the Stitch client.

Every error propagates to the caller of ``push``/``flush``/``close``; the
client never retries on its own and never drops buffered data on failure.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from stitch_client.transport import StitchResponse


class StitchError(Exception):
    """Base class for all Stitch client errors."""


class MessageValidationError(StitchError, ValueError):
    """Raised when a message cannot be turned into a valid wire mapping."""


class CodecError(StitchError):
    """Raised when a value cannot be encoded or decoded."""


class BufferCorruptionError(CodecError):
    """Raised when the buffered byte stream cannot be decoded at flush time.

    The buffered messages are left in place, but those written before the
    corruption point cannot be recovered by retrying.
    """


class StitchTransportError(StitchError):
    """Raised when the batch could not be delivered (connect, timeout, protocol)."""


class StitchRejectedError(StitchError):
    """Raised when the Stitch gateway refuses a batch."""

    def __init__(self, response: StitchResponse) -> None:
        self.response = response
        super().__init__(
            f"Stitch rejected batch: {response.status_code} {response.reason}"
            f" {response.content}"
        )

    @property
    def status_code(self) -> int:
        return self.response.status_code

    @property
    def reason(self) -> str:
        return self.response.reason

    @property
    def content(self) -> dict[str, Any]:
        return self.response.content


class ClientClosedError(StitchError, RuntimeError):
    """Raised when pushing to a client that has been closed."""
