"""Serialization codecs used for buffered messages and batch bodies.

The client only needs three things from a codec: a media type for the
``Content-Type`` header, a way to encode one value, and a way to read back
a concatenation of independently encoded values.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Iterator
from typing import Any, Protocol, runtime_checkable

from stitch_client.errors import CodecError

_WHITESPACE = re.compile(r"\s*")


@runtime_checkable
class Codec(Protocol):
    """Protocol every serialization codec must satisfy."""

    @property
    def content_type(self) -> str:
        """Media type sent with encoded batches."""
        ...

    def encode(self, value: Any) -> bytes:
        """Encode a single value."""
        ...

    def iter_decode(self, data: bytes) -> Iterator[Any]:
        """Yield each value from a concatenation of encoded values."""
        ...


class JsonCodec:
    """Compact JSON codec.

    Values are written back to back with no separator; ``iter_decode``
    stops cleanly once the stream is exhausted after a whole value.
    """

    content_type = "application/json"

    def __init__(self, default: Callable[[Any], Any] | None = None) -> None:
        self._default = default
        self._decoder = json.JSONDecoder()

    def encode(self, value: Any) -> bytes:
        try:
            text = json.dumps(
                value,
                separators=(",", ":"),
                ensure_ascii=False,
                allow_nan=False,
                default=self._default,
            )
            # Lone surrogates survive json.dumps but not UTF-8 encoding
            return text.encode("utf-8")
        except (TypeError, ValueError) as exc:
            msg = f"Cannot encode value as JSON: {exc}"
            raise CodecError(msg) from exc

    def iter_decode(self, data: bytes) -> Iterator[Any]:
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            msg = f"Encoded stream is not valid UTF-8: {exc}"
            raise CodecError(msg) from exc

        pos = _WHITESPACE.match(text, 0).end()  # type: ignore[union-attr]
        end = len(text)
        while pos < end:
            try:
                value, pos = self._decoder.raw_decode(text, pos)
            except json.JSONDecodeError as exc:
                msg = f"Malformed JSON value at offset {exc.pos}: {exc.msg}"
                raise CodecError(msg) from exc
            yield value
            pos = _WHITESPACE.match(text, pos).end()  # type: ignore[union-attr]
