"""Buffered client for pushing records to the Stitch import pipeline."""

from stitch_client.client import StitchClient
from stitch_client.config.models import ClientConfig
from stitch_client.errors import (
    BufferCorruptionError,
    ClientClosedError,
    CodecError,
    MessageValidationError,
    StitchError,
    StitchRejectedError,
    StitchTransportError,
)
from stitch_client.message import Action, StitchMessage

__all__ = [
    "Action",
    "BufferCorruptionError",
    "ClientClosedError",
    "ClientConfig",
    "CodecError",
    "MessageValidationError",
    "StitchClient",
    "StitchError",
    "StitchMessage",
    "StitchRejectedError",
    "StitchTransportError",
]
