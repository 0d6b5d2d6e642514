"""Records submitted by callers for delivery to Stitch."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
from enum import StrEnum
from typing import Any


class Action(StrEnum):
    """What the Stitch pipeline should do with a record."""

    UPSERT = "UPSERT"
    SWITCH_VIEW = "SWITCH_VIEW"


@dataclass(frozen=True, slots=True)
class StitchMessage:
    """One change to one destination table.

    ``table_name`` and ``key_names`` may be left unset when the client was
    configured with defaults for them.
    """

    table_name: str | None = None
    key_names: Sequence[str] | None = None
    action: Action | None = None
    table_version: int | None = None
    sequence: int | None = None  # ordering hint for the remote pipeline
    data: Any = None

    @classmethod
    def upsert(cls, data: Any, **kwargs: Any) -> StitchMessage:
        return cls(action=Action.UPSERT, data=data, **kwargs)

    @classmethod
    def switch_view(cls, table_version: int, **kwargs: Any) -> StitchMessage:
        return cls(action=Action.SWITCH_VIEW, table_version=table_version, **kwargs)

    def with_sequence(self, sequence: int) -> StitchMessage:
        return replace(self, sequence=sequence)
