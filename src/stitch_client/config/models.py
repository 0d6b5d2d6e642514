"""Pydantic configuration models for the Stitch client."""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

DEFAULT_PUSH_URL = "https://pipeline-gateway.rjmetrics.com/push"


class ClientConfig(BaseModel):
    """Everything a :class:`~stitch_client.client.StitchClient` needs.

    Built once and never mutated afterwards.  ``table_name`` and
    ``key_names`` are fallbacks used for messages that leave them unset.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: str = DEFAULT_PUSH_URL
    client_id: int = Field(ge=0)
    token: SecretStr
    namespace: str = Field(min_length=1)
    table_name: str | None = None
    key_names: list[str] | None = None
    # Flush triggers; both are inclusive thresholds
    flush_interval_ms: int = Field(default=60_000, ge=0)
    buffer_size: int = Field(default=5 * 1024, ge=0)
    connect_timeout_seconds: float = Field(default=120.0, gt=0)
    # None waits for the gateway indefinitely
    read_timeout_seconds: Annotated[float, Field(gt=0)] | None = 60.0
    headers: dict[str, str] = Field(default_factory=dict)

    @field_validator("url")
    @classmethod
    def validate_http_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            msg = f"url '{v}' must start with http:// or https://"
            raise ValueError(msg)
        return v

    @field_validator("key_names")
    @classmethod
    def validate_key_names(cls, v: list[str] | None) -> list[str] | None:
        if v is not None and not v:
            msg = "key_names must name at least one field when set"
            raise ValueError(msg)
        return v

    @property
    def flush_interval_seconds(self) -> float:
        return self.flush_interval_ms / 1000
