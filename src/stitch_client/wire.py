"""Message -> wire mapping transform."""

from __future__ import annotations

from typing import Any

from stitch_client.config.models import ClientConfig
from stitch_client.errors import MessageValidationError
from stitch_client.message import StitchMessage


class Field:
    """Keys of a wire mapping as the Stitch gateway expects them."""

    CLIENT_ID = "client_id"
    NAMESPACE = "namespace"
    ACTION = "action"
    TABLE_NAME = "table_name"
    TABLE_VERSION = "table_version"
    KEY_NAMES = "key_names"
    SEQUENCE = "sequence"
    DATA = "data"


def _put_if_not_none(mapping: dict[str, Any], key: str, value: Any) -> None:
    if value is not None:
        mapping[key] = value


def message_to_map(message: StitchMessage, config: ClientConfig) -> dict[str, Any]:
    """Build the wire mapping for *message*, filling gaps from *config*.

    Optional fields that are unset on the message are left out of the
    mapping entirely.  Raises :class:`MessageValidationError` when neither
    the message nor the client supplies a table name or key names.
    """
    table_name = message.table_name
    if table_name is None:
        table_name = config.table_name
    if table_name is None:
        msg = "message has no table_name and the client has no default table_name"
        raise MessageValidationError(msg)

    key_names = message.key_names
    if key_names is None:
        key_names = config.key_names
    if key_names is None:
        msg = "message has no key_names and the client has no default key_names"
        raise MessageValidationError(msg)
    if isinstance(key_names, (str, bytes)):
        msg = f"key_names must be a sequence of field names, not {key_names!r}"
        raise MessageValidationError(msg)

    mapping: dict[str, Any] = {
        Field.CLIENT_ID: config.client_id,
        Field.NAMESPACE: config.namespace,
        Field.TABLE_NAME: table_name,
        Field.KEY_NAMES: list(key_names),
    }
    if message.action is not None:
        mapping[Field.ACTION] = message.action.value
    _put_if_not_none(mapping, Field.TABLE_VERSION, message.table_version)
    _put_if_not_none(mapping, Field.SEQUENCE, message.sequence)
    _put_if_not_none(mapping, Field.DATA, message.data)
    return mapping
