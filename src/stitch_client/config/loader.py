"""Load a :class:`ClientConfig` from YAML with environment substitution.

String values may reference ``${VAR}`` or ``${VAR:-default}``.  Anything the
file leaves out takes the default declared on the model.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from stitch_client.config.models import ClientConfig

# ${VAR} or ${VAR:-default}; "\}" escapes a brace inside the default
_ENV_REF = re.compile(r"\$\{([^}:]+)(?::-((?:[^}\\]|\\.)*))?}")


def _substitute(match: re.Match[str]) -> str:
    name, default = match.group(1), match.group(2)
    value = os.environ.get(name)
    if value is not None:
        return value
    if default is None:
        msg = f"Environment variable '{name}' is not set and no default provided"
        raise ValueError(msg)
    return default.replace("\\}", "}")


def resolve_env_vars(data: Any) -> Any:
    """Expand environment references in every string inside *data*."""
    if isinstance(data, str):
        return _ENV_REF.sub(_substitute, data)
    if isinstance(data, dict):
        return {key: resolve_env_vars(value) for key, value in data.items()}
    if isinstance(data, list):
        return [resolve_env_vars(item) for item in data]
    return data


def load_yaml(path: str | Path) -> dict[str, Any]:
    """Parse a YAML mapping from *path* and expand environment references."""
    p = Path(path)
    if not p.exists():
        msg = f"Config file not found: {p}"
        raise FileNotFoundError(msg)
    try:
        data = yaml.safe_load(p.read_text())
    except yaml.YAMLError as exc:
        mark = getattr(exc, "problem_mark", None)
        where = f" at line {mark.line + 1}, column {mark.column + 1}" if mark else ""
        msg = f"Failed to parse YAML in {p}{where}: {exc}"
        raise ValueError(msg) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"Expected a YAML mapping at top level in {p}, got {type(data).__name__}"
        raise TypeError(msg)
    return resolve_env_vars(data)  # type: ignore[no-any-return]


def load_client_config(path: str | Path, **overrides: Any) -> ClientConfig:
    """Build a validated ClientConfig from *path*; keyword *overrides* win."""
    data = {**load_yaml(path), **overrides}
    try:
        return ClientConfig.model_validate(data)
    except ValidationError as exc:
        msg = f"Invalid client config ({path}):\n{exc}"
        raise ValueError(msg) from exc
