"""Environment-variable mapping helpers for Grove settings.

Environment variable format:
- Prefix: ``GROVE_``
- Nested keys: ``__`` separator
- Example: ``GROVE_STORAGE__ENVIRONMENT=staging`` -> ``storage.environment``
"""

from __future__ import annotations

import json
from typing import Any, Mapping

ENV_PREFIX = "GROVE_"


def nested_env_values(
    *, environ: Mapping[str, str], prefix: str = ENV_PREFIX
) -> dict[str, Any]:
    """Extract and map prefixed environment variables into nested config."""
    output: dict[str, Any] = {}

    for key, raw_value in environ.items():
        if not key.upper().startswith(prefix):
            continue

        remainder = key[len(prefix) :]
        if not remainder:
            continue

        path = [
            segment.strip().lower()
            for segment in remainder.split("__")
            if segment.strip()
        ]
        if not path:
            continue

        _set_nested(output, path, _coerce_scalar(raw_value))

    return output


def _set_nested(target: dict[str, Any], path: list[str], value: Any) -> None:
    """Set a nested mapping value by path, creating intermediate dicts."""
    cursor: dict[str, Any] = target
    for segment in path[:-1]:
        child = cursor.get(segment)
        if not isinstance(child, dict):
            child = {}
            cursor[segment] = child
        cursor = child
    cursor[path[-1]] = value


def _coerce_scalar(raw: str) -> Any:
    """Coerce scalar env strings into bool/int/float/JSON when obvious."""
    value = raw.strip()
    lowered = value.lower()

    if lowered in {"true", "false"}:
        return lowered == "true"

    if lowered in {"null", "none"}:
        return None

    if value.startswith("{") or value.startswith("["):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return raw

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        return raw
