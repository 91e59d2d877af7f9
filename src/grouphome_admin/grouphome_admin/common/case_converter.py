"""snake_case (DB rows) <-> camelCase (API payloads) key conversion."""
from __future__ import annotations

import re
from typing import Any

_SNAKE_RE = re.compile(r"_([a-z0-9])")
_CAMEL_RE = re.compile(r"([A-Z])")


def snake_key_to_camel(key: str) -> str:
    return _SNAKE_RE.sub(lambda m: m.group(1).upper(), key)


def camel_key_to_snake(key: str) -> str:
    return _CAMEL_RE.sub(r"_\1", key).lower()


def snake_to_camel(obj: Any) -> Any:
    """Recursively rename dict keys; lists are walked, other values untouched."""

    if isinstance(obj, list):
        return [snake_to_camel(v) for v in obj]
    if isinstance(obj, dict):
        return {snake_key_to_camel(str(k)): snake_to_camel(v) for k, v in obj.items()}
    return obj


def camel_to_snake(obj: Any) -> Any:
    if isinstance(obj, list):
        return [camel_to_snake(v) for v in obj]
    if isinstance(obj, dict):
        return {camel_key_to_snake(str(k)): camel_to_snake(v) for k, v in obj.items()}
    return obj


def normalize_payload(payload: Any) -> dict[str, Any]:
    """Request bodies may come in either style; services read snake_case.

    When both spellings of a key are present the camelCase one wins, since
    that is what the UI sends.
    """

    if not isinstance(payload, dict):
        return {}
    out: dict[str, Any] = {}
    for key, value in payload.items():
        if key != camel_key_to_snake(key):
            continue
        out[key] = camel_to_snake(value)
    for key, value in payload.items():
        snake = camel_key_to_snake(key)
        if key != snake:
            out[snake] = camel_to_snake(value)
    return out
