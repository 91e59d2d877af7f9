from __future__ import annotations

import dataclasses
from datetime import date, datetime, time
from enum import Enum
from typing import Any

from .case_converter import snake_to_camel


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat(timespec="seconds")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, time):
        return value.strftime("%H:%M")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: _plain(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def to_row(obj: Any) -> Any:
    """Dataclass/dict -> JSON-safe structure keeping snake_case keys."""
    return _plain(obj)


def to_api(obj: Any) -> Any:
    """Dataclass/dict -> JSON-safe camelCase structure for responses."""
    return snake_to_camel(_plain(obj))
