from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from flask import jsonify, request

from ..common.case_converter import normalize_payload, snake_key_to_camel
from ..common.serialization import to_api
from ..common.validators import read_int
from ..core.exceptions import ValidationError


def json_body() -> dict[str, Any]:
    """Request JSON as snake_case keys (camelCase or snake_case accepted)."""
    return normalize_payload(request.get_json(silent=True))


def arg(name: str) -> Optional[str]:
    """Query arg by snake_case or camelCase name."""

    value = request.args.get(name)
    if value is None:
        value = request.args.get(snake_key_to_camel(name))
    return value


def int_arg(name: str) -> Optional[int]:
    return read_int(arg(name))


def ok(data: Any, status: int = 200):
    return jsonify(to_api(data)), status


def ok_raw(data: Any, status: int = 200):
    """For payloads that are already camelCase dicts."""
    return jsonify(data), status


def period_args(now: date | datetime) -> tuple[int, int]:
    """`year`/`month` query args; missing ones default to `now`, bad ones are a 400."""

    values = []
    for name, default in (("year", now.year), ("month", now.month)):
        raw = arg(name)
        if raw is None or not raw.strip():
            values.append(default)
            continue
        parsed = read_int(raw)
        if parsed is None:
            raise ValidationError(errors={name: "数値で入力してください"})
        values.append(parsed)
    year, month = values
    if not 1 <= month <= 12:
        raise ValidationError(errors={"month": "対象月は1〜12で入力してください"})
    return year, month
