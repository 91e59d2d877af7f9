from __future__ import annotations

import re
from datetime import date
from typing import Any, Iterable, Optional

from ..core.exceptions import ValidationError
from .datetime_utils import parse_optional_date

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
POSTAL_CODE_RE = re.compile(r"^\d{3}-?\d{4}$")
PHONE_RE = re.compile(r"^[\d-]+$")
ROLE_NAME_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")
HIRAGANA_RE = re.compile(r"^[ぁ-ゖー\s　]+$")


class FieldErrors:
    """Collects field-scoped messages; raise once at the end of validation.

    The first message recorded for a field wins, later ones for the same field
    are dropped so the user sees the most basic problem first.
    """

    def __init__(self) -> None:
        self._errors: dict[str, str] = {}

    def add(self, field: str, message: str) -> None:
        self._errors.setdefault(field, message)

    def replace(self, field: str, message: str) -> None:
        self._errors[field] = message

    def has(self, field: str) -> bool:
        return field in self._errors

    def __bool__(self) -> bool:
        return bool(self._errors)

    def raise_if_any(self) -> None:
        if self._errors:
            raise ValidationError(errors=self._errors)


def clean_text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


LIST_FORMAT_MESSAGE = "一覧の形式が正しくありません"


def read_list(errors: FieldErrors, value: Any, field: str) -> list[Any]:
    """A JSON array field; missing means empty, anything else is a field error."""

    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    errors.add(field, LIST_FORMAT_MESSAGE)
    return []


def clean_rooms(rooms: Optional[Iterable[Any]]) -> list[str]:
    """Drop blank room entries, keep order."""

    return [clean_text(r) for r in (rooms or []) if clean_text(r)]


def read_date(errors: FieldErrors, value: Any, field: str) -> Optional[date]:
    """Parse a date field, recording a format error instead of raising."""

    try:
        return parse_optional_date(value, field)
    except ValidationError as e:
        errors.add(field, e.errors.get(field, str(e)))
        return None


def read_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
