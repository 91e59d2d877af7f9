from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

_DIGITS_RE = re.compile(r"(\d+)")
_NON_DIGITS_RE = re.compile(r"\D")


def natural_key(value: Any) -> tuple:
    """'2' < '10' < 'A1'; mixed text compares chunk by chunk."""

    parts = _DIGITS_RE.split(str(value or ""))
    return tuple((0, int(p), "") if p.isdigit() else (1, 0, p.lower()) for p in parts if p != "")


def room_sort_key(room: Any) -> tuple:
    """Order rooms by the number they contain ('101', 'A-102'), text otherwise."""

    text = str(room or "").strip()
    digits = _NON_DIGITS_RE.sub("", text)
    if digits:
        return (0, int(digits), text)
    return (1, 0, text)


def percent(part: int, whole: int) -> int:
    """Rounded percentage, halves rounded up; 0 when `whole` is 0."""

    if whole <= 0:
        return 0
    return int((Decimal(part) * 100 / Decimal(whole)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
