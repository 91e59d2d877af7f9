from __future__ import annotations

from enum import Enum


class EntityStatus(str, Enum):
    """在籍/在職ステータス（終了日から自動判定）。"""

    ACTIVE = "active"
    INACTIVE = "inactive"


class DisabilityLevel(str, Enum):
    """障害支援区分。"""

    LEVEL_1_OR_BELOW = "1以下"
    LEVEL_2 = "2"
    LEVEL_3 = "3"
    LEVEL_4 = "4"
    LEVEL_5 = "5"
    LEVEL_6 = "6"


class ExpansionType(str, Enum):
    """増床タイプ: A = 新規ユニット, B = 既存ユニットへの居室追加。"""

    NEW_UNIT = "A"
    ADD_ROOMS = "B"


class ShiftType(str, Enum):
    REGULAR = "regular"
    EARLY = "early"
    LATE = "late"
    NIGHT = "night"
    OVERTIME = "overtime"


SYSTEM_ROLE_NAMES = frozenset({"admin", "staff", "payroll"})
