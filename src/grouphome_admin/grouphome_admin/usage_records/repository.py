from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import UsageRecord


class UsageRecordRepository(Protocol):
    def list_between(self, start: date, end: date) -> Sequence[UsageRecord]:
        raise NotImplementedError

    def get_for(self, *, resident_id: int, day: date) -> Optional[UsageRecord]:
        raise NotImplementedError

    def upsert(self, *, resident_id: int, day: date, is_used: bool, disability_level: str) -> int:
        raise NotImplementedError

    def delete_by_resident(self, resident_id: int) -> int:
        raise NotImplementedError
