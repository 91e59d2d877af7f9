from __future__ import annotations

from datetime import date, datetime

import pytest

from src.grouphome_admin.grouphome_admin.common.status import derive_status, status_mismatch
from src.grouphome_admin.grouphome_admin.core.enums import EntityStatus


@pytest.mark.parametrize(
    "terminal,now,expected",
    [
        (None, date(2025, 6, 1), EntityStatus.ACTIVE),
        (date(2025, 1, 1), date(2025, 6, 1), EntityStatus.INACTIVE),
        (date(2025, 6, 1), date(2025, 6, 1), EntityStatus.INACTIVE),
        (date(2025, 6, 2), date(2025, 6, 1), EntityStatus.ACTIVE),
        (date(2025, 6, 1), datetime(2025, 6, 1, 0, 0, 1), EntityStatus.INACTIVE),
        (date(2025, 6, 1), datetime(2025, 5, 31, 23, 59, 59), EntityStatus.ACTIVE),
    ],
)
def test_derive_status(terminal, now, expected):
    assert derive_status(terminal, now) == expected


def test_derive_status_is_pure():
    now = date(2025, 6, 1)
    assert derive_status(date(2025, 1, 1), now) == derive_status(date(2025, 1, 1), now)


def test_status_mismatch_flags_stale_stored_status():
    now = date(2025, 6, 1)

    assert status_mismatch("active", date(2025, 1, 1), now) is True
    assert status_mismatch("inactive", date(2025, 1, 1), now) is False
    assert status_mismatch("inactive", None, now) is True
    assert status_mismatch(None, None, now) is False
