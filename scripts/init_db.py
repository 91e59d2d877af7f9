from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.grouphome_admin.grouphome_admin.database.bootstrap import SCHEMA_PATH, apply_schema, as_target, list_tables

EXPECTED_TABLES = {
    "departments",
    "roles",
    "users",
    "department_histories",
    "group_homes",
    "expansions",
    "residents",
    "disability_histories",
    "shift_preferences",
    "usage_records",
    "attendance_reports",
}


def main() -> int:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)
    target = as_target(db_config)

    apply_schema(db_config, schema_path=SCHEMA_PATH)
    tables = set(list_tables(db_config))
    missing = sorted(EXPECTED_TABLES - tables)

    print(f"Schema {SCHEMA_PATH.name} -> {target.describe()}")
    for name in sorted(tables):
        print(f"  {name}")
    if missing:
        print(f"NG: missing tables: {', '.join(missing)}")
        return 1
    print(f"OK: {len(tables)} tables")
    return 0


if __name__ == "__main__":
    sys.exit(main())
