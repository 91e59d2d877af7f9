from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.grouphome_admin.grouphome_admin.database.bootstrap import (
    SEED_PATH,
    apply_seed_sql,
    as_target,
    ensure_default_roles,
)


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=SEED_PATH)
    ensure_default_roles(db_config)

    print(f"OK: Seeded database -> {as_target(db_config).describe()}")


if __name__ == "__main__":
    main()
