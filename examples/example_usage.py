"""Example: call the service layer directly, without Flask.

Controllers stay thin; the rules live in the services, so a script can reuse
them as-is.
"""

import importlib

from config import get_settings_module

from src.grouphome_admin.grouphome_admin.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    print(container.group_home_service.statistics())
    print(container.resident_service.statistics())
    for user in container.user_service.list_users(status="mismatch"):
        print("status mismatch:", user.name, user.status)


if __name__ == "__main__":
    main()
