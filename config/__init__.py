import os

# APP_ENV value -> settings module; anything unknown means development.
_ENVIRONMENTS = {
    "dev": "development",
    "development": "development",
    "test": "testing",
    "testing": "testing",
    "prod": "production",
    "production": "production",
}


def get_settings_module() -> str:
    env = os.getenv("APP_ENV", "development").strip().lower()
    return f"config.{_ENVIRONMENTS.get(env, 'development')}"


def env_flag(name: str, default: bool = False) -> bool:
    return os.getenv(name, "1" if default else "0").strip().lower() in {"1", "true", "yes", "on"}


def env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def db_config_from_env(default_database: str, *, require_password: bool = False) -> dict:
    """Connection settings from DB_* variables, shared by every environment."""

    password = os.getenv("DB_PASSWORD")
    if require_password and not password:
        raise RuntimeError("DB_PASSWORD must be set")
    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": env_int("DB_PORT", 3306),
        "user": os.getenv("DB_USER", "root"),
        "password": password or "",
        "database": os.getenv("DB_NAME", default_database),
    }
