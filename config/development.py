import os

from config import db_config_from_env, env_flag, env_int

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = db_config_from_env("grouphome_db")
DB_POOL_SIZE = env_int("DB_POOL_SIZE", 5)

# Seconds between pool pings; 0 disables the background thread.
DB_KEEPALIVE_SECONDS = env_int("DB_KEEPALIVE_SECONDS", 300)
RETRY_ATTEMPTS = env_int("RETRY_ATTEMPTS", 3)
RETRY_DELAY_SECONDS = float(os.getenv("RETRY_DELAY_SECONDS", "1.0"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
DEBUG = True

# Schema is CREATE IF NOT EXISTS, so applying it on every start is safe.
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", True)
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", True)
