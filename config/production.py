import os

from config import db_config_from_env, env_flag, env_int

SECRET_KEY = os.environ["SECRET_KEY"]

DB_CONFIG = db_config_from_env("grouphome_db", require_password=True)
DB_POOL_SIZE = env_int("DB_POOL_SIZE", 10)

DB_KEEPALIVE_SECONDS = env_int("DB_KEEPALIVE_SECONDS", 300)
RETRY_ATTEMPTS = env_int("RETRY_ATTEMPTS", 3)
RETRY_DELAY_SECONDS = float(os.getenv("RETRY_DELAY_SECONDS", "2.0"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
DEBUG = False

AUTO_INIT_DB = env_flag("AUTO_INIT_DB")
AUTO_SEED_DB = False
