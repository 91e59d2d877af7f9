from config import db_config_from_env, env_flag

SECRET_KEY = "test-secret"

DB_CONFIG = db_config_from_env("grouphome_test_db")
DB_POOL_SIZE = 2
DB_KEEPALIVE_SECONDS = 0
RETRY_ATTEMPTS = 1
RETRY_DELAY_SECONDS = 0.0

LOG_LEVEL = "WARNING"
DEBUG = False
TESTING = True

AUTO_INIT_DB = env_flag("AUTO_INIT_DB")
AUTO_SEED_DB = env_flag("AUTO_SEED_DB")
