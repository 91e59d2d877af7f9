"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_DELAY_SECONDS = 1.0
DEFAULT_KEEPALIVE_SECONDS = 300
DEFAULT_POOL_SIZE = 5

MIN_DEPARTMENT_NAME_LENGTH = 2
MAX_DESIRED_DAYS = 31

SERVER_ERROR_MESSAGE = "サーバーエラーが発生しました"
