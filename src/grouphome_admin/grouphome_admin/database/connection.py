from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from mysql.connector import pooling

from ..core.constants import DEFAULT_POOL_SIZE


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    pool_size: int = DEFAULT_POOL_SIZE


class DatabaseConnection:
    """Process-wide connection pool.

    Note: The pool is created on first use so importing the app (and tests
    that never touch MySQL) does not require a running server.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config
        self._pool: Optional[pooling.MySQLConnectionPool] = None

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    @property
    def config(self) -> DBConfig:
        return self._config

    def _get_pool(self) -> pooling.MySQLConnectionPool:
        if self._pool is None:
            self._pool = pooling.MySQLConnectionPool(
                pool_name="grouphome_admin",
                pool_size=int(self._config.pool_size),
                pool_reset_session=True,
                host=self._config.host,
                port=int(self._config.port),
                user=self._config.user,
                password=self._config.password,
                database=self._config.database,
                charset="utf8mb4",
            )
        return self._pool

    def connect(self):
        """Borrow a pooled connection; `close()` hands it back to the pool."""
        return self._get_pool().get_connection()

    def ping(self) -> bool:
        conn = self.connect()
        try:
            conn.ping(reconnect=True, attempts=1, delay=0)
            return True
        finally:
            conn.close()
