from __future__ import annotations

import threading
from typing import Callable, Optional

from ..common.retry import retry_call
from ..core.constants import DEFAULT_KEEPALIVE_SECONDS, DEFAULT_RETRY_ATTEMPTS, DEFAULT_RETRY_DELAY_SECONDS
from ..core.logging import get_logger

logger = get_logger(__name__)


class KeepAlive:
    """Pings the pool every `interval_seconds` on a daemon thread.

    Runs independently of requests; a failed ping is retried through
    `retry_call` and then only logged.
    """

    def __init__(
        self,
        ping: Callable[[], bool],
        *,
        interval_seconds: float = DEFAULT_KEEPALIVE_SECONDS,
        attempts: int = DEFAULT_RETRY_ATTEMPTS,
        delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS,
    ):
        self._ping = ping
        self._interval = float(interval_seconds)
        self._attempts = attempts
        self._delay = delay_seconds
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def ping_once(self) -> bool:
        ok = retry_call(self._ping, attempts=self._attempts, delay_seconds=self._delay, label="db keep-alive ping")
        if not ok:
            logger.warning("db keep-alive ping gave up")
        return bool(ok)

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            self.ping_once()

    def start(self) -> None:
        if self.running or self._interval <= 0:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="db-keepalive", daemon=True)
        self._thread.start()
        logger.info("db keep-alive started (every %.0fs)", self._interval)

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=1.0)
        self._thread = None
