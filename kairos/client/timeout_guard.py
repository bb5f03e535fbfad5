import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class AuthTimeoutGuard:
    """
    One-shot timer bounding session store initialization.

    Fires `on_timeout` once after `timeout_seconds` unless cancelled first.
    There is no retry and no backoff.
    """

    def __init__(self, timeout_seconds: float, on_timeout: Callable[[], None]):
        self.timeout_seconds = timeout_seconds
        self._on_timeout = on_timeout
        self._handle: Optional[asyncio.TimerHandle] = None
        self.fired = False

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def arm(self) -> None:
        if self._handle is not None or self.fired:
            return
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.timeout_seconds, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self.fired = True
        logger.warning(
            f"Auth initialization did not resolve within {self.timeout_seconds}s"
        )
        self._on_timeout()
