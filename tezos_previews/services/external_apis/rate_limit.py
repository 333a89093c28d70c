"""Per-endpoint courtesy throttle shared by the API clients"""

import time
from typing import Callable, Dict

import structlog

logger = structlog.get_logger()


class RateLimiter:
    """
    Last-call gate keyed by logical endpoint name.

    A call is accepted when at least ``60000 / calls_per_minute``
    milliseconds have passed since the last accepted call for the same
    key. Read-then-write without locking: two concurrent tasks may both
    get through within one window, which is tolerated.
    """

    def __init__(
        self,
        calls_per_minute: int = 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.min_interval_ms = 60000 / max(calls_per_minute, 1)
        self._clock = clock
        self._last_call_ms: Dict[str, float] = {}

    def _now_ms(self) -> float:
        return self._clock() * 1000

    def check(self, endpoint: str) -> bool:
        """Record and accept the call, or reject it if inside the window"""
        now = self._now_ms()
        last_call = self._last_call_ms.get(endpoint)

        if last_call is not None and now - last_call < self.min_interval_ms:
            logger.warning(
                "rate_limit_exceeded",
                endpoint=endpoint,
                retry_in_ms=round(self.min_interval_ms - (now - last_call)),
            )
            return False

        self._last_call_ms[endpoint] = now
        return True

    def reset(self):
        """Forget every recorded call"""
        self._last_call_ms.clear()
