"""Minimum-interval throttle for state-mutating API calls."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

logger = logging.getLogger("orgmigrate.rate_limiter")


class RateLimiter:
    """Blocks until `interval_s` has passed since the previous throttled call.

    One instance is shared by every client that issues mutations, so the
    guarantee holds across both organisations.
    """

    def __init__(
        self,
        interval_s: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.interval_s = interval_s
        self._clock = clock
        self._sleep = sleep
        self._last_call: Optional[float] = None

    def throttle(self) -> None:
        if self._last_call is not None:
            remaining = self.interval_s - (self._clock() - self._last_call)
            if remaining > 0:
                logger.debug("Throttling mutation for %.3fs", remaining)
                self._sleep(remaining)
        self._last_call = self._clock()
