"""Throttling policy for outgoing suite messages.

Boundary messages (suite start and end) always go out. Updates go out at most
once per interval, measured from the last send the collector acknowledged,
so quick cases do not flood the collector and a failing collector does not
suppress later attempts.
"""

import time
from collections.abc import Callable

from .models import SuiteAction

DEFAULT_UPDATE_INTERVAL_SECONDS = 1.0


class ThrottleGate:
    """Decides whether a message may be sent now.

    Pure decision logic. Suppressed attempts are simply dropped; the next
    qualifying event sends the then-current state.
    """

    def __init__(
        self,
        interval_seconds: float = DEFAULT_UPDATE_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if interval_seconds < 0:
            raise ValueError(
                f"interval_seconds must be non-negative, got {interval_seconds}"
            )
        self.interval_seconds = interval_seconds
        self._clock = clock
        self._last_acknowledged: float | None = None

    @property
    def last_acknowledged(self) -> float | None:
        """Clock reading of the last acknowledged send, if any."""
        return self._last_acknowledged

    def permits(self, action: SuiteAction) -> bool:
        """Is a message with this action allowed to go out now?"""
        if action is not SuiteAction.UPDATE:
            return True
        if self._last_acknowledged is None:
            return True
        return self._clock() - self._last_acknowledged >= self.interval_seconds

    def mark_acknowledged(self) -> None:
        """Record that the collector accepted a message just now."""
        self._last_acknowledged = self._clock()
