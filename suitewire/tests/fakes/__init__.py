"""Fake implementations of core ports for testing.

- FakeReportTransport: Captured suite messages, scriptable failures
- FakeClock: Manually advanced monotonic clock
"""

from .clock import FakeClock
from .transport import FakeReportTransport

__all__ = [
    "FakeClock",
    "FakeReportTransport",
]
