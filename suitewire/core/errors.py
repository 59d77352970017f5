"""Exceptions raised by the suitewire reporting core.

Two families exist:

- Fatal errors (``OutcomeMappingError``, ``ReporterLifecycleError``) signal a
  contract break between the test harness and the reporter. They propagate.
- Transport errors (``ReportTransportError`` and subclasses) describe a send
  that did not reach the collector. The aggregator catches and logs them.
"""


class SuitewireError(Exception):
    """Base exception for all suitewire errors."""
    pass


class OutcomeMappingError(SuitewireError):
    """Raised when a harness state cannot be mapped to a report outcome."""
    pass


class ReporterLifecycleError(SuitewireError):
    """Raised when a lifecycle callback arrives out of order."""
    pass


class ReportTransportError(SuitewireError):
    """Base for failures while sending a report to the collector."""
    pass


class ReportSerializationError(ReportTransportError):
    """Raised when a suite message cannot be encoded."""
    pass


class ReportDeliveryError(ReportTransportError):
    """Raised when the collector is unreachable or rejects a message."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
