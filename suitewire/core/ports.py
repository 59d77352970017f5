"""Port interfaces for the suitewire reporting core.

These abstract base classes define the boundaries between core
domain logic and external adapters. Implementations live in the
adapters/ package.

Port Interface Categories:

1. **Driven Ports** (core calls out to adapters)
   - ReportTransportPort: Deliver suite messages to the collector

2. **Driving Ports** (adapters call into core)
   - SuiteReporterPort: Lifecycle entry point used by harness adapters
"""

from abc import ABC, abstractmethod

from .events import SuiteEvent
from .models import SuiteMessage


# ============================================================================
# DRIVEN PORTS (Core calls out to adapters)
# ============================================================================


class ReportTransportPort(ABC):
    """Port for delivering suite messages to a remote collector.

    Implementations must:
    - Encode the message and deliver it in a single blocking call
    - Bound the time spent waiting on the collector
    - Never retry; the core resends pending cases on the next event
    """

    @abstractmethod
    def send(self, message: SuiteMessage) -> None:
        """Deliver a suite message.

        Returns only once the collector has accepted the message.

        Args:
            message: The envelope to deliver.

        Raises:
            ReportSerializationError: If the message cannot be encoded.
            ReportDeliveryError: If the collector is unreachable or does
                not accept the message.
        """

    @abstractmethod
    def close(self) -> None:
        """Release any connections held by the transport."""


# ============================================================================
# DRIVING PORTS (Adapters call into core)
# ============================================================================


class SuiteReporterPort(ABC):
    """Port through which harness adapters report a suite's lifecycle.

    Events must arrive in lifecycle order: one start, at most one setup,
    any number of cases, at most one teardown, one end.
    """

    @abstractmethod
    def handle(self, event: SuiteEvent) -> None:
        """Apply a lifecycle event.

        Delivery problems are logged and never raised.

        Raises:
            ReporterLifecycleError: If the event arrives out of order.
            OutcomeMappingError: If the event carries an invalid harness state.
        """
