"""Core domain logic for the suitewire reporting system.

This package contains zero external dependencies and represents
the pure reporting logic. Network delivery and harness integration
are handled by the adapters package.
"""

from .aggregator import AggregatorState, SuiteAggregator
from .errors import (
    OutcomeMappingError,
    ReportDeliveryError,
    ReporterLifecycleError,
    ReportSerializationError,
    ReportTransportError,
    SuitewireError,
)
from .models import (
    ComponentType,
    FailureComponent,
    FailureInfo,
    Location,
    Outcome,
    PartStatus,
    StatusComponent,
    Suite,
    SuiteAction,
    SuiteMessage,
    SuiteReport,
    SuiteStats,
)
from .throttle import ThrottleGate

__all__ = [
    "AggregatorState",
    "ComponentType",
    "FailureComponent",
    "FailureInfo",
    "Location",
    "Outcome",
    "OutcomeMappingError",
    "PartStatus",
    "ReportDeliveryError",
    "ReportSerializationError",
    "ReportTransportError",
    "ReporterLifecycleError",
    "StatusComponent",
    "Suite",
    "SuiteAction",
    "SuiteAggregator",
    "SuiteMessage",
    "SuiteReport",
    "SuiteStats",
    "SuitewireError",
    "ThrottleGate",
]
