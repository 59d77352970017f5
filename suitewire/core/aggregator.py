"""Suite aggregation and send orchestration.

The aggregator owns one suite for one run. Each lifecycle event updates the
suite and then asks the throttle gate whether a message may go out. Messages
that reach the collector purge the cases they carried; anything else leaves
the suite untouched so the next message carries those cases again.
"""

import logging
from enum import Enum

from .errors import ReporterLifecycleError, ReportTransportError
from .events import (
    CaseCompleted,
    SetupCompleted,
    SuiteEnded,
    SuiteEvent,
    SuiteStarted,
    TeardownCompleted,
)
from .harness import RunSummary, SetupSummary, SpecSummary
from .mapping import OutcomeMapper
from .models import Suite, SuiteAction, SuiteMessage
from .ports import ReportTransportPort, SuiteReporterPort
from .throttle import ThrottleGate

logger = logging.getLogger(__name__)


class AggregatorState(Enum):
    """Lifecycle states of a suite aggregator.

    State transitions:
    - UNINITIALIZED → STARTED (on_suite_start)
    - STARTED → STARTED (setup, case and teardown updates)
    - STARTED → ENDED (on_suite_end)
    """

    UNINITIALIZED = "uninitialized"
    STARTED = "started"
    ENDED = "ended"


class SuiteAggregator(SuiteReporterPort):
    """Accumulates one suite's results and reports them remotely.

    Single-use: create one aggregator per suite run. Not safe to share
    between concurrently running suites.
    """

    def __init__(
        self,
        transport: ReportTransportPort,
        gate: ThrottleGate | None = None,
    ):
        self.transport = transport
        self.gate = gate or ThrottleGate()
        self.state = AggregatorState.UNINITIALIZED
        self._suite: Suite | None = None

    @property
    def suite(self) -> Suite:
        """The suite being reported."""
        if self._suite is None:
            raise ReporterLifecycleError("suite has not started")
        return self._suite

    def handle(self, event: SuiteEvent) -> None:
        """Apply a lifecycle event."""
        if isinstance(event, SuiteStarted):
            self.on_suite_start(event.name, event.suite_id)
        elif isinstance(event, SetupCompleted):
            self.on_setup_phase_complete(event.summary)
        elif isinstance(event, CaseCompleted):
            self.on_case_complete(event.summary)
        elif isinstance(event, TeardownCompleted):
            self.on_teardown_phase_complete(event.summary)
        elif isinstance(event, SuiteEnded):
            self.on_suite_end(event.summary)
        else:
            raise TypeError(f"Unknown suite event: {event!r}")

    def on_suite_start(self, name: str, suite_id: str) -> None:
        """Begin a fresh suite and announce it."""
        if self.state != AggregatorState.UNINITIALIZED:
            raise ReporterLifecycleError(
                f"Cannot start suite {name!r} in {self.state.value} state"
            )
        self._suite = Suite(name=name, id=suite_id)
        self.state = AggregatorState.STARTED
        self._request(SuiteAction.START, "Suite (start)")

    def on_setup_phase_complete(self, summary: SetupSummary) -> None:
        """Record the one-time setup phase result."""
        self._require_started("BeforeSuite")
        self.suite.record_before_suite(OutcomeMapper.setup_to_part_status(summary))
        self._request(SuiteAction.UPDATE, "BeforeSuite")

    def on_case_complete(self, summary: SpecSummary) -> None:
        """Queue a completed case."""
        self._require_started("Spec")
        self.suite.add_case(OutcomeMapper.spec_to_part_status(summary))
        self._request(SuiteAction.UPDATE, "Spec")

    def on_teardown_phase_complete(self, summary: SetupSummary) -> None:
        """Record the one-time teardown phase result."""
        self._require_started("AfterSuite")
        self.suite.record_after_suite(OutcomeMapper.setup_to_part_status(summary))
        self._request(SuiteAction.UPDATE, "AfterSuite")

    def on_suite_end(self, summary: RunSummary) -> None:
        """Finalize the suite with its tallies and announce the end."""
        self._require_started("Suite (end)")
        self.suite.finish(
            run_time=summary.run_time,
            stats=OutcomeMapper.to_suite_stats(summary),
        )
        self.state = AggregatorState.ENDED
        self._request(SuiteAction.END, "Suite (end)")

    def _require_started(self, phase: str) -> None:
        if self.state != AggregatorState.STARTED:
            raise ReporterLifecycleError(
                f"Cannot report {phase} in {self.state.value} state"
            )

    def _request(self, action: SuiteAction, reason: str) -> None:
        """Send the current suite if the gate allows it.

        Delivery failures are logged, never raised.
        """
        if not self.gate.permits(action):
            logger.debug(
                f"Throttled {action.value} for suite {self.suite.name!r}",
                extra={"suite_id": self.suite.id, "reason": reason},
            )
            return

        report = self.suite.snapshot()
        try:
            self.transport.send(SuiteMessage(action=action, suite=report))
        except ReportTransportError as e:
            logger.error(
                f"unable to send {action.value} for suite {self.suite.name!r} "
                f"from {reason}: {e}",
                extra={
                    "suite_id": self.suite.id,
                    "pending_cases": len(self.suite.more_test_cases),
                },
            )
            return

        self.gate.mark_acknowledged()
        self.suite.acknowledge(report)
        logger.debug(
            f"Sent {action.value} for suite {self.suite.name!r} "
            f"with {len(report.more_test_cases)} cases",
            extra={"suite_id": self.suite.id, "reason": reason},
        )
