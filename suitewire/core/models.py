"""Domain models for the suitewire reporting core.

All models in this module use only Python standard library types,
ensuring zero external dependencies in the core domain.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum


class SuiteAction(Enum):
    """The kind of event a suite message represents."""

    START = "suite-start"  # sent before anything has run
    UPDATE = "suite-update"  # new cases, setup or teardown results
    END = "suite-end"  # sent once the suite completes


class Outcome(Enum):
    """The terminal classification of a case."""

    PASSED = "passed"
    SKIPPED = "skipped"
    FAILED = "failed"
    PANICKED = "panicked"
    TIMED_OUT = "timed-out"
    PENDING = "pending"


class ComponentType(Enum):
    """The kind of component in which a failure occurred.

    CONTAINER is a grouping (module, class, describe block) and IT is the
    case body itself.
    """

    CONTAINER = "Container"
    BEFORE_EACH = "BeforeEach"
    JUST_BEFORE_EACH = "JustBeforeEach"
    JUST_AFTER_EACH = "JustAfterEach"
    AFTER_EACH = "AfterEach"
    IT = "It"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class Location:
    """A source code location."""

    file: str
    line: int
    stack: str = ""

    def __post_init__(self) -> None:
        """Validate location invariants on creation."""
        if self.line < 0:
            raise ValueError(f"line must be non-negative, got {self.line}")


@dataclass(frozen=True)
class StatusComponent:
    """One level of grouping in the path to a case."""

    text: str
    location: Location


@dataclass(frozen=True)
class FailureComponent:
    """The component of a case in which a failure occurred."""

    type: ComponentType
    location: Location
    index: int  # position of the component in the case's path


@dataclass(frozen=True)
class FailureInfo:
    """Details of a case that did not succeed."""

    message: str
    location: Location
    component: FailureComponent
    panic: str = ""  # captured panic or unexpected exception text, if any


@dataclass(frozen=True)
class PartStatus:
    """The outcome of a case, or of the one-time setup or teardown phase."""

    components: tuple[StatusComponent, ...]  # immutable for frozen dataclass
    state: Outcome
    run_time: timedelta
    output: str = ""
    failure: FailureInfo | None = None

    def __post_init__(self) -> None:
        """Validate part status invariants on creation."""
        if isinstance(self.components, list):
            object.__setattr__(self, "components", tuple(self.components))
        if self.run_time < timedelta(0):
            raise ValueError(f"run_time must be non-negative, got {self.run_time}")
        if self.failure is not None and self.state in {Outcome.PASSED, Outcome.PENDING}:
            raise ValueError(
                f"failure details are not allowed for {self.state.value} results"
            )


@dataclass(frozen=True)
class SuiteStats:
    """Final tallies of the cases run, broken down by outcome."""

    total: int = 0
    pending: int = 0
    skipped: int = 0
    passed: int = 0
    failed: int = 0
    flakes: int = 0

    def __post_init__(self) -> None:
        """Validate that all tallies are non-negative."""
        for name in ("total", "pending", "skipped", "passed", "failed", "flakes"):
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")


@dataclass(frozen=True)
class SuiteReport:
    """A point-in-time snapshot of a suite, as carried by a message."""

    name: str
    id: str
    run_time: timedelta
    before_suite: PartStatus | None
    after_suite: PartStatus | None
    more_test_cases: tuple[PartStatus, ...]
    stats: SuiteStats | None


@dataclass(frozen=True)
class SuiteMessage:
    """The envelope sent to the collector for each suite event."""

    action: SuiteAction
    suite: SuiteReport


@dataclass
class Suite:
    """An in-progress or complete test suite.

    Accumulates results between sends. Cases in ``more_test_cases`` are new
    since the last acknowledged send; they are dropped once the collector
    accepts them and are never sent twice.

    Note: This dataclass is intentionally mutable. Messages carry frozen
    snapshots taken with ``snapshot()``.
    """

    name: str
    id: str
    run_time: timedelta = timedelta(0)
    before_suite: PartStatus | None = None
    after_suite: PartStatus | None = None
    more_test_cases: list[PartStatus] = field(default_factory=list)
    stats: SuiteStats | None = None  # only set once the suite has ended

    @property
    def ended(self) -> bool:
        """Whether final tallies have been recorded."""
        return self.stats is not None

    def record_before_suite(self, result: PartStatus) -> None:
        """Record the setup phase result, replacing any earlier one."""
        self.before_suite = result

    def record_after_suite(self, result: PartStatus) -> None:
        """Record the teardown phase result, replacing any earlier one."""
        self.after_suite = result

    def add_case(self, result: PartStatus) -> None:
        """Queue a completed case for the next send."""
        self.more_test_cases.append(result)

    def finish(self, run_time: timedelta, stats: SuiteStats) -> None:
        """Record the total duration and final tallies."""
        if self.ended:
            raise ValueError(f"Suite {self.name!r} has already ended")
        self.run_time = run_time
        self.stats = stats

    def acknowledge(self, report: SuiteReport) -> None:
        """Drop the cases carried by a report the collector accepted."""
        delivered = len(report.more_test_cases)
        if delivered > len(self.more_test_cases):
            raise ValueError(
                f"Report carries {delivered} cases but only "
                f"{len(self.more_test_cases)} are pending"
            )
        del self.more_test_cases[:delivered]

    def snapshot(self) -> SuiteReport:
        """Freeze the current state into a report."""
        return SuiteReport(
            name=self.name,
            id=self.id,
            run_time=self.run_time,
            before_suite=self.before_suite,
            after_suite=self.after_suite,
            more_test_cases=tuple(self.more_test_cases),
            stats=self.stats,
        )
