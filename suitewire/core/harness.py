"""Harness-native summaries consumed by the reporting core.

A test harness describes what happened in its own, richer vocabulary: its
spec states include an INVALID pseudo-state, and its component types cover
suite-level hooks that never appear in a case path. Harness adapters build
these summaries and the core maps them to report models (see mapping.py).
"""

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum


class SpecState(Enum):
    """Spec states as reported by the harness."""

    INVALID = "invalid"
    PENDING = "pending"
    SKIPPED = "skipped"
    PASSED = "passed"
    FAILED = "failed"
    PANICKED = "panicked"
    TIMED_OUT = "timed-out"


class SpecComponentType(Enum):
    """Component types as reported by the harness."""

    INVALID = "invalid"
    BEFORE_SUITE = "before-suite"
    AFTER_SUITE = "after-suite"
    CONTAINER = "container"
    BEFORE_EACH = "before-each"
    JUST_BEFORE_EACH = "just-before-each"
    JUST_AFTER_EACH = "just-after-each"
    AFTER_EACH = "after-each"
    IT = "it"
    MEASURE = "measure"


@dataclass(frozen=True)
class CodeLocation:
    """A location in the code under test."""

    file_name: str
    line_number: int
    full_stack_trace: str = ""


NO_LOCATION = CodeLocation(file_name="", line_number=0)


@dataclass(frozen=True)
class SpecFailure:
    """Failure details captured by the harness.

    Only meaningful when the owning summary's state is a failing one.
    """

    message: str = ""
    location: CodeLocation = NO_LOCATION
    forwarded_panic: str = ""
    component_index: int = 0
    component_type: SpecComponentType = SpecComponentType.INVALID
    component_code_location: CodeLocation = NO_LOCATION


@dataclass(frozen=True)
class SpecSummary:
    """Summary of a single completed spec (test case)."""

    component_texts: tuple[str, ...]
    component_code_locations: tuple[CodeLocation, ...]
    state: SpecState
    run_time: timedelta
    captured_output: str = ""
    failure: SpecFailure = field(default_factory=SpecFailure)

    def __post_init__(self) -> None:
        """Validate that every component text has a location."""
        if len(self.component_texts) != len(self.component_code_locations):
            raise ValueError(
                f"got {len(self.component_texts)} component texts but "
                f"{len(self.component_code_locations)} component locations"
            )


@dataclass(frozen=True)
class SetupSummary:
    """Summary of a one-time suite setup or teardown phase."""

    code_location: CodeLocation
    state: SpecState
    run_time: timedelta
    captured_output: str = ""
    failure: SpecFailure = field(default_factory=SpecFailure)


@dataclass(frozen=True)
class RunSummary:
    """Summary of a finished suite."""

    suite_description: str
    run_time: timedelta
    number_of_total_specs: int = 0
    number_of_pending_specs: int = 0
    number_of_skipped_specs: int = 0
    number_of_passed_specs: int = 0
    number_of_failed_specs: int = 0
    number_of_flaked_specs: int = 0
