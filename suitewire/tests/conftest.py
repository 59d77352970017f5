"""Shared fixtures for suitewire tests."""

from datetime import timedelta

import pytest

from suitewire.core.aggregator import SuiteAggregator
from suitewire.core.harness import (
    CodeLocation,
    RunSummary,
    SetupSummary,
    SpecComponentType,
    SpecFailure,
    SpecState,
    SpecSummary,
)
from suitewire.core.throttle import ThrottleGate
from suitewire.tests.fakes import FakeClock, FakeReportTransport


def make_spec(
    text: str = "creates a widget",
    state: SpecState = SpecState.PASSED,
    run_time: timedelta = timedelta(milliseconds=10),
    output: str = "",
    failure: SpecFailure | None = None,
) -> SpecSummary:
    """Build a spec nested as Widgets → text."""
    return SpecSummary(
        component_texts=("Widgets", text),
        component_code_locations=(
            CodeLocation("widgets_test.py", 10),
            CodeLocation("widgets_test.py", 12),
        ),
        state=state,
        run_time=run_time,
        captured_output=output,
        failure=failure or SpecFailure(),
    )


def make_failure(
    component_type: SpecComponentType = SpecComponentType.IT,
    message: str = "expected 1 to equal 2",
) -> SpecFailure:
    return SpecFailure(
        message=message,
        location=CodeLocation("widgets_test.py", 14, "stack..."),
        component_index=1,
        component_type=component_type,
        component_code_location=CodeLocation("widgets_test.py", 12),
    )


def make_setup(state: SpecState = SpecState.PASSED) -> SetupSummary:
    return SetupSummary(
        code_location=CodeLocation("suite_test.py", 5),
        state=state,
        run_time=timedelta(milliseconds=3),
    )


def make_run_summary(
    total: int = 1,
    passed: int = 1,
    failed: int = 0,
    skipped: int = 0,
    pending: int = 0,
    flaked: int = 0,
) -> RunSummary:
    return RunSummary(
        suite_description="Widgets",
        run_time=timedelta(seconds=2),
        number_of_total_specs=total,
        number_of_pending_specs=pending,
        number_of_skipped_specs=skipped,
        number_of_passed_specs=passed,
        number_of_failed_specs=failed,
        number_of_flaked_specs=flaked,
    )


@pytest.fixture
def transport() -> FakeReportTransport:
    """Create a fake transport that records messages."""
    return FakeReportTransport()


@pytest.fixture
def clock() -> FakeClock:
    """Create a manually advanced clock."""
    return FakeClock()


@pytest.fixture
def aggregator(transport: FakeReportTransport, clock: FakeClock) -> SuiteAggregator:
    """Create an aggregator with a one second update interval."""
    return SuiteAggregator(
        transport=transport,
        gate=ThrottleGate(interval_seconds=1.0, clock=clock),
    )
