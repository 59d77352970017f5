"""Translation of pytest reports into harness summaries.

A pytest item reports up to three phases (setup, call, teardown), and
pytest-rerunfailures may replay them. CaseTracker merges the phases of the
final attempt into one SpecSummary once the item's teardown has been logged.
"""

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

import pytest

from suitewire.core.harness import (
    CodeLocation,
    RunSummary,
    SpecComponentType,
    SpecFailure,
    SpecState,
    SpecSummary,
)

logger = logging.getLogger(__name__)

PENDING_MARKER = "pending"
PENDING_ATTR = "suitewire_pending"
FAILURE_KIND_ATTR = "suitewire_failure_kind"

FAILURE_ASSERTION = "assertion"
FAILURE_TIMEOUT = "timeout"
FAILURE_ERROR = "error"

_PHASE_COMPONENTS = {
    "setup": SpecComponentType.BEFORE_EACH,
    "call": SpecComponentType.IT,
    "teardown": SpecComponentType.AFTER_EACH,
}


def _code_location(path: str, lineno: int | None) -> CodeLocation:
    """pytest line numbers are 0-based; report locations are 1-based."""
    return CodeLocation(
        file_name=path,
        line_number=lineno + 1 if lineno is not None else 0,
    )


def component_path(
    report: pytest.TestReport,
) -> tuple[tuple[str, ...], tuple[CodeLocation, ...]]:
    """Split a node id into component texts and locations.

    ``tests/test_widgets.py::TestWidget::test_create[small]`` becomes
    the module, the class and the test. Only the test itself has a known
    line; containers carry the file alone.
    """
    parts = tuple(report.nodeid.split("::"))
    path, lineno, _ = report.location
    containers = tuple(CodeLocation(file_name=path, line_number=0) for _ in parts[:-1])
    return parts, containers + (_code_location(path, lineno),)


def _crash_message(report: pytest.TestReport) -> tuple[str, CodeLocation | None]:
    reprcrash = getattr(report.longrepr, "reprcrash", None)
    if reprcrash is None:
        return report.longreprtext.strip(), None
    location = CodeLocation(
        file_name=str(reprcrash.path),
        line_number=reprcrash.lineno,
        full_stack_trace=report.longreprtext,
    )
    return reprcrash.message, location


def failure_kind(excinfo: pytest.ExceptionInfo[BaseException]) -> str:
    """Tell assertion failures, timeouts and unexpected errors apart."""
    if excinfo.errisinstance(pytest.fail.Exception):
        if str(excinfo.value).startswith("Timeout"):
            return FAILURE_TIMEOUT
        return FAILURE_ASSERTION
    if excinfo.errisinstance(AssertionError):
        return FAILURE_ASSERTION
    return FAILURE_ERROR


def classify_failure(report: pytest.TestReport) -> SpecState:
    """Map a failed phase report to a harness state.

    Reports that were not tagged by the plugin count as plain failures.
    """
    kind = getattr(report, FAILURE_KIND_ATTR, FAILURE_ASSERTION)
    if kind == FAILURE_TIMEOUT:
        return SpecState.TIMED_OUT
    if kind == FAILURE_ERROR:
        return SpecState.PANICKED
    return SpecState.FAILED


def _is_pending(report: pytest.TestReport) -> bool:
    # Set by the plugin from the item's markers; keywords also hold node names
    return hasattr(report, "wasxfail") or getattr(report, PENDING_ATTR, False)


@dataclass
class _Attempt:
    """Reports of the current attempt at running one item."""

    reports: list[pytest.TestReport] = field(default_factory=list)
    reruns: int = 0


def build_spec_summary(reports: list[pytest.TestReport]) -> SpecSummary:
    """Merge the phase reports of one attempt into a spec summary.

    The first phase that did not pass decides the state.
    """
    final = reports[-1]
    texts, locations = component_path(final)
    run_time = timedelta(seconds=sum(r.duration for r in reports))
    output = final.capstdout + final.capstderr

    state = SpecState.PASSED
    failure = SpecFailure()
    for report in reports:
        if report.skipped:
            state = SpecState.PENDING if _is_pending(report) else SpecState.SKIPPED
            break
        if report.failed:
            message, crash_location = _crash_message(report)
            state = classify_failure(report)
            failure = SpecFailure(
                message=message,
                location=crash_location or locations[-1],
                forwarded_panic=message if state == SpecState.PANICKED else "",
                component_index=len(texts) - 1,
                component_type=_PHASE_COMPONENTS.get(
                    report.when, SpecComponentType.INVALID
                ),
                component_code_location=locations[-1],
            )
            break

    return SpecSummary(
        component_texts=texts,
        component_code_locations=locations,
        state=state,
        run_time=run_time,
        captured_output=output,
        failure=failure,
    )


@dataclass
class RunTally:
    """Running counts of finished cases, by outcome."""

    total: int = 0
    pending: int = 0
    skipped: int = 0
    passed: int = 0
    failed: int = 0
    flaked: int = 0

    def add(self, summary: SpecSummary, reruns: int = 0) -> None:
        self.total += 1
        if summary.state == SpecState.PENDING:
            self.pending += 1
        elif summary.state == SpecState.SKIPPED:
            self.skipped += 1
        elif summary.state == SpecState.PASSED:
            self.passed += 1
            if reruns:
                self.flaked += 1
        else:
            self.failed += 1

    def to_run_summary(self, description: str, run_time: timedelta) -> RunSummary:
        return RunSummary(
            suite_description=description,
            run_time=run_time,
            number_of_total_specs=self.total,
            number_of_pending_specs=self.pending,
            number_of_skipped_specs=self.skipped,
            number_of_passed_specs=self.passed,
            number_of_failed_specs=self.failed,
            number_of_flaked_specs=self.flaked,
        )


class CaseTracker:
    """Collects phase reports per item and yields finished cases."""

    def __init__(self) -> None:
        self._attempts: dict[str, _Attempt] = {}
        self.tally = RunTally()

    def record(self, report: pytest.TestReport) -> SpecSummary | None:
        """Record a phase report.

        Returns:
            The item's summary once its final attempt has torn down,
            otherwise None.
        """
        attempt = self._attempts.setdefault(report.nodeid, _Attempt())

        if report.outcome == "rerun":
            # The failed attempt is abandoned without a teardown report
            attempt.reruns += 1
            attempt.reports.clear()
            return None

        attempt.reports.append(report)
        if report.when != "teardown":
            return None

        del self._attempts[report.nodeid]
        summary = build_spec_summary(attempt.reports)
        self.tally.add(summary, reruns=attempt.reruns)
        logger.debug(
            f"Case finished: {report.nodeid} ({summary.state.value})",
            extra={"reruns": attempt.reruns},
        )
        return summary

    @property
    def unfinished(self) -> dict[str, Any]:
        """Items whose teardown has not been seen (e.g. interrupted runs)."""
        return dict(self._attempts)
