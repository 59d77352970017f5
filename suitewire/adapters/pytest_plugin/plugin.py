"""Pytest plugin that reports a session to a remote collector.

The plugin activates when ``--remote-report-addr`` is given, or on CI when
``REMOTE_TEST_OUT_ADDR`` is set. A pytest session maps onto one suite:

- session start → suite start
- collection → the one-time setup phase
- each test item → one case, once its teardown has run
- session finish → suite end with the final tallies
"""

import logging
import time
import uuid
from datetime import timedelta

import pytest
from pydantic import ValidationError

from suitewire.config import load_settings
from suitewire.core.aggregator import SuiteAggregator
from suitewire.core.events import (
    CaseCompleted,
    SetupCompleted,
    SuiteEnded,
    SuiteStarted,
)
from suitewire.core.harness import (
    CodeLocation,
    SetupSummary,
    SpecComponentType,
    SpecFailure,
    SpecState,
)
from suitewire.main import configure_logging, create_reporter, resolve_addr

from .cases import (
    FAILURE_KIND_ATTR,
    PENDING_ATTR,
    PENDING_MARKER,
    CaseTracker,
    failure_kind,
)

logger = logging.getLogger(__name__)

PLUGIN_NAME = "suitewire-remote-report"


def new_suite_id() -> str:
    """A semi-random identifier for one suite run."""
    return uuid.uuid4().hex


class RemoteReportPlugin:
    """Feeds pytest session events into a suite aggregator."""

    def __init__(self, reporter: SuiteAggregator, suite_name: str | None = None):
        """Initialize the plugin.

        Args:
            reporter: Single-use aggregator for this session.
            suite_name: Suite name; defaults to the root directory name.
        """
        self.reporter = reporter
        self.suite_name = suite_name
        self.tracker = CaseTracker()
        self._started_at: float | None = None
        self._collection_errors: list[pytest.CollectReport] = []

    def _elapsed(self) -> timedelta:
        if self._started_at is None:
            return timedelta(0)
        return timedelta(seconds=time.perf_counter() - self._started_at)

    def _name(self, session: pytest.Session) -> str:
        return self.suite_name or session.config.rootpath.name

    def pytest_sessionstart(self, session: pytest.Session) -> None:
        self._started_at = time.perf_counter()
        self.reporter.handle(
            SuiteStarted(name=self._name(session), suite_id=new_suite_id())
        )

    def pytest_collectreport(self, report: pytest.CollectReport) -> None:
        if report.failed:
            self._collection_errors.append(report)

    def pytest_collection_finish(self, session: pytest.Session) -> None:
        """Report collection as the suite's one-time setup phase."""
        root = CodeLocation(file_name=str(session.config.rootpath), line_number=0)
        state = SpecState.PASSED
        failure = SpecFailure()
        if self._collection_errors:
            first = self._collection_errors[0]
            location = CodeLocation(file_name=first.nodeid or root.file_name, line_number=0)
            state = SpecState.FAILED
            failure = SpecFailure(
                message=(
                    f"{len(self._collection_errors)} error(s) during collection: "
                    f"{first.longreprtext.strip()}"
                ),
                location=location,
                component_type=SpecComponentType.BEFORE_SUITE,
                component_code_location=location,
            )
        self.reporter.handle(
            SetupCompleted(
                SetupSummary(
                    code_location=root,
                    state=state,
                    run_time=self._elapsed(),
                    failure=failure,
                )
            )
        )

    def pytest_runtest_logreport(self, report: pytest.TestReport) -> None:
        summary = self.tracker.record(report)
        if summary is not None:
            self.reporter.handle(CaseCompleted(summary))

    def pytest_sessionfinish(self, session: pytest.Session, exitstatus: int) -> None:
        if self.tracker.unfinished:
            logger.warning(
                f"{len(self.tracker.unfinished)} test(s) did not finish and "
                "will not be reported",
                extra={"exitstatus": int(exitstatus)},
            )
        try:
            self.reporter.handle(
                SuiteEnded(
                    self.tracker.tally.to_run_summary(
                        description=self._name(session), run_time=self._elapsed()
                    )
                )
            )
        finally:
            self.reporter.transport.close()


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("suitewire", "remote suite reporting")
    group.addoption(
        "--remote-report-addr",
        action="store",
        dest="remote_report_addr",
        default=None,
        metavar="HOST:PORT",
        help="Send suite reports to the collector at HOST:PORT "
        "(default: $REMOTE_TEST_OUT_ADDR when $CI is set).",
    )
    group.addoption(
        "--remote-report-suite-name",
        action="store",
        dest="remote_report_suite_name",
        default=None,
        help="Suite name used in remote reports (default: root directory name).",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        f"{PENDING_MARKER}: test is declared but not yet implemented; "
        "it is skipped and reported as pending.",
    )

    # xdist workers forward their reports to the controller, which reports
    if hasattr(config, "workerinput"):
        return

    try:
        settings = load_settings()
    except ValidationError as e:
        raise pytest.UsageError(f"invalid suitewire settings: {e}") from e

    try:
        addr = resolve_addr(settings, config.getoption("remote_report_addr"))
    except ValueError as e:
        raise pytest.UsageError(f"invalid --remote-report-addr: {e}") from e
    if addr is None:
        return

    configure_logging(settings.log_level, settings.log_format)
    reporter = create_reporter(settings, addr)
    config.pluginmanager.register(
        RemoteReportPlugin(
            reporter, suite_name=config.getoption("remote_report_suite_name")
        ),
        PLUGIN_NAME,
    )


def pytest_runtest_setup(item: pytest.Item) -> None:
    marker = item.get_closest_marker(PENDING_MARKER)
    if marker is not None:
        pytest.skip(marker.kwargs.get("reason", "pending"))


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item: pytest.Item, call: pytest.CallInfo[None]):
    outcome = yield
    report = outcome.get_result()
    if item.get_closest_marker(PENDING_MARKER) is not None:
        setattr(report, PENDING_ATTR, True)
    if report.failed and call.excinfo is not None:
        setattr(report, FAILURE_KIND_ATTR, failure_kind(call.excinfo))
