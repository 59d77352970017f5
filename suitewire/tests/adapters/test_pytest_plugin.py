"""Tests for the pytest plugin and its case tracking.

Session tests run a real inner pytest session through ``pytester`` with the
plugin wired to a fake transport.
"""

from datetime import timedelta
from typing import Any

import pytest

from suitewire.adapters.pytest_plugin.cases import (
    FAILURE_KIND_ATTR,
    FAILURE_TIMEOUT,
    PENDING_ATTR,
    CaseTracker,
    RunTally,
    component_path,
)
from suitewire.adapters.pytest_plugin.plugin import RemoteReportPlugin
from suitewire.core.aggregator import SuiteAggregator
from suitewire.core.harness import SpecState
from suitewire.core.models import (
    ComponentType,
    Outcome,
    PartStatus,
    SuiteAction,
    SuiteStats,
)
from suitewire.core.throttle import ThrottleGate
from suitewire.tests.fakes import FakeReportTransport

WIDGET_TESTS = """
    import pytest

    def test_passes():
        print("hello from a widget")

    def test_fails():
        assert 1 == 2

    def test_errors():
        raise RuntimeError("boom")

    def test_skipped():
        pytest.skip("not today")

    @pytest.mark.xfail(reason="known bug")
    def test_expected_failure():
        assert False

    @pytest.mark.pending
    def test_not_written():
        pass

    class TestWidget:
        def test_nested(self):
            pass
"""


@pytest.fixture(autouse=True)
def no_ci_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the inner session from enabling reporting on its own."""
    monkeypatch.delenv("CI", raising=False)
    monkeypatch.delenv("REMOTE_TEST_OUT_ADDR", raising=False)


def run_session(
    pytester: pytest.Pytester,
    transport: FakeReportTransport,
    suite_name: str | None = "widgets",
) -> pytest.HookRecorder:
    plugin = RemoteReportPlugin(
        SuiteAggregator(transport, ThrottleGate(interval_seconds=0)),
        suite_name=suite_name,
    )
    return pytester.inline_run(plugins=[plugin])


def cases_by_name(transport: FakeReportTransport) -> dict[str, PartStatus]:
    return {
        case.components[-1].text: case
        for message in transport.delivered
        for case in message.suite.more_test_cases
    }


def make_report(
    when: str,
    outcome: str = "passed",
    nodeid: str = "test_w.py::test_flaky",
    longrepr: Any = None,
    keywords: dict[str, Any] | None = None,
    **extra: Any,
) -> pytest.TestReport:
    return pytest.TestReport(
        nodeid=nodeid,
        location=("test_w.py", 2, "test_flaky"),
        keywords=keywords or {},
        outcome=outcome,
        longrepr=longrepr,
        when=when,
        duration=0.5,
        **extra,
    )


# ============================================================================
# Full sessions
# ============================================================================


class TestSession:
    """One pytest session reported as one suite."""

    def test_message_sequence(
        self, pytester: pytest.Pytester, transport: FakeReportTransport
    ) -> None:
        pytester.makepyfile(test_widgets=WIDGET_TESTS)
        run_session(pytester, transport)

        actions = transport.actions()
        assert actions[0] == SuiteAction.START
        assert actions[-1] == SuiteAction.END
        # setup phase plus seven cases
        assert actions[1:-1] == [SuiteAction.UPDATE] * 8
        assert {m.suite.name for m in transport.delivered} == {"widgets"}
        assert len({m.suite.id for m in transport.delivered}) == 1
        assert transport.closed

    def test_case_states(
        self, pytester: pytest.Pytester, transport: FakeReportTransport
    ) -> None:
        pytester.makepyfile(test_widgets=WIDGET_TESTS)
        run_session(pytester, transport)

        states = {name: case.state for name, case in cases_by_name(transport).items()}
        assert states == {
            "test_passes": Outcome.PASSED,
            "test_fails": Outcome.FAILED,
            "test_errors": Outcome.PANICKED,
            "test_skipped": Outcome.SKIPPED,
            "test_expected_failure": Outcome.PENDING,
            "test_not_written": Outcome.PENDING,
            "test_nested": Outcome.PASSED,
        }

    def test_final_stats(
        self, pytester: pytest.Pytester, transport: FakeReportTransport
    ) -> None:
        pytester.makepyfile(test_widgets=WIDGET_TESTS)
        run_session(pytester, transport)

        end = transport.delivered[-1]
        assert end.suite.stats == SuiteStats(
            total=7, pending=2, skipped=1, passed=2, failed=2, flakes=0
        )
        assert end.suite.run_time > timedelta(0)

    def test_failure_details(
        self, pytester: pytest.Pytester, transport: FakeReportTransport
    ) -> None:
        pytester.makepyfile(test_widgets=WIDGET_TESTS)
        run_session(pytester, transport)
        cases = cases_by_name(transport)

        failed = cases["test_fails"].failure
        assert failed is not None
        assert "assert 1 == 2" in failed.message
        assert failed.panic == ""
        assert failed.component.type == ComponentType.IT
        assert failed.location.file.endswith("test_widgets.py")

        errored = cases["test_errors"].failure
        assert errored is not None
        assert "RuntimeError: boom" in errored.panic

        assert cases["test_passes"].failure is None
        assert "hello from a widget" in cases["test_passes"].output

    def test_component_paths(
        self, pytester: pytest.Pytester, transport: FakeReportTransport
    ) -> None:
        pytester.makepyfile(test_widgets=WIDGET_TESTS)
        run_session(pytester, transport)

        nested = cases_by_name(transport)["test_nested"]
        assert [c.text for c in nested.components] == [
            "test_widgets.py",
            "TestWidget",
            "test_nested",
        ]
        assert nested.components[0].location.line == 0
        assert nested.components[-1].location.line > 0

    def test_setup_phase_passes_after_clean_collection(
        self, pytester: pytest.Pytester, transport: FakeReportTransport
    ) -> None:
        pytester.makepyfile(test_widgets=WIDGET_TESTS)
        run_session(pytester, transport)

        setup = transport.delivered[1].suite.before_suite
        assert setup is not None
        assert setup.state == Outcome.PASSED
        assert [c.text for c in setup.components] == [""]

    def test_collection_error_fails_setup_phase(
        self, pytester: pytest.Pytester, transport: FakeReportTransport
    ) -> None:
        pytester.makepyfile(
            test_broken="import module_that_does_not_exist\n",
            test_fine="def test_fine():\n    pass\n",
        )
        run_session(pytester, transport)

        assert transport.actions() == [
            SuiteAction.START,
            SuiteAction.UPDATE,
            SuiteAction.END,
        ]
        setup = transport.delivered[1].suite.before_suite
        assert setup is not None
        assert setup.state == Outcome.FAILED
        assert setup.failure is not None
        assert setup.failure.message.startswith("1 error(s) during collection")
        assert transport.delivered[-1].suite.stats == SuiteStats(total=0)

    def test_suite_name_defaults_to_root_directory(
        self, pytester: pytest.Pytester, transport: FakeReportTransport
    ) -> None:
        pytester.makepyfile(test_fine="def test_fine():\n    pass\n")
        run_session(pytester, transport, suite_name=None)

        assert transport.delivered[0].suite.name == pytester.path.name

    def test_rejected_messages_do_not_fail_session(
        self, pytester: pytest.Pytester, transport: FakeReportTransport
    ) -> None:
        pytester.makepyfile(test_fine="def test_fine():\n    pass\n")
        transport.set_should_fail(True)

        result = run_session(pytester, transport)

        result.assertoutcome(passed=1)
        assert transport.delivered == []
        assert transport.actions()[-1] == SuiteAction.END
        assert transport.closed


class TestPendingMarker:
    def test_marked_test_body_never_runs(
        self, pytester: pytest.Pytester, transport: FakeReportTransport
    ) -> None:
        pytester.makepyfile(
            test_todo="""
            import pytest

            @pytest.mark.pending(reason="needs a widget factory")
            def test_todo():
                raise AssertionError("should not run")
            """
        )
        result = run_session(pytester, transport)

        result.assertoutcome(skipped=1)
        assert cases_by_name(transport)["test_todo"].state == Outcome.PENDING

    def test_skip_inside_pending_directory_is_skipped(
        self, pytester: pytest.Pytester, transport: FakeReportTransport
    ) -> None:
        """Node names are not markers."""
        package = pytester.mkpydir("pending")
        (package / "test_later.py").write_text(
            "import pytest\n\n"
            "@pytest.mark.skip(reason='not today')\n"
            "def test_later():\n"
            "    pass\n"
        )
        run_session(pytester, transport)

        assert cases_by_name(transport)["test_later"].state == Outcome.SKIPPED
        assert transport.delivered[-1].suite.stats == SuiteStats(total=1, skipped=1)


class TestActivation:
    """Activation through --remote-report-addr in a separate process."""

    def test_unresolvable_collector_does_not_fail_session(
        self, pytester: pytest.Pytester
    ) -> None:
        pytester.makepyfile(test_fine="def test_fine():\n    pass\n")

        result = pytester.runpytest_subprocess(
            "-s", "--remote-report-addr", "x" * 64 + ":80"
        )

        assert result.ret == pytest.ExitCode.OK
        result.stdout.fnmatch_lines(["*1 passed*"])
        result.stderr.fnmatch_lines(["*unable to send suite-start*"])

    def test_address_with_scheme_is_a_usage_error(
        self, pytester: pytest.Pytester
    ) -> None:
        pytester.makepyfile(test_fine="def test_fine():\n    pass\n")

        result = pytester.runpytest_subprocess(
            "--remote-report-addr", "http://collector:8080"
        )

        assert result.ret == pytest.ExitCode.USAGE_ERROR
        result.stderr.fnmatch_lines(["*invalid --remote-report-addr*"])


# ============================================================================
# Case tracking
# ============================================================================


class TestCaseTracker:
    """Merging phase reports into cases."""

    def test_case_finishes_on_teardown(self) -> None:
        tracker = CaseTracker()

        assert tracker.record(make_report("setup")) is None
        assert tracker.record(make_report("call")) is None
        summary = tracker.record(make_report("teardown"))

        assert summary is not None
        assert summary.state == SpecState.PASSED
        assert summary.run_time == timedelta(seconds=1.5)
        assert summary.component_texts == ("test_w.py", "test_flaky")
        assert not tracker.unfinished

    def test_rerun_then_pass_is_a_flake(self) -> None:
        tracker = CaseTracker()

        tracker.record(make_report("setup"))
        tracker.record(make_report("call", outcome="rerun", longrepr="boom"))
        tracker.record(make_report("setup"))
        tracker.record(make_report("call"))
        summary = tracker.record(make_report("teardown"))

        assert summary is not None
        assert summary.state == SpecState.PASSED
        assert summary.run_time == timedelta(seconds=1.5)
        assert tracker.tally.passed == 1
        assert tracker.tally.flaked == 1

    def test_rerun_then_fail_is_not_a_flake(self) -> None:
        tracker = CaseTracker()

        tracker.record(make_report("setup"))
        tracker.record(make_report("call", outcome="rerun", longrepr="boom"))
        tracker.record(make_report("setup"))
        tracker.record(make_report("call", outcome="failed", longrepr="boom again"))
        summary = tracker.record(make_report("teardown"))

        assert summary is not None
        assert summary.state == SpecState.FAILED
        assert summary.failure.message == "boom again"
        assert tracker.tally.failed == 1
        assert tracker.tally.flaked == 0

    def test_timeout_failure(self) -> None:
        tracker = CaseTracker()

        tracker.record(make_report("setup"))
        call = make_report("call", outcome="failed", longrepr="Timeout >1.0s")
        setattr(call, FAILURE_KIND_ATTR, FAILURE_TIMEOUT)
        tracker.record(call)
        summary = tracker.record(make_report("teardown"))

        assert summary is not None
        assert summary.state == SpecState.TIMED_OUT
        assert tracker.tally.failed == 1

    def test_pending_comes_from_marker_tag_not_keywords(self) -> None:
        tracker = CaseTracker()
        nodeid = "pending/test_w.py::test_flaky"

        tracker.record(
            make_report(
                "setup",
                outcome="skipped",
                nodeid=nodeid,
                longrepr="skip",
                keywords={"pending": 1, "test_flaky": 1},
            )
        )
        skipped = tracker.record(make_report("teardown", nodeid=nodeid))

        tagged = make_report("setup", outcome="skipped", longrepr="pending")
        setattr(tagged, PENDING_ATTR, True)
        tracker.record(tagged)
        pending = tracker.record(make_report("teardown"))

        assert skipped is not None
        assert skipped.state == SpecState.SKIPPED
        assert pending is not None
        assert pending.state == SpecState.PENDING

    def test_interrupted_item_is_unfinished(self) -> None:
        tracker = CaseTracker()
        tracker.record(make_report("setup"))
        tracker.record(make_report("call"))

        assert list(tracker.unfinished) == ["test_w.py::test_flaky"]
        assert tracker.tally.total == 0


def test_component_path_uses_one_based_lines() -> None:
    texts, locations = component_path(
        make_report("call", nodeid="test_w.py::TestFlaky::test_flaky[1]")
    )
    assert texts == ("test_w.py", "TestFlaky", "test_flaky[1]")
    assert [loc.line_number for loc in locations] == [0, 0, 3]


def test_tally_counts_timeouts_and_panics_as_failed() -> None:
    tally = RunTally()
    tracker = CaseTracker()
    for kind in ("timeout", "error"):
        nodeid = f"test_w.py::test_{kind}"
        tracker.record(make_report("setup", nodeid=nodeid))
        call = make_report("call", outcome="failed", nodeid=nodeid, longrepr=kind)
        setattr(call, FAILURE_KIND_ATTR, kind)
        tracker.record(call)
        summary = tracker.record(make_report("teardown", nodeid=nodeid))
        assert summary is not None
        tally.add(summary)

    run = tally.to_run_summary("widgets", timedelta(seconds=1))
    assert run.number_of_total_specs == 2
    assert run.number_of_failed_specs == 2
