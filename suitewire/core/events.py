"""Lifecycle events consumed by the suite aggregator.

A harness run produces, in order: exactly one SuiteStarted, at most one
SetupCompleted, any number of CaseCompleted, at most one TeardownCompleted,
and exactly one SuiteEnded.
"""

from dataclasses import dataclass
from typing import TypeAlias

from .harness import RunSummary, SetupSummary, SpecSummary


@dataclass(frozen=True)
class SuiteStarted:
    """The suite is about to run."""

    name: str
    suite_id: str


@dataclass(frozen=True)
class SetupCompleted:
    """The one-time suite setup phase finished."""

    summary: SetupSummary


@dataclass(frozen=True)
class CaseCompleted:
    """A single case finished."""

    summary: SpecSummary


@dataclass(frozen=True)
class TeardownCompleted:
    """The one-time suite teardown phase finished."""

    summary: SetupSummary


@dataclass(frozen=True)
class SuiteEnded:
    """The suite finished; carries the final tallies."""

    summary: RunSummary


SuiteEvent: TypeAlias = (
    SuiteStarted | SetupCompleted | CaseCompleted | TeardownCompleted | SuiteEnded
)
