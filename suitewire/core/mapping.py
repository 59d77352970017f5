"""Mapping from harness summaries to report models.

This module converts the harness vocabulary (see harness.py) into the
report vocabulary sent to the collector. An INVALID harness state means the
harness and the reporter have desynchronized, so it is never defaulted.
"""

from .errors import OutcomeMappingError
from .harness import (
    CodeLocation,
    RunSummary,
    SetupSummary,
    SpecComponentType,
    SpecFailure,
    SpecState,
    SpecSummary,
)
from .models import (
    ComponentType,
    FailureComponent,
    FailureInfo,
    Location,
    Outcome,
    PartStatus,
    StatusComponent,
    SuiteStats,
)

_OUTCOMES = {
    SpecState.PENDING: Outcome.PENDING,
    SpecState.SKIPPED: Outcome.SKIPPED,
    SpecState.PASSED: Outcome.PASSED,
    SpecState.FAILED: Outcome.FAILED,
    SpecState.PANICKED: Outcome.PANICKED,
    SpecState.TIMED_OUT: Outcome.TIMED_OUT,
}

_COMPONENT_TYPES = {
    SpecComponentType.CONTAINER: ComponentType.CONTAINER,
    SpecComponentType.BEFORE_EACH: ComponentType.BEFORE_EACH,
    SpecComponentType.JUST_BEFORE_EACH: ComponentType.JUST_BEFORE_EACH,
    SpecComponentType.JUST_AFTER_EACH: ComponentType.JUST_AFTER_EACH,
    SpecComponentType.AFTER_EACH: ComponentType.AFTER_EACH,
    SpecComponentType.IT: ComponentType.IT,
}


class OutcomeMapper:
    """Translates harness summaries into report models.

    No external dependencies. All methods are static as the class carries
    no state.
    """

    @staticmethod
    def to_outcome(state: SpecState) -> Outcome:
        """Map a harness spec state to a report outcome.

        Raises:
            OutcomeMappingError: If the state is INVALID or unknown.
        """
        try:
            return _OUTCOMES[state]
        except KeyError:
            raise OutcomeMappingError(
                f"encountered spec with invalid state: {state!r}"
            ) from None

    @staticmethod
    def to_component_type(component_type: SpecComponentType) -> ComponentType:
        """Map a harness component type; anything unrecognized is UNKNOWN."""
        return _COMPONENT_TYPES.get(component_type, ComponentType.UNKNOWN)

    @staticmethod
    def to_location(location: CodeLocation) -> Location:
        """Convert a harness code location to its serializable form."""
        return Location(
            file=location.file_name,
            line=location.line_number,
            stack=location.full_stack_trace,
        )

    @staticmethod
    def to_failure(failure: SpecFailure) -> FailureInfo:
        """Convert harness failure details."""
        return FailureInfo(
            message=failure.message,
            location=OutcomeMapper.to_location(failure.location),
            panic=failure.forwarded_panic,
            component=FailureComponent(
                type=OutcomeMapper.to_component_type(failure.component_type),
                location=OutcomeMapper.to_location(failure.component_code_location),
                index=failure.component_index,
            ),
        )

    @staticmethod
    def to_components(
        texts: tuple[str, ...], locations: tuple[CodeLocation, ...]
    ) -> tuple[StatusComponent, ...]:
        """Pair component texts with their locations."""
        if len(texts) != len(locations):
            raise ValueError(
                f"got {len(texts)} component texts but {len(locations)} locations"
            )
        return tuple(
            StatusComponent(text=text, location=OutcomeMapper.to_location(loc))
            for text, loc in zip(texts, locations)
        )

    @staticmethod
    def _part_status(
        components: tuple[StatusComponent, ...],
        state: SpecState,
        summary: SpecSummary | SetupSummary,
    ) -> PartStatus:
        outcome = OutcomeMapper.to_outcome(state)
        failure = None
        # Failure details only accompany outcomes other than passed/pending
        if outcome not in {Outcome.PASSED, Outcome.PENDING}:
            failure = OutcomeMapper.to_failure(summary.failure)
        return PartStatus(
            components=components,
            state=outcome,
            run_time=summary.run_time,
            output=summary.captured_output,
            failure=failure,
        )

    @staticmethod
    def spec_to_part_status(summary: SpecSummary) -> PartStatus:
        """Convert a completed spec into a case result."""
        components = OutcomeMapper.to_components(
            summary.component_texts, summary.component_code_locations
        )
        return OutcomeMapper._part_status(components, summary.state, summary)

    @staticmethod
    def setup_to_part_status(summary: SetupSummary) -> PartStatus:
        """Convert a setup or teardown phase into a result.

        Suite-level phases have no text; their path is a single component
        holding only the phase's location.
        """
        components = (
            StatusComponent(
                text="", location=OutcomeMapper.to_location(summary.code_location)
            ),
        )
        return OutcomeMapper._part_status(components, summary.state, summary)

    @staticmethod
    def to_suite_stats(summary: RunSummary) -> SuiteStats:
        """Extract the final tallies from a run summary."""
        return SuiteStats(
            total=summary.number_of_total_specs,
            pending=summary.number_of_pending_specs,
            skipped=summary.number_of_skipped_specs,
            passed=summary.number_of_passed_specs,
            failed=summary.number_of_failed_specs,
            flakes=summary.number_of_flaked_specs,
        )
