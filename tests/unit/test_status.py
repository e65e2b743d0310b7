import pytest

from simplymedi.processor.exceptions import InvalidStatusTransitionError
from simplymedi.processor.status import (
    TERMINAL_STATUSES,
    ProcessingStatus,
    can_transition,
    check_transition,
    sources_for,
)


class TestCanTransition:
    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (ProcessingStatus.UPLOADED, ProcessingStatus.PROCESSING),
            (ProcessingStatus.PROCESSING, ProcessingStatus.COMPLETED),
            (ProcessingStatus.PROCESSING, ProcessingStatus.FAILED),
            (ProcessingStatus.COMPLETED, ProcessingStatus.PROCESSING),
            (ProcessingStatus.FAILED, ProcessingStatus.PROCESSING),
        ],
    )
    def test_allowed(self, current: ProcessingStatus, target: ProcessingStatus) -> None:
        assert can_transition(current, target)

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (ProcessingStatus.UPLOADED, ProcessingStatus.COMPLETED),
            (ProcessingStatus.UPLOADED, ProcessingStatus.FAILED),
            (ProcessingStatus.COMPLETED, ProcessingStatus.FAILED),
            (ProcessingStatus.FAILED, ProcessingStatus.COMPLETED),
            (ProcessingStatus.PROCESSING, ProcessingStatus.UPLOADED),
        ],
    )
    def test_rejected(self, current: ProcessingStatus, target: ProcessingStatus) -> None:
        assert not can_transition(current, target)


class TestSourcesFor:
    def test_processing_is_entered_from_uploaded_and_terminal(self) -> None:
        assert sources_for(ProcessingStatus.PROCESSING) == {
            ProcessingStatus.UPLOADED,
            *TERMINAL_STATUSES,
        }

    def test_terminal_states_are_entered_only_from_processing(self) -> None:
        assert sources_for(ProcessingStatus.FAILED) == {ProcessingStatus.PROCESSING}

    def test_status_values_match_persisted_strings(self) -> None:
        assert ProcessingStatus("completed") is ProcessingStatus.COMPLETED


class TestCheckTransition:
    def test_returns_sources_when_every_pair_is_allowed(self) -> None:
        sources = check_transition(iter(TERMINAL_STATUSES), ProcessingStatus.PROCESSING)

        assert set(sources) == TERMINAL_STATUSES

    def test_names_every_illegal_source(self) -> None:
        with pytest.raises(InvalidStatusTransitionError, match="completed, uploaded to failed"):
            check_transition(
                [
                    ProcessingStatus.UPLOADED,
                    ProcessingStatus.PROCESSING,
                    ProcessingStatus.COMPLETED,
                ],
                ProcessingStatus.FAILED,
            )
