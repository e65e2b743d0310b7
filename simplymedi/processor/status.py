"""Document job lifecycle: uploaded -> processing -> completed | failed.

``completed`` and ``failed`` are terminal for a single run; reprocessing moves a
terminal job back to ``processing``.
"""

from collections.abc import Iterable
from enum import Enum

from simplymedi.processor.exceptions import InvalidStatusTransitionError


class ProcessingStatus(str, Enum):
    UPLOADED = "uploaded"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATUSES: frozenset[ProcessingStatus] = frozenset(
    {ProcessingStatus.COMPLETED, ProcessingStatus.FAILED}
)

ALLOWED_TRANSITIONS: dict[ProcessingStatus, frozenset[ProcessingStatus]] = {
    ProcessingStatus.UPLOADED: frozenset({ProcessingStatus.PROCESSING}),
    ProcessingStatus.PROCESSING: TERMINAL_STATUSES,
    ProcessingStatus.COMPLETED: frozenset({ProcessingStatus.PROCESSING}),
    ProcessingStatus.FAILED: frozenset({ProcessingStatus.PROCESSING}),
}


def can_transition(current: ProcessingStatus, target: ProcessingStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def sources_for(target: ProcessingStatus) -> frozenset[ProcessingStatus]:
    """Return every status from which ``target`` may be entered."""
    return frozenset(
        status for status, targets in ALLOWED_TRANSITIONS.items() if target in targets
    )


def check_transition(
    from_statuses: Iterable[ProcessingStatus], to_status: ProcessingStatus
) -> list[ProcessingStatus]:
    """Return ``from_statuses`` as a list, rejecting any pair the lifecycle forbids.

    Raises:
        InvalidStatusTransitionError: if a source status cannot move to ``to_status``.
    """
    sources = list(from_statuses)
    illegal = sorted(status.value for status in sources if not can_transition(status, to_status))
    if illegal:
        raise InvalidStatusTransitionError(
            f"Cannot move a report from {', '.join(illegal)} to {to_status.value}"
        )
    return sources
