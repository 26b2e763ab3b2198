"""Application status transition table and read-only helpers."""

from typing import Dict, FrozenSet, List, Optional, Union

from jobportal.core.errors import InvalidTransition
from jobportal.core.models import ApplicationStatus

INITIAL_STATUS = ApplicationStatus.PENDING

VALID_STATUS_TRANSITIONS: Dict[ApplicationStatus, List[ApplicationStatus]] = {
    ApplicationStatus.PENDING: [
        ApplicationStatus.REVIEWING,
        ApplicationStatus.REJECTED,
        ApplicationStatus.WITHDRAWN,
    ],
    ApplicationStatus.REVIEWING: [
        ApplicationStatus.INTERVIEW,
        ApplicationStatus.REJECTED,
        ApplicationStatus.WITHDRAWN,
    ],
    ApplicationStatus.INTERVIEW: [
        ApplicationStatus.OFFERED,
        ApplicationStatus.REJECTED,
        ApplicationStatus.WITHDRAWN,
    ],
    # Offer declined or rescinded
    ApplicationStatus.OFFERED: [ApplicationStatus.REJECTED],
    ApplicationStatus.REJECTED: [],
    ApplicationStatus.WITHDRAWN: [],
}

TERMINAL_STATUSES: FrozenSet[ApplicationStatus] = frozenset(
    status for status, targets in VALID_STATUS_TRANSITIONS.items() if not targets
)

ADVANCE_ORDER = [
    ApplicationStatus.REVIEWING,
    ApplicationStatus.INTERVIEW,
    ApplicationStatus.OFFERED,
]

STATUS_LABELS: Dict[ApplicationStatus, str] = {
    ApplicationStatus.PENDING: "Applied",
    ApplicationStatus.REVIEWING: "Under Review",
    ApplicationStatus.INTERVIEW: "Interview",
    ApplicationStatus.OFFERED: "Offer",
    ApplicationStatus.REJECTED: "Rejected",
    ApplicationStatus.WITHDRAWN: "Withdrawn",
}

STATUS_SORT_ORDER: Dict[ApplicationStatus, int] = {
    ApplicationStatus.PENDING: 1,
    ApplicationStatus.REVIEWING: 2,
    ApplicationStatus.INTERVIEW: 3,
    ApplicationStatus.OFFERED: 4,
    ApplicationStatus.REJECTED: 5,
    ApplicationStatus.WITHDRAWN: 6,
}

StatusLike = Union[ApplicationStatus, str]


def as_status(value: StatusLike) -> ApplicationStatus:
    """Coerce a status value or its string form; unknown strings raise ValueError."""
    if isinstance(value, ApplicationStatus):
        return value
    return ApplicationStatus(str(value).strip().lower())


def valid_next_statuses(status: StatusLike) -> List[ApplicationStatus]:
    return list(VALID_STATUS_TRANSITIONS.get(as_status(status), []))


def can_transition(current: StatusLike, target: StatusLike) -> bool:
    """Whether ``target`` is reachable in one step. Staying put is never a transition."""
    return as_status(target) in VALID_STATUS_TRANSITIONS.get(as_status(current), [])


def is_terminal(status: StatusLike) -> bool:
    return as_status(status) in TERMINAL_STATUSES


def next_advance_status(status: StatusLike) -> Optional[ApplicationStatus]:
    """Next forward step in the hiring pipeline, or None when none is allowed."""
    allowed = VALID_STATUS_TRANSITIONS.get(as_status(status), [])
    for candidate in ADVANCE_ORDER:
        if candidate in allowed:
            return candidate
    return None


def validate_transition(
    application_id: Optional[str],
    current: StatusLike,
    target: StatusLike,
) -> None:
    """Raise InvalidTransition unless ``current -> target`` is in the table."""
    current_status = as_status(current)
    target_status = as_status(target)
    if not can_transition(current_status, target_status):
        raise InvalidTransition(
            application_id,
            current_status,
            target_status,
            allowed=valid_next_statuses(current_status),
        )
