"""Application lifecycle: status table and state machine."""

from .status import (
    ADVANCE_ORDER,
    INITIAL_STATUS,
    STATUS_LABELS,
    STATUS_SORT_ORDER,
    TERMINAL_STATUSES,
    VALID_STATUS_TRANSITIONS,
    can_transition,
    is_terminal,
    next_advance_status,
    valid_next_statuses,
    validate_transition,
)
from .workflow import (
    ApplicationWorkflow,
    BulkItemResult,
    BulkItemState,
    BulkTransitionReport,
    TransitionOutcome,
)

__all__ = [
    "ADVANCE_ORDER",
    "INITIAL_STATUS",
    "STATUS_LABELS",
    "STATUS_SORT_ORDER",
    "TERMINAL_STATUSES",
    "VALID_STATUS_TRANSITIONS",
    "can_transition",
    "is_terminal",
    "next_advance_status",
    "valid_next_statuses",
    "validate_transition",
    "ApplicationWorkflow",
    "BulkItemResult",
    "BulkItemState",
    "BulkTransitionReport",
    "TransitionOutcome",
]
