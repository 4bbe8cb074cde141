"""Status state machines for loads, receipts and pay statements."""

from __future__ import annotations

from enum import Enum

from neopay.errors import InvalidTransitionError


class LoadStatus(str, Enum):
    """Load status values."""

    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ReceiptStatus(str, Enum):
    """Receipt processing status values."""

    PROCESSING = "Processing"
    COMPLETED = "Completed"
    FAILED = "Failed"


class PayStatementStatus(str, Enum):
    """Pay statement status values."""

    DRAFT = "draft"
    FINALIZED = "finalized"
    PAID = "paid"


class StateMachine:
    """Transition table lookups shared by the concrete machines."""

    VALID_TRANSITIONS: dict[str, list[str]] = {}

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_status, to_status):
            raise InvalidTransitionError(from_status, to_status)

    @classmethod
    def get_next_statuses(cls, current_status: str) -> list[str]:
        """Get list of valid next statuses from current status."""
        return [str(s.value) for s in cls.VALID_TRANSITIONS.get(current_status, [])]

    @classmethod
    def is_terminal(cls, status: str) -> bool:
        return status in cls.VALID_TRANSITIONS and not cls.VALID_TRANSITIONS[status]


class LoadStateMachine(StateMachine):
    """Load status graph.

    Allowed transitions:
    - assigned → in_progress
    - assigned → cancelled
    - in_progress → completed
    - in_progress → cancelled

    The status endpoint does not enforce this graph; any of the four
    literals is accepted regardless of the current status. The graph is
    published to clients as ``nextStatuses`` so they can offer only the
    moves that make sense.
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        LoadStatus.ASSIGNED: [LoadStatus.IN_PROGRESS, LoadStatus.CANCELLED],
        LoadStatus.IN_PROGRESS: [LoadStatus.COMPLETED, LoadStatus.CANCELLED],
        LoadStatus.COMPLETED: [],  # Terminal state
        LoadStatus.CANCELLED: [],  # Terminal state
    }

    @classmethod
    def is_valid_status(cls, status: str) -> bool:
        return status in {s.value for s in LoadStatus}


class ReceiptStateMachine(StateMachine):
    """Receipt processing graph.

    Allowed transitions:
    - Processing → Completed
    - Processing → Failed

    Both outcomes are terminal; a receipt never goes back to Processing.
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        ReceiptStatus.PROCESSING: [ReceiptStatus.COMPLETED, ReceiptStatus.FAILED],
        ReceiptStatus.COMPLETED: [],
        ReceiptStatus.FAILED: [],
    }


class PayStatementStateMachine(StateMachine):
    """Pay statement graph.

    Allowed transitions:
    - draft → finalized
    - finalized → paid
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        PayStatementStatus.DRAFT: [PayStatementStatus.FINALIZED],
        PayStatementStatus.FINALIZED: [PayStatementStatus.PAID],
        PayStatementStatus.PAID: [],  # Terminal state
    }

    @classmethod
    def can_delete(cls, status: str) -> bool:
        """Only drafts may be deleted."""
        return status == PayStatementStatus.DRAFT
