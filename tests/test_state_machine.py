"""Tests for status state machines."""

import pytest

from neopay.errors import InvalidTransitionError
from neopay.services.state_machine import (
    LoadStateMachine,
    PayStatementStateMachine,
    ReceiptStateMachine,
)


class TestLoadStateMachine:
    """Load graph, published as next statuses."""

    def test_valid_transitions(self):
        assert LoadStateMachine.can_transition("assigned", "in_progress") is True
        assert LoadStateMachine.can_transition("assigned", "cancelled") is True
        assert LoadStateMachine.can_transition("in_progress", "completed") is True
        assert LoadStateMachine.can_transition("in_progress", "cancelled") is True

    def test_invalid_transitions(self):
        # Can't skip in_progress
        assert LoadStateMachine.can_transition("assigned", "completed") is False
        # Terminal
        assert LoadStateMachine.can_transition("completed", "in_progress") is False
        assert LoadStateMachine.can_transition("cancelled", "assigned") is False

    def test_next_statuses(self):
        assert LoadStateMachine.get_next_statuses("assigned") == ["in_progress", "cancelled"]
        assert LoadStateMachine.get_next_statuses("completed") == []
        assert LoadStateMachine.get_next_statuses("unknown") == []

    def test_valid_status_literals(self):
        for status in ("assigned", "in_progress", "completed", "cancelled"):
            assert LoadStateMachine.is_valid_status(status) is True
        assert LoadStateMachine.is_valid_status("delivered") is False

    def test_terminal(self):
        assert LoadStateMachine.is_terminal("completed") is True
        assert LoadStateMachine.is_terminal("assigned") is False


class TestReceiptStateMachine:
    """Processing ends in Completed or Failed, never back."""

    def test_processing_outcomes(self):
        assert ReceiptStateMachine.can_transition("Processing", "Completed") is True
        assert ReceiptStateMachine.can_transition("Processing", "Failed") is True

    def test_no_way_back(self):
        assert ReceiptStateMachine.can_transition("Completed", "Processing") is False
        assert ReceiptStateMachine.can_transition("Failed", "Processing") is False
        assert ReceiptStateMachine.can_transition("Failed", "Completed") is False


class TestPayStatementStateMachine:
    def test_forward_only(self):
        assert PayStatementStateMachine.can_transition("draft", "finalized") is True
        assert PayStatementStateMachine.can_transition("finalized", "paid") is True
        assert PayStatementStateMachine.can_transition("draft", "paid") is False
        assert PayStatementStateMachine.can_transition("paid", "draft") is False

    def test_validate_transition_raises(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            PayStatementStateMachine.validate_transition("draft", "paid")

        assert exc_info.value.from_status == "draft"
        assert exc_info.value.to_status == "paid"
        assert exc_info.value.status_code == 400

    def test_only_drafts_deletable(self):
        assert PayStatementStateMachine.can_delete("draft") is True
        assert PayStatementStateMachine.can_delete("finalized") is False
        assert PayStatementStateMachine.can_delete("paid") is False
