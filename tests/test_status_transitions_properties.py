"""Property-based tests for the application status transition table."""

import pytest
from hypothesis import given, strategies as st, settings

from jobportal.applications.status import (
    ADVANCE_ORDER,
    STATUS_LABELS,
    STATUS_SORT_ORDER,
    TERMINAL_STATUSES,
    VALID_STATUS_TRANSITIONS,
    as_status,
    can_transition,
    is_terminal,
    next_advance_status,
    valid_next_statuses,
    validate_transition,
)
from jobportal.core.errors import InvalidTransition
from jobportal.core.models import ApplicationStatus

statuses = st.sampled_from(list(ApplicationStatus))


class TestStatusTransitionProperties:
    """Property-based tests for the transition table."""

    @given(current=statuses, target=statuses)
    @settings(max_examples=100, deadline=1000)
    def test_validate_matches_table(self, current, target):
        """
        Property: a transition validates exactly when the table lists it.
        """
        allowed = target in VALID_STATUS_TRANSITIONS[current]

        assert can_transition(current, target) is allowed
        if allowed:
            validate_transition("app-1", current, target)
        else:
            with pytest.raises(InvalidTransition) as exc_info:
                validate_transition("app-1", current, target)
            assert exc_info.value.current_status == current
            assert exc_info.value.target_status == target
            assert exc_info.value.allowed == VALID_STATUS_TRANSITIONS[current]

    @given(status=statuses)
    @settings(max_examples=50, deadline=1000)
    def test_staying_put_is_never_a_transition(self, status):
        """
        Property: moving a status to itself is invalid.
        """
        assert not can_transition(status, status)
        with pytest.raises(InvalidTransition):
            validate_transition(None, status, status)

    @given(status=st.sampled_from([ApplicationStatus.REJECTED, ApplicationStatus.WITHDRAWN]), target=statuses)
    @settings(max_examples=50, deadline=1000)
    def test_terminal_statuses_have_no_exits(self, status, target):
        """
        Property: rejected and withdrawn accept no transition at all.
        """
        assert is_terminal(status)
        assert valid_next_statuses(status) == []
        assert not can_transition(status, target)
        assert next_advance_status(status) is None

    @given(status=statuses)
    @settings(max_examples=50, deadline=1000)
    def test_advance_target_is_allowed(self, status):
        """
        Property: the advance target, when present, is an allowed forward step.
        """
        target = next_advance_status(status)
        if target is not None:
            assert target in ADVANCE_ORDER
            assert can_transition(status, target)
            assert STATUS_SORT_ORDER[target] > STATUS_SORT_ORDER[status]


class TestStatusTable:
    """Concrete checks on the transition table."""

    def test_table_covers_every_status(self):
        assert set(VALID_STATUS_TRANSITIONS) == set(ApplicationStatus)
        assert set(STATUS_LABELS) == set(ApplicationStatus)
        assert TERMINAL_STATUSES == {ApplicationStatus.REJECTED, ApplicationStatus.WITHDRAWN}

    @pytest.mark.parametrize("current,expected", [
        (ApplicationStatus.PENDING, ApplicationStatus.REVIEWING),
        (ApplicationStatus.REVIEWING, ApplicationStatus.INTERVIEW),
        (ApplicationStatus.INTERVIEW, ApplicationStatus.OFFERED),
        (ApplicationStatus.OFFERED, None),
    ])
    def test_advance_sequence(self, current, expected):
        assert next_advance_status(current) == expected

    def test_offer_can_only_be_rejected(self):
        assert valid_next_statuses("offered") == [ApplicationStatus.REJECTED]
        assert not can_transition("offered", "withdrawn")

    def test_interview_back_to_pending_is_invalid(self):
        with pytest.raises(InvalidTransition) as exc_info:
            validate_transition("app-9", ApplicationStatus.INTERVIEW, ApplicationStatus.PENDING)

        message = str(exc_info.value)
        assert "interview" in message
        assert "offered, rejected, withdrawn" in message

    def test_status_strings_are_normalised(self):
        assert as_status(" Reviewing ") == ApplicationStatus.REVIEWING
        with pytest.raises(ValueError):
            as_status("hired")
