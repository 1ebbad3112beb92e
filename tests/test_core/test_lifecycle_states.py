"""Tests for lifecycle states and the transition whitelist."""

import pytest

from app.core.exceptions import InvalidTransitionError, ValidationError
from app.core.lifecycle_states import (
    ALLOWED_TRANSITIONS,
    INITIAL_STATE,
    LifecycleState,
    allowed_targets,
    can_transition,
    is_terminal,
    parse_state,
    validate_transition,
)

S = LifecycleState

EXPECTED_EDGES = {
    (S.DRAFT, S.PENDING_APPROVAL),
    (S.PENDING_APPROVAL, S.APPROVED),
    (S.PENDING_APPROVAL, S.DRAFT),
    (S.APPROVED, S.ACTIVE),
    (S.ACTIVE, S.DISCONTINUED),
    (S.DISCONTINUED, S.ARCHIVED),
}


class TestTransitionTable:
    """Tests for the whitelist itself."""

    def test_six_states(self):
        assert [s.value for s in LifecycleState] == [
            "draft",
            "pending_approval",
            "approved",
            "active",
            "discontinued",
            "archived",
        ]

    def test_every_state_has_an_entry(self):
        assert set(ALLOWED_TRANSITIONS) == set(LifecycleState)

    def test_edges_are_exactly_the_whitelist(self):
        edges = {
            (current, target)
            for current, targets in ALLOWED_TRANSITIONS.items()
            for target in targets
        }
        assert edges == EXPECTED_EDGES

    @pytest.mark.parametrize("current", list(LifecycleState))
    @pytest.mark.parametrize("target", list(LifecycleState))
    def test_can_transition_matches_whitelist(self, current, target):
        assert can_transition(current, target) is ((current, target) in EXPECTED_EDGES)

    def test_archived_is_terminal(self):
        assert is_terminal(S.ARCHIVED)
        assert allowed_targets(S.ARCHIVED) == frozenset()

    def test_only_archived_is_terminal(self):
        assert [s for s in LifecycleState if is_terminal(s)] == [S.ARCHIVED]

    def test_draft_cannot_skip_review(self):
        assert not can_transition(S.DRAFT, S.ACTIVE)
        assert not can_transition(S.DRAFT, S.APPROVED)

    def test_initial_state_is_draft(self):
        assert INITIAL_STATE is S.DRAFT


class TestParseState:
    def test_parses_values(self):
        assert parse_state("pending_approval") is S.PENDING_APPROVAL

    def test_is_case_and_whitespace_tolerant(self):
        assert parse_state("  Active ") is S.ACTIVE

    def test_passes_enum_through(self):
        assert parse_state(S.ARCHIVED) is S.ARCHIVED

    @pytest.mark.parametrize("value", ["", "deleted", "live", "None"])
    def test_rejects_unknown_values(self, value):
        with pytest.raises(ValidationError) as exc_info:
            parse_state(value)
        assert "Must be one of" in exc_info.value.message


class TestValidateTransition:
    def test_valid_edge_passes(self):
        validate_transition(S.APPROVED, S.ACTIVE)

    def test_invalid_edge_raises_with_states(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            validate_transition(S.ARCHIVED, S.ACTIVE)

        assert exc_info.value.from_state == "archived"
        assert exc_info.value.to_state == "active"
        assert exc_info.value.status_code == 409

    def test_self_transition_is_rejected(self):
        with pytest.raises(InvalidTransitionError):
            validate_transition(S.DRAFT, S.DRAFT)
