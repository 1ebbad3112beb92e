"""Product lifecycle states and the whitelist of allowed transitions.

    draft            -> pending_approval
    pending_approval -> approved, draft   (rejection returns to draft)
    approved         -> active
    active           -> discontinued
    discontinued     -> archived
    archived         -> (terminal)
"""

from enum import Enum

from app.core.exceptions import InvalidTransitionError, ValidationError


class LifecycleState(str, Enum):
    """Named lifecycle states of a catalog product."""

    DRAFT = "draft"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    ACTIVE = "active"
    DISCONTINUED = "discontinued"
    ARCHIVED = "archived"

    def __str__(self) -> str:
        return self.value


INITIAL_STATE = LifecycleState.DRAFT

ALLOWED_TRANSITIONS: dict[LifecycleState, frozenset[LifecycleState]] = {
    LifecycleState.DRAFT: frozenset({LifecycleState.PENDING_APPROVAL}),
    LifecycleState.PENDING_APPROVAL: frozenset(
        {LifecycleState.APPROVED, LifecycleState.DRAFT}
    ),
    LifecycleState.APPROVED: frozenset({LifecycleState.ACTIVE}),
    LifecycleState.ACTIVE: frozenset({LifecycleState.DISCONTINUED}),
    LifecycleState.DISCONTINUED: frozenset({LifecycleState.ARCHIVED}),
    LifecycleState.ARCHIVED: frozenset(),
}


def parse_state(value: str | LifecycleState) -> LifecycleState:
    """Coerce a raw value into a LifecycleState.

    Raises:
        ValidationError: If the value is not a recognized state
    """
    if isinstance(value, LifecycleState):
        return value
    try:
        return LifecycleState(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(state.value for state in LifecycleState)
        raise ValidationError(
            f"Invalid lifecycle state '{value}'. Must be one of: {allowed}"
        ) from None


def allowed_targets(current: LifecycleState) -> frozenset[LifecycleState]:
    return ALLOWED_TRANSITIONS[current]


def can_transition(current: LifecycleState, target: LifecycleState) -> bool:
    """Check whether `current -> target` is an edge of the whitelist."""
    return target in ALLOWED_TRANSITIONS[current]


def is_terminal(state: LifecycleState) -> bool:
    return not ALLOWED_TRANSITIONS[state]


def validate_transition(current: LifecycleState, target: LifecycleState) -> None:
    """Validate a state transition.

    Raises:
        InvalidTransitionError: If the edge is not in the whitelist
    """
    if not can_transition(current, target):
        raise InvalidTransitionError(current.value, target.value)
