"""Core module - lifecycle states, access policy and error types."""

from app.core.access_policy import AccessPolicy, Actor, Role, get_access_policy
from app.core.exceptions import (
    AuthorizationError,
    CatalogError,
    InternalError,
    InvalidTransitionError,
    NotFoundError,
    TransitionConflictError,
    ValidationError,
)
from app.core.lifecycle_states import ALLOWED_TRANSITIONS, LifecycleState

__all__ = [
    "ALLOWED_TRANSITIONS",
    "AccessPolicy",
    "Actor",
    "AuthorizationError",
    "CatalogError",
    "InternalError",
    "InvalidTransitionError",
    "LifecycleState",
    "NotFoundError",
    "Role",
    "TransitionConflictError",
    "ValidationError",
    "get_access_policy",
]
