"""Typed errors raised by catalog services.

Each error carries the HTTP status it maps to; the API layer renders any
CatalogError as the standard error envelope.
"""

from typing import Any


class CatalogError(Exception):
    """Base class for all catalog service errors."""

    status_code: int = 500

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(CatalogError):
    """Input is missing or malformed."""

    status_code = 400


class AuthorizationError(CatalogError):
    """Actor's role does not permit the requested operation."""

    status_code = 403

    def __init__(self, operation: str, role: str) -> None:
        super().__init__(
            f"Role '{role}' is not allowed to perform '{operation}'",
            operation=operation,
            role=role,
        )
        self.operation = operation
        self.role = role


class NotFoundError(CatalogError):
    """Referenced entity does not exist."""

    status_code = 404

    def __init__(self, entity: str, entity_id: Any) -> None:
        super().__init__(f"{entity} {entity_id} not found", entity=entity, entity_id=entity_id)
        self.entity = entity
        self.entity_id = entity_id


class InvalidTransitionError(CatalogError):
    """Requested lifecycle edge is not in the whitelist."""

    status_code = 409

    def __init__(self, from_state: str, to_state: str, message: str | None = None) -> None:
        super().__init__(
            message or f"Invalid state transition from '{from_state}' to '{to_state}'",
            from_state=from_state,
            to_state=to_state,
        )
        self.from_state = from_state
        self.to_state = to_state


class TransitionConflictError(InvalidTransitionError):
    """Concurrent writers kept moving the product while a transition retried."""

    def __init__(self, product_id: int, from_state: str, to_state: str, attempts: int) -> None:
        super().__init__(
            from_state,
            to_state,
            message=(
                f"Product {product_id} changed state concurrently; "
                f"gave up after {attempts} attempts"
            ),
        )
        self.product_id = product_id
        self.attempts = attempts


class InternalError(CatalogError):
    """Persistence or other unexpected failure."""

    status_code = 500
