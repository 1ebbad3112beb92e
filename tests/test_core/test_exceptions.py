"""Tests for catalog error types."""

from app.core.exceptions import (
    AuthorizationError,
    CatalogError,
    InternalError,
    InvalidTransitionError,
    NotFoundError,
    TransitionConflictError,
    ValidationError,
)


def test_status_codes():
    assert ValidationError("bad").status_code == 400
    assert AuthorizationError("approve", "public").status_code == 403
    assert NotFoundError("Product", 1).status_code == 404
    assert InvalidTransitionError("draft", "active").status_code == 409
    assert InternalError("boom").status_code == 500


def test_all_errors_are_catalog_errors():
    for error in (
        ValidationError("bad"),
        NotFoundError("Product", 1),
        InvalidTransitionError("draft", "active"),
        InternalError("boom"),
    ):
        assert isinstance(error, CatalogError)


def test_not_found_message():
    error = NotFoundError("Product", 42)
    assert error.message == "Product 42 not found"
    assert error.details == {"entity": "Product", "entity_id": 42}


def test_conflict_is_an_invalid_transition():
    error = TransitionConflictError(5, "draft", "pending_approval", attempts=3)

    assert isinstance(error, InvalidTransitionError)
    assert error.status_code == 409
    assert "3 attempts" in error.message
