"""Tests for product lifecycle schemas."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from app.core.lifecycle_states import LifecycleState
from app.schemas.product import (
    BulkApprovalResult,
    BulkApproveRequest,
    BulkItemOutcome,
    LifecycleActionRequest,
    ProductCreate,
    TransitionRequest,
)


class TestProductCreate:
    def test_valid_payload(self):
        data = ProductCreate(name=" Cola ", category_id=1, unit_price="1.50", sku="cola-330")

        assert data.name == "Cola"
        assert data.unit_price == Decimal("1.50")
        assert data.sku == "COLA-330"

    def test_ignores_unknown_fields(self):
        data = ProductCreate.model_validate(
            {"name": "Cola", "category_id": 1, "unit_price": "1", "sku": "C1", "color": "red"}
        )
        assert not hasattr(data, "color")

    @pytest.mark.parametrize("missing", ["name", "category_id", "unit_price", "sku"])
    def test_required_fields(self, missing):
        payload = {"name": "Cola", "category_id": 1, "unit_price": "1.00", "sku": "C1"}
        payload.pop(missing)

        with pytest.raises(ValidationError):
            ProductCreate.model_validate(payload)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"name": ""},
            {"category_id": 0},
            {"unit_price": "-1"},
            {"unit_price": "1.999"},
            {"sku": "has space"},
            {"sku": "-leading-dash"},
        ],
    )
    def test_malformed_fields(self, overrides):
        payload = {"name": "Cola", "category_id": 1, "unit_price": "1.00", "sku": "C1"}
        payload.update(overrides)

        with pytest.raises(ValidationError):
            ProductCreate.model_validate(payload)

    def test_price_serializes_as_number(self):
        data = ProductCreate(name="Cola", category_id=1, unit_price="19.99", sku="C1")
        assert data.model_dump(mode="json")["unit_price"] == 19.99


class TestRequestAliases:
    def test_transition_request_uses_camel_case(self):
        request = TransitionRequest.model_validate(
            {"newState": "approved", "notes": "ok", "userId": "u-1"}
        )

        assert request.new_state == "approved"
        assert request.user_id == "u-1"
        assert request.notes == "ok"

    def test_transition_request_requires_new_state(self):
        with pytest.raises(ValidationError):
            TransitionRequest.model_validate({"notes": "missing"})

    def test_action_request_defaults(self):
        request = LifecycleActionRequest()
        assert request.user_id is None
        assert request.notes is None

    def test_bulk_request_requires_ids(self):
        with pytest.raises(ValidationError):
            BulkApproveRequest.model_validate({"productIds": []})

    def test_bulk_request(self):
        request = BulkApproveRequest.model_validate({"productIds": [1, 2], "userId": "a"})
        assert request.product_ids == [1, 2]


class TestBulkApprovalResult:
    def test_total_counts_both_lists(self):
        result = BulkApprovalResult(
            succeeded=[BulkItemOutcome(product_id=1, success=True, state=LifecycleState.APPROVED)],
            failed=[
                BulkItemOutcome(product_id=2, success=False, error="x", error_type="NotFoundError")
            ],
        )

        assert result.total == 2
        assert result.model_dump(mode="json")["total"] == 2
