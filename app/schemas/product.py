"""Product lifecycle schemas for requests and responses."""

from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, computed_field, field_validator

from app.core.lifecycle_states import LifecycleState

# Prices are exact decimals internally and plain JSON numbers on the wire
Price = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]


class ProductCreate(BaseModel):
    """Attributes for creating a product in the draft state."""

    name: str = Field(min_length=1, max_length=200, description="Display name")
    description: str | None = Field(default=None, max_length=5000)
    category_id: int = Field(gt=0, description="Owning category id")
    unit_price: Price = Field(ge=0, max_digits=12, decimal_places=2, description="Unit price")
    sku: str = Field(
        min_length=1,
        max_length=64,
        pattern=r"^[A-Za-z0-9][A-Za-z0-9_.-]*$",
        description="Stock keeping unit, unique across the catalog",
    )

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    @field_validator("sku")
    @classmethod
    def normalize_sku(cls, v: str) -> str:
        """SKUs are compared case-insensitively; store them upper-cased."""
        return v.upper()


class ProductRead(BaseModel):
    """Product as returned by the API."""

    id: int
    name: str
    description: str | None = None
    category_id: int
    sku: str
    unit_price: Price
    state: LifecycleState
    submitted_at: datetime | None = None
    approved_at: datetime | None = None
    approved_by: str | None = None
    created_at: datetime
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class LifecycleActionRequest(BaseModel):
    """Body of the fixed-target lifecycle shortcuts (approve, activate, ...)."""

    user_id: str | None = Field(default=None, alias="userId", max_length=200)
    notes: str | None = Field(default=None, max_length=2000)

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class TransitionRequest(LifecycleActionRequest):
    """Body of the generic transition endpoint."""

    new_state: str = Field(alias="newState", min_length=1, description="Target lifecycle state")


class BulkApproveRequest(LifecycleActionRequest):
    """Body of the bulk approval endpoint."""

    product_ids: list[int] = Field(alias="productIds", min_length=1)


class BulkItemOutcome(BaseModel):
    """Outcome of approving one product inside a bulk request."""

    product_id: int
    success: bool
    state: LifecycleState | None = Field(default=None, description="State after the attempt")
    error: str | None = None
    error_type: str | None = None


class BulkApprovalResult(BaseModel):
    """Per-item report of a bulk approval."""

    succeeded: list[BulkItemOutcome] = Field(default_factory=list)
    failed: list[BulkItemOutcome] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)


class LifecycleTransitionRead(BaseModel):
    """One entry of a product's lifecycle history."""

    id: int
    product_id: int
    from_state: LifecycleState | None
    to_state: LifecycleState
    actor: str
    notes: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
