"""Pricing schemas: quotes, competitor comparison, rules and price history."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.core.pricing import PricingRuleType
from app.schemas.product import Price


# =============================================================================
# Quotes
# =============================================================================


class PriceQuoteRequest(BaseModel):
    """Body of the single product price calculation."""

    product_id: int = Field(alias="productId", gt=0)
    quantity: int = Field(default=1, ge=1, le=100_000)
    customer_id: str | None = Field(default=None, alias="customerId", max_length=200)

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class BundleQuoteRequest(BaseModel):
    items: list[PriceQuoteRequest] = Field(min_length=1)

    model_config = ConfigDict(extra="ignore")


class AppliedDiscount(BaseModel):
    rule_id: int
    rule_name: str
    rule_type: PricingRuleType
    discount_percentage: Price
    amount: Price


class PriceQuote(BaseModel):
    """Price of `quantity` units of one product after discounts."""

    product_id: int
    sku: str
    quantity: int
    unit_price: Price
    subtotal: Price
    discount_total: Price
    total: Price
    effective_unit_price: Price
    applied_discounts: list[AppliedDiscount] = Field(default_factory=list)
    discount_capped: bool = Field(
        default=False, description="True when the discount cap reduced the stacked discounts"
    )


class BundleQuote(BaseModel):
    items: list[PriceQuote]
    subtotal: Price = Field(description="Sum of the item totals")
    bundle_discount_percentage: Price
    bundle_discount: Price
    total: Price


# =============================================================================
# Competitor comparison
# =============================================================================


class CompetitorPrice(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    price: Price = Field(ge=0, max_digits=12, decimal_places=2)

    model_config = ConfigDict(str_strip_whitespace=True)


class CompareRequest(BaseModel):
    product_id: int = Field(alias="productId", gt=0)
    competitor_prices: list[CompetitorPrice] = Field(alias="competitorPrices", min_length=1)

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class CompetitorComparison(BaseModel):
    name: str
    price: Price
    difference: Price = Field(description="Our price minus the competitor's")
    difference_percentage: Price | None = Field(
        default=None, description="Difference relative to the competitor's price"
    )


class PriceComparison(BaseModel):
    product_id: int
    our_price: Price
    competitors: list[CompetitorComparison]
    lowest_competitor_price: Price
    average_competitor_price: Price
    position: Literal["below_market", "at_market", "above_market"]
    is_lowest: bool


# =============================================================================
# Rules
# =============================================================================


class PricingRuleCreate(BaseModel):
    """A new discount rule.

    Bulk rules need `min_quantity`, category rules `category_id` and
    customer rules `customer_id`.
    """

    rule_name: str = Field(min_length=1, max_length=200)
    rule_type: PricingRuleType
    product_id: int | None = Field(default=None, gt=0)
    category_id: int | None = Field(default=None, gt=0)
    customer_id: str | None = Field(default=None, min_length=1, max_length=200)
    discount_percentage: Price = Field(gt=0, le=100, max_digits=5, decimal_places=2)
    min_quantity: int | None = Field(default=None, ge=2)
    priority: int = 0
    is_active: bool = True
    valid_from: datetime | None = None
    valid_until: datetime | None = None

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    @model_validator(mode="after")
    def check_rule_target(self) -> "PricingRuleCreate":
        if self.rule_type is PricingRuleType.BULK and self.min_quantity is None:
            raise ValueError("bulk rules require min_quantity")
        if self.rule_type is PricingRuleType.CATEGORY and self.category_id is None:
            raise ValueError("category rules require category_id")
        if self.rule_type is PricingRuleType.CUSTOMER and self.customer_id is None:
            raise ValueError("customer rules require customer_id")
        if self.valid_from and self.valid_until and self.valid_until <= self.valid_from:
            raise ValueError("valid_until must be after valid_from")
        return self


class PricingRuleUpdate(BaseModel):
    """Partial update of a rule; the merged rule is re-validated."""

    rule_name: str | None = Field(default=None, min_length=1, max_length=200)
    product_id: int | None = Field(default=None, gt=0)
    category_id: int | None = Field(default=None, gt=0)
    customer_id: str | None = Field(default=None, min_length=1, max_length=200)
    discount_percentage: Price | None = Field(
        default=None, gt=0, le=100, max_digits=5, decimal_places=2
    )
    min_quantity: int | None = Field(default=None, ge=2)
    priority: int | None = None
    is_active: bool | None = None
    valid_from: datetime | None = None
    valid_until: datetime | None = None

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class PricingRuleRead(BaseModel):
    id: int
    rule_name: str
    rule_type: PricingRuleType
    product_id: int | None = None
    category_id: int | None = None
    customer_id: str | None = None
    discount_percentage: Price
    min_quantity: int | None = None
    priority: int
    is_active: bool
    valid_from: datetime | None = None
    valid_until: datetime | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# =============================================================================
# Price changes
# =============================================================================


class PriceChangeRequest(BaseModel):
    unit_price: Price = Field(ge=0, max_digits=12, decimal_places=2)
    reason: str | None = Field(default=None, max_length=2000)
    user_id: str | None = Field(default=None, alias="userId", max_length=200)

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class PriceHistoryRead(BaseModel):
    id: int
    product_id: int
    old_price: Price | None = None
    new_price: Price
    changed_by: str
    reason: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
