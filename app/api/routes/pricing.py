"""Pricing endpoints.

Quotes and competitor comparison are open to everyone; rule management and
list price changes are admin operations (enforced by the access policy).
"""

from typing import Annotated

from fastapi import APIRouter, Query, status

from app.api.deps import CurrentActor, Pricing, attribute_to
from app.core.pricing import PricingRuleType
from app.schemas.common import ApiResponse
from app.schemas.pricing import (
    BundleQuote,
    BundleQuoteRequest,
    CompareRequest,
    PriceChangeRequest,
    PriceComparison,
    PriceHistoryRead,
    PriceQuote,
    PriceQuoteRequest,
    PricingRuleCreate,
    PricingRuleRead,
    PricingRuleUpdate,
)
from app.schemas.product import ProductRead

router = APIRouter()


# =============================================================================
# Price calculation
# =============================================================================


@router.post(
    "/calculate",
    response_model=ApiResponse[PriceQuote],
    summary="Price a product with all applicable discounts",
)
async def calculate_price(
    body: PriceQuoteRequest, pricing: Pricing, actor: CurrentActor
) -> ApiResponse[PriceQuote]:
    return ApiResponse[PriceQuote](data=await pricing.calculate_price(body, actor))


@router.post(
    "/calculate-bundle",
    response_model=ApiResponse[BundleQuote],
    summary="Price several products as a bundle",
)
async def calculate_bundle(
    body: BundleQuoteRequest, pricing: Pricing, actor: CurrentActor
) -> ApiResponse[BundleQuote]:
    return ApiResponse[BundleQuote](data=await pricing.calculate_bundle(body, actor))


@router.post(
    "/compare",
    response_model=ApiResponse[PriceComparison],
    summary="Compare our price with competitor prices",
)
async def compare_competitors(
    body: CompareRequest, pricing: Pricing, actor: CurrentActor
) -> ApiResponse[PriceComparison]:
    return ApiResponse[PriceComparison](data=await pricing.compare_competitors(body, actor))


# =============================================================================
# Pricing rules
# =============================================================================


@router.get("/rules", response_model=ApiResponse[list[PricingRuleRead]])
async def list_pricing_rules(
    pricing: Pricing,
    actor: CurrentActor,
    rule_type: PricingRuleType | None = None,
    is_active: bool | None = None,
) -> ApiResponse[list[PricingRuleRead]]:
    rules = await pricing.list_rules(actor, rule_type=rule_type, is_active=is_active)
    return ApiResponse[list[PricingRuleRead]](
        data=[PricingRuleRead.model_validate(rule) for rule in rules]
    )


@router.post(
    "/rules",
    response_model=ApiResponse[PricingRuleRead],
    status_code=status.HTTP_201_CREATED,
)
async def create_pricing_rule(
    body: PricingRuleCreate, pricing: Pricing, actor: CurrentActor
) -> ApiResponse[PricingRuleRead]:
    rule = await pricing.create_rule(body, actor)
    return ApiResponse[PricingRuleRead](data=PricingRuleRead.model_validate(rule))


@router.put("/rules/{rule_id}", response_model=ApiResponse[PricingRuleRead])
async def update_pricing_rule(
    rule_id: int, body: PricingRuleUpdate, pricing: Pricing, actor: CurrentActor
) -> ApiResponse[PricingRuleRead]:
    rule = await pricing.update_rule(rule_id, body, actor)
    return ApiResponse[PricingRuleRead](data=PricingRuleRead.model_validate(rule))


# =============================================================================
# Price history
# =============================================================================


@router.get(
    "/history/{product_id}",
    response_model=ApiResponse[list[PriceHistoryRead]],
    summary="Price changes of a product, newest first",
)
async def get_price_history(
    product_id: int,
    pricing: Pricing,
    actor: CurrentActor,
    days: Annotated[int | None, Query()] = None,
) -> ApiResponse[list[PriceHistoryRead]]:
    history = await pricing.get_price_history(product_id, actor, days=days)
    return ApiResponse[list[PriceHistoryRead]](
        data=[PriceHistoryRead.model_validate(entry) for entry in history]
    )


@router.put(
    "/products/{product_id}/price",
    response_model=ApiResponse[ProductRead],
    summary="Change a product's list price",
)
async def set_product_price(
    product_id: int, body: PriceChangeRequest, pricing: Pricing, actor: CurrentActor
) -> ApiResponse[ProductRead]:
    product = await pricing.set_price(
        product_id, body.unit_price, attribute_to(actor, body.user_id), body.reason
    )
    return ApiResponse[ProductRead](data=ProductRead.model_validate(product))
