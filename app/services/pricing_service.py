"""Pricing - discounted quotes, bundles, competitor comparison and price changes.

Quotes start from the product's list price (`unit_price`) and apply every
active pricing rule that matches, highest priority first. Price changes are
recorded in the append-only price history.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.access_policy import AccessPolicy, Actor, Operation, get_access_policy
from app.core.exceptions import NotFoundError, ValidationError
from app.core.lifecycle_states import LifecycleState
from app.core.pricing import (
    PricingRuleType,
    apply_discounts,
    compare_position,
    percent_of,
    rule_applies,
    to_money,
)
from app.infra.logging import get_logger
from app.models import PriceHistory, PricingRule, Product, ProductCategory
from app.models.base import utcnow
from app.schemas.pricing import (
    AppliedDiscount,
    BundleQuote,
    BundleQuoteRequest,
    CompareRequest,
    CompetitorComparison,
    PriceComparison,
    PriceQuote,
    PriceQuoteRequest,
    PricingRuleCreate,
    PricingRuleUpdate,
)
from app.services.lifecycle_service import format_validation_errors

logger = get_logger(__name__)

_RULE_FIELDS = (
    "rule_name",
    "rule_type",
    "product_id",
    "category_id",
    "customer_id",
    "discount_percentage",
    "min_quantity",
    "priority",
    "is_active",
    "valid_from",
    "valid_until",
)


def as_utc(value: datetime | None) -> datetime | None:
    """Normalize to UTC; naive datetimes are taken to be UTC already."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class PricingService:
    """Price calculation and pricing rule management."""

    def __init__(self, session: AsyncSession, policy: AccessPolicy | None = None) -> None:
        self.session = session
        self.policy = policy or get_access_policy()

    # =========================================================================
    # Quotes
    # =========================================================================

    async def calculate_price(self, request: PriceQuoteRequest, actor: Actor) -> PriceQuote:
        """Price `quantity` units of a product with all applicable discounts.

        Raises:
            NotFoundError: Unknown product
            ValidationError: Product is archived
        """
        self.policy.require(actor, Operation.CALCULATE_PRICE)
        return await self._quote(request.product_id, request.quantity, request.customer_id)

    async def calculate_bundle(self, request: BundleQuoteRequest, actor: Actor) -> BundleQuote:
        """Quote several line items and apply the bundle discount.

        The bundle discount applies on top of the item totals once the
        bundle holds `bundle_min_products` distinct products.
        """
        self.policy.require(actor, Operation.CALCULATE_BUNDLE)

        if len(request.items) > settings.bundle_max_items:
            raise ValidationError(
                f"A bundle can hold at most {settings.bundle_max_items} items",
                field="items",
            )

        quotes = [
            await self._quote(item.product_id, item.quantity, item.customer_id)
            for item in request.items
        ]
        subtotal = sum((quote.total for quote in quotes), Decimal("0"))

        distinct_products = len({quote.product_id for quote in quotes})
        if distinct_products >= settings.bundle_min_products:
            percentage = settings.bundle_discount_percentage
        else:
            percentage = Decimal("0")
        bundle_discount = percent_of(subtotal, percentage)

        return BundleQuote(
            items=quotes,
            subtotal=subtotal,
            bundle_discount_percentage=percentage,
            bundle_discount=bundle_discount,
            total=subtotal - bundle_discount,
        )

    async def compare_competitors(self, request: CompareRequest, actor: Actor) -> PriceComparison:
        """Compare our list price against competitor prices."""
        self.policy.require(actor, Operation.COMPARE_PRICES)

        product = await self._get_priceable_product(request.product_id)
        our_price = to_money(product.unit_price)

        competitors = []
        for competitor in request.competitor_prices:
            difference = our_price - competitor.price
            competitors.append(
                CompetitorComparison(
                    name=competitor.name,
                    price=competitor.price,
                    difference=difference,
                    difference_percentage=(
                        to_money(difference / competitor.price * 100)
                        if competitor.price > 0
                        else None
                    ),
                )
            )

        prices = [competitor.price for competitor in request.competitor_prices]
        lowest = min(prices)
        average = to_money(sum(prices, Decimal("0")) / len(prices))

        return PriceComparison(
            product_id=product.id,
            our_price=our_price,
            competitors=competitors,
            lowest_competitor_price=lowest,
            average_competitor_price=average,
            position=compare_position(our_price, average),
            is_lowest=our_price <= lowest,
        )

    async def _quote(self, product_id: int, quantity: int, customer_id: str | None) -> PriceQuote:
        product = await self._get_priceable_product(product_id)
        rules = await self._applicable_rules(product, quantity, customer_id)

        subtotal = to_money(product.unit_price * quantity)
        total, lines, capped = apply_discounts(
            subtotal, rules, settings.pricing_max_discount_percentage
        )

        logger.debug(
            "Price calculated",
            product_id=product.id,
            quantity=quantity,
            rules=[line.rule_id for line in lines],
            total=str(total),
        )
        return PriceQuote(
            product_id=product.id,
            sku=product.sku,
            quantity=quantity,
            unit_price=product.unit_price,
            subtotal=subtotal,
            discount_total=subtotal - total,
            total=total,
            effective_unit_price=to_money(total / quantity),
            applied_discounts=[
                AppliedDiscount(
                    rule_id=line.rule_id,
                    rule_name=line.rule_name,
                    rule_type=line.rule_type,
                    discount_percentage=line.discount_percentage,
                    amount=line.amount,
                )
                for line in lines
            ],
            discount_capped=capped,
        )

    async def _get_priceable_product(self, product_id: int) -> Product:
        product = await self.session.get(Product, product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        if product.state == LifecycleState.ARCHIVED.value:
            raise ValidationError(
                f"Product {product_id} is archived and cannot be priced",
                field="product_id",
            )
        return product

    async def _applicable_rules(
        self, product: Product, quantity: int, customer_id: str | None
    ) -> list[PricingRule]:
        now = utcnow()
        result = await self.session.scalars(
            select(PricingRule)
            .where(
                PricingRule.is_active.is_(True),
                or_(PricingRule.valid_from.is_(None), PricingRule.valid_from <= now),
                or_(PricingRule.valid_until.is_(None), PricingRule.valid_until > now),
                or_(PricingRule.product_id.is_(None), PricingRule.product_id == product.id),
                or_(
                    PricingRule.category_id.is_(None),
                    PricingRule.category_id == product.category_id,
                ),
            )
            .order_by(PricingRule.priority.desc(), PricingRule.id.asc())
        )
        return [
            rule
            for rule in result.all()
            if rule_applies(
                rule,
                product_id=product.id,
                category_id=product.category_id,
                quantity=quantity,
                customer_id=customer_id,
            )
        ]

    # =========================================================================
    # Rules
    # =========================================================================

    async def list_rules(
        self,
        actor: Actor,
        rule_type: PricingRuleType | None = None,
        is_active: bool | None = None,
    ) -> list[PricingRule]:
        self.policy.require(actor, Operation.LIST_PRICING_RULES)

        stmt = select(PricingRule)
        if rule_type is not None:
            stmt = stmt.where(PricingRule.rule_type == PricingRuleType(rule_type).value)
        if is_active is not None:
            stmt = stmt.where(PricingRule.is_active.is_(is_active))
        result = await self.session.scalars(
            stmt.order_by(PricingRule.priority.desc(), PricingRule.id.asc())
        )
        return list(result.all())

    async def create_rule(self, data: PricingRuleCreate, actor: Actor) -> PricingRule:
        """Create a pricing rule.

        Raises:
            ValidationError: Referenced product or category does not exist
        """
        self.policy.require(actor, Operation.CREATE_PRICING_RULE)
        await self._check_references(data.product_id, data.category_id)

        values = data.model_dump()
        values["rule_type"] = data.rule_type.value
        values["valid_from"] = as_utc(data.valid_from)
        values["valid_until"] = as_utc(data.valid_until)

        rule = PricingRule(**values)
        self.session.add(rule)
        await self.session.flush()
        await self.session.refresh(rule)

        logger.info(
            "Pricing rule created",
            rule_id=rule.id,
            rule_type=rule.rule_type,
            discount_percentage=str(rule.discount_percentage),
            actor=actor.user_id,
        )
        return rule

    async def update_rule(
        self, rule_id: int, data: PricingRuleUpdate, actor: Actor
    ) -> PricingRule:
        """Update a rule; the merged result must still be a valid rule.

        Raises:
            NotFoundError: Unknown rule
            ValidationError: Merged rule is invalid or references a missing
                product or category
        """
        self.policy.require(actor, Operation.UPDATE_PRICING_RULE)

        rule = await self.session.get(PricingRule, rule_id)
        if rule is None:
            raise NotFoundError("Pricing rule", rule_id)

        changes: dict[str, Any] = data.model_dump(exclude_unset=True)
        merged = {field: getattr(rule, field) for field in _RULE_FIELDS}
        merged.update(changes)
        merged["valid_from"] = as_utc(merged["valid_from"])
        merged["valid_until"] = as_utc(merged["valid_until"])
        try:
            validated = PricingRuleCreate.model_validate(merged)
        except PydanticValidationError as e:
            raise ValidationError(format_validation_errors(e)) from e

        await self._check_references(
            changes.get("product_id"), changes.get("category_id")
        )

        for field in changes:
            value = getattr(validated, field)
            if field in ("valid_from", "valid_until"):
                value = as_utc(value)
            setattr(rule, field, value)
        await self.session.flush()
        await self.session.refresh(rule)

        logger.info(
            "Pricing rule updated",
            rule_id=rule.id,
            fields=sorted(changes),
            actor=actor.user_id,
        )
        return rule

    async def _check_references(self, product_id: int | None, category_id: int | None) -> None:
        if product_id is not None and await self.session.get(Product, product_id) is None:
            raise ValidationError(f"Product {product_id} does not exist", field="product_id")
        if (
            category_id is not None
            and await self.session.get(ProductCategory, category_id) is None
        ):
            raise ValidationError(f"Category {category_id} does not exist", field="category_id")

    # =========================================================================
    # Price changes
    # =========================================================================

    async def set_price(
        self,
        product_id: int,
        unit_price: Decimal,
        actor: Actor,
        reason: str | None = None,
    ) -> Product:
        """Change a product's list price and record it in the price history.

        Setting the current price again is a no-op and writes no history.

        Raises:
            NotFoundError: Unknown product
            ValidationError: Negative price or archived product
        """
        self.policy.require(actor, Operation.SET_PRICE)

        new_price = to_money(Decimal(unit_price))
        if new_price < 0:
            raise ValidationError("unit_price must not be negative", field="unit_price")

        product = await self._get_priceable_product(product_id)
        old_price = product.unit_price
        if old_price == new_price:
            return product

        product.unit_price = new_price
        self.session.add(
            PriceHistory(
                product_id=product.id,
                old_price=old_price,
                new_price=new_price,
                changed_by=actor.user_id,
                reason=reason,
            )
        )
        await self.session.flush()
        await self.session.refresh(product)

        logger.info(
            "Product price changed",
            product_id=product.id,
            old_price=str(old_price),
            new_price=str(new_price),
            actor=actor.user_id,
        )
        return product

    async def get_price_history(
        self, product_id: int, actor: Actor, days: int | None = None
    ) -> list[PriceHistory]:
        """Price changes of the last `days` days, newest first.

        Raises:
            ValidationError: `days` outside 1..price_history_max_days
            NotFoundError: Unknown product
        """
        self.policy.require(actor, Operation.PRICE_HISTORY)

        days = settings.price_history_default_days if days is None else days
        if not 1 <= days <= settings.price_history_max_days:
            raise ValidationError(
                f"days must be between 1 and {settings.price_history_max_days}",
                field="days",
            )

        exists = await self.session.scalar(select(Product.id).where(Product.id == product_id))
        if exists is None:
            raise NotFoundError("Product", product_id)

        since = utcnow() - timedelta(days=days)
        result = await self.session.scalars(
            select(PriceHistory)
            .where(PriceHistory.product_id == product_id, PriceHistory.created_at >= since)
            .order_by(PriceHistory.created_at.desc(), PriceHistory.id.desc())
        )
        return list(result.all())
