"""Pricing rules and discount arithmetic.

Money is handled as `Decimal` and rounded half-up to cents after every
step. Discounts stack multiplicatively in rule order (highest priority
first); the combined discount is capped by the caller.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Protocol, Sequence

CENT = Decimal("0.01")
HUNDRED = Decimal("100")


class PricingRuleType(str, Enum):
    """How a pricing rule selects the quotes it discounts.

    PERCENTAGE: one product, or every product when no product is given
    CATEGORY: every product of a category
    BULK: quotes whose quantity reaches `min_quantity`
    CUSTOMER: quotes requested for a specific customer
    """

    PERCENTAGE = "percentage"
    CATEGORY = "category"
    BULK = "bulk"
    CUSTOMER = "customer"

    def __str__(self) -> str:
        return self.value


class RuleLike(Protocol):
    id: int
    rule_name: str
    rule_type: str
    product_id: int | None
    category_id: int | None
    customer_id: str | None
    discount_percentage: Decimal
    min_quantity: int | None


@dataclass(frozen=True)
class DiscountLine:
    """A rule's contribution to a quote."""

    rule_id: int
    rule_name: str
    rule_type: PricingRuleType
    discount_percentage: Decimal
    amount: Decimal


def to_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def percent_of(amount: Decimal, percentage: Decimal) -> Decimal:
    return to_money(amount * percentage / HUNDRED)


def rule_applies(
    rule: RuleLike,
    *,
    product_id: int,
    category_id: int,
    quantity: int,
    customer_id: str | None = None,
) -> bool:
    """Check whether an active rule matches a quote.

    Product and category scopes are honoured by every rule type; the type
    adds its own condition on top.
    """
    if rule.product_id is not None and rule.product_id != product_id:
        return False
    if rule.category_id is not None and rule.category_id != category_id:
        return False

    rule_type = PricingRuleType(rule.rule_type)
    if rule_type is PricingRuleType.CATEGORY:
        return rule.category_id is not None
    if rule_type is PricingRuleType.BULK:
        return rule.min_quantity is not None and quantity >= rule.min_quantity
    if rule_type is PricingRuleType.CUSTOMER:
        return customer_id is not None and rule.customer_id == customer_id
    return True


def apply_discounts(
    subtotal: Decimal,
    rules: Sequence[RuleLike],
    max_discount_percentage: Decimal,
) -> tuple[Decimal, list[DiscountLine], bool]:
    """Apply rules in order to a subtotal.

    Returns:
        (total, discount lines, whether the cap reduced the discount)
    """
    running = to_money(subtotal)
    lines: list[DiscountLine] = []
    for rule in rules:
        amount = percent_of(running, rule.discount_percentage)
        if amount <= 0:
            continue
        running -= amount
        lines.append(
            DiscountLine(
                rule_id=rule.id,
                rule_name=rule.rule_name,
                rule_type=PricingRuleType(rule.rule_type),
                discount_percentage=rule.discount_percentage,
                amount=amount,
            )
        )

    floor = to_money(subtotal) - percent_of(subtotal, max_discount_percentage)
    if running < floor:
        return floor, lines, True
    return running, lines, False


def compare_position(our_price: Decimal, average: Decimal) -> str:
    """Where our price sits relative to the competitor average."""
    if our_price < average:
        return "below_market"
    if our_price > average:
        return "above_market"
    return "at_market"
