"""PricingRule model - discount rules evaluated by the pricing service."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.core.pricing import PricingRuleType
from app.models.base import Base, TimestampMixin

_RULE_TYPES = ", ".join(f"'{rule_type.value}'" for rule_type in PricingRuleType)


class PricingRule(Base, TimestampMixin):
    """Discount rule.

    Maps to the `pricing_rules` table. `product_id` and `category_id`
    narrow the rule's scope; `min_quantity` is used by bulk rules and
    `customer_id` by customer rules. A rule is considered only while
    `is_active` and inside its validity window.
    """

    __tablename__ = "pricing_rules"
    __table_args__ = (
        CheckConstraint(f"rule_type IN ({_RULE_TYPES})", name="valid_rule_type"),
        CheckConstraint(
            "discount_percentage > 0 AND discount_percentage <= 100",
            name="discount_range",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    rule_name: Mapped[str] = mapped_column(String(200), nullable=False)
    rule_type: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    product_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    category_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("product_categories.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    customer_id: Mapped[str | None] = mapped_column(String(200), nullable=True)
    discount_percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    min_quantity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    valid_from: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    valid_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<PricingRule(id={self.id}, type='{self.rule_type}', "
            f"discount={self.discount_percentage})>"
        )
