"""Product model - catalog item carrying its lifecycle state."""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.lifecycle_states import LifecycleState
from app.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.product_category import ProductCategory

_STATE_VALUES = ", ".join(f"'{state.value}'" for state in LifecycleState)


class Product(Base, TimestampMixin):
    """Catalog product.

    Maps to the `products` table. `state` is written only by the lifecycle
    engine; the check constraint keeps it within the known lifecycle states.
    """

    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint(f"state IN ({_STATE_VALUES})", name="valid_state"),
        CheckConstraint("unit_price >= 0", name="non_negative_price"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    category_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("product_categories.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    sku: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    state: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=LifecycleState.DRAFT.value,
        index=True,
    )

    # Approval bookkeeping
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    approved_by: Mapped[str | None] = mapped_column(String(200), nullable=True)

    # Relationships
    category: Mapped["ProductCategory"] = relationship(
        "ProductCategory",
        lazy="selectin",
    )

    @property
    def lifecycle_state(self) -> LifecycleState:
        return LifecycleState(self.state)

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, sku='{self.sku}', state='{self.state}')>"
