"""PriceHistory model - every change of a product's unit price."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Numeric, String, Text, event
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, utcnow
from app.models.lifecycle_transition import ImmutableRecordError


class PriceHistory(Base):
    """One unit price change.

    Maps to the `product_price_history` table. `old_price` is NULL for the
    entry written when the product is created. Rows are append-only.
    """

    __tablename__ = "product_price_history"
    __table_args__ = (
        Index("ix_price_history_product_created", "product_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("products.id", ondelete="RESTRICT"),
        nullable=False,
    )
    old_price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    new_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    changed_by: Mapped[str] = mapped_column(String(200), nullable=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<PriceHistory(product_id={self.product_id}, "
            f"{self.old_price} -> {self.new_price})>"
        )


@event.listens_for(PriceHistory, "before_update")
def _reject_update(mapper, connection, target):  # type: ignore[no-untyped-def]
    raise ImmutableRecordError(f"Price history is append-only: {target!r}")


@event.listens_for(PriceHistory, "before_delete")
def _reject_delete(mapper, connection, target):  # type: ignore[no-untyped-def]
    raise ImmutableRecordError(f"Price history is append-only: {target!r}")
