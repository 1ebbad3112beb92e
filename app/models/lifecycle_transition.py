"""LifecycleTransition model - append-only audit trail of state changes."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, event
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, utcnow


class LifecycleTransition(Base):
    """One lifecycle state change of a product.

    Maps to the `product_lifecycle_transitions` table. Rows are inserted by
    the lifecycle engine and never modified afterwards; `from_state` is NULL
    only for the entry written at creation time.
    """

    __tablename__ = "product_lifecycle_transitions"
    __table_args__ = (
        Index("ix_lifecycle_transitions_product_created", "product_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("products.id", ondelete="RESTRICT"),
        nullable=False,
    )
    from_state: Mapped[str | None] = mapped_column(String(32), nullable=True)
    to_state: Mapped[str] = mapped_column(String(32), nullable=False)
    actor: Mapped[str] = mapped_column(String(200), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<LifecycleTransition(product_id={self.product_id}, "
            f"{self.from_state} -> {self.to_state})>"
        )


class ImmutableRecordError(RuntimeError):
    """Raised when code attempts to modify an append-only record."""


@event.listens_for(LifecycleTransition, "before_update")
def _reject_update(mapper, connection, target):  # type: ignore[no-untyped-def]
    raise ImmutableRecordError(f"Lifecycle history is append-only: {target!r}")


@event.listens_for(LifecycleTransition, "before_delete")
def _reject_delete(mapper, connection, target):  # type: ignore[no-untyped-def]
    raise ImmutableRecordError(f"Lifecycle history is append-only: {target!r}")
