"""Tests for base model infrastructure."""

from datetime import timezone

from sqlalchemy.orm import DeclarativeBase

from app.models.base import Base, TimestampMixin, utcnow


def test_base_is_declarative_base():
    """Base should be a SQLAlchemy DeclarativeBase."""
    assert hasattr(Base, "metadata")
    assert issubclass(Base, DeclarativeBase)


def test_timestamp_mixin_columns():
    assert hasattr(TimestampMixin, "created_at")
    assert hasattr(TimestampMixin, "updated_at")


def test_utcnow_is_timezone_aware():
    assert utcnow().tzinfo is timezone.utc


def test_all_tables_registered():
    assert {
        "products",
        "product_categories",
        "product_lifecycle_transitions",
        "pricing_rules",
        "product_price_history",
    } <= set(Base.metadata.tables)
