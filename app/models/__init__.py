"""SQLAlchemy models for the product catalog."""

from app.models.base import Base, TimestampMixin
from app.models.lifecycle_transition import ImmutableRecordError, LifecycleTransition
from app.models.price_history import PriceHistory
from app.models.pricing_rule import PricingRule
from app.models.product import Product
from app.models.product_category import ProductCategory

__all__ = [
    "Base",
    "TimestampMixin",
    "ImmutableRecordError",
    "LifecycleTransition",
    "PriceHistory",
    "PricingRule",
    "Product",
    "ProductCategory",
]
