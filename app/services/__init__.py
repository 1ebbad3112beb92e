"""Business logic services."""

from app.services.approval_service import ApprovalWorkflow
from app.services.category_service import CategoryService
from app.services.lifecycle_query_service import LifecycleQueryService
from app.services.lifecycle_service import LifecycleEngine
from app.services.pricing_service import PricingService

__all__ = [
    "ApprovalWorkflow",
    "CategoryService",
    "LifecycleEngine",
    "LifecycleQueryService",
    "PricingService",
]
