"""Pydantic schemas for request/response validation."""

from app.schemas.category import CategoryCreate, CategoryRead, CategoryUpdate
from app.schemas.common import ApiResponse, ErrorResponse, HealthResponse
from app.schemas.product import (
    BulkApprovalResult,
    BulkApproveRequest,
    BulkItemOutcome,
    LifecycleActionRequest,
    LifecycleTransitionRead,
    ProductCreate,
    ProductRead,
    TransitionRequest,
)

__all__ = [
    "ApiResponse",
    "ErrorResponse",
    "HealthResponse",
    "CategoryCreate",
    "CategoryRead",
    "CategoryUpdate",
    "BulkApprovalResult",
    "BulkApproveRequest",
    "BulkItemOutcome",
    "LifecycleActionRequest",
    "LifecycleTransitionRead",
    "ProductCreate",
    "ProductRead",
    "TransitionRequest",
]
