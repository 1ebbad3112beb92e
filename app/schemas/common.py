"""Common schemas for API envelopes and health checks."""

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope wrapping every API payload."""

    success: bool = Field(default=True, description="Always true for successful calls")
    data: T = Field(description="Response payload")

    model_config = {"extra": "forbid"}


class ErrorResponse(BaseModel):
    """Standard error envelope."""

    success: bool = Field(default=False)
    message: str = Field(description="Human readable error message")
    error_type: str = Field(description="Error type/class name")
    detail: dict[str, Any] | None = Field(default=None, description="Additional error details")

    model_config = {"extra": "forbid"}


class HealthResponse(BaseModel):
    """Health check response."""

    success: bool = Field(default=True)
    service: str = Field(description="Service name")
    status: str = Field(description="Health status (healthy, degraded)")
    version: str = Field(description="Service version")
    environment: str = Field(description="Environment name")
    features: dict[str, bool] = Field(default_factory=dict, description="Enabled feature flags")
    checks: dict[str, bool] = Field(default_factory=dict, description="Individual health checks")
    timestamp: datetime = Field(description="Time the check was evaluated")

    model_config = {"extra": "forbid"}
