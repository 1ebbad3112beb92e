"""Health check endpoints.

`/health` and `/health/live` are stateless; `/health/ready` also checks
database connectivity.
"""

from fastapi import APIRouter, Response, status

from app import __version__
from app.config import settings
from app.infra.database import verify_db_connection
from app.infra.logging import get_logger
from app.models.base import utcnow
from app.schemas.common import HealthResponse

router = APIRouter()
logger = get_logger(__name__)


def feature_flags() -> dict[str, bool]:
    return {
        "dynamicPricing": True,
        "lifecycleManagement": True,
        "bulkDiscounts": True,
        "approvalWorkflow": True,
        "bulkApproval": True,
        "authorization": settings.authorization_enabled,
    }


def _health(status_value: str, checks: dict[str, bool]) -> HealthResponse:
    return HealthResponse(
        service=settings.service_name,
        status=status_value,
        version=__version__,
        environment=settings.environment,
        features=feature_flags(),
        checks=checks,
        timestamp=utcnow(),
    )


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Basic health check with enabled features."""
    return _health("healthy", {})


@router.get("/health/live", response_model=HealthResponse)
async def health_live() -> HealthResponse:
    """Liveness check."""
    return _health("healthy", {"alive": True})


@router.get("/health/ready", response_model=HealthResponse)
async def health_ready(response: Response) -> HealthResponse:
    """Readiness check.

    Returns 503 while the database is unreachable.
    """
    checks = {"database": await verify_db_connection()}

    all_healthy = all(checks.values())
    if not all_healthy:
        logger.warning("Readiness check failed", checks=checks)
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return _health("healthy" if all_healthy else "degraded", checks)
