"""FastAPI dependencies for dependency injection.

Provides:
- Database session per request
- The acting user asserted by the identity gateway
- Service instances bound to the request session
"""

from dataclasses import replace
from typing import Annotated, AsyncGenerator

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.access_policy import Actor, Role
from app.infra.database import get_db_session
from app.infra.logging import bind_request_context, get_logger
from app.services import (
    ApprovalWorkflow,
    CategoryService,
    LifecycleEngine,
    LifecycleQueryService,
    PricingService,
)

logger = get_logger(__name__)

ANONYMOUS_USER = "anonymous"


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session committed when the request succeeds."""
    async with get_db_session() as session:
        yield session


async def get_actor(
    x_user_id: Annotated[str | None, Header()] = None,
    x_user_role: Annotated[str | None, Header()] = None,
) -> Actor:
    """Build the acting user from gateway headers.

    Authentication happens upstream; the gateway forwards the verified
    user id and role. Missing or unknown roles are treated as public.

    Args:
        x_user_id: Verified user identifier
        x_user_role: Role claim (admin or public)

    Returns:
        Actor for authorization and audit
    """
    actor = Actor(
        user_id=x_user_id.strip() if x_user_id and x_user_id.strip() else ANONYMOUS_USER,
        role=Role.parse(x_user_role),
    )
    bind_request_context(user_id=actor.user_id, role=actor.role.value)
    return actor


def attribute_to(actor: Actor, body_user_id: str | None) -> Actor:
    """Use the body's userId for audit when the gateway sent no identity.

    The role is never taken from the body.
    """
    if actor.user_id != ANONYMOUS_USER or not body_user_id:
        return actor
    return replace(actor, user_id=body_user_id)


# Type aliases for cleaner annotations
DbSession = Annotated[AsyncSession, Depends(get_db)]
CurrentActor = Annotated[Actor, Depends(get_actor)]


def get_lifecycle_engine(db: DbSession) -> LifecycleEngine:
    return LifecycleEngine(db)


def get_approval_workflow(
    db: DbSession,
    engine: Annotated[LifecycleEngine, Depends(get_lifecycle_engine)],
) -> ApprovalWorkflow:
    return ApprovalWorkflow(db, engine=engine)


def get_query_service(db: DbSession) -> LifecycleQueryService:
    return LifecycleQueryService(db)


def get_category_service(db: DbSession) -> CategoryService:
    return CategoryService(db)


def get_pricing_service(db: DbSession) -> PricingService:
    return PricingService(db)


Engine = Annotated[LifecycleEngine, Depends(get_lifecycle_engine)]
Approvals = Annotated[ApprovalWorkflow, Depends(get_approval_workflow)]
Queries = Annotated[LifecycleQueryService, Depends(get_query_service)]
Categories = Annotated[CategoryService, Depends(get_category_service)]
Pricing = Annotated[PricingService, Depends(get_pricing_service)]
