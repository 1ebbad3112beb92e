"""Approval Workflow - the pending_approval -> approved path.

A thin policy layer over the lifecycle engine: it never writes state
itself, it only selects which edge to ask the engine for.
"""

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.access_policy import AccessPolicy, Actor, Operation, get_access_policy
from app.core.exceptions import CatalogError, InvalidTransitionError, ValidationError
from app.core.lifecycle_states import LifecycleState
from app.infra.logging import get_logger
from app.models import Product
from app.schemas.product import BulkApprovalResult, BulkItemOutcome
from app.services.lifecycle_service import LifecycleEngine

logger = get_logger(__name__)


class ApprovalWorkflow:
    """Approval queue and (bulk) approval on top of LifecycleEngine."""

    def __init__(
        self,
        session: AsyncSession,
        engine: LifecycleEngine | None = None,
        policy: AccessPolicy | None = None,
    ) -> None:
        self.session = session
        self.policy = policy or get_access_policy()
        self.engine = engine or LifecycleEngine(session, policy=self.policy)

    async def get_pending_approvals(self, actor: Actor) -> list[Product]:
        """Products awaiting approval, oldest submission first."""
        self.policy.require(actor, Operation.PENDING_APPROVALS)

        result = await self.session.scalars(
            select(Product)
            .where(Product.state == LifecycleState.PENDING_APPROVAL.value)
            .order_by(Product.submitted_at.asc(), Product.id.asc())
        )
        return list(result.all())

    async def approve_product(
        self, product_id: int, actor: Actor, notes: str | None = None
    ) -> Product:
        return await self.engine.approve(product_id, actor, notes)

    async def reject_product(
        self, product_id: int, actor: Actor, notes: str | None = None
    ) -> Product:
        """Send a pending product back to draft."""
        return await self.engine.reject(product_id, actor, notes)

    async def bulk_approve(
        self,
        product_ids: Sequence[int],
        actor: Actor,
        notes: str | None = None,
    ) -> BulkApprovalResult:
        """Approve each product independently.

        Items run sequentially in input order, each inside its own SAVEPOINT,
        so a failing item is rolled back alone and never aborts its siblings.

        Args:
            product_ids: Products to approve
            actor: Approving user
            notes: Notes recorded on every successful approval

        Returns:
            Per-id outcomes split into succeeded and failed

        Raises:
            AuthorizationError: Actor may not bulk approve (nothing is attempted)
            ValidationError: Empty batch or more than the configured maximum
        """
        self.policy.require(actor, Operation.BULK_APPROVE)

        if not product_ids:
            raise ValidationError("productIds must contain at least one id", field="productIds")
        if len(product_ids) > settings.bulk_approve_max_items:
            raise ValidationError(
                f"At most {settings.bulk_approve_max_items} products can be approved at once",
                field="productIds",
            )

        report = BulkApprovalResult()
        for product_id in product_ids:
            try:
                async with self.session.begin_nested():
                    product = await self.engine.transition(
                        product_id,
                        LifecycleState.APPROVED,
                        actor,
                        notes,
                        operation=Operation.BULK_APPROVE,
                    )
                    new_state = product.state
            except CatalogError as e:
                report.failed.append(
                    BulkItemOutcome(
                        product_id=product_id,
                        success=False,
                        state=e.from_state if isinstance(e, InvalidTransitionError) else None,
                        error=e.message,
                        error_type=type(e).__name__,
                    )
                )
                continue
            except SQLAlchemyError as e:
                logger.error(
                    "Bulk approval item failed",
                    product_id=product_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                report.failed.append(
                    BulkItemOutcome(
                        product_id=product_id,
                        success=False,
                        error="Internal error while approving product",
                        error_type="InternalError",
                    )
                )
                continue

            report.succeeded.append(
                BulkItemOutcome(product_id=product_id, success=True, state=new_state)
            )

        logger.info(
            "Bulk approval completed",
            actor=actor.user_id,
            requested=len(product_ids),
            succeeded=len(report.succeeded),
            failed=len(report.failed),
        )
        return report
