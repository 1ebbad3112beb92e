"""Read-only reporting over product lifecycle state."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.access_policy import AccessPolicy, Actor, Operation, get_access_policy
from app.core.exceptions import NotFoundError, ValidationError
from app.core.lifecycle_states import LifecycleState, parse_state
from app.models import LifecycleTransition, Product


class LifecycleQueryService:
    """By-state listings, per-product history and state counts."""

    def __init__(self, session: AsyncSession, policy: AccessPolicy | None = None) -> None:
        self.session = session
        self.policy = policy or get_access_policy()

    async def get_products_by_state(
        self,
        state: LifecycleState | str,
        actor: Actor,
        category_id: int | None = None,
    ) -> list[Product]:
        """List products currently in `state`, optionally within one category.

        Raises:
            ValidationError: If `state` is not a lifecycle state
        """
        self.policy.require(actor, Operation.PRODUCTS_BY_STATE)
        lifecycle_state = parse_state(state)

        stmt = select(Product).where(Product.state == lifecycle_state.value)
        if category_id is not None:
            stmt = stmt.where(Product.category_id == category_id)

        result = await self.session.scalars(stmt.order_by(Product.id.asc()))
        return list(result.all())

    async def get_lifecycle_history(
        self,
        product_id: int,
        actor: Actor,
        limit: int | None = None,
    ) -> list[LifecycleTransition]:
        """History entries of one product, newest first.

        Raises:
            ValidationError: If `limit` is outside 1..history_max_limit
            NotFoundError: If the product does not exist
        """
        self.policy.require(actor, Operation.LIFECYCLE_HISTORY)

        if limit is None:
            limit = settings.history_default_limit
        if not 1 <= limit <= settings.history_max_limit:
            raise ValidationError(
                f"limit must be between 1 and {settings.history_max_limit}",
                field="limit",
            )

        exists = await self.session.scalar(select(Product.id).where(Product.id == product_id))
        if exists is None:
            raise NotFoundError("Product", product_id)

        result = await self.session.scalars(
            select(LifecycleTransition)
            .where(LifecycleTransition.product_id == product_id)
            .order_by(LifecycleTransition.created_at.desc(), LifecycleTransition.id.desc())
            .limit(limit)
        )
        return list(result.all())

    async def get_lifecycle_stats(self, actor: Actor) -> dict[LifecycleState, int]:
        """Number of products in each state; every state is present."""
        self.policy.require(actor, Operation.LIFECYCLE_STATS)

        counts = {state: 0 for state in LifecycleState}
        rows = await self.session.execute(
            select(Product.state, func.count(Product.id)).group_by(Product.state)
        )
        for state_value, count in rows.all():
            counts[LifecycleState(state_value)] = count
        return counts
