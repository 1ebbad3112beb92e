"""Lifecycle Engine - the only writer of product lifecycle state.

Creates products in the draft state and moves them along the whitelist in
`app.core.lifecycle_states`. Every state change is a conditional update
(compare-and-set on the current state) followed by exactly one appended
history row, both inside the caller's transaction.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.access_policy import AccessPolicy, Actor, Operation, get_access_policy
from app.core.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    TransitionConflictError,
    ValidationError,
)
from app.core.lifecycle_states import (
    INITIAL_STATE,
    LifecycleState,
    parse_state,
    validate_transition,
)
from app.infra.logging import get_logger
from app.models import LifecycleTransition, PriceHistory, Product, ProductCategory
from app.models.base import utcnow
from app.schemas.product import ProductCreate

logger = get_logger(__name__)

CREATION_NOTE = "Product created"
INITIAL_PRICE_NOTE = "Initial price"


def format_validation_errors(exc: PydanticValidationError) -> str:
    """Flatten pydantic errors into a single readable message."""
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts)


class LifecycleEngine:
    """Validates and executes product lifecycle transitions."""

    def __init__(
        self,
        session: AsyncSession,
        policy: AccessPolicy | None = None,
        max_retries: int | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            session: Session of the current unit of work
            policy: Access policy (defaults to the process-wide policy)
            max_retries: Attempts for the conditional state update
        """
        self.session = session
        self.policy = policy or get_access_policy()
        self.max_retries = max_retries or settings.transition_max_retries

    # =========================================================================
    # Creation
    # =========================================================================

    async def create_product(
        self,
        attributes: ProductCreate | Mapping[str, Any],
        actor: Actor,
    ) -> Product:
        """Create a product in the draft state.

        Args:
            attributes: name, category_id, unit_price, sku and optional description
            actor: User creating the product

        Returns:
            The persisted product

        Raises:
            ValidationError: Missing/malformed attributes, unknown category
                or duplicate SKU
        """
        self.policy.require(actor, Operation.CREATE_PRODUCT)
        data = self._coerce_attributes(attributes)

        category = await self.session.get(ProductCategory, data.category_id)
        if category is None:
            raise ValidationError(
                f"Category {data.category_id} does not exist",
                field="category_id",
            )
        if not category.active:
            raise ValidationError(
                f"Category {data.category_id} is inactive",
                field="category_id",
            )

        existing = await self.session.scalar(select(Product.id).where(Product.sku == data.sku))
        if existing is not None:
            raise ValidationError(f"SKU '{data.sku}' already exists", field="sku")

        product = Product(
            name=data.name,
            description=data.description,
            category_id=data.category_id,
            unit_price=data.unit_price,
            sku=data.sku,
            state=INITIAL_STATE.value,
        )
        self.session.add(product)
        try:
            await self.session.flush()
        except IntegrityError as e:
            # Lost a race on the unique SKU index
            raise ValidationError(f"SKU '{data.sku}' already exists", field="sku") from e

        self.session.add(
            LifecycleTransition(
                product_id=product.id,
                from_state=None,
                to_state=INITIAL_STATE.value,
                actor=actor.user_id,
                notes=CREATION_NOTE,
                created_at=product.created_at,
            )
        )
        self.session.add(
            PriceHistory(
                product_id=product.id,
                old_price=None,
                new_price=product.unit_price,
                changed_by=actor.user_id,
                reason=INITIAL_PRICE_NOTE,
                created_at=product.created_at,
            )
        )
        await self.session.flush()
        await self.session.refresh(product)

        logger.info(
            "Product created",
            product_id=product.id,
            sku=product.sku,
            category_id=product.category_id,
            actor=actor.user_id,
        )
        return product

    @staticmethod
    def _coerce_attributes(attributes: ProductCreate | Mapping[str, Any]) -> ProductCreate:
        if isinstance(attributes, ProductCreate):
            return attributes
        try:
            return ProductCreate.model_validate(dict(attributes))
        except PydanticValidationError as e:
            raise ValidationError(format_validation_errors(e)) from e

    # =========================================================================
    # Transitions
    # =========================================================================

    async def transition(
        self,
        product_id: int,
        target_state: LifecycleState | str,
        actor: Actor,
        notes: str | None = None,
        *,
        operation: Operation = Operation.TRANSITION,
    ) -> Product:
        """Move a product to `target_state`.

        Args:
            product_id: Product to transition
            target_state: Requested lifecycle state
            actor: User performing the change (recorded in history)
            notes: Optional free text stored with the history entry
            operation: Operation name checked against the access policy

        Returns:
            The updated product

        Raises:
            AuthorizationError: Actor may not perform `operation`
            ValidationError: `target_state` is not a lifecycle state
            NotFoundError: Unknown product id
            InvalidTransitionError: Edge not in the whitelist (state unchanged)
            TransitionConflictError: Concurrent writers outran every retry
        """
        self.policy.require(actor, operation)
        target = parse_state(target_state)

        current = INITIAL_STATE
        for attempt in range(1, self.max_retries + 1):
            product = await self._load_product(product_id)
            current = product.lifecycle_state

            try:
                validate_transition(current, target)
            except InvalidTransitionError:
                logger.info(
                    "Lifecycle transition rejected",
                    product_id=product_id,
                    from_state=current.value,
                    to_state=target.value,
                    actor=actor.user_id,
                )
                raise

            now = utcnow()
            result = await self.session.execute(
                update(Product)
                .where(Product.id == product_id, Product.state == current.value)
                .values(state=target.value, updated_at=now, **self._bookkeeping(target, actor, now))
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 1:
                self.session.add(
                    LifecycleTransition(
                        product_id=product_id,
                        from_state=current.value,
                        to_state=target.value,
                        actor=actor.user_id,
                        notes=notes,
                        created_at=now,
                    )
                )
                await self.session.flush()
                await self.session.refresh(product)

                logger.info(
                    "Lifecycle transition applied",
                    product_id=product_id,
                    from_state=current.value,
                    to_state=target.value,
                    actor=actor.user_id,
                    operation=operation.value,
                    attempt=attempt,
                )
                return product

            logger.warning(
                "Concurrent state change detected",
                product_id=product_id,
                expected_state=current.value,
                to_state=target.value,
                attempt=attempt,
            )

        raise TransitionConflictError(product_id, current.value, target.value, self.max_retries)

    async def submit_for_approval(
        self, product_id: int, actor: Actor, notes: str | None = None
    ) -> Product:
        """draft -> pending_approval"""
        return await self.transition(
            product_id,
            LifecycleState.PENDING_APPROVAL,
            actor,
            notes,
            operation=Operation.SUBMIT_FOR_APPROVAL,
        )

    async def approve(self, product_id: int, actor: Actor, notes: str | None = None) -> Product:
        """pending_approval -> approved"""
        return await self.transition(
            product_id, LifecycleState.APPROVED, actor, notes, operation=Operation.APPROVE
        )

    async def reject(self, product_id: int, actor: Actor, notes: str | None = None) -> Product:
        """pending_approval -> draft"""
        return await self.transition(
            product_id, LifecycleState.DRAFT, actor, notes, operation=Operation.REJECT
        )

    async def activate(self, product_id: int, actor: Actor, notes: str | None = None) -> Product:
        """approved -> active"""
        return await self.transition(
            product_id, LifecycleState.ACTIVE, actor, notes, operation=Operation.ACTIVATE
        )

    async def discontinue(
        self, product_id: int, actor: Actor, notes: str | None = None
    ) -> Product:
        """active -> discontinued"""
        return await self.transition(
            product_id, LifecycleState.DISCONTINUED, actor, notes, operation=Operation.DISCONTINUE
        )

    async def archive(self, product_id: int, actor: Actor, notes: str | None = None) -> Product:
        """discontinued -> archived"""
        return await self.transition(
            product_id, LifecycleState.ARCHIVED, actor, notes, operation=Operation.ARCHIVE
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _load_product(self, product_id: int) -> Product:
        """Read the product, bypassing any stale copy in the identity map."""
        product = await self.session.scalar(
            select(Product)
            .where(Product.id == product_id)
            .execution_options(populate_existing=True)
        )
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    @staticmethod
    def _bookkeeping(target: LifecycleState, actor: Actor, now: datetime) -> dict[str, Any]:
        """Approval columns that change together with the state."""
        if target is LifecycleState.PENDING_APPROVAL:
            return {"submitted_at": now}
        if target is LifecycleState.DRAFT:
            return {"submitted_at": None}
        if target is LifecycleState.APPROVED:
            return {"approved_at": now, "approved_by": actor.user_id}
        return {}
