"""Product category catalog."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.access_policy import AccessPolicy, Actor, Operation, get_access_policy
from app.core.exceptions import NotFoundError, ValidationError
from app.infra.logging import get_logger
from app.models import ProductCategory
from app.schemas.category import CategoryCreate, CategoryUpdate

logger = get_logger(__name__)


class CategoryService:
    def __init__(self, session: AsyncSession, policy: AccessPolicy | None = None) -> None:
        self.session = session
        self.policy = policy or get_access_policy()

    async def create_category(self, data: CategoryCreate, actor: Actor) -> ProductCategory:
        """Create a category with a unique code.

        Raises:
            ValidationError: If the code is already taken
        """
        self.policy.require(actor, Operation.CREATE_CATEGORY)

        existing = await self.session.scalar(
            select(ProductCategory.id).where(ProductCategory.code == data.code)
        )
        if existing is not None:
            raise ValidationError(f"Category code '{data.code}' already exists", field="code")

        category = ProductCategory(code=data.code, name=data.name, description=data.description)
        self.session.add(category)
        await self.session.flush()
        await self.session.refresh(category)

        logger.info("Category created", category_id=category.id, code=category.code)
        return category

    async def list_categories(
        self, actor: Actor, include_inactive: bool = False
    ) -> list[ProductCategory]:
        self.policy.require(actor, Operation.LIST_CATEGORIES)

        stmt = select(ProductCategory)
        if not include_inactive:
            stmt = stmt.where(ProductCategory.active.is_(True))
        result = await self.session.scalars(stmt.order_by(ProductCategory.name.asc()))
        return list(result.all())

    async def get_category(self, category_id: int, actor: Actor) -> ProductCategory:
        self.policy.require(actor, Operation.GET_CATEGORY)

        category = await self.session.get(ProductCategory, category_id)
        if category is None:
            raise NotFoundError("Category", category_id)
        return category

    async def update_category(
        self, category_id: int, data: CategoryUpdate, actor: Actor
    ) -> ProductCategory:
        """Apply the fields set in `data`.

        Existing products keep a deactivated category; only new products
        are refused.
        """
        self.policy.require(actor, Operation.UPDATE_CATEGORY)

        category = await self.session.get(ProductCategory, category_id)
        if category is None:
            raise NotFoundError("Category", category_id)

        # description may be cleared; name and active may not
        changes = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None or field == "description"
        }
        for field, value in changes.items():
            setattr(category, field, value)
        await self.session.flush()
        await self.session.refresh(category)

        logger.info(
            "Category updated",
            category_id=category.id,
            fields=sorted(changes),
            active=category.active,
        )
        return category
