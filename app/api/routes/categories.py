"""Product category endpoints."""

from fastapi import APIRouter, status

from app.api.deps import Categories, CurrentActor
from app.schemas.category import CategoryCreate, CategoryRead, CategoryUpdate
from app.schemas.common import ApiResponse

router = APIRouter()


@router.post("", response_model=ApiResponse[CategoryRead], status_code=status.HTTP_201_CREATED)
async def create_category(
    body: CategoryCreate, categories: Categories, actor: CurrentActor
) -> ApiResponse[CategoryRead]:
    category = await categories.create_category(body, actor)
    return ApiResponse[CategoryRead](data=CategoryRead.model_validate(category))


@router.get("", response_model=ApiResponse[list[CategoryRead]])
async def list_categories(
    categories: Categories, actor: CurrentActor, include_inactive: bool = False
) -> ApiResponse[list[CategoryRead]]:
    items = await categories.list_categories(actor, include_inactive=include_inactive)
    return ApiResponse[list[CategoryRead]](
        data=[CategoryRead.model_validate(item) for item in items]
    )


@router.get("/{category_id}", response_model=ApiResponse[CategoryRead])
async def get_category(
    category_id: int, categories: Categories, actor: CurrentActor
) -> ApiResponse[CategoryRead]:
    category = await categories.get_category(category_id, actor)
    return ApiResponse[CategoryRead](data=CategoryRead.model_validate(category))


@router.patch("/{category_id}", response_model=ApiResponse[CategoryRead])
async def update_category(
    category_id: int, body: CategoryUpdate, categories: Categories, actor: CurrentActor
) -> ApiResponse[CategoryRead]:
    category = await categories.update_category(category_id, body, actor)
    return ApiResponse[CategoryRead](data=CategoryRead.model_validate(category))
