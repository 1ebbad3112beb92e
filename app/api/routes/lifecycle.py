"""Product lifecycle endpoints.

Creation, transitions, the approval workflow and read-only lifecycle
reporting. Static paths are declared before the `/{product_id}/...` ones.
"""

from typing import Annotated

from fastapi import APIRouter, Query, status

from app.api.deps import Approvals, CurrentActor, Engine, Queries, attribute_to
from app.models import Product
from app.schemas.common import ApiResponse
from app.schemas.product import (
    BulkApprovalResult,
    BulkApproveRequest,
    LifecycleActionRequest,
    LifecycleTransitionRead,
    ProductCreate,
    ProductRead,
    TransitionRequest,
)

router = APIRouter()


def _product(product: Product) -> ApiResponse[ProductRead]:
    return ApiResponse[ProductRead](data=ProductRead.model_validate(product))


def _products(products: list[Product]) -> ApiResponse[list[ProductRead]]:
    return ApiResponse[list[ProductRead]](
        data=[ProductRead.model_validate(product) for product in products]
    )


# =============================================================================
# Creation & generic transition
# =============================================================================


@router.post(
    "/lifecycle",
    response_model=ApiResponse[ProductRead],
    status_code=status.HTTP_201_CREATED,
    summary="Create a product in the draft state",
)
async def create_product(
    body: ProductCreate, engine: Engine, actor: CurrentActor
) -> ApiResponse[ProductRead]:
    return _product(await engine.create_product(body, actor))


@router.post(
    "/{product_id}/transition",
    response_model=ApiResponse[ProductRead],
    summary="Move a product to another lifecycle state",
)
async def transition_state(
    product_id: int, body: TransitionRequest, engine: Engine, actor: CurrentActor
) -> ApiResponse[ProductRead]:
    product = await engine.transition(
        product_id, body.new_state, attribute_to(actor, body.user_id), body.notes
    )
    return _product(product)


# =============================================================================
# Approval workflow
# =============================================================================


@router.get(
    "/pending-approvals",
    response_model=ApiResponse[list[ProductRead]],
    summary="Products awaiting approval, oldest first",
)
async def get_pending_approvals(
    approvals: Approvals, actor: CurrentActor
) -> ApiResponse[list[ProductRead]]:
    return _products(await approvals.get_pending_approvals(actor))


@router.post(
    "/bulk-approve",
    response_model=ApiResponse[BulkApprovalResult],
    summary="Approve several products, reporting each outcome",
)
async def bulk_approve(
    body: BulkApproveRequest, approvals: Approvals, actor: CurrentActor
) -> ApiResponse[BulkApprovalResult]:
    report = await approvals.bulk_approve(
        body.product_ids, attribute_to(actor, body.user_id), body.notes
    )
    return ApiResponse[BulkApprovalResult](data=report)


@router.post("/{product_id}/submit-for-approval", response_model=ApiResponse[ProductRead])
async def submit_for_approval(
    product_id: int,
    engine: Engine,
    actor: CurrentActor,
    body: LifecycleActionRequest | None = None,
) -> ApiResponse[ProductRead]:
    body = body or LifecycleActionRequest()
    product = await engine.submit_for_approval(
        product_id, attribute_to(actor, body.user_id), body.notes
    )
    return _product(product)


@router.post("/{product_id}/approve", response_model=ApiResponse[ProductRead])
async def approve_product(
    product_id: int,
    approvals: Approvals,
    actor: CurrentActor,
    body: LifecycleActionRequest | None = None,
) -> ApiResponse[ProductRead]:
    body = body or LifecycleActionRequest()
    product = await approvals.approve_product(
        product_id, attribute_to(actor, body.user_id), body.notes
    )
    return _product(product)


@router.post("/{product_id}/reject", response_model=ApiResponse[ProductRead])
async def reject_product(
    product_id: int,
    approvals: Approvals,
    actor: CurrentActor,
    body: LifecycleActionRequest | None = None,
) -> ApiResponse[ProductRead]:
    body = body or LifecycleActionRequest()
    product = await approvals.reject_product(
        product_id, attribute_to(actor, body.user_id), body.notes
    )
    return _product(product)


# =============================================================================
# State shortcuts
# =============================================================================


@router.post("/{product_id}/activate", response_model=ApiResponse[ProductRead])
async def activate_product(
    product_id: int,
    engine: Engine,
    actor: CurrentActor,
    body: LifecycleActionRequest | None = None,
) -> ApiResponse[ProductRead]:
    body = body or LifecycleActionRequest()
    return _product(await engine.activate(product_id, attribute_to(actor, body.user_id), body.notes))


@router.post("/{product_id}/discontinue", response_model=ApiResponse[ProductRead])
async def discontinue_product(
    product_id: int,
    engine: Engine,
    actor: CurrentActor,
    body: LifecycleActionRequest | None = None,
) -> ApiResponse[ProductRead]:
    body = body or LifecycleActionRequest()
    product = await engine.discontinue(product_id, attribute_to(actor, body.user_id), body.notes)
    return _product(product)


@router.post("/{product_id}/archive", response_model=ApiResponse[ProductRead])
async def archive_product(
    product_id: int,
    engine: Engine,
    actor: CurrentActor,
    body: LifecycleActionRequest | None = None,
) -> ApiResponse[ProductRead]:
    body = body or LifecycleActionRequest()
    return _product(await engine.archive(product_id, attribute_to(actor, body.user_id), body.notes))


# =============================================================================
# Lifecycle queries
# =============================================================================


@router.get(
    "/lifecycle-stats",
    response_model=ApiResponse[dict[str, int]],
    summary="Number of products in each lifecycle state",
)
async def get_lifecycle_stats(queries: Queries, actor: CurrentActor) -> ApiResponse[dict[str, int]]:
    stats = await queries.get_lifecycle_stats(actor)
    return ApiResponse[dict[str, int]](data={state.value: count for state, count in stats.items()})


@router.get(
    "/by-state/{state}",
    response_model=ApiResponse[list[ProductRead]],
    summary="Products currently in a lifecycle state",
)
async def get_products_by_state(
    state: str,
    queries: Queries,
    actor: CurrentActor,
    category_id: Annotated[int | None, Query(gt=0)] = None,
) -> ApiResponse[list[ProductRead]]:
    return _products(await queries.get_products_by_state(state, actor, category_id=category_id))


@router.get(
    "/{product_id}/lifecycle-history",
    response_model=ApiResponse[list[LifecycleTransitionRead]],
    summary="Lifecycle history of a product, newest first",
)
async def get_lifecycle_history(
    product_id: int,
    queries: Queries,
    actor: CurrentActor,
    limit: int | None = None,
) -> ApiResponse[list[LifecycleTransitionRead]]:
    history = await queries.get_lifecycle_history(product_id, actor, limit=limit)
    return ApiResponse[list[LifecycleTransitionRead]](
        data=[LifecycleTransitionRead.model_validate(entry) for entry in history]
    )
