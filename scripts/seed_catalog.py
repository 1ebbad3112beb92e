#!/usr/bin/env python
"""Seed a local database with categories and sample products.

This script:
1. Creates the schema if it does not exist
2. Creates a few product categories and sample pricing rules
3. Creates sample products and spreads them across lifecycle states

Usage:
    # Categories plus 12 products spread over every state
    python scripts/seed_catalog.py --products 12

    # Only show current lifecycle counts
    python scripts/seed_catalog.py --stats
"""

import argparse
import asyncio
import sys
from decimal import Decimal
from itertools import cycle
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select

from app.core.access_policy import Actor, Role
from app.core.lifecycle_states import LifecycleState
from app.infra.database import close_db_engine, get_db_session, init_db
from app.infra.logging import get_logger, setup_logging
from app.models import PricingRule, ProductCategory
from app.schemas.category import CategoryCreate
from app.schemas.pricing import PricingRuleCreate
from app.schemas.product import ProductCreate
from app.services import CategoryService, LifecycleEngine, LifecycleQueryService, PricingService

setup_logging()
logger = get_logger(__name__)

SEED_ACTOR = Actor(user_id="seed-script", role=Role.ADMIN)

DEFAULT_CATEGORIES = [
    CategoryCreate(code="beverages", name="Beverages", description="Drinks and juices"),
    CategoryCreate(code="snacks", name="Snacks", description="Packaged snacks"),
    CategoryCreate(code="household", name="Household", description="Cleaning and home care"),
]

# Edges walked from draft to reach each target state
PATH_TO_STATE: dict[LifecycleState, list[LifecycleState]] = {
    LifecycleState.DRAFT: [],
    LifecycleState.PENDING_APPROVAL: [LifecycleState.PENDING_APPROVAL],
    LifecycleState.APPROVED: [LifecycleState.PENDING_APPROVAL, LifecycleState.APPROVED],
    LifecycleState.ACTIVE: [
        LifecycleState.PENDING_APPROVAL,
        LifecycleState.APPROVED,
        LifecycleState.ACTIVE,
    ],
    LifecycleState.DISCONTINUED: [
        LifecycleState.PENDING_APPROVAL,
        LifecycleState.APPROVED,
        LifecycleState.ACTIVE,
        LifecycleState.DISCONTINUED,
    ],
    LifecycleState.ARCHIVED: [
        LifecycleState.PENDING_APPROVAL,
        LifecycleState.APPROVED,
        LifecycleState.ACTIVE,
        LifecycleState.DISCONTINUED,
        LifecycleState.ARCHIVED,
    ],
}


async def ensure_categories() -> list[int]:
    """Create the default categories that are missing; return all their ids."""
    ids: list[int] = []
    async with get_db_session() as session:
        service = CategoryService(session)
        for data in DEFAULT_CATEGORIES:
            existing = await session.scalar(
                select(ProductCategory).where(ProductCategory.code == data.code)
            )
            category = existing or await service.create_category(data, SEED_ACTOR)
            ids.append(category.id)
    logger.info("Categories ensured", count=len(ids))
    return ids


async def ensure_pricing_rules(category_ids: list[int]) -> int:
    """Create a bulk rule and a rule for the first category when none exist."""
    async with get_db_session() as session:
        if await session.scalar(select(PricingRule.id).limit(1)) is not None:
            logger.info("Pricing rules already present")
            return 0

        service = PricingService(session)
        rules = [
            PricingRuleCreate(
                rule_name="Case of 12",
                rule_type="bulk",
                min_quantity=12,
                discount_percentage=Decimal("8"),
            ),
            PricingRuleCreate(
                rule_name="Category promotion",
                rule_type="category",
                category_id=category_ids[0],
                discount_percentage=Decimal("5"),
                priority=10,
            ),
        ]
        for data in rules:
            await service.create_rule(data, SEED_ACTOR)

    logger.info("Pricing rules seeded", count=len(rules))
    return len(rules)


async def seed_products(count: int, category_ids: list[int], prefix: str) -> int:
    """Create `count` products, cycling through categories and target states."""
    created = 0
    targets = cycle(LifecycleState)
    categories = cycle(category_ids)

    async with get_db_session() as session:
        engine = LifecycleEngine(session)
        for index in range(1, count + 1):
            product = await engine.create_product(
                ProductCreate(
                    name=f"Sample product {index}",
                    category_id=next(categories),
                    unit_price=Decimal("9.99") + index,
                    sku=f"{prefix}-{index:04d}",
                ),
                SEED_ACTOR,
            )
            for state in PATH_TO_STATE[next(targets)]:
                await engine.transition(product.id, state, SEED_ACTOR, notes="seeded")
            created += 1

    logger.info("Products seeded", count=created)
    return created


async def print_stats() -> None:
    async with get_db_session() as session:
        stats = await LifecycleQueryService(session).get_lifecycle_stats(SEED_ACTOR)

    print("\nLifecycle state counts:")
    print("-" * 40)
    for state, count in stats.items():
        print(f"  {state.value:<18} {count}")
    print(f"\nTotal: {sum(stats.values())} products")


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Seed the product catalog database",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--products",
        type=int,
        default=0,
        help="Number of sample products to create (default: 0)",
    )
    parser.add_argument(
        "--sku-prefix",
        type=str,
        default="SEED",
        help="Prefix for generated SKUs (default: SEED)",
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Only print lifecycle state counts",
    )
    return parser.parse_args()


async def main() -> int:
    """Main entry point."""
    args = parse_args()

    try:
        await init_db()

        if not args.stats:
            category_ids = await ensure_categories()
            await ensure_pricing_rules(category_ids)
            if args.products > 0:
                await seed_products(args.products, category_ids, args.sku_prefix.upper())

        await print_stats()
        return 0
    finally:
        await close_db_engine()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
