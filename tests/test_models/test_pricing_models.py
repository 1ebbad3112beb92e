"""Tests for the pricing rule and price history models."""

from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from app.models import PriceHistory, PricingRule


def test_tablenames():
    assert PricingRule.__tablename__ == "pricing_rules"
    assert PriceHistory.__tablename__ == "product_price_history"


def test_price_history_old_price_nullable():
    assert PriceHistory.__table__.c.old_price.nullable is True
    assert PriceHistory.__table__.c.new_price.nullable is False


@pytest.mark.asyncio
async def test_rule_defaults(db_session):
    rule = PricingRule(rule_name="All", rule_type="percentage", discount_percentage=Decimal("5"))
    db_session.add(rule)
    await db_session.flush()
    await db_session.refresh(rule)

    assert rule.is_active is True
    assert rule.priority == 0
    assert rule.created_at is not None


@pytest.mark.asyncio
async def test_unknown_rule_type_rejected_by_database(db_session):
    db_session.add(
        PricingRule(rule_name="Odd", rule_type="flash_sale", discount_percentage=Decimal("5"))
    )

    with pytest.raises(IntegrityError):
        await db_session.flush()


@pytest.mark.asyncio
async def test_discount_over_100_rejected_by_database(db_session):
    db_session.add(
        PricingRule(rule_name="Free", rule_type="percentage", discount_percentage=Decimal("150"))
    )

    with pytest.raises(IntegrityError):
        await db_session.flush()
