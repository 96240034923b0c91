"""
Shared test fixtures

Settings are read at import time, so the environment is prepared before
anything from dealcart is imported.
"""

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOG_FILE", "")

from datetime import datetime, timedelta
from decimal import Decimal
import uuid

import pytest
from httpx import ASGITransport, AsyncClient

from dealcart.core.database import create_db_engine, create_session_factory, get_db, init_db
from dealcart.discounts import (
    BulkTerms,
    CartLine,
    CouponTerms,
    CustomerRef,
    Discount,
    DiscountKind,
    DiscountValueType,
    OrderContext,
    PromotionTerms,
)
from dealcart.models import CartItem, Category, DiscountRecord, Order, OrderStatus, Product, User

NOW = datetime(2024, 6, 15, 12, 0, 0)

# Domain builders

def make_coupon(**overrides) -> Discount:
    terms = overrides.pop("terms", CouponTerms(coupon_code=overrides.get("code", "SAVE20")))
    values = dict(
        id=uuid.uuid4(),
        name="Save 20",
        kind=DiscountKind.COUPON,
        value_type=DiscountValueType.PERCENTAGE,
        discount_value=Decimal("20"),
        terms=terms,
        code="SAVE20",
    )
    values.update(overrides)
    return Discount(**values)

def make_bulk(minimum_quantity: int = 3, product_id=None, **overrides) -> Discount:
    values = dict(
        id=uuid.uuid4(),
        name="Buy more",
        kind=DiscountKind.BULK_DISCOUNT,
        value_type=DiscountValueType.PERCENTAGE,
        discount_value=Decimal("10"),
        terms=BulkTerms(minimum_quantity=minimum_quantity, product_id=product_id),
    )
    values.update(overrides)
    return Discount(**values)

def make_promotion(**overrides) -> Discount:
    values = dict(
        id=uuid.uuid4(),
        name="Summer sale",
        kind=DiscountKind.PROMOTION,
        value_type=DiscountValueType.PERCENTAGE,
        discount_value=Decimal("15"),
        terms=PromotionTerms(auto_apply=True, banner_text="Summer!"),
    )
    values.update(overrides)
    return Discount(**values)

def make_context(
    subtotal="150.00",
    items=None,
    customer=None,
    **overrides
) -> OrderContext:
    if items is None:
        items = (CartLine(uuid.uuid4(), "Widget", Decimal(subtotal), 1),)
    values = dict(
        customer=customer or CustomerRef(id=uuid.uuid4(), email="buyer@example.com"),
        order_time=NOW,
        items=items,
        subtotal=Decimal(subtotal) if subtotal is not None else None,
        shipping_cost=Decimal("0.00"),
        tax_amount=Decimal("0.00"),
    )
    values.update(overrides)
    return OrderContext(**values)

class FakeDiscountRepository:
    """In-memory stand-in for the rule store"""

    def __init__(self, discounts=()):
        self.discounts = list(discounts)
        self.calls = []

    async def find_active_discounts(self, now):
        self.calls.append(now)
        return [d for d in self.discounts if d.is_active and d.is_within_window(now)]

# Database fixtures

@pytest.fixture
async def engine():
    engine = create_db_engine("sqlite+aiosqlite:///:memory:")
    await init_db(engine)
    yield engine
    await engine.dispose()

@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)

@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session

@pytest.fixture
async def client(session_factory):
    from dealcart.main import app

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()

# Seed helpers

async def seed_customer(db, email="buyer@example.com", name="Test Buyer", is_active=True) -> User:
    user = User(email=email, name=name, is_active=is_active)
    db.add(user)
    await db.flush()
    return user

async def seed_cart(db, user, lines) -> list:
    """Add (price, quantity, category) lines to a user's cart, returning the products"""
    products = []
    for index, (price, quantity, category) in enumerate(lines):
        product = Product(
            name=f"Product {index}",
            sku=f"SKU-{uuid.uuid4().hex[:10]}",
            price=Decimal(price),
            category_id=category.id if category is not None else None,
        )
        db.add(product)
        await db.flush()
        db.add(CartItem(user_id=user.id, product_id=product.id, quantity=quantity, price=Decimal(price)))
        products.append(product)
    await db.flush()
    return products

async def seed_category(db, name="Electronics") -> Category:
    category = Category(name=name, slug=f"{name.lower()}-{uuid.uuid4().hex[:6]}")
    db.add(category)
    await db.flush()
    return category

async def seed_order(db, user, status=OrderStatus.DELIVERED) -> Order:
    order = Order(
        order_number=f"ORD-{uuid.uuid4().hex[:8]}",
        buyer_id=user.id,
        status=status,
        subtotal=Decimal("10.00"),
        total_amount=Decimal("10.00"),
    )
    db.add(order)
    await db.flush()
    return order

async def seed_discount(db, **values) -> DiscountRecord:
    defaults = dict(
        kind=DiscountKind.COUPON,
        name="Save 20",
        code="SAVE20",
        value_type=DiscountValueType.PERCENTAGE,
        discount_value=Decimal("20"),
        start_date=NOW - timedelta(days=30),
        end_date=datetime(2100, 1, 1),
        uses_count=0,
        is_active=True,
        excluded_products=[],
        excluded_categories=[],
    )
    defaults.update(values)
    record = DiscountRecord(**defaults)
    db.add(record)
    await db.flush()
    return record
