"""Tests for discount applicability checks"""

from datetime import timedelta
from decimal import Decimal
import uuid

import pytest

from dealcart.core.exceptions import InvalidQuantityException
from dealcart.discounts import CartLine, CouponTerms, CustomerRef, DiscountValidator, OrderContext

from conftest import NOW, make_bulk, make_context, make_coupon, make_promotion

@pytest.fixture
def validator():
    return DiscountValidator()

class TestDateRange:

    def test_before_start_is_invalid(self, validator):
        discount = make_coupon(start_date=NOW + timedelta(seconds=1))
        assert validator.is_valid(discount, make_context()) is False

    def test_after_end_is_invalid(self, validator):
        discount = make_coupon(end_date=NOW - timedelta(seconds=1))
        assert validator.is_valid(discount, make_context()) is False

    def test_bounds_are_inclusive(self, validator):
        discount = make_coupon(start_date=NOW, end_date=NOW)
        assert validator.is_valid(discount, make_context()) is True

    def test_missing_dates_leave_window_open(self, validator):
        assert validator.is_valid(make_coupon(), make_context()) is True

class TestUsageLimits:

    def test_exhausted_rule_is_invalid(self, validator):
        discount = make_coupon(max_uses=5, uses_count=5)
        assert validator.is_valid(discount, make_context()) is False

    def test_rule_with_uses_left_is_valid(self, validator):
        discount = make_coupon(max_uses=5, uses_count=4)
        assert validator.is_valid(discount, make_context()) is True

    def test_per_customer_limit_ignored_by_default(self, validator):
        discount = make_coupon(max_uses_per_customer=1)
        customer = CustomerRef(id=uuid.uuid4(), email="buyer@example.com", usage_counts={discount.id: 3})
        assert validator.is_valid(discount, make_context(customer=customer)) is True

    def test_per_customer_limit_enforced(self):
        validator = DiscountValidator(enforce_per_customer_limit=True)
        discount = make_coupon(max_uses_per_customer=2)

        used_once = CustomerRef(id=uuid.uuid4(), email="buyer@example.com", usage_counts={discount.id: 1})
        used_twice = CustomerRef(id=uuid.uuid4(), email="buyer@example.com", usage_counts={discount.id: 2})

        assert validator.is_valid(discount, make_context(customer=used_once)) is True
        assert validator.is_valid(discount, make_context(customer=used_twice)) is False

class TestMinimumCartValue:

    def test_just_below_minimum(self, validator):
        discount = make_coupon(minimum_cart_value=Decimal("100"))
        assert validator.is_valid(discount, make_context(subtotal="99.99")) is False

    def test_exactly_minimum(self, validator):
        discount = make_coupon(minimum_cart_value=Decimal("100"))
        assert validator.is_valid(discount, make_context(subtotal="100.00")) is True

    def test_unknown_subtotal_fails_minimum(self, validator):
        discount = make_coupon(minimum_cart_value=Decimal("1"))
        context = make_context(subtotal=None, items=())
        assert validator.is_valid(discount, context) is False

class TestCustomerEligibility:

    def test_missing_customer_is_invalid(self, validator):
        context = OrderContext(customer=None, order_time=NOW, subtotal=Decimal("50"))
        assert validator.is_valid(make_bulk(minimum_quantity=1), context) is False

    def test_personalised_coupon_matches_email(self, validator):
        discount = make_coupon(terms=CouponTerms(coupon_code="VIP", customer_email="vip@example.com"))

        vip = CustomerRef(id=uuid.uuid4(), email="vip@example.com")
        other = CustomerRef(id=uuid.uuid4(), email="VIP@example.com")

        assert validator.is_valid(discount, make_context(customer=vip)) is True
        assert validator.is_valid(discount, make_context(customer=other)) is False

    def test_first_order_only_accepted_without_enforcement(self, validator):
        discount = make_coupon(terms=CouponTerms(coupon_code="WELCOME", is_first_order_only=True))
        returning = CustomerRef(id=uuid.uuid4(), previous_orders=4)
        assert validator.is_valid(discount, make_context(customer=returning)) is True

    def test_first_order_only_enforced(self):
        validator = DiscountValidator(enforce_first_order_only=True)
        discount = make_coupon(terms=CouponTerms(coupon_code="WELCOME", is_first_order_only=True))

        newcomer = CustomerRef(id=uuid.uuid4(), previous_orders=0)
        returning = CustomerRef(id=uuid.uuid4(), previous_orders=1)

        assert validator.is_valid(discount, make_context(customer=newcomer)) is True
        assert validator.is_valid(discount, make_context(customer=returning)) is False

class TestExclusions:

    def test_excluded_category_blocks_rule(self, validator):
        category_id = uuid.uuid4()
        items = (
            CartLine(uuid.uuid4(), "Phone", Decimal("100.00"), 1, category_id=uuid.uuid4()),
            CartLine(uuid.uuid4(), "Cable", Decimal("50.00"), 1, category_id=category_id),
        )
        discount = make_coupon(excluded_categories=[category_id])
        assert validator.is_valid(discount, make_context(items=items)) is False

    def test_excluded_product_blocks_rule(self, validator):
        product_id = uuid.uuid4()
        items = (CartLine(product_id, "Phone", Decimal("150.00"), 1),)
        discount = make_coupon(excluded_products={product_id})
        assert validator.is_valid(discount, make_context(items=items)) is False

    def test_unrelated_exclusions_pass(self, validator):
        discount = make_coupon(excluded_products={uuid.uuid4()}, excluded_categories={uuid.uuid4()})
        assert validator.is_valid(discount, make_context()) is True

class TestBulkThreshold:

    def test_below_threshold_across_products(self, validator):
        items = (
            CartLine(uuid.uuid4(), "A", Decimal("50.00"), 1),
            CartLine(uuid.uuid4(), "B", Decimal("50.00"), 1),
        )
        assert validator.is_valid(make_bulk(minimum_quantity=3), make_context(subtotal="100.00", items=items)) is False

    def test_threshold_scoped_to_product(self, validator):
        scoped = uuid.uuid4()
        items = (
            CartLine(scoped, "A", Decimal("10.00"), 2),
            CartLine(uuid.uuid4(), "B", Decimal("10.00"), 5),
        )
        context = make_context(subtotal="70.00", items=items)

        assert validator.is_valid(make_bulk(minimum_quantity=3, product_id=scoped), context) is False
        assert validator.is_valid(make_bulk(minimum_quantity=2, product_id=scoped), context) is True

    def test_promotion_has_no_extra_conditions(self, validator):
        assert validator.is_valid(make_promotion(), make_context()) is True

def test_non_positive_quantity_is_rejected():
    with pytest.raises(InvalidQuantityException):
        CartLine(uuid.uuid4(), "Broken", Decimal("1.00"), 0)

def test_context_helpers():
    scoped = uuid.uuid4()
    context = make_context(
        subtotal="40.00",
        items=(
            CartLine(scoped, "A", Decimal("10.00"), 2),
            CartLine(uuid.uuid4(), "B", Decimal("20.00"), 1),
        ),
        shipping_cost=Decimal("4.00"),
        tax_amount=None,
        coupon_codes=["FIRST", "SECOND"],
    )

    assert context.coupon_code == "FIRST"
    assert context.coupon_codes == ("FIRST", "SECOND")
    assert context.product_quantity(scoped) == 2
    assert context.total_quantity() == 3
    assert context.cart_total() == Decimal("44.00")
