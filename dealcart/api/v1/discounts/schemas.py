"""
Discount schemas for request/response validation
"""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import datetime
from decimal import Decimal
import uuid

from dealcart.discounts import (
    BulkTerms,
    CouponTerms,
    Discount,
    DiscountCalculationResult,
    DiscountKind,
    DiscountTarget,
    DiscountValueType,
    OrderSummary,
    PromotionTerms,
)

class CouponValidationRequest(BaseModel):
    """Request to check a single coupon code"""
    coupon_code: str = Field(..., min_length=1, max_length=50)
    customer_id: uuid.UUID
    user_id: Optional[uuid.UUID] = Field(None, description="Cart owner used to build the preview")

class ApplyDiscountRequest(BaseModel):
    """Request to apply discounts to a cart"""
    customer_id: uuid.UUID
    user_id: Optional[uuid.UUID] = Field(None, description="Cart owner, defaults to the customer")
    coupon_codes: List[str] = Field(default_factory=list)
    auto_apply: bool = True
    shipping_cost: Decimal = Field(Decimal("0.00"), ge=0)
    tax_amount: Decimal = Field(Decimal("0.00"), ge=0)

class DiscountResponse(BaseModel):
    """Snapshot of a discount rule"""
    id: uuid.UUID
    kind: DiscountKind
    name: str
    code: Optional[str] = None
    description: Optional[str] = None
    target: DiscountTarget
    value_type: DiscountValueType
    discount_value: Optional[Decimal] = None

    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    max_uses: Optional[int] = None
    uses_count: int = 0
    max_uses_per_customer: Optional[int] = None

    minimum_cart_value: Optional[Decimal] = None
    maximum_discount_amount: Optional[Decimal] = None

    is_active: bool
    is_stackable: bool
    is_exclusive: bool

    excluded_products: List[uuid.UUID] = Field(default_factory=list)
    excluded_categories: List[uuid.UUID] = Field(default_factory=list)

    # Coupon terms
    coupon_code: Optional[str] = None
    is_single_use: Optional[bool] = None
    is_first_order_only: Optional[bool] = None
    customer_email: Optional[str] = None

    # Bulk terms
    minimum_quantity: Optional[int] = None
    product_id: Optional[uuid.UUID] = None

    # Promotion terms
    auto_apply: Optional[bool] = None
    banner_text: Optional[str] = None
    image_url: Optional[str] = None

    @classmethod
    def from_rule(cls, rule: Discount) -> "DiscountResponse":
        data: Dict[str, Any] = {
            "id": rule.id,
            "kind": rule.kind,
            "name": rule.name,
            "code": rule.code,
            "description": rule.description,
            "target": rule.target,
            "value_type": rule.value_type,
            "discount_value": rule.discount_value,
            "start_date": rule.start_date,
            "end_date": rule.end_date,
            "max_uses": rule.max_uses,
            "uses_count": rule.uses_count,
            "max_uses_per_customer": rule.max_uses_per_customer,
            "minimum_cart_value": rule.minimum_cart_value,
            "maximum_discount_amount": rule.maximum_discount_amount,
            "is_active": rule.is_active,
            "is_stackable": rule.is_stackable,
            "is_exclusive": rule.is_exclusive,
            "excluded_products": sorted(rule.excluded_products, key=str),
            "excluded_categories": sorted(rule.excluded_categories, key=str),
        }

        terms = rule.terms
        if isinstance(terms, CouponTerms):
            data.update(
                coupon_code=terms.coupon_code,
                is_single_use=terms.is_single_use,
                is_first_order_only=terms.is_first_order_only,
                customer_email=terms.customer_email,
            )
        elif isinstance(terms, BulkTerms):
            data.update(
                minimum_quantity=terms.minimum_quantity,
                product_id=terms.product_id,
            )
        elif isinstance(terms, PromotionTerms):
            data.update(
                auto_apply=terms.auto_apply,
                banner_text=terms.banner_text,
                image_url=terms.image_url,
            )

        return cls(**data)

class DiscountCalculationResponse(BaseModel):
    """Computed effect of one applied discount"""
    discount_id: Optional[uuid.UUID] = None
    discount_amount: Decimal
    discount_name: str
    discount_code: Optional[str] = None
    value_type: Optional[DiscountValueType] = None
    item_discounts: Dict[str, Decimal] = Field(default_factory=dict)
    message: str

    @classmethod
    def from_result(cls, result: DiscountCalculationResult) -> "DiscountCalculationResponse":
        return cls(
            discount_id=result.discount_id,
            discount_amount=result.discount_amount,
            discount_name=result.discount_name,
            discount_code=result.discount_code,
            value_type=result.value_type,
            item_discounts={str(k): v for k, v in result.item_discounts.items()},
            message=result.message,
        )

class DiscountValidationResponse(BaseModel):
    """Outcome of a coupon check"""
    valid: bool
    message: str
    discount: Optional[DiscountResponse] = None
    preview: Optional[DiscountCalculationResponse] = None

class OrderSummaryResponse(BaseModel):
    """Final charge breakdown after discounts"""
    applied_discounts: List[DiscountCalculationResponse]
    total_discount: Decimal
    grand_total: Decimal
    subtotal: Decimal
    shipping_cost: Decimal
    tax_amount: Decimal

    @classmethod
    def from_summary(cls, summary: OrderSummary) -> "OrderSummaryResponse":
        return cls(
            applied_discounts=[
                DiscountCalculationResponse.from_result(r) for r in summary.applied_discounts
            ],
            total_discount=summary.total_discount,
            grand_total=summary.grand_total,
            subtotal=summary.subtotal,
            shipping_cost=summary.shipping_cost,
            tax_amount=summary.tax_amount,
        )
