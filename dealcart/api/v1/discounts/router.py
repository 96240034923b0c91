"""
Discount API routes
"""

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import uuid
import logging

from dealcart.core.config import settings
from dealcart.core.database import get_db
from dealcart.core.rate_limit import limiter
from dealcart.services.discount_service import DiscountService
from .schemas import (
    ApplyDiscountRequest,
    CouponValidationRequest,
    DiscountCalculationResponse,
    DiscountResponse,
    DiscountValidationResponse,
    OrderSummaryResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post(
    "/validate",
    response_model=DiscountValidationResponse,
    summary="Validate coupon",
    description="Check a coupon code for a customer and preview its effect on the cart"
)
@limiter.limit(settings.RATE_LIMIT_VALIDATE)
async def validate_coupon(
    request: Request,
    response: Response,
    data: CouponValidationRequest,
    db: AsyncSession = Depends(get_db)
):
    """Validate a coupon code"""
    service = DiscountService(db)
    outcome = await service.validate_coupon(
        coupon_code=data.coupon_code,
        customer_id=data.customer_id,
        user_id=data.user_id
    )

    if not outcome.valid:
        response.status_code = status.HTTP_400_BAD_REQUEST
        return DiscountValidationResponse(valid=False, message=outcome.message)

    return DiscountValidationResponse(
        valid=True,
        message=outcome.message,
        discount=DiscountResponse.from_rule(outcome.discount),
        preview=DiscountCalculationResponse.from_result(outcome.preview) if outcome.preview else None
    )

@router.post(
    "/apply",
    response_model=OrderSummaryResponse,
    summary="Apply discounts",
    description="Apply every eligible discount to the customer's cart and record usage"
)
async def apply_discounts(
    data: ApplyDiscountRequest,
    db: AsyncSession = Depends(get_db)
):
    """Apply discounts to cart"""
    service = DiscountService(db)
    summary = await service.apply_discounts(
        customer_id=data.customer_id,
        user_id=data.user_id,
        coupon_codes=data.coupon_codes,
        auto_apply=data.auto_apply,
        shipping_cost=data.shipping_cost,
        tax_amount=data.tax_amount
    )
    return OrderSummaryResponse.from_summary(summary)

@router.get(
    "/available",
    response_model=List[DiscountResponse],
    summary="List available discounts",
    description="Active discounts, not filtered by the customer's eligibility"
)
async def get_available_discounts(
    customer_id: uuid.UUID = Query(...),
    db: AsyncSession = Depends(get_db)
):
    """Get active discounts"""
    service = DiscountService(db)
    discounts = await service.get_available_discounts(customer_id)
    return [DiscountResponse.from_rule(d) for d in discounts]
