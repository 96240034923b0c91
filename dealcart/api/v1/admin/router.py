"""Admin discount management endpoints"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from dealcart.core.database import get_db
from dealcart.core.security import require_admin_key
from dealcart.api.v1.discounts.schemas import DiscountResponse
from .schemas import BulkActionRequest, BulkActionResponse, DiscountCreate, DiscountUpdate
from .services import DiscountAdminService

router = APIRouter(dependencies=[Depends(require_admin_key)])

@router.get("/discounts", response_model=List[DiscountResponse])
async def list_discounts(
    is_active: Optional[bool] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    """List all discount rules"""
    service = DiscountAdminService(db)
    records = await service.list_discounts(is_active)
    return [DiscountResponse.from_rule(r.to_rule()) for r in records]

@router.get("/discounts/{discount_id}", response_model=DiscountResponse)
async def get_discount(
    discount_id: uuid.UUID,
    db: AsyncSession = Depends(get_db)
):
    """Get single discount rule"""
    service = DiscountAdminService(db)
    record = await service.get_discount(discount_id)
    return DiscountResponse.from_rule(record.to_rule())

@router.post("/discounts", response_model=DiscountResponse, status_code=status.HTTP_201_CREATED)
async def create_discount(
    data: DiscountCreate,
    db: AsyncSession = Depends(get_db)
):
    """Create new discount rule"""
    service = DiscountAdminService(db)
    record = await service.create_discount(data)
    return DiscountResponse.from_rule(record.to_rule())

@router.put("/discounts/{discount_id}", response_model=DiscountResponse)
async def update_discount(
    discount_id: uuid.UUID,
    data: DiscountUpdate,
    db: AsyncSession = Depends(get_db)
):
    """Update discount rule"""
    service = DiscountAdminService(db)
    record = await service.update_discount(discount_id, data)
    return DiscountResponse.from_rule(record.to_rule())

@router.delete("/discounts/{discount_id}")
async def delete_discount(
    discount_id: uuid.UUID,
    db: AsyncSession = Depends(get_db)
):
    """Delete discount rule"""
    service = DiscountAdminService(db)
    await service.delete_discount(discount_id)
    return {"success": True, "message": "Discount deleted successfully"}

@router.post("/discounts/bulk-action", response_model=BulkActionResponse)
async def bulk_action(
    data: BulkActionRequest,
    db: AsyncSession = Depends(get_db)
):
    """Bulk activate, deactivate or delete discount rules"""
    service = DiscountAdminService(db)
    affected, skipped = await service.bulk_action(data.discount_ids, data.action)
    return BulkActionResponse(
        success=True,
        message=f"{data.action} completed for {affected} discounts",
        affected_count=affected,
        skipped_ids=skipped
    )
