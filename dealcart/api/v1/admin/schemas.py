"""Admin discount management schemas"""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List
from datetime import datetime, timezone
from decimal import Decimal
import uuid

from dealcart.discounts import DiscountKind, DiscountTarget, DiscountValueType

# Columns that must hold a value once a rule exists
NOT_NULL_FIELDS = (
    "name", "target", "value_type",
    "is_active", "is_stackable", "is_exclusive",
    "is_single_use", "is_first_order_only", "auto_apply",
)

class DiscountBase(BaseModel):
    """Fields shared by create and update"""
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    code: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    target: Optional[DiscountTarget] = None
    value_type: Optional[DiscountValueType] = None
    discount_value: Optional[Decimal] = Field(None, ge=0)

    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    max_uses: Optional[int] = Field(None, gt=0)
    max_uses_per_customer: Optional[int] = Field(None, gt=0)

    minimum_cart_value: Optional[Decimal] = Field(None, ge=0)
    maximum_discount_amount: Optional[Decimal] = Field(None, ge=0)

    is_active: Optional[bool] = None
    is_stackable: Optional[bool] = None
    is_exclusive: Optional[bool] = None

    excluded_products: Optional[List[uuid.UUID]] = None
    excluded_categories: Optional[List[uuid.UUID]] = None

    # Coupon terms
    coupon_code: Optional[str] = Field(None, max_length=50)
    is_single_use: Optional[bool] = None
    is_first_order_only: Optional[bool] = None
    customer_email: Optional[str] = Field(None, max_length=255)

    # Bulk terms
    minimum_quantity: Optional[int] = Field(None, gt=0)
    product_id: Optional[uuid.UUID] = None

    # Promotion terms
    auto_apply: Optional[bool] = None
    banner_text: Optional[str] = Field(None, max_length=255)
    image_url: Optional[str] = Field(None, max_length=500)

    @field_validator("start_date", "end_date")
    @classmethod
    def to_naive_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        """Windows are stored as naive UTC, offsets are converted on the way in"""
        if value is not None and value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    @model_validator(mode="after")
    def check_window(self):
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self

class DiscountCreate(DiscountBase):
    """Schema for creating a discount rule"""
    kind: DiscountKind
    name: str = Field(..., min_length=1, max_length=150)
    value_type: DiscountValueType
    target: DiscountTarget = DiscountTarget.CART

    @model_validator(mode="after")
    def check_kind_terms(self):
        if self.kind == DiscountKind.BULK_DISCOUNT and self.minimum_quantity is None:
            raise ValueError("minimum_quantity is required for bulk discounts")
        return self

class DiscountUpdate(DiscountBase):
    """Schema for updating a discount rule, kind cannot change"""

    @model_validator(mode="after")
    def check_not_null(self):
        cleared = [f for f in NOT_NULL_FIELDS if f in self.model_fields_set and getattr(self, f) is None]
        if cleared:
            raise ValueError(f"{', '.join(cleared)} cannot be null")
        return self

class BulkActionRequest(BaseModel):
    """Bulk activate, deactivate or delete"""
    discount_ids: List[str] = Field(..., min_length=1)
    action: str = Field(..., description="activate, deactivate, delete")

class BulkActionResponse(BaseModel):
    success: bool
    message: str
    affected_count: int
    skipped_ids: List[str] = Field(default_factory=list)
