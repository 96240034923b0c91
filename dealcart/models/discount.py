"""
Discount rule and usage ledger models
"""

from sqlalchemy import Column, String, Integer, Numeric, Boolean, ForeignKey, Index, CheckConstraint, Text, DateTime, JSON, Uuid, Enum
from sqlalchemy.orm import relationship
import uuid

from .base import Base, TimestampedModel, UUIDModel
from dealcart.discounts.rules import (
    BulkTerms,
    CouponTerms,
    Discount,
    DiscountKind,
    DiscountTarget,
    DiscountValueType,
    PromotionTerms,
)

def _to_uuid(value):
    return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))

class DiscountRecord(Base, TimestampedModel, UUIDModel):
    """Promotional rules, one table for every kind"""

    __tablename__ = "discounts"

    kind = Column(Enum(DiscountKind), nullable=False, index=True)

    # Identity
    name = Column(String(150), nullable=False)
    code = Column(String(50), nullable=True, index=True)
    description = Column(Text, nullable=True)

    # Targeting and value
    target = Column(Enum(DiscountTarget), nullable=False, default=DiscountTarget.CART)
    value_type = Column(Enum(DiscountValueType), nullable=False)
    discount_value = Column(Numeric(10, 2), nullable=True)

    # Validity
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)

    # Usage limits
    max_uses = Column(Integer, nullable=True)
    uses_count = Column(Integer, nullable=False, default=0)
    max_uses_per_customer = Column(Integer, nullable=True)

    # Cart gating
    minimum_cart_value = Column(Numeric(10, 2), nullable=True)
    maximum_discount_amount = Column(Numeric(10, 2), nullable=True)

    # Flags
    is_active = Column(Boolean, nullable=False, default=True)
    is_stackable = Column(Boolean, nullable=False, default=False)
    is_exclusive = Column(Boolean, nullable=False, default=False)

    # Exclusions (product and category ids as strings)
    excluded_products = Column(JSON, nullable=False, default=list)
    excluded_categories = Column(JSON, nullable=False, default=list)

    # Coupon terms
    coupon_code = Column(String(50), nullable=True)
    is_single_use = Column(Boolean, nullable=False, default=False)
    is_first_order_only = Column(Boolean, nullable=False, default=False)
    customer_email = Column(String(255), nullable=True)

    # Bulk terms
    minimum_quantity = Column(Integer, nullable=True)
    product_id = Column(Uuid(as_uuid=True), nullable=True)

    # Promotion terms
    auto_apply = Column(Boolean, nullable=False, default=False)
    banner_text = Column(String(255), nullable=True)
    image_url = Column(String(500), nullable=True)

    # Relationships
    usages = relationship("DiscountUsage", back_populates="discount", cascade="all, delete-orphan")

    # Constraints
    __table_args__ = (
        CheckConstraint("discount_value IS NULL OR discount_value >= 0", name="non_negative_value"),
        CheckConstraint("uses_count >= 0", name="non_negative_uses"),
        CheckConstraint("max_uses IS NULL OR uses_count <= max_uses", name="uses_within_limit"),
        Index("idx_discounts_active_window", "is_active", "start_date", "end_date"),
    )

    def terms(self):
        """Kind-specific terms for the domain rule"""
        if self.kind == DiscountKind.COUPON:
            return CouponTerms(
                coupon_code=self.coupon_code,
                is_single_use=bool(self.is_single_use),
                is_first_order_only=bool(self.is_first_order_only),
                customer_email=self.customer_email,
            )
        if self.kind == DiscountKind.BULK_DISCOUNT:
            return BulkTerms(
                minimum_quantity=self.minimum_quantity,
                product_id=self.product_id,
            )
        return PromotionTerms(
            auto_apply=bool(self.auto_apply),
            banner_text=self.banner_text,
            image_url=self.image_url,
        )

    def to_rule(self) -> Discount:
        """Immutable snapshot used by the discount engine"""
        return Discount(
            id=self.id,
            name=self.name,
            kind=self.kind,
            value_type=self.value_type,
            discount_value=self.discount_value,
            terms=self.terms(),
            code=self.code,
            description=self.description,
            target=self.target,
            start_date=self.start_date,
            end_date=self.end_date,
            max_uses=self.max_uses,
            uses_count=self.uses_count or 0,
            max_uses_per_customer=self.max_uses_per_customer,
            minimum_cart_value=self.minimum_cart_value,
            maximum_discount_amount=self.maximum_discount_amount,
            is_active=bool(self.is_active),
            is_stackable=bool(self.is_stackable),
            is_exclusive=bool(self.is_exclusive),
            excluded_products=frozenset(_to_uuid(p) for p in self.excluded_products or []),
            excluded_categories=frozenset(_to_uuid(c) for c in self.excluded_categories or []),
        )

class DiscountUsage(Base, TimestampedModel, UUIDModel):
    """Ledger of redeemed discounts, one row per successful claim"""

    __tablename__ = "discount_usages"

    discount_id = Column(Uuid(as_uuid=True), ForeignKey("discounts.id", ondelete="CASCADE"), nullable=False)
    customer_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)

    # Discount applied
    discount_amount = Column(Numeric(10, 2), nullable=False)

    # Relationships
    discount = relationship("DiscountRecord", back_populates="usages")
    customer = relationship("User")

    # Indexes
    __table_args__ = (
        Index("idx_discount_usages_discount_customer", "discount_id", "customer_id"),
    )
