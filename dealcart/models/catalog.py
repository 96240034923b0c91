"""
Catalog models
Products and their categories, read when a cart is snapshotted so
category exclusions can be checked
"""

from sqlalchemy import Column, String, Numeric, Boolean, ForeignKey, Index, CheckConstraint, Uuid
from sqlalchemy.orm import relationship

from .base import Base, TimestampedModel, UUIDModel

class Category(Base, TimestampedModel, UUIDModel):
    """Product category"""

    __tablename__ = "categories"

    name = Column(String(100), nullable=False)
    slug = Column(String(100), unique=True, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)

    products = relationship("Product", back_populates="category")

class Product(Base, TimestampedModel, UUIDModel):
    """Catalog product"""

    __tablename__ = "products"

    name = Column(String(255), nullable=False, index=True)
    sku = Column(String(50), unique=True, index=True)
    category_id = Column(Uuid(as_uuid=True), ForeignKey("categories.id"), nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    category = relationship("Category", back_populates="products")
    cart_items = relationship("CartItem", back_populates="product")

    __table_args__ = (
        CheckConstraint("price >= 0", name="non_negative_price"),
        Index("idx_products_category_active", "category_id", "is_active"),
    )
