"""API v1 routes aggregation"""

from fastapi import APIRouter

from .discounts.router import router as discounts_router
from .admin.router import router as admin_router

# Create v1 router
api_router = APIRouter()

# Include all routers
api_router.include_router(discounts_router, prefix="/discounts", tags=["Discounts"])
api_router.include_router(admin_router, prefix="/admin", tags=["Admin"])

# Export router
router = api_router
