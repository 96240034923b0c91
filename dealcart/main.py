"""
Main FastAPI application
"""

from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded

from dealcart.core.config import settings
from dealcart.core.events import lifespan
from dealcart.core.exceptions import DealCartException, dealcart_exception_handler
from dealcart.core.middleware import setup_middleware
from dealcart.core.rate_limit import limiter, custom_rate_limit_handler
from dealcart.api import api_router, health_router

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Discount and coupon engine for the DealCart storefront",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, custom_rate_limit_handler)
app.add_exception_handler(DealCartException, dealcart_exception_handler)

# Setup middleware
setup_middleware(app)

# Include routers
app.include_router(api_router, prefix="/api/v1")
app.include_router(health_router)

# Root endpoint
@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "docs": "/api/docs"
    }

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "dealcart.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        workers=1 if settings.DEBUG else settings.WORKERS
    )
