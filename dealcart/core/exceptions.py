"""
Custom exception classes and error handlers
Provides consistent error responses across the application
"""

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)

class DealCartException(HTTPException):
    """Base exception class for DealCart application"""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code

class BadRequestException(DealCartException):
    """400 Bad Request"""

    def __init__(self, detail: str, error_code: str = "BAD_REQUEST"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code=error_code
        )

class ForbiddenException(DealCartException):
    """403 Forbidden"""

    def __init__(self, detail: str = "Forbidden", error_code: str = "FORBIDDEN"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code=error_code
        )

class NotFoundException(DealCartException):
    """404 Not Found"""

    def __init__(self, detail: str = "Not found", error_code: str = "NOT_FOUND"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code=error_code
        )

class ValidationException(DealCartException):
    """422 Unprocessable Entity"""

    def __init__(self, detail: str, error_code: str = "VALIDATION_ERROR"):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
            error_code=error_code
        )

# Business logic exceptions
class InvalidDiscountCodeException(BadRequestException):
    """No discount carries the given code"""

    def __init__(self, code: str):
        super().__init__(
            detail=f"Invalid coupon code '{code}'",
            error_code="INVALID_CODE"
        )

class InactiveDiscountException(BadRequestException):
    """Discount exists but is switched off"""

    def __init__(self, name: str):
        super().__init__(
            detail=f"Discount '{name}' is not active",
            error_code="INACTIVE_RULE"
        )

class CustomerNotFoundException(BadRequestException):
    """Customer lookup failed"""

    def __init__(self, customer_id: Any):
        super().__init__(
            detail=f"Customer {customer_id} not found",
            error_code="CUSTOMER_NOT_FOUND"
        )

class CartUnavailableException(BadRequestException):
    """Cart missing or empty"""

    def __init__(self, detail: str = "Cart is empty or unavailable"):
        super().__init__(
            detail=detail,
            error_code="CART_UNAVAILABLE"
        )

class InvalidQuantityException(BadRequestException):
    """Cart line quantity must be positive"""

    def __init__(self, product_id: Any, quantity: int):
        super().__init__(
            detail=f"Invalid quantity {quantity} for product {product_id}",
            error_code="INVALID_QUANTITY"
        )

class InvalidDiscountException(ValidationException):
    """Discount rule data is inconsistent"""

    def __init__(self, detail: str):
        super().__init__(
            detail=detail,
            error_code="INVALID_DISCOUNT"
        )

async def dealcart_exception_handler(request: Request, exc: DealCartException) -> JSONResponse:
    """Render application exceptions in a single error envelope"""
    if exc.status_code >= 500:
        logger.error(f"{exc.error_code}: {exc.detail} ({request.url.path})")
    else:
        logger.info(f"{exc.error_code}: {exc.detail} ({request.url.path})")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": exc.error_code,
                "message": exc.detail
            }
        },
        headers=exc.headers
    )
