# utils/errors.py
import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)


class ValidationError(HTTPException):
    """Required fields missing or malformed. Nothing is persisted."""

    def __init__(self, detail: str):
        super().__init__(status_code=400, detail=detail)


class ForbiddenError(HTTPException):
    def __init__(self, detail: str = "Not allowed to modify this resource"):
        super().__init__(status_code=403, detail=detail)


class NotFoundError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=404, detail=detail)


class ConflictError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=409, detail=detail)


class InvalidTransitionError(ConflictError):
    def __init__(self, current: str, new: str):
        super().__init__(f"Cannot change booking status from '{current}' to '{new}'")
        self.current = current
        self.new = new


class DuplicatePaymentError(ConflictError):
    def __init__(self, reference: str, booking_id: str = None):
        detail = f"Payment reference {reference} has already been used"
        if booking_id:
            detail += f" by booking {booking_id}"
        super().__init__(detail)
        self.reference = reference
        self.booking_id = booking_id


class PaymentVerificationError(HTTPException):
    """The gateway does not confirm the capture we were told about."""

    def __init__(self, detail: str):
        super().__init__(status_code=402, detail=detail)


class PaymentInfrastructureError(HTTPException):
    """The payment gateway could not be reached or set up."""

    def __init__(self, detail: str = "Payment service is unavailable, please try again"):
        super().__init__(status_code=502, detail=detail)


class BookingPersistenceError(HTTPException):
    """Payment was captured externally but the booking could not be written."""

    def __init__(self, reference: str):
        super().__init__(
            status_code=500,
            detail="Your payment was received but we could not save your booking. "
                   f"Please contact support with reference {reference}.",
        )
        self.reference = reference


def register_exception_handlers(app: FastAPI):

    @app.exception_handler(PyMongoError)
    async def database_exception_handler(request: Request, exc: PyMongoError):
        logger.exception("Database error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=503, content={"detail": "Database unavailable, please try again"})
