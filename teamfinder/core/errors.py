"""
Error types and FastAPI error handlers
"""

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from teamfinder.core.logger import logger


class ErrorResponse(Exception):
    """Custom exception for application errors surfaced through the HTTP layer"""

    def __init__(self, message: str, status_code: int = 400, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class ErrorResponseModel(BaseModel):
    """Pydantic model for error responses"""
    error: str
    details: dict = None


class EventDeserializationError(Exception):
    """Payload could not be turned into the event implied by its routing key"""

    def __init__(self, routing_key: str, reason: str):
        self.routing_key = routing_key
        self.reason = reason
        super().__init__(f"Malformed '{routing_key}' payload: {reason}")


class UnknownRoutingKeyError(Exception):
    """No event kind is published under the routing key"""

    def __init__(self, routing_key: str):
        self.routing_key = routing_key
        super().__init__(f"Unknown routing key: {routing_key}")


class StoreUnavailableError(Exception):
    """Transient data-store failure; the operation may succeed if retried"""


class EmailDeliveryError(Exception):
    """Outbound email could not be handed to the mail relay"""

    def __init__(self, recipient: str, reason: str):
        self.recipient = recipient
        self.reason = reason
        super().__init__(f"Failed to send email to {recipient}: {reason}")


async def error_response_handler(request: Request, exc: ErrorResponse):
    """Handler for custom ErrorResponse exceptions"""
    logger.error(
        f"Error: {exc.message}",
        metadata={
            "event": "error_response",
            "status_code": exc.status_code,
            "url": str(request.url),
            "method": request.method,
            **exc.details,
        },
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "details": exc.details},
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    """Handler for FastAPI HTTPException"""
    logger.error(
        f"HTTPException: {exc.detail}",
        metadata={
            "event": "http_exception",
            "status_code": exc.status_code,
            "url": str(request.url),
            "method": request.method,
        },
    )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


async def store_unavailable_handler(request: Request, exc: StoreUnavailableError):
    """Handler for transient data-store failures surfaced by HTTP requests"""
    logger.error(
        f"Store unavailable: {exc}",
        metadata={
            "event": "store_unavailable",
            "url": str(request.url),
            "method": request.method,
        },
    )
    return JSONResponse(status_code=503, content={"error": "Service temporarily unavailable"})


async def email_delivery_handler(request: Request, exc: EmailDeliveryError):
    """Handler for email sends the relay did not accept"""
    return JSONResponse(
        status_code=502,
        content={"error": "Email delivery failed", "details": {"recipient": exc.recipient, "reason": exc.reason}},
    )
