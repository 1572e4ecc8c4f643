"""
Custom exception classes and FastAPI exception handlers.

The service layer raises domain-specific errors (like CardAuthenticationError)
without importing HTTP concepts. The handlers registered here translate them
into HTTP responses with a stable shape:

    {"detail": "<human-readable message>", "error_type": "<discriminator>"}

Exception hierarchy:
    SandboxAPIError (base)
    ├── ValidationError          — malformed or missing input (400)
    ├── ConflictError            — mutually exclusive fields both supplied (400)
    ├── AccountNotFoundError     — no account with that number (404)
    ├── CardNotFoundError        — no account holds that card number (404)
    ├── CardAuthenticationError  — card exists but expiry/CVV mismatch (400)
    └── PersistenceError         — the database rejected or failed a write (503)

A declined payment is NOT an exception: it is a normal result with
status "declined".
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class SandboxAPIError(Exception):
    """Base exception for all sandbox domain errors."""

    status_code: int = 400
    error_type: str = "sandbox_error"

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(self.detail)


# ---------------------------------------------------------------------------
# Domain exceptions
# ---------------------------------------------------------------------------

class ValidationError(SandboxAPIError):
    """Raised for malformed or missing input, before any store access."""

    status_code = 400
    error_type = "validation_error"


class ConflictError(SandboxAPIError):
    """Raised when two mutually exclusive fields are supplied together."""

    status_code = 400
    error_type = "conflicting_fields"


class AccountNotFoundError(SandboxAPIError):
    """Raised when a requested account does not exist."""

    status_code = 404
    error_type = "account_not_found"

    def __init__(self, account_number: str):
        self.account_number = account_number
        super().__init__("Account not found.")


class CardNotFoundError(SandboxAPIError):
    """Raised when no account holds the presented card number."""

    status_code = 404
    error_type = "card_not_found"

    def __init__(self):
        super().__init__("Card not found.")


class CardAuthenticationError(SandboxAPIError):
    """
    Raised when the card number exists but the expiry or CVV do not match.

    Kept distinct from CardNotFoundError so callers can tell a wrong card
    apart from an unknown one.
    """

    status_code = 400
    error_type = "card_authentication_failed"

    def __init__(self):
        super().__init__("Invalid card details.")


class PersistenceError(SandboxAPIError):
    """
    Raised when the underlying store is unavailable or a write failed.

    The driver error is logged where it is caught; only a generic message
    travels to the caller.
    """

    status_code = 503
    error_type = "persistence_error"


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register custom exception handlers with the FastAPI application.

    Called once from create_app() in main.py.
    """

    @app.exception_handler(SandboxAPIError)
    async def sandbox_error_handler(
        request: Request, exc: SandboxAPIError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail, "error_type": exc.error_type},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        # Missing or mistyped request fields are the same client error as a
        # ValidationError raised by the services
        fields = sorted(
            {".".join(str(part) for part in error["loc"][1:]) or "body" for error in exc.errors()}
        )
        return JSONResponse(
            status_code=400,
            content={
                "detail": "Missing or invalid fields: " + ", ".join(fields),
                "error_type": ValidationError.error_type,
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error.", "error_type": "internal_error"},
        )
