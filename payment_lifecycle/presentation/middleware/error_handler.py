"""Error handling middleware and exception handlers."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import structlog

from payment_lifecycle.domain.exceptions import (
    AgreementNotFoundException,
    DomainException,
    InvalidStateError,
    PaymentConflictException,
    ValidationError,
)
from .request_context import get_request_id

logger = structlog.get_logger(__name__)


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": code,
            "message": message,
            "request_id": get_request_id(),
        },
    )


def error_handler_middleware(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI app.

    Maps domain exceptions to appropriate HTTP responses.
    """

    @app.exception_handler(AgreementNotFoundException)
    async def agreement_not_found_handler(
        request: Request,
        exc: AgreementNotFoundException,
    ) -> JSONResponse:
        """Handle agreement not found errors."""
        return _error_response(404, exc.code, exc.message)

    @app.exception_handler(ValidationError)
    async def validation_error_handler(
        request: Request,
        exc: ValidationError,
    ) -> JSONResponse:
        """Handle invalid agreement terms and payment input."""
        logger.info("validation_failed", field=exc.field, message=exc.message)
        return _error_response(422, exc.code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Report malformed request bodies in the standard error format."""
        errors = exc.errors()
        message = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'] if part != 'body')}: {err['msg']}"
            for err in errors
        )
        return _error_response(422, "VALIDATION_ERROR", message or "invalid request")

    @app.exception_handler(InvalidStateError)
    async def invalid_state_handler(
        request: Request,
        exc: InvalidStateError,
    ) -> JSONResponse:
        """Handle operations the agreement's status forbids."""
        logger.info("invalid_state", message=exc.message)
        return _error_response(409, exc.code, exc.message)

    @app.exception_handler(PaymentConflictException)
    async def payment_conflict_handler(
        request: Request,
        exc: PaymentConflictException,
    ) -> JSONResponse:
        """Handle payments that lost a concurrent recording race."""
        logger.warning(
            "payment_conflict_rejected",
            agreement_id=exc.agreement_id,
            payment_number=exc.payment_number,
        )
        return _error_response(409, exc.code, exc.message)

    @app.exception_handler(DomainException)
    async def domain_exception_handler(
        request: Request,
        exc: DomainException,
    ) -> JSONResponse:
        """Handle generic domain exceptions."""
        logger.warning(
            "domain_exception",
            code=exc.code,
            message=exc.message,
        )
        return _error_response(400, exc.code, exc.message)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception(
            "unhandled_exception",
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return _error_response(500, "INTERNAL_ERROR", "An unexpected error occurred.")
