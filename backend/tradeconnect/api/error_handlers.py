"""Error Handlers - global exception handlers for the TradeConnect API.

Invariants:
    - TradeConnectError -> its own envelope and HTTP status
    - RequestValidationError -> 400 VALIDATION_ERROR with field-level details;
      messages raised by our validators reach the client verbatim
    - RateLimitExceeded -> 429 RATE_LIMIT_EXCEEDED with the limiter's message
    - Exception (catch-all) -> 500 that never leaks internal details

Design Decisions:
    - Four-layer handler: domain, validation, rate limit, catch-all
    - The rate limit handler is sync: SlowAPIMiddleware calls it directly
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from tradeconnect.core import messages
from tradeconnect.core.errors import TradeConnectError, utc_timestamp

logger = logging.getLogger(__name__)

_LOCATION_ROOTS = {"body", "query", "path", "header"}


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_domain_error_handler(app)
    _register_validation_error_handler(app)
    _register_rate_limit_handler(app)
    _register_generic_error_handler(app)


def _register_domain_error_handler(app: FastAPI) -> None:

    @app.exception_handler(TradeConnectError)
    async def domain_error_handler(request: Request, exc: TradeConnectError):
        """Handle all TradeConnect domain/infrastructure errors."""
        log = logger.error if exc.http_status >= 500 else logger.info
        log(
            f"TradeConnectError: {exc.message}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
            extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=build_validation_error_response(exc.errors()),
        )


def _register_rate_limit_handler(app: FastAPI) -> None:

    def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        limit = getattr(exc, "limit", None)
        message = (
            exc.detail if limit is not None and limit.error_message
            else messages.RATE_LIMIT_GLOBAL
        )
        logger.warning(
            f"Rate limit exceeded on {request.url.path}",
            extra={"error_code": "RATE_LIMIT_EXCEEDED", "path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content={
                "success": False,
                "message": message,
                "error": "RATE_LIMIT_EXCEEDED",
                "timestamp": utc_timestamp(),
            },
        )

    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all, never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
            extra={"path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "message": messages.INTERNAL_ERROR,
                "error": "INTERNAL_SERVER_ERROR",
                "timestamp": utc_timestamp(),
            },
        )


def build_validation_error_response(errors: list[dict]) -> dict:
    details = [_detail(e) for e in errors]
    return {
        "success": False,
        "message": details[0]["message"] if details else messages.INVALID_INPUT,
        "error": "VALIDATION_ERROR",
        "details": details,
        "timestamp": utc_timestamp(),
    }


def _detail(error: dict) -> dict:
    loc = [str(part) for part in error.get("loc", ())]
    if loc and loc[0] in _LOCATION_ROOTS:
        loc = loc[1:]
    ctx_error = (error.get("ctx") or {}).get("error")
    return {
        "field": ".".join(loc),
        "message": str(ctx_error) if ctx_error else error.get("msg", ""),
        "type": error.get("type", "value_error"),
    }
