"""Exception handlers for the Token Pagination API."""

import logging
from typing import Union
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from pydantic import ValidationError

from .problem_details import ProblemDetailException, create_problem_response

logger = logging.getLogger(__name__)

STATUS_TITLES = {
    400: "Bad Request",
    404: "Not Found",
    405: "Method Not Allowed",
    409: "Conflict",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
    503: "Service Unavailable",
}


async def problem_detail_exception_handler(
    request: Request,
    exc: ProblemDetailException
) -> JSONResponse:
    """Handle ProblemDetailException instances."""
    log = logger.error if exc.status >= 500 else logger.info
    log(
        f"Problem detail exception: {exc.status} - {exc.title}",
        extra={
            "status_code": exc.status,
            "path": str(request.url.path),
            "method": request.method,
            "detail": exc.detail
        }
    )
    return exc.to_response(request)


async def http_exception_handler(
    request: Request,
    exc: Union[HTTPException, StarletteHTTPException]
) -> JSONResponse:
    """Handle FastAPI HTTPException and Starlette HTTPException."""
    logger.info(f"HTTP exception: {exc.status_code} - {exc.detail}")

    response = create_problem_response(
        status=exc.status_code,
        title=STATUS_TITLES.get(exc.status_code, "HTTP Error"),
        detail=str(exc.detail) if exc.detail else None,
        request=request
    )

    if getattr(exc, "headers", None):
        for key, value in exc.headers.items():
            response.headers[key] = value

    return response


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation errors."""
    errors = exc.errors()
    logger.info(f"Validation error on {request.method} {request.url.path}: {len(errors)} errors")

    error_messages = []
    for error in errors:
        loc = " -> ".join(str(x) for x in error["loc"])
        error_messages.append(f"{loc}: {error['msg']}")

    return create_problem_response(
        status=422,
        title="Validation Error",
        detail="Validation failed: " + "; ".join(error_messages),
        request=request
    )


async def pydantic_validation_exception_handler(
    request: Request,
    exc: ValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors raised while building models in endpoints."""
    logger.info(f"Pydantic validation error on {request.method} {request.url.path}: {len(exc.errors())} errors")

    error_messages = []
    for error in exc.errors():
        loc = " -> ".join(str(x) for x in error["loc"])
        error_messages.append(f"{loc}: {error['msg']}")

    return create_problem_response(
        status=400,
        title="Validation Error",
        detail="Data validation failed: " + "; ".join(error_messages),
        request=request
    )


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(
        f"Unhandled exception: {type(exc).__name__} - {str(exc)}",
        extra={
            "path": str(request.url.path),
            "method": request.method,
            "exception_type": type(exc).__name__
        },
        exc_info=True
    )

    # Don't expose internal error details
    return create_problem_response(
        status=500,
        title="Internal Server Error",
        detail="An unexpected error occurred",
        request=request
    )


def register_exception_handlers(app):
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(ProblemDetailException, problem_detail_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, pydantic_validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
