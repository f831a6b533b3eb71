"""Error handling module for the Token Pagination API."""

from .problem_details import (
    ProblemDetail,
    ProblemDetailException,
    BadRequestError,
    ConflictError,
    InternalServerError,
    ServiceUnavailableError,
    InvalidContinuationToken,
    StoreQueryFailed,
    create_problem_response
)
from .handlers import register_exception_handlers

__all__ = [
    "ProblemDetail",
    "ProblemDetailException",
    "BadRequestError",
    "ConflictError",
    "InternalServerError",
    "ServiceUnavailableError",
    "InvalidContinuationToken",
    "StoreQueryFailed",
    "create_problem_response",
    "register_exception_handlers"
]
