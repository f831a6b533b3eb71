"""API routers for the Token Pagination API."""

from .records import records_router

__all__ = ["records_router"]
