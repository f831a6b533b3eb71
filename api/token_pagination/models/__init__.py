"""Data models for the Token Pagination API."""

from .records import (
    Record,
    RecordCreate,
    RecordCreatedResponse,
    RecordListResponse,
    PaginatedResult
)

__all__ = [
    "Record",
    "RecordCreate",
    "RecordCreatedResponse",
    "RecordListResponse",
    "PaginatedResult"
]
