"""Pagination module for continuation-token pagination."""

from .cursor import (
    DEFAULT_PAGE_SIZE,
    CursorPosition,
    InvalidTokenError,
    InvalidTokenEncoding,
    InvalidTokenFormat,
    InvalidTokenTimestamp,
    encode_cursor,
    decode_cursor,
    build_seek_clause,
    build_order_clause,
    normalize_page_size,
    paginate_query_results,
    create_link_header
)

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "CursorPosition",
    "InvalidTokenError",
    "InvalidTokenEncoding",
    "InvalidTokenFormat",
    "InvalidTokenTimestamp",
    "encode_cursor",
    "decode_cursor",
    "build_seek_clause",
    "build_order_clause",
    "normalize_page_size",
    "paginate_query_results",
    "create_link_header"
]
