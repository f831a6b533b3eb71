"""Cursor-based pagination utilities for the Token Pagination API."""

import base64
import binascii
import math
import re
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List, Sequence, Tuple
from urllib.parse import urlencode

from pydantic import BaseModel, Field, ConfigDict


DEFAULT_PAGE_SIZE = 5
TOKEN_DELIMITER = "|"
TOKEN_FIELD_COUNT = 3

_TOKEN_ALPHABET = re.compile(r"[A-Za-z0-9_-]*={0,2}")
_TIMESTAMP_PATTERN = re.compile(r"[+-]?[0-9]+")


class InvalidTokenError(ValueError):
    """Base class for continuation tokens that cannot be decoded."""


class InvalidTokenEncoding(InvalidTokenError):
    """The token is not valid URL-safe base64 text."""


class InvalidTokenFormat(InvalidTokenError):
    """The decoded token does not hold exactly three fields."""


class InvalidTokenTimestamp(InvalidTokenError):
    """The timestamp field of the decoded token is not an integer."""


class CursorPosition(BaseModel):
    """Position of the last record seen, in (created_at, resource_type, resource_id) order."""

    created_at: datetime = Field(description="Primary ordering key")
    resource_type: str = Field(description="Secondary ordering key")
    resource_id: str = Field(description="Tertiary ordering key")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_record(cls, record: Any) -> "CursorPosition":
        """Build the position identifying ``record``."""
        return cls(
            created_at=record.created_at,
            resource_type=record.resource_type,
            resource_id=record.resource_id
        )


def _unix_seconds(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return math.floor(value.timestamp())


def encode_cursor(position: CursorPosition) -> str:
    """Encode a cursor position into an opaque continuation token.

    The token carries ``resource_type|resource_id|unix_seconds`` in URL-safe
    base64 with the padding removed. Sub-second precision is not kept.

    Args:
        position: Position of the last record on the page

    Returns:
        Continuation token containing only ``[A-Za-z0-9_-]``

    Raises:
        ValueError: If a key field contains the token delimiter
    """
    for name in ("resource_type", "resource_id"):
        if TOKEN_DELIMITER in getattr(position, name):
            raise ValueError(f"Cannot encode cursor: {name} contains '{TOKEN_DELIMITER}'")

    token_data = TOKEN_DELIMITER.join([
        position.resource_type,
        position.resource_id,
        str(_unix_seconds(position.created_at))
    ])
    encoded = base64.urlsafe_b64encode(token_data.encode("utf-8")).decode("ascii")
    return encoded.rstrip("=")


def decode_cursor(token: str) -> CursorPosition:
    """Decode a continuation token back into a cursor position.

    Args:
        token: Token produced by ``encode_cursor`` (padded or unpadded)

    Returns:
        Decoded cursor position with a UTC timestamp at whole-second precision

    Raises:
        InvalidTokenEncoding: If the token is not URL-safe base64 of UTF-8 text
        InvalidTokenFormat: If the payload does not split into three fields
        InvalidTokenTimestamp: If the timestamp field is not an integer
    """
    if not _TOKEN_ALPHABET.fullmatch(token):
        raise InvalidTokenEncoding("Invalid continuation token: illegal base64 character")

    padded = token.rstrip("=")
    padded += "=" * (-len(padded) % 4)
    try:
        token_data = base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise InvalidTokenEncoding(f"Invalid continuation token: {e}")

    parts = token_data.split(TOKEN_DELIMITER)
    if len(parts) != TOKEN_FIELD_COUNT:
        raise InvalidTokenFormat("Invalid continuation token format")

    resource_type, resource_id, raw_timestamp = parts

    if not _TIMESTAMP_PATTERN.fullmatch(raw_timestamp):
        raise InvalidTokenTimestamp(f"Invalid timestamp in token: {raw_timestamp!r}")
    try:
        created_at = datetime.fromtimestamp(int(raw_timestamp), tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise InvalidTokenTimestamp(f"Invalid timestamp in token: {e}")

    return CursorPosition(
        created_at=created_at,
        resource_type=resource_type,
        resource_id=resource_id
    )


def build_seek_clause(
    cursor_data: Optional[CursorPosition],
    first_param: int = 1
) -> Tuple[str, List[Any]]:
    """Build the WHERE clause selecting rows strictly after a cursor position.

    Under the descending (created_at, resource_type, resource_id) order a row
    comes after the cursor when its tuple is lexicographically smaller.

    Args:
        cursor_data: Decoded cursor position, or None for the first page
        first_param: Index of the first positional parameter to use

    Returns:
        Tuple of (where_clause, parameters); an empty clause when there is no cursor
    """
    if cursor_data is None:
        return "", []

    ts_param = f"${first_param}"
    type_param = f"${first_param + 1}"
    id_param = f"${first_param + 2}"

    where_clause = (
        f"WHERE (created_at < {ts_param}::timestamptz"
        f" OR (created_at = {ts_param}::timestamptz AND resource_type < {type_param})"
        f" OR (created_at = {ts_param}::timestamptz AND resource_type = {type_param}"
        f" AND resource_id < {id_param}))"
    )
    params = [cursor_data.created_at, cursor_data.resource_type, cursor_data.resource_id]
    return where_clause, params


def build_order_clause() -> str:
    """Build ORDER BY clause for pagination."""
    return "ORDER BY created_at DESC, resource_type DESC, resource_id DESC"


def normalize_page_size(page_size: int) -> int:
    """Substitute the default page size for zero or negative values."""
    if page_size <= 0:
        return DEFAULT_PAGE_SIZE
    return page_size


def paginate_query_results(
    items: Sequence[Any],
    page_size: int
) -> Tuple[List[Any], Optional[str]]:
    """Process over-fetched query results for pagination.

    ``items`` is the result of a query limited to ``page_size + 1`` rows. When
    the extra row came back another page exists, and the next token points at
    the last row kept on this page.

    Args:
        items: Rows in descending order, at most ``page_size + 1`` of them
        page_size: Requested page size

    Returns:
        Tuple of (page_items, next_continuation_token)
    """
    page_size = normalize_page_size(page_size)

    if len(items) <= page_size:
        return list(items), None

    page_items = list(items[:page_size])
    next_token = encode_cursor(CursorPosition.from_record(page_items[-1]))
    return page_items, next_token


def create_link_header(
    base_url: str,
    params: Dict[str, Any],
    next_token: Optional[str] = None
) -> Optional[str]:
    """Create Link header for pagination as per RFC 8288.

    Args:
        base_url: Base URL for the resource
        params: Current query parameters
        next_token: Continuation token for the next page

    Returns:
        Link header value or None if there is no next page
    """
    if not next_token:
        return None

    next_params = {k: v for k, v in params.items() if v is not None}
    next_params["continuation_token"] = next_token
    return f'<{base_url}?{urlencode(next_params)}>; rel="next"'
