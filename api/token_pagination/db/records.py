"""Database operations for resource context records."""

import logging
from datetime import datetime, timezone
from typing import Optional, List

import asyncpg

from ..models.records import Record, RecordCreate, PaginatedResult
from ..pagination import (
    DEFAULT_PAGE_SIZE, CursorPosition, InvalidTokenError, decode_cursor, build_seek_clause,
    build_order_clause, normalize_page_size, paginate_query_results
)
from ..errors.problem_details import (
    ConflictError, InvalidContinuationToken, StoreQueryFailed
)
from .connection import get_db_pool
from .models import drop_table_statement, create_table_statements


logger = logging.getLogger(__name__)

RECORD_COLUMNS = "resource_id, resource_type, context, created_at, updated_at"

STORE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


async def create_table() -> None:
    """Drop and recreate the resource_context table.

    Raises:
        StoreQueryFailed: If a DDL statement fails
    """
    try:
        pool = await get_db_pool()
        async with pool.acquire() as conn:
            async with conn.transaction():
                await conn.execute(drop_table_statement())
                for statement in create_table_statements():
                    await conn.execute(statement)
        logger.info("Recreated resource_context table")
    except STORE_ERRORS as e:
        logger.error(f"Database error creating table: {e}")
        raise StoreQueryFailed(f"Failed to create table: {e}")


async def insert_record(record_data: RecordCreate) -> Record:
    """Insert a new record stamped with the current time.

    Both timestamps are truncated to whole seconds so that a record's stored
    ``created_at`` equals the value a continuation token can carry.

    Args:
        record_data: Record creation data

    Returns:
        The inserted record

    Raises:
        ConflictError: If (resource_type, resource_id) already exists
        StoreQueryFailed: If the database operation fails
    """
    now = datetime.now(timezone.utc).replace(microsecond=0)

    try:
        pool = await get_db_pool()
        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                INSERT INTO resource_context ({RECORD_COLUMNS})
                VALUES ($1, $2, $3, $4, $5)
                RETURNING {RECORD_COLUMNS}
                """,
                record_data.resource_id,
                record_data.resource_type,
                record_data.context,
                now,
                now
            )
    except asyncpg.UniqueViolationError:
        raise ConflictError(
            f"Record '{record_data.resource_type}/{record_data.resource_id}' already exists"
        )
    except STORE_ERRORS as e:
        logger.error(f"Database error inserting record: {e}")
        raise StoreQueryFailed(f"Failed to create record: {e}")

    record = Record.model_validate(dict(row))
    logger.debug(f"Inserted record {record.resource_type}/{record.resource_id}")
    return record


async def get_all_records() -> List[Record]:
    """Get every record ordered by created_at descending.

    Raises:
        StoreQueryFailed: If the database operation fails
    """
    try:
        pool = await get_db_pool()
        async with pool.acquire() as conn:
            rows = await conn.fetch(
                f"SELECT {RECORD_COLUMNS} FROM resource_context ORDER BY created_at DESC"
            )
    except STORE_ERRORS as e:
        logger.error(f"Database error listing records: {e}")
        raise StoreQueryFailed(f"Failed to retrieve records: {e}")

    return [Record.model_validate(dict(row)) for row in rows]


async def count_records() -> int:
    """Count the records in resource_context."""
    try:
        pool = await get_db_pool()
        async with pool.acquire() as conn:
            return await conn.fetchval("SELECT COUNT(*) FROM resource_context")
    except STORE_ERRORS as e:
        logger.error(f"Database error counting records: {e}")
        raise StoreQueryFailed(f"Failed to count records: {e}")


async def fetch_record_range(
    cursor_data: Optional[CursorPosition],
    limit: int
) -> List[Record]:
    """Fetch up to ``limit`` records strictly after ``cursor_data``.

    Args:
        cursor_data: Exclusive bound, or None to start from the newest record
        limit: Maximum number of rows to return

    Returns:
        Records ordered by (created_at, resource_type, resource_id) descending

    Raises:
        StoreQueryFailed: If the database operation fails
    """
    where_clause, params = build_seek_clause(cursor_data)
    query = f"""
        SELECT {RECORD_COLUMNS}
        FROM resource_context
        {where_clause}
        {build_order_clause()}
        LIMIT ${len(params) + 1}
    """

    try:
        pool = await get_db_pool()
        async with pool.acquire() as conn:
            rows = await conn.fetch(query, *params, limit)
    except STORE_ERRORS as e:
        logger.error(f"Database error fetching record range: {e}")
        raise StoreQueryFailed(f"Failed to retrieve records: {e}")

    return [Record.model_validate(dict(row)) for row in rows]


async def get_paginated_records(
    continuation_token: str = "",
    page_size: int = DEFAULT_PAGE_SIZE
) -> PaginatedResult:
    """Get one page of records using continuation-token pagination.

    An empty token starts from the newest record. One row more than the page
    size is fetched so the presence of a further page is known without a count.

    Args:
        continuation_token: Token from a previous page, or empty for the first page
        page_size: Records per page; zero or negative means the default

    Returns:
        The page, carrying a next token only when more records exist

    Raises:
        InvalidContinuationToken: If the token cannot be decoded
        StoreQueryFailed: If the database operation fails
    """
    page_size = normalize_page_size(page_size)

    cursor_data = None
    if continuation_token:
        try:
            cursor_data = decode_cursor(continuation_token)
        except InvalidTokenError as e:
            logger.info(f"Rejected continuation token: {e}")
            raise InvalidContinuationToken(str(e), error_type=type(e).__name__)

    rows = await fetch_record_range(cursor_data, page_size + 1)
    records, next_token = paginate_query_results(rows, page_size)

    logger.debug(
        f"Fetched page of {len(records)} records (page_size={page_size}, more={next_token is not None})"
    )
    return PaginatedResult(records=records, next_continuation_token=next_token)
