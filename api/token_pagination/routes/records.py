"""Records API endpoints."""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Query, Request, Response

from ..config import get_settings
from ..models.records import (
    RecordCreate, RecordCreatedResponse, RecordListResponse, PaginatedResult
)
from ..pagination import create_link_header
from ..db.records import insert_record, get_all_records, get_paginated_records
from ..errors.problem_details import BadRequestError


logger = logging.getLogger(__name__)

records_router = APIRouter(
    prefix="/records",
    tags=["Records"],
    responses={
        500: {"description": "Internal Server Error"}
    }
)


def resolve_page_size(raw_page_size: Optional[str], default: int, maximum: int) -> int:
    """Turn the raw page_size query value into a page size within bounds.

    Missing, unparsable and non-positive values fall back to ``default``;
    values above ``maximum`` are capped.
    """
    if not raw_page_size:
        return default
    try:
        page_size = int(raw_page_size)
    except ValueError:
        return default
    if page_size <= 0:
        return default
    return min(page_size, maximum)


@records_router.post(
    "",
    response_model=RecordCreatedResponse,
    status_code=201,
    summary="Create a record",
    responses={
        409: {"description": "Record already exists"},
        422: {"description": "Invalid record data"}
    }
)
async def create_record(record_data: RecordCreate) -> RecordCreatedResponse:
    """Create a record from a JSON body."""
    record = await insert_record(record_data)
    logger.info(f"Created record {record.resource_type}/{record.resource_id}")
    return RecordCreatedResponse(resource_id=record.resource_id, resource_type=record.resource_type)


@records_router.post(
    "/create",
    response_model=RecordCreatedResponse,
    status_code=201,
    summary="Create a record from query parameters",
    responses={
        400: {"description": "Missing or invalid query parameters"},
        409: {"description": "Record already exists"}
    }
)
async def create_record_from_query(
    resource_id: Annotated[str, Query(description="Resource identifier")] = "",
    resource_type: Annotated[str, Query(description="Resource type")] = "",
    context: Annotated[str, Query(description="Optional context")] = ""
) -> RecordCreatedResponse:
    """Create a record from query parameters.

    An empty ``context`` is stored as NULL.
    """
    if not resource_id:
        raise BadRequestError("resource_id query parameter is required")
    if not resource_type:
        raise BadRequestError("resource_type query parameter is required")

    record_data = RecordCreate(
        resource_id=resource_id,
        resource_type=resource_type,
        context=context or None
    )
    record = await insert_record(record_data)
    logger.info(f"Created record {record.resource_type}/{record.resource_id} from query")
    return RecordCreatedResponse(resource_id=record.resource_id, resource_type=record.resource_type)


@records_router.get(
    "",
    response_model=RecordListResponse,
    response_model_exclude_none=True,
    summary="List all records",
    description="Return every record ordered by creation time, newest first, without pagination."
)
async def list_records() -> RecordListResponse:
    records = await get_all_records()
    return RecordListResponse(records=records)


@records_router.get(
    "/paginated",
    response_model=PaginatedResult,
    response_model_exclude_none=True,
    summary="List records page by page",
    description="List records with continuation-token pagination, newest first.",
    responses={
        400: {"description": "Bad Request - Invalid continuation token"}
    }
)
async def list_records_paginated(
    request: Request,
    response: Response,
    continuation_token: Annotated[str, Query(description="Token from the previous page")] = "",
    page_size: Annotated[Optional[str], Query(description="Records per page (1-100)")] = None
) -> PaginatedResult:
    """List records with seek-based pagination.

    Records are sorted by creation time with resource type and resource id as
    tie-breakers, so pages stay stable when many records share a timestamp.
    Records inserted while a client is paging never shift later pages.

    Args:
        request: FastAPI request object
        response: FastAPI response object for adding headers
        continuation_token: Token from the previous page, empty for the first page
        page_size: Records per page; invalid values use the default, large ones are capped

    Returns:
        The page of records and, when more exist, the next continuation token
    """
    settings = get_settings()
    size = resolve_page_size(page_size, settings.default_page_size, settings.max_page_size)

    result = await get_paginated_records(continuation_token, size)

    link_header = create_link_header(
        base_url=str(request.url.replace(query="")),
        params={"page_size": size},
        next_token=result.next_continuation_token
    )
    if link_header:
        response.headers["Link"] = link_header

    return result
