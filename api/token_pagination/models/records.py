"""Pydantic models for resource context records."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, ConfigDict, field_validator

from ..pagination.cursor import TOKEN_DELIMITER


class RecordCreate(BaseModel):
    """Model for creating a new record."""

    resource_id: str = Field(..., min_length=1, max_length=128, description="Resource identifier")
    resource_type: str = Field(..., min_length=1, max_length=128, description="Resource type")
    context: Optional[str] = Field(default=None, description="Free-form context for the resource")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "resource_id": "user-123",
                "resource_type": "user",
                "context": "Primary account"
            }
        }
    )

    @field_validator("resource_id", "resource_type")
    @classmethod
    def validate_key_field(cls, v):
        """Key fields end up in continuation tokens and cannot hold the delimiter."""
        if TOKEN_DELIMITER in v:
            raise ValueError(f"must not contain '{TOKEN_DELIMITER}'")
        return v


class Record(BaseModel):
    """Complete record model as stored in resource_context."""

    resource_id: str = Field(description="Resource identifier")
    resource_type: str = Field(description="Resource type")
    context: Optional[str] = Field(default=None, description="Free-form context for the resource")
    created_at: datetime = Field(description="Creation timestamp")
    updated_at: datetime = Field(description="Last update timestamp")

    model_config = ConfigDict(from_attributes=True)


class RecordCreatedResponse(BaseModel):
    """Response model for record creation."""

    message: str = "Record created successfully"
    resource_id: str
    resource_type: str


class RecordListResponse(BaseModel):
    """Response model for listing every record."""

    records: list[Record] = Field(description="List of records")


class PaginatedResult(BaseModel):
    """One page of records with an optional continuation token."""

    records: list[Record] = Field(description="Records on this page, newest first")
    next_continuation_token: Optional[str] = Field(
        default=None,
        description="Token for the next page; absent on the last page"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "records": [
                    {
                        "resource_id": "user-123",
                        "resource_type": "user",
                        "context": "Primary account",
                        "created_at": "2024-01-01T12:00:00Z",
                        "updated_at": "2024-01-01T12:00:00Z"
                    }
                ],
                "next_continuation_token": "dXNlcnx1c2VyLTEyM3wxNzA0MTEwNDAw"
            }
        }
    )
