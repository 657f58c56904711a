"""Common Pydantic schemas shared across the API."""

from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, Field


class PaginationParams(BaseModel):
    """Pagination query parameters."""

    page: int = Field(default=1, ge=1, description="Page number (1-indexed)")
    limit: int = Field(default=20, ge=1, le=100, description="Items per page")

    @property
    def offset(self) -> int:
        """Calculate offset from page and limit."""
        return (self.page - 1) * self.limit


class PaginationMeta(BaseModel):
    """Pagination block returned next to a page of results."""

    page: int = Field(ge=1, description="Current page number")
    limit: int = Field(ge=1, le=100, description="Items per page")
    total: int = Field(ge=0, description="Total number of items across all pages")
    total_pages: int = Field(ge=0, description="Total number of pages")


class TimestampMixin(BaseModel):
    """Mixin for timestamp fields."""

    created_at: datetime = Field(description="Timestamp when the resource was created")
    updated_at: datetime = Field(description="Timestamp when the resource was last updated")


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    """Error response model."""

    error: str = Field(description="Human-readable error message")
    code: str = Field(description="Error code for programmatic handling")
    details: Optional[list[dict[str, Any]]] = Field(None, description="Per-field validation errors")
