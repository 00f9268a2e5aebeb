"""Shared pagination schemas for list endpoints."""

import math
from typing import Any

from pydantic import BaseModel, Field


class PaginationInfo(BaseModel):
    """Page position plus totals for the filtered set."""

    page: int = Field(ge=1)
    limit: int = Field(ge=1)
    total: int = Field(ge=0, description="Records matching the filter, ignoring pagination")
    pages: int = Field(ge=0, description="ceil(total / limit); 0 when nothing matches")

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PaginationInfo":
        pages = math.ceil(total / limit) if total > 0 else 0
        return cls(page=page, limit=limit, total=total, pages=pages)


class ListQueryResult(BaseModel):
    """Standard list result: sorted items + pagination info."""

    items: list[dict[str, Any]]
    pagination: PaginationInfo


class ErrorEnvelope(BaseModel):
    success: bool = False
    message: str
    error: str | None = None
