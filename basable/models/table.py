"""
Table configuration models.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class TableConfig(BaseModel):
    """Per-table display and paging configuration."""

    table_name: str = Field(..., min_length=1, description="Table the config applies to")
    label: str | None = Field(None, description="Display label")
    pk_column: str | None = Field(None, description="Primary key column")
    created_column: str | None = Field(None, description="Column holding creation time")
    updated_column: str | None = Field(None, description="Column holding last update time")
    items_per_page: int = Field(default=100, gt=0, le=10000, description="Rows per page")
    extra: dict[str, Any] = Field(default_factory=dict, description="Free-form settings")
