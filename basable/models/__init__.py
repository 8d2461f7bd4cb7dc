"""Basable data models."""

from basable.models.config import (
    ConnectionConfig,
    DatabaseVariant,
    SourceKind,
    SourceType,
    infer_source_type,
    resolve_source_type,
)
from basable.models.table import TableConfig

__all__ = [
    "ConnectionConfig",
    "DatabaseVariant",
    "SourceKind",
    "SourceType",
    "TableConfig",
    "infer_source_type",
    "resolve_source_type",
]
