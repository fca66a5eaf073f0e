"""Schema catalog module for NLQ.

This module defines the normalized table/column catalog read from a live
database and renders it as prompt context for SQL generation.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColumnSchema:
    """Schema definition for a single column."""

    name: str
    data_type: str


@dataclass(frozen=True)
class TableSchema:
    """Schema definition for a single table."""

    name: str
    columns: tuple[ColumnSchema, ...] = ()


@dataclass(frozen=True)
class SchemaCatalog:
    """Introspected catalog of a data source. Built fresh for every request."""

    tables: tuple[TableSchema, ...] = field(default_factory=tuple)

    @property
    def table_names(self) -> list[str]:
        return [table.name for table in self.tables]

    def get_table(self, name: str) -> TableSchema | None:
        for table in self.tables:
            if table.name == name:
                return table
        return None


def build_schema_catalog(rows: Iterable[Sequence[Any]]) -> SchemaCatalog:
    """Build a catalog from flat information-schema rows.

    Args:
        rows: ``(table_name, column_name, data_type)`` triples, already in
            catalog order. ``column_name`` is None for tables without
            columns (outer join rows).

    Returns:
        SchemaCatalog preserving first-seen table order and column order
    """
    columns_by_table: dict[str, list[ColumnSchema]] = {}

    for table_name, column_name, data_type in rows:
        columns = columns_by_table.setdefault(str(table_name), [])
        if column_name is None:
            continue
        columns.append(ColumnSchema(name=str(column_name), data_type=str(data_type)))

    tables = tuple(
        TableSchema(name=name, columns=tuple(columns))
        for name, columns in columns_by_table.items()
    )

    logger.debug(
        "Built schema catalog",
        extra={
            "table_count": len(tables),
            "column_count": sum(len(t.columns) for t in tables),
        },
    )

    return SchemaCatalog(tables=tables)


def format_schema_for_prompt(catalog: SchemaCatalog) -> str:
    """Render the catalog as plain text for the LLM prompt.

    Each table becomes a ``Table:`` line followed by a ``Columns:`` line
    listing ``name (type)`` pairs. Tables are separated by a blank line.
    """
    blocks = []
    for table in catalog.tables:
        columns = ", ".join(f"{col.name} ({col.data_type})" for col in table.columns)
        blocks.append(f"Table: {table.name}\nColumns: {columns}")
    return "\n\n".join(blocks)
