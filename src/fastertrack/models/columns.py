"""
Column definition models.

A column definition describes how one run attribute is labelled, filtered and
formatted by a tabular surface. Definitions are immutable values so that two
projections of the same schema compare equal.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any


class FilterKind(Enum):
    """Kind of filter a tabular surface offers for a column."""

    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    SET = "set"


class ColumnNamespace(Enum):
    """Category of a run column.

    Dynamic columns carry their namespace as a ``<namespace>:`` prefix in the
    snapshot schema. Core columns have no prefix.
    """

    CORE = "core"
    METRICS = "metrics"
    PARAMS = "params"
    TAGS = "tags"

    @property
    def prefix(self) -> str:
        """Column name prefix for dynamic namespaces (empty for core)."""
        if self is ColumnNamespace.CORE:
            return ""
        return f"{self.value}:"


@dataclass(frozen=True)
class ColumnDefinition:
    """Display metadata for a single run table column.

    Attributes:
        field: Schema column name, or None for synthesized columns.
        display_name: Header label.
        namespace: Category the column belongs to.
        filter_kind: Filter offered for the column, if any.
        value_getter: Computes the cell value from a whole row (synthesized columns).
        value_formatter: Renders a cell value as text.
        pinned: Whether the column stays visible when scrolling horizontally.
    """

    field: str | None
    display_name: str
    namespace: ColumnNamespace = ColumnNamespace.CORE
    filter_kind: FilterKind | None = None
    value_getter: Callable[[Mapping[str, Any]], Any] | None = None
    value_formatter: Callable[[Any], str] | None = None
    pinned: bool = False

    @property
    def key(self) -> str:
        """Stable identifier for the column within a table."""
        return self.field if self.field is not None else self.display_name

    def cell_value(self, row: Mapping[str, Any]) -> Any:
        """Get the raw value of this column for a row."""
        if self.value_getter is not None:
            return self.value_getter(row)
        if self.field is None:
            return None
        return row.get(self.field)

    def format_cell(self, row: Mapping[str, Any]) -> str:
        """Render the value of this column for a row as text."""
        value = self.cell_value(row)
        if self.value_formatter is not None:
            return self.value_formatter(value)
        if value is None:
            return ""
        return str(value)
