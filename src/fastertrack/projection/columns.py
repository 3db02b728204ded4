"""
Column projection for run tables.

The run search snapshot carries a fixed set of core columns followed by
dynamic ``metrics:``, ``params:`` and ``tags:`` columns whose names depend on
the runs in the result. Projection depends on column names only, never on row
values, so the same schema always yields an equal list of definitions.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

from fastertrack.models import ColumnDefinition, ColumnNamespace, FilterKind

# Order in which dynamic namespaces are appended after the core columns
DYNAMIC_NAMESPACES = (ColumnNamespace.METRICS, ColumnNamespace.PARAMS, ColumnNamespace.TAGS)


def format_creation_time(value: Any) -> str:
    """Format a run timestamp in the local timezone using the locale's representation.

    Snapshot timestamps are timezone-naive UTC milliseconds.
    """
    if value is None:
        return ""
    if not isinstance(value, datetime):
        return str(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone().strftime("%x %X")


def duration_seconds(row: Mapping[str, Any]) -> float | None:
    """Compute run duration in seconds from creation_time and end_time.

    Returns:
        Duration in seconds, or None when either timestamp is missing or the
        run has not ended after it started (active runs report no end time).
    """
    start = row.get("creation_time")
    end = row.get("end_time")
    if not isinstance(start, datetime) or not isinstance(end, datetime):
        return None
    if end < start:
        return None
    return (end - start).total_seconds()


def format_duration(seconds: Any) -> str:
    """Format a duration as ``<whole-seconds>s <milliseconds>ms``.

    Examples:
        >>> format_duration(65.432)
        '65s 432ms'
    """
    if seconds is None:
        return ""
    total_ms = round(seconds * 1000)
    return f"{total_ms // 1000}s {total_ms % 1000}ms"


def format_metric_value(value: Any) -> str:
    """Format a metric value with two decimals."""
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return "NaN"
    return f"{value:.2f}"


def _format_flag(value: Any) -> str:
    if value is None:
        return ""
    return "true" if value else "false"


CORE_COLUMNS: tuple[ColumnDefinition, ...] = (
    ColumnDefinition(field="name", display_name="Name", filter_kind=FilterKind.TEXT, pinned=True),
    ColumnDefinition(field="run_id", display_name="ID"),
    ColumnDefinition(field="experiment_name", display_name="Experiment", filter_kind=FilterKind.TEXT),
    ColumnDefinition(
        field="creation_time",
        display_name="Date",
        filter_kind=FilterKind.DATE,
        value_formatter=format_creation_time,
    ),
    ColumnDefinition(
        field=None,
        display_name="Duration",
        filter_kind=FilterKind.NUMBER,
        value_getter=duration_seconds,
        value_formatter=format_duration,
    ),
    ColumnDefinition(field="archived", display_name="Archived", filter_kind=FilterKind.SET, value_formatter=_format_flag),
    ColumnDefinition(field="active", display_name="Active", filter_kind=FilterKind.SET, value_formatter=_format_flag),
)


def strip_namespace(column: str, namespace: ColumnNamespace) -> str:
    """Remove the namespace prefix from a column name."""
    return column.removeprefix(namespace.prefix)


def _dynamic_column(column: str, namespace: ColumnNamespace) -> ColumnDefinition:
    if namespace is ColumnNamespace.METRICS:
        return ColumnDefinition(
            field=column,
            display_name=strip_namespace(column, namespace),
            namespace=namespace,
            filter_kind=FilterKind.NUMBER,
            value_formatter=format_metric_value,
        )
    return ColumnDefinition(
        field=column,
        display_name=strip_namespace(column, namespace),
        namespace=namespace,
        filter_kind=FilterKind.TEXT,
    )


def project_columns(schema: Iterable[str]) -> list[ColumnDefinition]:
    """Derive column definitions from a run table schema.

    Args:
        schema: Column names in schema order

    Returns:
        Core column definitions followed by metrics:, params: and tags:
        definitions, each group in schema order
    """
    names = list(schema)
    columns = list(CORE_COLUMNS)
    for namespace in DYNAMIC_NAMESPACES:
        columns.extend(_dynamic_column(name, namespace) for name in names if name.startswith(namespace.prefix))
    return columns


def available_metrics(schema: Iterable[str]) -> tuple[str, ...]:
    """Get the metric keys present in a run table schema.

    Args:
        schema: Column names in schema order

    Returns:
        Metric keys with the metrics: prefix stripped, in schema order
    """
    prefix = ColumnNamespace.METRICS.prefix
    return tuple(strip_namespace(name, ColumnNamespace.METRICS) for name in schema if name.startswith(prefix))
