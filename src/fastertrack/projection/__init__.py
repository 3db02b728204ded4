"""
Schema-driven column projection.

Turns the schema of a run snapshot into the ordered column definitions shown
by tabular surfaces.
"""

from .columns import (
    CORE_COLUMNS,
    DYNAMIC_NAMESPACES,
    available_metrics,
    duration_seconds,
    format_creation_time,
    format_duration,
    format_metric_value,
    project_columns,
    strip_namespace,
)

__all__ = [
    "CORE_COLUMNS",
    "DYNAMIC_NAMESPACES",
    "available_metrics",
    "duration_seconds",
    "format_creation_time",
    "format_duration",
    "format_metric_value",
    "project_columns",
    "strip_namespace",
]
