"""
FasterTrack data models package.

This package contains core data models shared by the gateway, the cascade and the terminal UI.
"""

from fastertrack.models.columns import ColumnDefinition, ColumnNamespace, FilterKind
from fastertrack.models.experiment import Experiment
from fastertrack.models.series import MetricSeries, RunSeries

__all__ = [
    "ColumnDefinition",
    "ColumnNamespace",
    "Experiment",
    "FilterKind",
    "MetricSeries",
    "RunSeries",
]
