"""
FasterTrack TUI Widgets

Custom widget classes for the TUI application.
"""

from .experiment_list import ExperimentList
from .metrics_grid import MetricsGridWidget
from .runs_table import RunsTable

__all__ = ["ExperimentList", "MetricsGridWidget", "RunsTable"]
