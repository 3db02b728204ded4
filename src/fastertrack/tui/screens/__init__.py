"""
FasterTrack TUI Screens

Screen classes for different views in the TUI application.
"""

from .dashboard import DashboardScreen
from .help import HelpScreen
from .metric_chart import MetricChartScreen

__all__ = [
    "DashboardScreen",
    "HelpScreen",
    "MetricChartScreen",
]
