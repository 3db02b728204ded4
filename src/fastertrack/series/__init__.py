"""
Metric history transformation.

Turns long-format metric histories into one plotted series per metric.
"""

from .transform import HISTORY_COLUMNS, build_series

__all__ = ["HISTORY_COLUMNS", "build_series"]
