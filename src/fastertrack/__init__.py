"""
FasterTrack - Interactive dashboard for machine learning experiment tracking servers.

Experiments, runs and metric histories are fetched from a tracking server
gateway and explored in a terminal dashboard.

Examples:
    >>> from fastertrack import build_run_filter
    >>> build_run_filter(["mnist"], "run.active")
    'run.experiment in ["mnist"] and (run.active)'
"""

from fastertrack.cascade import CascadeController, SelectionState, build_run_filter
from fastertrack.config import DashboardConfig, get_config
from fastertrack.exceptions import FasterTrackError, GatewayError, SnapshotDecodeError
from fastertrack.gateway import GatewayClient, RunGateway
from fastertrack.projection import project_columns
from fastertrack.series import build_series
from fastertrack.snapshot import decode_snapshot

__version__ = "0.1.0"
__all__ = [
    "CascadeController",
    "DashboardConfig",
    "FasterTrackError",
    "GatewayClient",
    "GatewayError",
    "RunGateway",
    "SelectionState",
    "SnapshotDecodeError",
    "build_run_filter",
    "build_series",
    "decode_snapshot",
    "get_config",
    "project_columns",
]
