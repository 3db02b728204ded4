"""
FasterTrack Terminal UI Dashboard

A terminal-based dashboard using Textual framework for exploring
experiments, runs and metric histories served by a tracking server.
"""

from __future__ import annotations

from fastertrack.config import DashboardConfig


def run_tui(config: DashboardConfig | None = None) -> None:
    """Run the FasterTrack TUI application.

    Args:
        config: Dashboard configuration. Defaults to the environment configuration.
    """
    from fastertrack.tui.app import FasterTrackApp

    app = FasterTrackApp(config=config)
    app.run()


__all__ = ["run_tui"]
