"""
Metric Chart Screen

Displays a single metric full-size, one line per run, with pan and zoom over
the step axis.
"""

from __future__ import annotations

from collections.abc import Mapping

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Vertical
from textual.screen import Screen
from textual.widgets import Footer, Header, Static
from textual_plotext import PlotextPlot

from fastertrack.models import MetricSeries
from fastertrack.tui.widgets.metrics_grid import Color, plot_series


class MetricChartScreen(Screen[None]):
    """Screen displaying a chart for a specific metric."""

    BINDINGS = [
        Binding("h", "pan_left", "Pan Left", show=True),
        Binding("l", "pan_right", "Pan Right", show=True),
        Binding("left", "pan_left", "Pan Left", show=False),
        Binding("right", "pan_right", "Pan Right", show=False),
        Binding("plus", "zoom_in", "Zoom In", show=True),
        Binding("equals", "zoom_in", "Zoom In", show=False),
        Binding("minus", "zoom_out", "Zoom Out", show=True),
        Binding("r", "reset_view", "Reset", show=True),
        Binding("backspace", "go_back", "Back", show=False),
    ]

    MIN_VIEW_WIDTH = 10

    def __init__(
        self,
        series: MetricSeries,
        colors: Mapping[str, Color],
        labels: Mapping[str, str],
        max_points: int,
    ) -> None:
        super().__init__()
        self._series = series
        self._colors = colors
        self._labels = labels
        self._max_points = max_points
        self._steps = sorted({step for run in series.runs.values() for step in run.steps})
        self._view_start: int | None = None
        self._view_end: int | None = None

    @property
    def metric_name(self) -> str:
        """Get the metric name."""
        return self._series.metric

    @property
    def view_range(self) -> tuple[int, int] | None:
        """Get the zoomed step range, or None when showing everything."""
        if self._view_start is None or self._view_end is None:
            return None
        return (self._view_start, self._view_end)

    def compose(self) -> ComposeResult:
        """Compose the screen layout."""
        yield Header()
        yield Container(
            Static(f"Metric: [bold]{self.metric_name}[/]", classes="chart-title"),
            Vertical(
                PlotextPlot(id="chart"),
                id="chart-container",
                classes="chart-container",
            ),
            Static(id="chart-summary", classes="chart-summary"),
            classes="main-container",
        )
        yield Footer()

    def on_mount(self) -> None:
        """Handle mount event - draw the chart."""
        self._update_chart()

    def _update_chart(self) -> None:
        chart = self.query_one("#chart", PlotextPlot)
        plot_series(
            chart,
            self._series,
            colors=self._colors,
            labels=self._labels,
            max_points=self._max_points,
            step_range=self.view_range,
        )

        summary = self.query_one("#chart-summary", Static)
        lines = []
        for run_id, run in self._series.runs.items():
            if run.steps:
                label = self._labels.get(run_id, run_id)
                lines.append(f"{label}: step={run.steps[-1]}, value={run.values[-1]:.6g}")
        summary.update("\n".join(lines) if lines else "No data")

    def _get_view_range(self) -> tuple[int, int]:
        """Get current view range.

        Returns:
            Tuple of (start, end) step values.
        """
        if self._view_start is not None and self._view_end is not None:
            return (self._view_start, self._view_end)
        if self._steps:
            return (self._steps[0], self._steps[-1])
        return (0, 100)

    def action_pan_left(self) -> None:
        """Pan chart view left."""
        if not self._steps:
            return

        start, end = self._get_view_range()
        width = end - start
        pan_amount = max(1, width // 10)

        self._view_start = max(self._steps[0], start - pan_amount)
        self._view_end = self._view_start + width
        self._update_chart()

    def action_pan_right(self) -> None:
        """Pan chart view right."""
        if not self._steps:
            return

        start, end = self._get_view_range()
        width = end - start
        pan_amount = max(1, width // 10)

        self._view_end = min(self._steps[-1], end + pan_amount)
        self._view_start = self._view_end - width
        self._update_chart()

    def action_zoom_in(self) -> None:
        """Zoom in on chart."""
        if not self._steps:
            return

        start, end = self._get_view_range()
        width = end - start
        if width <= self.MIN_VIEW_WIDTH:
            return

        center = (start + end) // 2
        new_width = max(self.MIN_VIEW_WIDTH, width // 2)

        self._view_start = center - new_width // 2
        self._view_end = center + new_width // 2
        self._update_chart()

    def action_zoom_out(self) -> None:
        """Zoom out on chart."""
        if not self._steps:
            return

        start, end = self._get_view_range()
        center = (start + end) // 2
        new_width = (end - start) * 2

        min_step, max_step = self._steps[0], self._steps[-1]
        self._view_start = max(min_step, center - new_width // 2)
        self._view_end = min(max_step, center + new_width // 2)

        if self._view_start == min_step and self._view_end == max_step:
            self._view_start = None
            self._view_end = None

        self._update_chart()

    def action_reset_view(self) -> None:
        """Reset chart view to show all data."""
        self._view_start = None
        self._view_end = None
        self._update_chart()

    def action_go_back(self) -> None:
        """Go back to previous screen."""
        self.app.pop_screen()
