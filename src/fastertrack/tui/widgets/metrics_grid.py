"""
Metrics Grid Widget

A widget that displays one chart per selected metric in a grid layout, using
individual PlotextPlot widgets. Each chart draws one line per run.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

import numpy as np
from lttb import downsample
from textual import on
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.dom import DOMNode
from textual.events import Click, Resize
from textual.message import Message
from textual.reactive import reactive
from textual.timer import Timer
from textual.widget import Widget
from textual.widgets import Static
from textual_plotext import PlotextPlot

from fastertrack.models import MetricSeries, RunSeries

Color = tuple[int, int, int]
DEFAULT_LINE_COLOR: Color = (58, 110, 165)


def prepare_points(run: RunSeries, max_points: int) -> tuple[list[int], list[float]]:
    """Get the points of a run series ready for plotting.

    Repeated steps keep their last value. Series longer than max_points are
    downsampled using LTTB.

    Args:
        run: Run series ordered by step
        max_points: Maximum number of points to plot

    Returns:
        Tuple of (steps, values)
    """
    by_step: dict[int, float] = {}
    for step, value in zip(run.steps, run.values, strict=True):
        by_step[step] = value
    steps = list(by_step.keys())
    values = list(by_step.values())

    if len(steps) <= max_points:
        return steps, values

    data = np.array(list(zip(steps, values, strict=True)), dtype=float)
    downsampled = downsample(data, max_points)
    return (
        [int(d[0]) for d in downsampled],
        [float(d[1]) for d in downsampled],
    )


def plot_series(
    plot: PlotextPlot,
    series: MetricSeries,
    *,
    colors: Mapping[str, Color],
    labels: Mapping[str, str],
    max_points: int,
    step_range: tuple[int, int] | None = None,
) -> None:
    """Draw a metric series on a plotext plot, one line per run.

    Args:
        plot: Target plot widget
        series: Series to draw
        colors: Line color per run id
        labels: Legend label per run id
        max_points: Maximum number of points per line
        step_range: Optional (start, end) steps to restrict the view to
    """
    plot.plt.clear_figure()

    if series.is_empty:
        plot.plt.title(f"{series.metric} (no data)")
        plot.refresh()
        return

    plot.plt.title(series.metric)
    plot.plt.xlabel("step")
    for run_id, run in series.runs.items():
        steps, values = prepare_points(run, max_points)
        if step_range is not None:
            start, end = step_range
            pairs = [(s, v) for s, v in zip(steps, values, strict=True) if start <= s <= end]
            steps = [s for s, _ in pairs]
            values = [v for _, v in pairs]
        if not steps:
            continue
        plot.plt.plot(
            steps,
            values,
            label=labels.get(run_id, run_id),
            color=colors.get(run_id, DEFAULT_LINE_COLOR),
        )
    plot.refresh()


class _ChartCell(Widget):
    """A single chart cell in the metrics grid."""

    can_focus = True

    class Selected(Message):
        """Message sent when the chart cell is selected."""

        def __init__(self, metric_name: str) -> None:
            """Initialize the Selected message.

            Args:
                metric_name: The name of the selected metric.
            """
            self.metric_name = metric_name
            super().__init__()

    def __init__(
        self,
        series: MetricSeries,
        colors: Mapping[str, Color],
        labels: Mapping[str, str],
        max_points: int,
        *,
        name: str | None = None,
        id: str | None = None,
        classes: str | None = None,
    ) -> None:
        super().__init__(name=name, id=id, classes=classes)
        self._series = series
        self._colors = colors
        self._labels = labels
        self._max_points = max_points
        self._plot: PlotextPlot | None = None

    @property
    def metric_name(self) -> str:
        """Get the metric name."""
        return self._series.metric

    def compose(self) -> ComposeResult:
        """Compose the widget layout."""
        self._plot = PlotextPlot()
        yield self._plot

    def on_mount(self) -> None:
        """Handle mount event - render the chart."""
        if self._plot is not None:
            plot_series(
                self._plot,
                self._series,
                colors=self._colors,
                labels=self._labels,
                max_points=self._max_points,
            )

    def key_enter(self) -> None:
        """Handle Enter key press."""
        self.post_message(self.Selected(self.metric_name))


class MetricsGridWidget(Widget):
    """A widget that displays metric series in a responsive grid.

    Attributes:
        MIN_CHART_WIDTH: Minimum column width in characters (for xticks visibility).
        CHART_HEIGHT: Height per chart in terminal lines.
        RESIZE_DEBOUNCE_DELAY: Delay in seconds before processing resize events.
    """

    MIN_CHART_WIDTH = 40
    CHART_HEIGHT = 14
    RESIZE_DEBOUNCE_DELAY = 0.15

    _cols = reactive(1)

    class MetricSelected(Message):
        """Message sent when a metric chart is clicked."""

        def __init__(self, metric_name: str) -> None:
            """Initialize the MetricSelected message.

            Args:
                metric_name: The name of the selected metric.
            """
            self.metric_name = metric_name
            super().__init__()

    def __init__(
        self,
        max_points: int = 200,
        *,
        name: str | None = None,
        id: str | None = None,
        classes: str | None = None,
    ) -> None:
        """Initialize the MetricsGridWidget.

        Args:
            max_points: Maximum number of points plotted per run.
            name: Widget name.
            id: Widget ID.
            classes: CSS classes.
        """
        super().__init__(name=name, id=id, classes=classes)
        self._max_points = max_points
        self._series: tuple[MetricSeries, ...] = ()
        self._colors: Mapping[str, Color] = {}
        self._labels: Mapping[str, str] = {}
        self._resize_timer: Timer | None = None

    @property
    def series(self) -> tuple[MetricSeries, ...]:
        """Series currently shown."""
        return self._series

    def compose(self) -> ComposeResult:
        """Compose the widget layout."""
        yield Static("No plots: select runs and metrics", id="plots-placeholder")
        yield Vertical(id="metrics-rows")

    def on_mount(self) -> None:
        """Handle mount event - build the grid."""
        self._rebuild_grid()

    def show_series(
        self,
        series: Sequence[MetricSeries],
        colors: Mapping[str, Color] | None = None,
        labels: Mapping[str, str] | None = None,
    ) -> None:
        """Replace the plotted series.

        Args:
            series: One series per chart, in display order.
            colors: Line color per run id.
            labels: Legend label per run id.
        """
        self._series = tuple(series)
        self._colors = dict(colors or {})
        self._labels = dict(labels or {})
        self._rebuild_grid()

    def on_resize(self, event: Resize) -> None:
        """Handle resize event - recalculate grid dimensions with debounce."""
        if self._resize_timer is not None:
            self._resize_timer.stop()
        self._resize_timer = self.set_timer(self.RESIZE_DEBOUNCE_DELAY, self._handle_debounced_resize)

    def _handle_debounced_resize(self) -> None:
        """Handle debounced resize - rebuild grid if column count changed."""
        self._resize_timer = None
        new_cols = self._calculate_cols()
        if new_cols != self._cols:
            self._cols = new_cols
            self._rebuild_grid()

    def _calculate_cols(self) -> int:
        """Calculate optimal column count based on widget width.

        Returns:
            Number of columns for the grid layout.
        """
        width = self.size.width if self.size.width > 0 else 80
        cols = max(1, width // self.MIN_CHART_WIDTH)
        cols = min(cols, max(1, len(self._series)))
        return cols

    def _rebuild_grid(self) -> None:
        """Rebuild the grid with current column count."""
        try:
            container = self.query_one("#metrics-rows", Vertical)
            placeholder = self.query_one("#plots-placeholder", Static)
        except NoMatches:
            return

        container.remove_children()
        placeholder.display = not self._series
        if not self._series:
            return

        cols = self._calculate_cols()
        rows_count = (len(self._series) + cols - 1) // cols

        for row_idx in range(rows_count):
            start_idx = row_idx * cols
            end_idx = min(start_idx + cols, len(self._series))

            cells = [
                _ChartCell(
                    self._series[i],
                    self._colors,
                    self._labels,
                    self._max_points,
                    classes="chart-cell",
                )
                for i in range(start_idx, end_idx)
            ]
            container.mount(Horizontal(*cells, classes="metrics-row"))

    def on_click(self, event: Click) -> None:
        """Handle click event - determine which metric was clicked.

        Args:
            event: The click event.
        """
        target: DOMNode | None = event.widget
        while target is not None and target is not self:
            if isinstance(target, _ChartCell):
                self.post_message(self.MetricSelected(target.metric_name))
                return
            target = target.parent

    @on(_ChartCell.Selected)
    def _on_cell_selected(self, event: _ChartCell.Selected) -> None:
        """Handle cell selection and propagate as MetricSelected.

        Args:
            event: The cell selected event.
        """
        event.stop()
        self.post_message(self.MetricSelected(event.metric_name))
