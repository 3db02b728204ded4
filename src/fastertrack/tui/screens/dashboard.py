"""
Dashboard Screen

Experiments on the side, run search and metric selection on top, per-metric
plots and the runs table below. All selection changes are forwarded to the
cascade controller, and the widgets are redrawn from its derived values.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import Screen
from textual.widgets import Footer, Header, Input, SelectionList, Static
from textual.widgets.selection_list import Selection

from fastertrack.cascade import CascadeController, CascadeEvent
from fastertrack.tui.app import run_color
from fastertrack.tui.widgets import ExperimentList, MetricsGridWidget, RunsTable

if TYPE_CHECKING:
    from fastertrack.tui.app import FasterTrackApp

logger = logging.getLogger(__name__)


class DashboardScreen(Screen[None]):
    """Screen for picking experiments, runs and metrics and plotting histories."""

    BINDINGS = [
        Binding("slash", "focus_search", "Search", show=True),
        Binding("e", "focus_experiments", "Experiments", show=True),
        Binding("m", "focus_metrics", "Metrics", show=True),
        Binding("t", "focus_runs", "Runs", show=True),
        Binding("escape", "unfocus_search", "Clear focus", show=False),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def tui_app(self) -> FasterTrackApp:
        """Get the typed app instance."""
        from fastertrack.tui.app import FasterTrackApp

        assert isinstance(self.app, FasterTrackApp)
        return self.app

    @property
    def controller(self) -> CascadeController:
        """Get the cascade controller."""
        return self.tui_app.controller

    def compose(self) -> ComposeResult:
        """Compose the screen layout."""
        yield Header()
        yield Horizontal(
            Vertical(
                ExperimentList(id="experiments"),
                classes="side-nav",
            ),
            Vertical(
                Horizontal(
                    Input(placeholder="Search for runs… (Enter to apply)", id="search-input"),
                    SelectionList[str](id="metrics-select"),
                    classes="toolbar",
                ),
                MetricsGridWidget(max_points=self.tui_app.config.chart_max_points, id="plots"),
                Static(id="runs-status", classes="runs-status"),
                RunsTable(id="runs-table"),
                classes="main-pane",
            ),
            classes="layout",
        )
        yield Footer()

    def on_mount(self) -> None:
        """Handle mount event - subscribe to the cascade and load experiments."""
        self.query_one("#experiments", ExperimentList).border_title = "Experiments"
        self.query_one("#metrics-select", SelectionList).border_title = "Metrics"

        self._unsubscribe = self.controller.subscribe(self._on_cascade_event)
        self._show_runs()
        self._show_metrics()
        self.run_worker(self.controller.load_experiments(), group="cascade")

    def on_unmount(self) -> None:
        """Handle unmount - stop listening to the cascade."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_cascade_event(self, event: CascadeEvent) -> None:
        """Redraw the widgets affected by a cascade change."""
        if event is CascadeEvent.EXPERIMENTS:
            self._show_experiments()
        elif event is CascadeEvent.RUNS:
            self._show_runs()
        elif event is CascadeEvent.METRICS:
            self._show_metrics()
        elif event is CascadeEvent.SERIES:
            self._show_series()
        elif event is CascadeEvent.FETCH_FAILED:
            self.notify(self.controller.last_error or "Request failed", severity="error")
            if self.controller.run_search_failed:
                self._show_runs()
                self._show_metrics()

    def _show_experiments(self) -> None:
        experiments = self.controller.experiments
        experiment_list = self.query_one("#experiments", ExperimentList)
        experiment_list.show_experiments(experiments, self.controller.state.selected_experiments)
        experiment_list.border_title = f"Experiments ({len(experiments)})"

    def _show_runs(self) -> None:
        state = self.controller.state
        table = self.controller.run_table
        self.query_one("#runs-table", RunsTable).show_runs(table, self.controller.columns, state.selected_runs)

        status = self.query_one("#runs-status", Static)
        if self.controller.run_search_failed:
            status.update("[red]No runs available[/]")
        elif table is None:
            status.update("[dim]Searching runs…[/]")
        else:
            status.update(f"{table.height} runs, {len(state.selected_runs)} selected")

    def _show_metrics(self) -> None:
        state = self.controller.state
        metrics_select = self.query_one("#metrics-select", SelectionList)
        selected = set(state.selected_metrics)
        available = state.available_metrics or ()

        metrics_select.clear_options()
        metrics_select.add_options([Selection(metric, metric, metric in selected) for metric in available])

        if self.controller.run_search_failed:
            metrics_select.border_title = "Metrics (unavailable)"
        elif state.available_metrics is None:
            metrics_select.border_title = "Metrics (loading…)"
        elif not state.available_metrics:
            metrics_select.border_title = "Metrics (none)"
        else:
            metrics_select.border_title = f"Metrics ({len(available)})"

    def _run_styles(self) -> tuple[dict[str, tuple[int, int, int]], dict[str, str]]:
        """Get line colors and legend labels per run id.

        Colors follow run table order so that toggling runs does not recolor the others.
        """
        table = self.controller.run_table
        run_ids: list[str] = list(self.controller.state.selected_runs)
        labels: dict[str, str] = {}
        if table is not None and "run_id" in table.columns:
            run_ids = [str(run_id) for run_id in table["run_id"].drop_nulls().to_list()]
            if "name" in table.columns:
                for run_id, name in table.select("run_id", "name").iter_rows():
                    if run_id is not None and name:
                        labels[str(run_id)] = str(name)
        colors = {run_id: run_color(i) for i, run_id in enumerate(run_ids)}
        return colors, labels

    def _show_series(self) -> None:
        colors, labels = self._run_styles()
        self.query_one("#plots", MetricsGridWidget).show_series(self.controller.series, colors, labels)

    @on(SelectionList.SelectedChanged, "#experiments")
    def on_experiments_changed(self, event: SelectionList.SelectedChanged) -> None:
        """Handle experiment selection change."""
        names = list(event.selection_list.selected)
        if set(names) == set(self.controller.state.selected_experiments):
            return
        self.run_worker(self.controller.select_experiments(names), group="cascade")

    @on(Input.Submitted, "#search-input")
    def on_search_submitted(self, event: Input.Submitted) -> None:
        """Handle search query confirmation (Enter)."""
        self.run_worker(self.controller.commit_search_query(event.value), group="cascade")

    @on(SelectionList.SelectedChanged, "#metrics-select")
    def on_metrics_changed(self, event: SelectionList.SelectedChanged) -> None:
        """Handle metric selection change.

        Selected metrics that the current runs do not have stay selected.
        """
        state = self.controller.state
        available = set(state.available_metrics or ())
        checked = list(event.selection_list.selected)
        shown = {metric for metric in state.selected_metrics if metric in available}
        if set(checked) == shown:
            return

        keys = [metric for metric in state.selected_metrics if metric in checked or metric not in available]
        keys += [metric for metric in checked if metric not in state.selected_metrics]
        self.run_worker(self.controller.select_metrics(keys), group="cascade")

    @on(RunsTable.SelectionChanged)
    def on_runs_changed(self, event: RunsTable.SelectionChanged) -> None:
        """Handle run selection change."""
        self.query_one("#runs-status", Static).update(
            f"{len(self.query_one('#runs-table', RunsTable).run_ids)} runs, {len(event.run_ids)} selected"
        )
        self.run_worker(self.controller.select_runs(event.run_ids), group="cascade")

    @on(MetricsGridWidget.MetricSelected)
    def on_metric_selected(self, event: MetricsGridWidget.MetricSelected) -> None:
        """Open the full chart of a metric."""
        series = next((s for s in self.controller.series if s.metric == event.metric_name), None)
        if series is None:
            return
        from fastertrack.tui.screens import MetricChartScreen

        colors, labels = self._run_styles()
        self.app.push_screen(MetricChartScreen(series, colors, labels, self.tui_app.config.chart_max_points))

    def action_focus_search(self) -> None:
        """Focus the search input."""
        self.query_one("#search-input", Input).focus()

    def action_focus_experiments(self) -> None:
        """Focus the experiment list."""
        self.query_one("#experiments", ExperimentList).focus()

    def action_focus_metrics(self) -> None:
        """Focus the metric selection."""
        self.query_one("#metrics-select", SelectionList).focus()

    def action_focus_runs(self) -> None:
        """Focus the runs table."""
        self.query_one("#runs-table", RunsTable).focus()

    def action_unfocus_search(self) -> None:
        """Remove focus from search input (Escape key)."""
        search_input = self.query_one("#search-input", Input)
        if search_input.has_focus:
            self.query_one("#runs-table", RunsTable).focus()
