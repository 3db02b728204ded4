"""
CascadeController - owner of the dashboard selection state.

The controller propagates selection changes through the cascade
experiments -> runs -> metrics -> plots. Each derived value (the run table and
the plotted series) is refreshed by an asynchronous gateway request. Requests
are tagged with a per-value sequence number, and a response is applied only if
it answers the latest request for its value. Outstanding requests are never
cancelled; late answers are simply dropped.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from enum import Enum

import polars as pl

from fastertrack.exceptions import GatewayError, SnapshotDecodeError
from fastertrack.gateway import RunGateway
from fastertrack.models import ColumnDefinition, Experiment, MetricSeries
from fastertrack.projection import available_metrics, project_columns
from fastertrack.series import build_series

from . import state as transitions
from .filters import build_run_filter
from .state import SelectionState

logger = logging.getLogger(__name__)

RUNS = "runs"
HISTORIES = "histories"


class CascadeEvent(Enum):
    """Derived value that changed, sent to controller listeners."""

    EXPERIMENTS = "experiments"
    RUNS = "runs"
    METRICS = "metrics"
    SERIES = "series"
    FETCH_FAILED = "fetch_failed"


Listener = Callable[[CascadeEvent], None]


class RequestSequencer:
    """Issues monotonically increasing sequence numbers per derived value."""

    def __init__(self) -> None:
        self._latest: dict[str, int] = {}

    def issue(self, name: str) -> int:
        """Issue the next sequence number for a derived value."""
        seq = self._latest.get(name, 0) + 1
        self._latest[name] = seq
        return seq

    def is_current(self, name: str, seq: int) -> bool:
        """Check whether seq is the latest number issued for a derived value."""
        return self._latest.get(name) == seq

    def latest(self, name: str) -> int:
        """Get the latest number issued for a derived value (0 if none)."""
        return self._latest.get(name, 0)


class CascadeController:
    """Selection cascade over a run gateway.

    Attributes:
        state: Current selection state (replaced on every transition).
        experiments: Experiments loaded from the gateway.
        run_table: Current run table, or None while a search is pending or failed.
        columns: Column definitions projected from the current run table.
        series: One series per selected metric, in selection order.
        last_error: Message of the most recent failed fetch.
        run_search_failed: Whether the latest run search failed.
    """

    def __init__(self, gateway: RunGateway, *, default_experiment_id: str | None = "0") -> None:
        """Initialize the controller.

        Args:
            gateway: Data source for experiments, runs and metric histories
            default_experiment_id: Experiment id selected when the experiment
                list loads, or None to start with nothing selected
        """
        self._gateway = gateway
        self._default_experiment_id = default_experiment_id
        self._sequencer = RequestSequencer()
        self._listeners: list[Listener] = []

        self.state = SelectionState()
        self.experiments: tuple[Experiment, ...] = ()
        self.run_table: pl.DataFrame | None = None
        self.columns: tuple[ColumnDefinition, ...] = tuple(project_columns([]))
        self.series: tuple[MetricSeries, ...] = ()
        self.last_error: str | None = None
        self.run_search_failed = False

    @property
    def sequencer(self) -> RequestSequencer:
        """Get the request sequencer."""
        return self._sequencer

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener for derived value changes.

        Args:
            listener: Called with the event describing what changed

        Returns:
            Function that unregisters the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, *events: CascadeEvent) -> None:
        for event in events:
            for listener in list(self._listeners):
                listener(event)

    def _fail(self, what: str, error: Exception) -> None:
        logger.warning("%s failed: %s", what, error)
        self.last_error = f"{what} failed: {error}"
        self._notify(CascadeEvent.FETCH_FAILED)

    async def load_experiments(self) -> tuple[Experiment, ...]:
        """Load the experiment list and apply the default selection.

        A failed load leaves the list empty.

        Returns:
            Loaded experiments
        """
        try:
            experiments = await self._gateway.list_experiments()
        except GatewayError as e:
            self._fail("Loading experiments", e)
            experiments = []

        self.experiments = tuple(experiments)
        defaults = transitions.default_experiment_selection(self.experiments, self._default_experiment_id)
        if defaults:
            logger.debug("Selecting default experiments %s", defaults)
            self.state = transitions.select_experiments(self.state, defaults)
        self._notify(CascadeEvent.EXPERIMENTS)

        if defaults:
            await self._refresh_runs()
        return self.experiments

    async def select_experiments(self, names: Iterable[str]) -> None:
        """Replace the experiment selection and search runs again."""
        self.state = transitions.select_experiments(self.state, names)
        await self._refresh_runs()

    async def commit_search_query(self, query: str) -> None:
        """Commit a free-text run query and search runs again."""
        self.state = transitions.commit_search_query(self.state, query)
        await self._refresh_runs()

    async def select_runs(self, run_ids: Iterable[str]) -> None:
        """Replace the run selection and refresh the plotted series."""
        self.state = transitions.select_runs(self.state, run_ids)
        await self._refresh_series()

    async def select_metrics(self, keys: Iterable[str]) -> None:
        """Replace the metric selection and refresh the plotted series."""
        self.state = transitions.select_metrics(self.state, keys)
        await self._refresh_series()

    def _invalidate_runs(self) -> None:
        """Drop the run table and everything derived from it."""
        self.run_table = None
        self.run_search_failed = False
        self.columns = tuple(project_columns([]))
        self.series = ()
        # Histories requested for the previous run table must not land either
        self._sequencer.issue(HISTORIES)
        self._notify(CascadeEvent.RUNS, CascadeEvent.METRICS, CascadeEvent.SERIES)

    async def _refresh_runs(self) -> None:
        seq = self._sequencer.issue(RUNS)
        self._invalidate_runs()

        expression = build_run_filter(self.state.selected_experiments, self.state.search_query)
        logger.debug("Run search #%d: %s", seq, expression)
        try:
            table = await self._gateway.search_runs(expression)
        except (GatewayError, SnapshotDecodeError) as e:
            if self._sequencer.is_current(RUNS, seq):
                self.run_search_failed = True
                self._fail("Run search", e)
            return

        if not self._sequencer.is_current(RUNS, seq):
            logger.debug("Discarding stale run search #%d (latest is #%d)", seq, self._sequencer.latest(RUNS))
            return

        run_ids = []
        if "run_id" in table.columns:
            run_ids = [str(run_id) for run_id in table["run_id"].drop_nulls().to_list()]

        self.run_table = table
        self.columns = tuple(project_columns(table.columns))
        self.state = transitions.receive_run_table(self.state, run_ids, available_metrics(table.columns))
        self._notify(CascadeEvent.RUNS, CascadeEvent.METRICS)

        await self._refresh_series()

    async def _refresh_series(self) -> None:
        seq = self._sequencer.issue(HISTORIES)
        self.series = ()
        self._notify(CascadeEvent.SERIES)

        if not self.state.wants_series:
            return

        run_ids = self.state.selected_runs
        metrics = self.state.selected_metrics
        logger.debug("History request #%d: %d runs, metrics %s", seq, len(run_ids), metrics)
        try:
            table = await self._gateway.get_metric_histories(run_ids, metrics)
        except (GatewayError, SnapshotDecodeError) as e:
            if self._sequencer.is_current(HISTORIES, seq):
                self._fail("Metric history request", e)
            return

        if not self._sequencer.is_current(HISTORIES, seq):
            logger.debug("Discarding stale history request #%d (latest is #%d)", seq, self._sequencer.latest(HISTORIES))
            return

        self.series = tuple(build_series(table, metrics))
        self._notify(CascadeEvent.SERIES)
