"""
Selection state and its transitions.

The selection state is an immutable value. Every user action or fetch
completion maps the current state to a new one through one of the pure
transitions below; nothing mutates a state in place.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from pydantic import BaseModel, ConfigDict, Field

from fastertrack.models import Experiment


def unique(values: Iterable[str]) -> tuple[str, ...]:
    """De-duplicate values while keeping first-seen order."""
    return tuple(dict.fromkeys(values))


class SelectionState(BaseModel):
    """Current selection of the dashboard.

    ``available_metrics`` is None while no run search result applies (before
    the first search completes, or while one is outstanding). An empty tuple
    means the last search completed without any metric columns.
    """

    model_config = ConfigDict(frozen=True)

    selected_experiments: tuple[str, ...] = Field(default=(), description="Selected experiment names")
    search_query: str = Field(default="", description="Committed free-text run query")
    selected_runs: tuple[str, ...] = Field(default=(), description="Selected run ids")
    available_metrics: tuple[str, ...] | None = Field(default=None, description="Metric keys of the current run table")
    selected_metrics: tuple[str, ...] = Field(default=(), description="Selected metric keys, in selection order")

    @property
    def wants_series(self) -> bool:
        """Whether both runs and metrics are selected, so plots can be drawn."""
        return bool(self.selected_runs) and bool(self.selected_metrics)


def select_experiments(state: SelectionState, names: Iterable[str]) -> SelectionState:
    """Replace the experiment selection and invalidate everything derived from runs."""
    return state.model_copy(
        update={
            "selected_experiments": unique(names),
            "selected_runs": (),
            "available_metrics": None,
        }
    )


def commit_search_query(state: SelectionState, query: str) -> SelectionState:
    """Commit a search query and invalidate everything derived from runs."""
    return state.model_copy(
        update={
            "search_query": query.strip(),
            "selected_runs": (),
            "available_metrics": None,
        }
    )


def receive_run_table(state: SelectionState, run_ids: Iterable[str], metrics: Iterable[str]) -> SelectionState:
    """Apply a new run table: select all its runs and expose its metrics.

    The metric selection is kept; metric names may repeat across tables.
    """
    return state.model_copy(
        update={
            "selected_runs": unique(run_ids),
            "available_metrics": unique(metrics),
        }
    )


def select_runs(state: SelectionState, run_ids: Iterable[str]) -> SelectionState:
    """Replace the run selection."""
    return state.model_copy(update={"selected_runs": unique(run_ids)})


def select_metrics(state: SelectionState, keys: Iterable[str]) -> SelectionState:
    """Replace the metric selection, keeping selection order."""
    return state.model_copy(update={"selected_metrics": unique(keys)})


def default_experiment_selection(experiments: Sequence[Experiment], default_id: str | None) -> tuple[str, ...]:
    """Get the experiment names selected by default when the list first loads.

    Args:
        experiments: Experiments as listed by the gateway
        default_id: Id of the experiment to select, or None to select nothing

    Returns:
        Names of the experiments whose id matches (empty if none does)
    """
    if default_id is None:
        return ()
    return unique(experiment.name for experiment in experiments if experiment.id == default_id)
