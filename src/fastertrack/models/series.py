"""
Models for plotted metric series.

A metric series holds the history of one metric for several runs, grouped by
run so that each run can be drawn as its own line.
"""

from pydantic import BaseModel, Field


class RunSeries(BaseModel):
    """History of one metric for one run, ordered by step."""

    run_id: str
    steps: list[int] = Field(default_factory=list)
    values: list[float] = Field(default_factory=list)

    def points(self) -> list[tuple[int, float]]:
        """Get the history as (step, value) pairs."""
        return list(zip(self.steps, self.values, strict=True))


class MetricSeries(BaseModel):
    """History of one metric across the selected runs."""

    metric: str
    runs: dict[str, RunSeries] = Field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        """Whether no run logged this metric."""
        return not self.runs

    def points_by_run(self) -> dict[str, list[tuple[int, float]]]:
        """Get the history as {run_id: [(step, value), ...]}."""
        return {run_id: run.points() for run_id, run in self.runs.items()}

    def __str__(self) -> str:
        return f"MetricSeries(metric={self.metric}, runs={list(self.runs.keys())})"
