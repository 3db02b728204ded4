"""
Long-format metric history transformer.

The history endpoint returns one row per (run, metric, step). Each selected
metric becomes its own series, grouped by run so that every run is drawn as a
separate line.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import polars as pl

from fastertrack.models import MetricSeries, RunSeries

logger = logging.getLogger(__name__)

HISTORY_COLUMNS = ("run_id", "key", "step", "value")


def _metric_series(table: pl.DataFrame, metric: str) -> MetricSeries:
    """Build the series of a single metric from a long-format table."""
    rows = (
        table.filter(pl.col("key") == metric)
        .select("run_id", "step", "value")
        .drop_nulls(["run_id", "step", "value"])
    )
    if rows.is_empty():
        return MetricSeries(metric=metric)

    runs: dict[str, RunSeries] = {}
    for part in rows.partition_by("run_id", maintain_order=True):
        ordered = part.sort("step", maintain_order=True)
        run_id = str(ordered["run_id"][0])
        runs[run_id] = RunSeries(
            run_id=run_id,
            steps=[int(s) for s in ordered["step"].to_list()],
            values=[float(v) for v in ordered["value"].to_list()],
        )
    return MetricSeries(metric=metric, runs=runs)


def build_series(table: pl.DataFrame | None, metrics: Sequence[str]) -> list[MetricSeries]:
    """Split a long-format history table into one series per metric.

    Args:
        table: Table with run_id, key, step and value columns (other columns
            are ignored). None means no history data is available.
        metrics: Selected metric keys; output order follows this order

    Returns:
        One MetricSeries per metric. Metrics missing from the table yield an
        empty series.
    """
    if table is None:
        return [MetricSeries(metric=metric) for metric in metrics]

    missing = [column for column in HISTORY_COLUMNS if column not in table.columns]
    if missing:
        logger.warning("History table is missing columns %s; no series produced", missing)
        return [MetricSeries(metric=metric) for metric in metrics]

    return [_metric_series(table, metric) for metric in metrics]
