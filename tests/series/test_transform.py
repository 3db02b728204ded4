"""Tests for the long-format metric history transformer."""

import polars as pl

from conftest import make_history_table
from fastertrack.series import build_series


class TestBuildSeries:
    """Tests for build_series function."""

    def test_one_series_per_metric_grouped_by_run(self):
        table = make_history_table(
            [
                ("r1", "acc", 0, 0.5),
                ("r1", "loss", 0, 1.0),
                ("r2", "acc", 0, 0.4),
                ("r1", "acc", 1, 0.6),
            ]
        )

        series = build_series(table, ["acc"])

        assert len(series) == 1
        assert series[0].metric == "acc"
        assert series[0].points_by_run() == {
            "r1": [(0, 0.5), (1, 0.6)],
            "r2": [(0, 0.4)],
        }

    def test_output_follows_metric_selection_order(self, history_table):
        series = build_series(history_table, ["loss", "acc"])

        assert [s.metric for s in series] == ["loss", "acc"]

    def test_steps_are_sorted_within_a_run(self):
        table = make_history_table([("r1", "acc", 2, 0.3), ("r1", "acc", 0, 0.1), ("r1", "acc", 1, 0.2)])

        run = build_series(table, ["acc"])[0].runs["r1"]

        assert run.steps == [0, 1, 2]
        assert run.values == [0.1, 0.2, 0.3]

    def test_metric_without_rows_gives_empty_series(self, history_table):
        series = build_series(history_table, ["acc", "f1"])

        assert not series[0].is_empty
        assert series[1].metric == "f1"
        assert series[1].is_empty

    def test_no_table_gives_empty_series(self):
        series = build_series(None, ["acc", "loss"])

        assert [s.metric for s in series] == ["acc", "loss"]
        assert all(s.is_empty for s in series)

    def test_table_missing_columns_gives_empty_series(self):
        table = pl.DataFrame({"run_id": ["r1"], "key": ["acc"], "value": [0.1]})

        series = build_series(table, ["acc"])

        assert series[0].is_empty

    def test_rows_with_missing_values_are_skipped(self):
        table = make_history_table([("r1", "acc", 0, 0.5)])
        table = pl.concat(
            [
                table,
                pl.DataFrame(
                    {"run_id": ["r1"], "key": ["acc"], "step": [1], "value": [None]},
                    schema=table.schema,
                ),
            ]
        )

        run = build_series(table, ["acc"])[0].runs["r1"]

        assert run.points() == [(0, 0.5)]

    def test_no_metrics_selected(self, history_table):
        assert build_series(history_table, []) == []
