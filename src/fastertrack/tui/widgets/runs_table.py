"""
Runs Table Widget

Data table whose columns are projected from the schema of the current run
search result, with a selection mark per run.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

import polars as pl
from textual.binding import Binding
from textual.message import Message
from textual.widgets import DataTable

from fastertrack.models import ColumnDefinition

logger = logging.getLogger(__name__)

SELECTED_COLUMN_KEY = "__selected__"
SELECTED_MARK = "[green]✓[/]"
UNSELECTED_MARK = " "


def _escape_markup(text: str) -> str:
    return text.replace("[", "\\[")


class RunsTable(DataTable[str]):
    """Table of runs with a toggleable selection per row."""

    BINDINGS = [
        Binding("space", "toggle_run", "Toggle run", show=True),
        Binding("a", "toggle_all", "All runs", show=True),
        Binding("j", "cursor_down", "Down", show=False),
        Binding("k", "cursor_up", "Up", show=False),
    ]

    class SelectionChanged(Message):
        """Message sent when the user changes the run selection."""

        def __init__(self, run_ids: tuple[str, ...]) -> None:
            """Initialize the SelectionChanged message.

            Args:
                run_ids: Selected run ids in table order.
            """
            self.run_ids = run_ids
            super().__init__()

    def __init__(
        self,
        *,
        name: str | None = None,
        id: str | None = None,
        classes: str | None = None,
    ) -> None:
        super().__init__(name=name, id=id, classes=classes, cursor_type="row", zebra_stripes=True)
        self._row_run_ids: list[str] = []
        self._selected_runs: set[str] = set()

    @property
    def run_ids(self) -> tuple[str, ...]:
        """Run ids in table order."""
        return tuple(self._row_run_ids)

    @property
    def selected_run_ids(self) -> tuple[str, ...]:
        """Selected run ids in table order."""
        return tuple(run_id for run_id in self._row_run_ids if run_id in self._selected_runs)

    def show_runs(
        self,
        table: pl.DataFrame | None,
        columns: Sequence[ColumnDefinition],
        selected: Iterable[str],
    ) -> None:
        """Replace columns and rows.

        Args:
            table: Run table, or None to show no rows
            columns: Column definitions to display
            selected: Run ids to mark as selected
        """
        self.clear(columns=True)
        self._row_run_ids = []
        self._selected_runs = set(selected)

        self.add_column("", key=SELECTED_COLUMN_KEY)
        for column in columns:
            self.add_column(column.display_name, key=column.key)
        self.fixed_columns = 1 + sum(1 for column in columns if column.pinned)

        if table is None or "run_id" not in table.columns:
            return

        seen: set[str] = set()
        for row in table.iter_rows(named=True):
            run_id = row.get("run_id")
            if run_id is None:
                continue
            run_id = str(run_id)
            if run_id in seen:
                logger.debug("Skipping duplicate run %s", run_id)
                continue
            seen.add(run_id)
            self._row_run_ids.append(run_id)
            cells = [_escape_markup(column.format_cell(row)) for column in columns]
            self.add_row(self._mark(run_id), *cells, key=run_id)

    def _mark(self, run_id: str) -> str:
        return SELECTED_MARK if run_id in self._selected_runs else UNSELECTED_MARK

    def _refresh_marks(self) -> None:
        for run_id in self._row_run_ids:
            self.update_cell(run_id, SELECTED_COLUMN_KEY, self._mark(run_id))

    def action_toggle_run(self) -> None:
        """Toggle selection of the run under the cursor."""
        if not self._row_run_ids:
            return
        row_key, _ = self.coordinate_to_cell_key(self.cursor_coordinate)
        run_id = str(row_key.value)
        if run_id in self._selected_runs:
            self._selected_runs.discard(run_id)
        else:
            self._selected_runs.add(run_id)
        self.update_cell(row_key, SELECTED_COLUMN_KEY, self._mark(run_id))
        self.post_message(self.SelectionChanged(self.selected_run_ids))

    def action_toggle_all(self) -> None:
        """Select all runs, or none if all are already selected."""
        if not self._row_run_ids:
            return
        if self._selected_runs.issuperset(self._row_run_ids):
            self._selected_runs = set()
        else:
            self._selected_runs = set(self._row_run_ids)
        self._refresh_marks()
        self.post_message(self.SelectionChanged(self.selected_run_ids))
