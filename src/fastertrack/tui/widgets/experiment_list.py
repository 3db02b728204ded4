"""
Experiment List Widget

Multi-select list of experiments, sorted by name.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from textual.widgets import SelectionList
from textual.widgets.selection_list import Selection

from fastertrack.models import Experiment


class ExperimentList(SelectionList[str]):
    """Selectable list of experiments.

    Values are experiment names, which is what run filter expressions match on.
    Selection changes are reported through SelectionList.SelectedChanged.
    """

    def show_experiments(self, experiments: Sequence[Experiment], selected: Iterable[str]) -> None:
        """Replace the listed experiments.

        Args:
            experiments: Experiments to list
            selected: Names to show as selected
        """
        selected_names = set(selected)
        names = sorted({experiment.name for experiment in experiments}, key=str.lower)

        self.clear_options()
        self.add_options([Selection(name, name, name in selected_names) for name in names])

    @property
    def experiment_count(self) -> int:
        """Number of listed experiments."""
        return self.option_count
