"""Tests for selection state transitions."""

import pytest
from pydantic import ValidationError

from fastertrack.cascade import SelectionState, default_experiment_selection
from fastertrack.cascade import state as transitions
from fastertrack.models import Experiment


@pytest.fixture
def loaded_state() -> SelectionState:
    """State after a run table with metrics was received and a metric picked."""
    state = transitions.select_experiments(SelectionState(), ["Default"])
    state = transitions.receive_run_table(state, ["r1", "r2"], ["acc", "loss"])
    return transitions.select_metrics(state, ["loss"])


class TestSelectionState:
    """Tests for SelectionState model."""

    def test_initial_state(self):
        state = SelectionState()

        assert state.selected_experiments == ()
        assert state.search_query == ""
        assert state.selected_runs == ()
        assert state.available_metrics is None
        assert state.selected_metrics == ()
        assert not state.wants_series

    def test_is_immutable(self):
        with pytest.raises(ValidationError):
            SelectionState().search_query = "run.active"

    def test_wants_series_needs_runs_and_metrics(self, loaded_state):
        assert loaded_state.wants_series
        assert not transitions.select_runs(loaded_state, []).wants_series
        assert not transitions.select_metrics(loaded_state, []).wants_series


class TestTransitions:
    """Tests for the pure state transitions."""

    def test_select_experiments_clears_runs_and_metrics(self, loaded_state):
        state = transitions.select_experiments(loaded_state, ["mnist", "mnist", "cifar"])

        assert state.selected_experiments == ("mnist", "cifar")
        assert state.selected_runs == ()
        assert state.available_metrics is None
        assert state.selected_metrics == ("loss",)

    def test_commit_search_query_clears_runs_and_metrics(self, loaded_state):
        state = transitions.commit_search_query(loaded_state, "  run.active  ")

        assert state.search_query == "run.active"
        assert state.selected_experiments == ("Default",)
        assert state.selected_runs == ()
        assert state.available_metrics is None

    def test_receive_run_table_selects_all_runs(self):
        state = transitions.receive_run_table(SelectionState(), ["r1", "r2", "r1"], ["acc"])

        assert state.selected_runs == ("r1", "r2")
        assert state.available_metrics == ("acc",)

    def test_receive_run_table_without_metrics(self):
        state = transitions.receive_run_table(SelectionState(), ["r1"], [])

        assert state.available_metrics == ()

    def test_select_metrics_keeps_order(self, loaded_state):
        state = transitions.select_metrics(loaded_state, ["loss", "acc"])

        assert state.selected_metrics == ("loss", "acc")

    def test_transitions_do_not_mutate_input(self, loaded_state):
        before = loaded_state.model_copy()

        transitions.select_experiments(loaded_state, [])
        transitions.select_runs(loaded_state, [])

        assert loaded_state == before


class TestDefaultExperimentSelection:
    """Tests for default_experiment_selection function."""

    def test_selects_experiment_with_default_id(self):
        experiments = [Experiment(id="1", name="mnist"), Experiment(id="0", name="Default")]

        assert default_experiment_selection(experiments, "0") == ("Default",)

    def test_no_match_selects_nothing(self):
        assert default_experiment_selection([Experiment(id="1", name="mnist")], "0") == ()

    def test_disabled_default_selects_nothing(self):
        assert default_experiment_selection([Experiment(id="0", name="Default")], None) == ()

    def test_numeric_ids_are_matched_as_strings(self):
        assert default_experiment_selection([Experiment.model_validate({"id": 0, "name": "Default"})], "0") == (
            "Default",
        )
