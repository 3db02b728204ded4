"""Tests for run filter expressions."""

from fastertrack.cascade import build_run_filter


class TestBuildRunFilter:
    """Tests for build_run_filter function."""

    def test_single_experiment(self):
        assert build_run_filter(["Default"]) == 'run.experiment in ["Default"]'

    def test_names_joined_with_comma_in_selection_order(self):
        assert build_run_filter(["b", "a"]) == 'run.experiment in ["b","a"]'

    def test_query_is_parenthesized_and_conjoined(self):
        assert (
            build_run_filter(["mnist"], 'run.name == "lenet" or run.active')
            == 'run.experiment in ["mnist"] and (run.name == "lenet" or run.active)'
        )

    def test_blank_query_is_ignored(self):
        assert build_run_filter(["mnist"], "   ") == 'run.experiment in ["mnist"]'

    def test_no_experiments_gives_empty_membership(self):
        assert build_run_filter([], "run.active") == "run.experiment in [] and (run.active)"

    def test_names_are_escaped(self):
        assert build_run_filter(['say "hi"', "back\\slash"]) == r'run.experiment in ["say \"hi\"","back\\slash"]'

    def test_non_ascii_names_are_kept(self):
        assert build_run_filter(["実験"]) == 'run.experiment in ["実験"]'
