"""Tests for config module."""

import pytest
from pydantic import ValidationError

from fastertrack.config import DEFAULT_BASE_URL, DashboardConfig, get_config


class TestDashboardConfigFromEnv:
    """Tests for DashboardConfig.from_env."""

    def test_defaults_when_no_env_vars_set(self):
        """Test default values when no FASTERTRACK_* variables are set."""
        config = DashboardConfig.from_env()

        assert config.base_url == DEFAULT_BASE_URL
        assert config.namespace is None
        assert config.request_timeout == 30.0
        assert config.default_experiment_id == "0"
        assert config.search_limit is None
        assert config.chart_max_points == 200

    def test_env_vars_override_defaults(self, monkeypatch):
        """Test that every setting can be read from the environment."""
        monkeypatch.setenv("FASTERTRACK_URL", "http://tracking.example:8080/")
        monkeypatch.setenv("FASTERTRACK_NAMESPACE", "team-a")
        monkeypatch.setenv("FASTERTRACK_TIMEOUT", "5")
        monkeypatch.setenv("FASTERTRACK_DEFAULT_EXPERIMENT", "7")
        monkeypatch.setenv("FASTERTRACK_SEARCH_LIMIT", "50")
        monkeypatch.setenv("FASTERTRACK_CHART_MAX_POINTS", "500")

        config = DashboardConfig.from_env()

        assert config.base_url == "http://tracking.example:8080"
        assert config.namespace == "team-a"
        assert config.request_timeout == 5.0
        assert config.default_experiment_id == "7"
        assert config.search_limit == 50
        assert config.chart_max_points == 500

    def test_empty_default_experiment_disables_default_selection(self, monkeypatch):
        """Test that an empty FASTERTRACK_DEFAULT_EXPERIMENT means no default selection."""
        monkeypatch.setenv("FASTERTRACK_DEFAULT_EXPERIMENT", "")

        config = DashboardConfig.from_env()

        assert config.default_experiment_id is None

    def test_blank_namespace_is_default_namespace(self, monkeypatch):
        """Test that a blank namespace is treated as unset."""
        monkeypatch.setenv("FASTERTRACK_NAMESPACE", "   ")

        assert DashboardConfig.from_env().namespace is None

    @pytest.mark.parametrize("limit", ["0", "-1"])
    def test_non_positive_search_limit_is_unlimited(self, monkeypatch, limit):
        """Test that zero or negative limits mean no limit."""
        monkeypatch.setenv("FASTERTRACK_SEARCH_LIMIT", limit)

        assert DashboardConfig.from_env().search_limit is None


class TestDashboardConfigValidation:
    """Tests for DashboardConfig field validation."""

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            DashboardConfig(request_timeout=0)

    def test_chart_max_points_minimum(self):
        with pytest.raises(ValidationError):
            DashboardConfig(chart_max_points=2)


class TestGetConfig:
    """Tests for get_config function."""

    def test_returns_cached_instance(self):
        """Test that the configuration is read once and cached."""
        assert get_config() is get_config()

    def test_reads_environment_on_first_call(self, monkeypatch):
        monkeypatch.setenv("FASTERTRACK_URL", "http://other:5000")

        assert get_config().base_url == "http://other:5000"
