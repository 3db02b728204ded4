"""Configuration and environment handling for FasterTrack."""

import os

from pydantic import BaseModel, Field, field_validator

__all__ = [
    "DEFAULT_BASE_URL",
    "DashboardConfig",
    "get_config",
]

DEFAULT_BASE_URL = "http://localhost:5000"


def _env_or_none(name: str) -> str | None:
    """Return the environment variable value, treating an empty string as unset."""
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return None
    return value.strip()


class DashboardConfig(BaseModel):
    """Dashboard configuration.

    Covers where the gateway lives, how long to wait for it, and the
    presentation defaults of the dashboard.

    All fields can be customized via environment variables.
    """

    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        description="Base URL of the tracking server gateway",
    )

    namespace: str | None = Field(
        default=None,
        description="Namespace code; requests are prefixed with /ns/<code> unless this is the default namespace",
    )

    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="HTTP request timeout in seconds",
    )

    default_experiment_id: str | None = Field(
        default="0",
        description="Experiment id selected automatically when the experiment list first loads (None disables)",
    )

    search_limit: int | None = Field(
        default=None,
        description="Runs per run-search page; searches page until all runs are loaded (None means one unpaged request)",
    )

    chart_max_points: int = Field(
        default=200,
        ge=3,
        description="Downsample each plotted run series using LTTB when it exceeds this many points",
    )

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("search_limit")
    @classmethod
    def _non_positive_limit_is_unlimited(cls, value: int | None) -> int | None:
        if value is not None and value <= 0:
            return None
        return value

    @classmethod
    def from_env(cls) -> "DashboardConfig":
        """Create DashboardConfig from environment variables.

        Environment variables:
        - FASTERTRACK_URL: Gateway base URL (default: http://localhost:5000)
        - FASTERTRACK_NAMESPACE: Namespace code (default: default namespace)
        - FASTERTRACK_TIMEOUT: Request timeout in seconds (default: 30)
        - FASTERTRACK_DEFAULT_EXPERIMENT: Default experiment id (default: "0"; set empty to disable)
        - FASTERTRACK_SEARCH_LIMIT: Runs per search page (default: no paging)
        - FASTERTRACK_CHART_MAX_POINTS: Points per plotted run before downsampling (default: 200)
        """
        search_limit = _env_or_none("FASTERTRACK_SEARCH_LIMIT")
        if "FASTERTRACK_DEFAULT_EXPERIMENT" in os.environ:
            default_experiment_id = _env_or_none("FASTERTRACK_DEFAULT_EXPERIMENT")
        else:
            default_experiment_id = cls.model_fields["default_experiment_id"].default

        return cls(
            base_url=_env_or_none("FASTERTRACK_URL") or cls.model_fields["base_url"].default,
            namespace=_env_or_none("FASTERTRACK_NAMESPACE"),
            request_timeout=float(os.environ.get("FASTERTRACK_TIMEOUT", cls.model_fields["request_timeout"].default)),
            default_experiment_id=default_experiment_id,
            search_limit=int(search_limit) if search_limit is not None else None,
            chart_max_points=int(os.environ.get("FASTERTRACK_CHART_MAX_POINTS", cls.model_fields["chart_max_points"].default)),
        )


# Global configuration instance
_config: DashboardConfig | None = None


def get_config() -> DashboardConfig:
    """Get dashboard configuration.

    Returns cached instance if already initialized.
    """
    global _config
    if _config is None:
        _config = DashboardConfig.from_env()
    return _config
