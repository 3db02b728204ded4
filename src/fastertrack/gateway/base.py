"""
RunGateway - Abstract base class for experiment data sources.

This module defines the interface the cascade controller uses to fetch
experiments, run snapshots and metric histories. The controller never talks
HTTP directly, which keeps it testable against in-memory gateways.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

import polars as pl

from fastertrack.models import Experiment


class RunGateway(ABC):
    """Abstract base class for experiment data sources."""

    @abstractmethod
    async def list_experiments(self) -> list[Experiment]:  # pragma: no cover - interface only
        """List all experiments.

        Returns:
            Experiments in server order

        Raises:
            GatewayError: If the request fails
        """
        raise NotImplementedError

    @abstractmethod
    async def search_runs(self, expression: str) -> pl.DataFrame:  # pragma: no cover - interface only
        """Search runs matching a filter expression.

        Args:
            expression: Boolean filter expression, e.g. ``run.experiment in ["a"]``

        Returns:
            Run table with core columns plus dynamic metrics:/params:/tags: columns

        Raises:
            GatewayError: If the request fails
            SnapshotDecodeError: If the response is not a valid snapshot
        """
        raise NotImplementedError

    @abstractmethod
    async def get_metric_histories(
        self,
        run_ids: Sequence[str],
        metric_keys: Sequence[str],
    ) -> pl.DataFrame:  # pragma: no cover - interface only
        """Fetch metric histories in long format.

        Args:
            run_ids: Runs to fetch histories for
            metric_keys: Metrics to fetch histories for

        Returns:
            Long-format table with run_id, key, step and value columns

        Raises:
            GatewayError: If the request fails
            SnapshotDecodeError: If the response is not a valid snapshot
        """
        raise NotImplementedError

    async def aclose(self) -> None:  # noqa: B027
        """Release any resources held by the gateway.

        Default implementation does nothing. Override if cleanup is needed.
        """
