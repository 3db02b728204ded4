"""GatewayClient implementation for fetching experiment data over HTTP."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any
from urllib.parse import quote

import httpx
import polars as pl

from fastertrack.config import DashboardConfig, get_config
from fastertrack.exceptions import GatewayError
from fastertrack.models import Experiment
from fastertrack.snapshot import SNAPSHOT_MEDIA_TYPE, decode_snapshot

from .base import RunGateway

logger = logging.getLogger(__name__)

EXPERIMENTS_PATH = "/aim/api/experiments"
RUN_SEARCH_PATH = "/aim/api/runs/search/run/arrow"
METRIC_HISTORIES_PATH = "/api/2.0/mlflow/metrics/get-histories"

# Requests without a namespace prefix are served from this namespace
DEFAULT_NAMESPACE = "default"


class GatewayClient(RunGateway):
    """Async HTTP client for the tracking server gateway."""

    def __init__(
        self,
        config: DashboardConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize gateway client.

        Args:
            config: Dashboard configuration. Defaults to the environment configuration.
            transport: Optional httpx transport (used to run against in-process apps)
        """
        self.config = config or get_config()
        self.base_url = self.config.base_url.rstrip("/")
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.config.request_timeout,
            transport=transport,
        )

    async def __aenter__(self) -> GatewayClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self.client.aclose()

    def _path(self, path: str) -> str:
        """Prefix a path with the configured namespace, if any."""
        namespace = self.config.namespace
        if namespace and namespace != DEFAULT_NAMESPACE:
            return f"/ns/{quote(namespace, safe='')}{path}"
        return path

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send a request and raise GatewayError on transport or status failures."""
        url = self._path(path)
        try:
            response = await self.client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise GatewayError(f"{method} {url} failed with status {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise GatewayError(f"{method} {url} failed: {e}") from e
        return response

    async def list_experiments(self) -> list[Experiment]:
        """List all experiments.

        Returns:
            Experiments in server order

        Raises:
            GatewayError: If the request fails or the body is not a JSON list
        """
        response = await self._request("GET", EXPERIMENTS_PATH)
        try:
            payload = response.json()
        except ValueError as e:
            raise GatewayError(f"Experiment list is not valid JSON: {e}") from e

        if not isinstance(payload, list):
            raise GatewayError(f"Experiment list must be a JSON array, got {type(payload).__name__}")

        experiments = []
        for item in payload:
            try:
                experiments.append(Experiment.model_validate(item))
            except ValueError as e:
                logger.warning("Skipping invalid experiment entry %r: %s", item, e)
        logger.debug("Fetched %d experiments", len(experiments))
        return experiments

    async def search_runs(self, expression: str) -> pl.DataFrame:
        """Search runs matching a filter expression.

        With a configured search limit, runs are fetched in pages of that size,
        each continuing after the last run id of the previous page, until a
        short page arrives.

        Args:
            expression: Boolean filter expression

        Returns:
            Decoded run table

        Raises:
            GatewayError: If the request fails
            SnapshotDecodeError: If the response is not a valid snapshot
        """
        page_size = self.config.search_limit
        pages = [await self._search_page(expression, page_size, None)]
        while page_size and pages[-1].height >= page_size and "run_id" in pages[-1].columns:
            offset = pages[-1]["run_id"][-1]
            if offset is None:
                break
            page = await self._search_page(expression, page_size, str(offset))
            if page.height == 0:
                break
            if "run_id" in page.columns and page["run_id"][-1] == offset:
                logger.warning("Run search did not advance past offset %r, stopping", offset)
                break
            pages.append(page)

        table = pages[0] if len(pages) == 1 else pl.concat(pages, how="diagonal_relaxed")
        logger.debug("Run search %r returned %d runs in %d pages", expression, table.height, len(pages))
        return table

    async def _search_page(self, expression: str, limit: int | None, offset: str | None) -> pl.DataFrame:
        params: dict[str, str] = {"q": expression}
        if limit:
            params["limit"] = str(limit)
        if offset:
            params["offset"] = offset

        response = await self._request(
            "GET",
            RUN_SEARCH_PATH,
            params=params,
            headers={"Accept": SNAPSHOT_MEDIA_TYPE},
        )
        return decode_snapshot(response.content)

    async def get_metric_histories(
        self,
        run_ids: Sequence[str],
        metric_keys: Sequence[str],
    ) -> pl.DataFrame:
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
        response = await self._request(
            "POST",
            METRIC_HISTORIES_PATH,
            json={"run_ids": list(run_ids), "metric_keys": list(metric_keys)},
            headers={"Accept": SNAPSHOT_MEDIA_TYPE},
        )
        table = decode_snapshot(response.content)
        logger.debug("Fetched %d history points for %d runs", table.height, len(run_ids))
        return table
