"""
Pytest configuration and shared fixtures.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from datetime import datetime

import polars as pl
import pytest
from fastapi import FastAPI, Request, Response

from fastertrack.exceptions import GatewayError
from fastertrack.gateway import EXPERIMENTS_PATH, METRIC_HISTORIES_PATH, RUN_SEARCH_PATH, RunGateway
from fastertrack.models import Experiment
from fastertrack.snapshot import SNAPSHOT_MEDIA_TYPE, encode_snapshot


@pytest.fixture(autouse=True)
def clean_env_for_tests(monkeypatch):
    """Clean environment variables for test isolation.

    Ensures tests don't pick up a developer's gateway settings by clearing
    every FASTERTRACK_* variable and the cached configuration.

    This fixture is applied automatically to all tests (autouse=True).
    """
    for name in (
        "FASTERTRACK_URL",
        "FASTERTRACK_NAMESPACE",
        "FASTERTRACK_TIMEOUT",
        "FASTERTRACK_DEFAULT_EXPERIMENT",
        "FASTERTRACK_SEARCH_LIMIT",
        "FASTERTRACK_CHART_MAX_POINTS",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("fastertrack.config._config", None)


def make_run_table(
    runs: Sequence[tuple[str, str, str]],
    metrics: dict[str, Sequence[float | None]] | None = None,
    params: dict[str, Sequence[str | None]] | None = None,
    tags: dict[str, Sequence[str | None]] | None = None,
) -> pl.DataFrame:
    """Build a run search table like the gateway returns.

    Args:
        runs: (run_id, name, experiment_name) per run
        metrics: Latest value per run, keyed by metric name (without prefix)
        params: Param value per run, keyed by param name (without prefix)
        tags: Tag value per run, keyed by tag name (without prefix)
    """
    count = len(runs)
    columns: dict[str, pl.Series] = {
        "run_id": pl.Series([r[0] for r in runs], dtype=pl.Utf8),
        "name": pl.Series([r[1] for r in runs], dtype=pl.Utf8),
        "experiment_name": pl.Series([r[2] for r in runs], dtype=pl.Utf8),
        "creation_time": pl.Series([datetime(2024, 1, 15, 10, 0, 0)] * count, dtype=pl.Datetime("ms")),
        "end_time": pl.Series([datetime(2024, 1, 15, 10, 1, 5, 432000)] * count, dtype=pl.Datetime("ms")),
        "archived": pl.Series([False] * count, dtype=pl.Boolean),
        "active": pl.Series([False] * count, dtype=pl.Boolean),
    }
    for key, values in (metrics or {}).items():
        columns[f"metrics:{key}"] = pl.Series(list(values), dtype=pl.Float64)
    for key, values in (params or {}).items():
        columns[f"params:{key}"] = pl.Series(list(values), dtype=pl.Utf8)
    for key, values in (tags or {}).items():
        columns[f"tags:{key}"] = pl.Series(list(values), dtype=pl.Utf8)
    return pl.DataFrame(columns)


def make_history_table(rows: Sequence[tuple[str, str, int, float]]) -> pl.DataFrame:
    """Build a long-format history table from (run_id, key, step, value) rows."""
    return pl.DataFrame(
        {
            "run_id": [r[0] for r in rows],
            "key": [r[1] for r in rows],
            "step": [r[2] for r in rows],
            "value": [r[3] for r in rows],
        },
        schema={"run_id": pl.Utf8, "key": pl.Utf8, "step": pl.Int64, "value": pl.Float64},
    )


@pytest.fixture
def experiments() -> list[Experiment]:
    """Experiments listed by the fake gateways."""
    return [
        Experiment(id="0", name="Default"),
        Experiment(id="1", name="mnist"),
        Experiment(id="2", name="cifar"),
    ]


@pytest.fixture
def run_tables() -> dict[str, pl.DataFrame]:
    """Run table per experiment name."""
    return {
        "Default": make_run_table(
            [("r1", "baseline", "Default"), ("r2", "tuned", "Default")],
            metrics={"acc": [0.91, 0.95], "loss": [0.3, 0.2]},
            params={"lr": ["0.01", "0.001"]},
        ),
        "mnist": make_run_table(
            [("m1", "lenet", "mnist")],
            metrics={"acc": [0.99]},
            tags={"owner": ["ana"]},
        ),
        "cifar": make_run_table(
            [("c1", "resnet", "cifar")],
            metrics={"top5": [0.97]},
        ),
    }


@pytest.fixture
def history_table() -> pl.DataFrame:
    """Histories of acc and loss for runs r1 and r2."""
    return make_history_table(
        [
            ("r1", "acc", 0, 0.5),
            ("r1", "acc", 1, 0.6),
            ("r2", "acc", 0, 0.4),
            ("r1", "loss", 0, 1.0),
            ("r1", "loss", 1, 0.8),
            ("r2", "loss", 0, 1.2),
        ]
    )


class FakeGateway(RunGateway):
    """In-memory gateway recording every request.

    Run searches answer with the concatenation of the tables of the
    experiments named in the filter expression. Setting a gate event on
    ``search_gates`` or ``history_gates`` (keyed by call number, starting at 1)
    holds that call until the event is set.
    """

    def __init__(
        self,
        experiments: list[Experiment],
        run_tables: dict[str, pl.DataFrame],
        history: pl.DataFrame | None = None,
    ) -> None:
        self.experiments = experiments
        self.run_tables = run_tables
        self.history = history
        self.search_calls: list[str] = []
        self.history_calls: list[tuple[tuple[str, ...], tuple[str, ...]]] = []
        self.search_gates: dict[int, asyncio.Event] = {}
        self.history_gates: dict[int, asyncio.Event] = {}
        self.fail_experiments = False
        self.fail_search = False
        self.fail_history = False
        self.closed = False

    async def list_experiments(self) -> list[Experiment]:
        if self.fail_experiments:
            raise GatewayError("GET /aim/api/experiments failed with status 500")
        return list(self.experiments)

    async def search_runs(self, expression: str) -> pl.DataFrame:
        self.search_calls.append(expression)
        gate = self.search_gates.get(len(self.search_calls))
        if gate is not None:
            await gate.wait()
        if self.fail_search:
            raise GatewayError("GET /aim/api/runs/search/run/arrow failed with status 500")

        tables = [table for name, table in self.run_tables.items() if f'"{name}"' in expression]
        if not tables:
            return make_run_table([])
        return pl.concat(tables, how="diagonal")

    async def get_metric_histories(self, run_ids: Sequence[str], metric_keys: Sequence[str]) -> pl.DataFrame:
        self.history_calls.append((tuple(run_ids), tuple(metric_keys)))
        gate = self.history_gates.get(len(self.history_calls))
        if gate is not None:
            await gate.wait()
        if self.fail_history:
            raise GatewayError("POST /api/2.0/mlflow/metrics/get-histories failed with status 500")

        if self.history is None:
            return make_history_table([])
        return self.history.filter(pl.col("run_id").is_in(list(run_ids)) & pl.col("key").is_in(list(metric_keys)))

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_gateway(experiments, run_tables, history_table) -> FakeGateway:
    """Create an in-memory gateway with sample data."""
    return FakeGateway(experiments, run_tables, history_table)


@pytest.fixture
def gateway_requests() -> list[Request]:
    """Requests received by the fake gateway app."""
    return []


@pytest.fixture
def gateway_app(run_tables, history_table, gateway_requests) -> FastAPI:
    """Create an in-process FastAPI app serving the gateway endpoints.

    Every endpoint is also served below /ns/{namespace}.
    """
    app = FastAPI()

    async def list_experiments(request: Request) -> list[dict]:
        gateway_requests.append(request)
        return [{"id": 0, "name": "Default"}, {"id": "1", "name": "mnist"}, {"name": "no id"}]

    async def search_runs(request: Request) -> Response:
        gateway_requests.append(request)
        return Response(content=encode_snapshot(run_tables["Default"]), media_type=SNAPSHOT_MEDIA_TYPE)

    async def get_histories(request: Request) -> Response:
        gateway_requests.append(request)
        body = await request.json()
        table = history_table.filter(
            pl.col("run_id").is_in(body["run_ids"]) & pl.col("key").is_in(body["metric_keys"])
        )
        return Response(content=encode_snapshot(table), media_type=SNAPSHOT_MEDIA_TYPE)

    for prefix in ("", "/ns/{namespace}"):
        app.add_api_route(prefix + EXPERIMENTS_PATH, list_experiments, methods=["GET"])
        app.add_api_route(prefix + RUN_SEARCH_PATH, search_runs, methods=["GET"])
        app.add_api_route(prefix + METRIC_HISTORIES_PATH, get_histories, methods=["POST"])

    @app.get("/broken" + RUN_SEARCH_PATH)
    async def broken_search(request: Request) -> Response:
        gateway_requests.append(request)
        return Response(content=b"not an arrow stream", media_type=SNAPSHOT_MEDIA_TYPE)

    return app
