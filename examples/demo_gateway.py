"""
Demo gateway serving random example data for the FasterTrack dashboard.

Serves experiments, run searches and metric histories on the same paths as a
tracking server, so that the dashboard can be tried without one:

    python examples/demo_gateway.py --port 5000
    fastertrack tui --url http://localhost:5000

Run searches only honour the experiment part of the filter expression; any
additional query is ignored.
"""

from __future__ import annotations

import argparse
import json
import math
import random
import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import polars as pl
import uvicorn
from fastapi import APIRouter, FastAPI, Request, Response
from pydantic import BaseModel

from fastertrack.gateway import EXPERIMENTS_PATH, METRIC_HISTORIES_PATH, RUN_SEARCH_PATH
from fastertrack.snapshot import SNAPSHOT_MEDIA_TYPE, encode_snapshot

EXPERIMENT_FILTER = re.compile(r"run\.experiment in (\[.*?\])")

OPTIMIZERS = ["adam", "sgd", "rmsprop", "adagrad"]
FRUITS = ["apple", "pear", "orange", "grape", "banana", "mango"]


@dataclass
class DemoRun:
    run_id: str
    name: str
    experiment: str
    start: datetime
    end: datetime | None
    archived: bool
    params: dict[str, str]
    tags: dict[str, str]
    histories: dict[str, list[float]] = field(default_factory=dict)


def generate_history(rng: random.Random, metric: str, values: int) -> list[float]:
    """
    Generate a metric history with trend and noise.

    Args:
        rng: Random source
        metric: Metric name; "loss" metrics decrease, the others increase
        values: Number of steps

    Returns:
        One value per step
    """
    decreasing = "loss" in metric
    base = 1.0 + rng.uniform(-0.2, 0.2) if decreasing else 0.3 + rng.uniform(-0.1, 0.1)
    trend = -0.8 if decreasing else 0.5
    noise_level = rng.uniform(0.02, 0.08)

    history = []
    for step in range(values):
        progress = step / max(1, values - 1)
        trend_factor = progress * (1.0 + 0.2 * math.log(1 + 5 * progress))
        noise = noise_level * math.sin(step * 0.2) * 0.3 + noise_level * rng.gauss(0, 0.5)
        value = base + trend * trend_factor + noise
        history.append(max(0.01, value) if decreasing else max(0.0, min(1.0, value)))
    return history


def generate_runs(
    seed: int,
    experiments: int,
    runs: int,
    params: int,
    metrics: int,
    values: int,
) -> tuple[list[dict[str, str]], list[DemoRun]]:
    """
    Generate experiments and runs.

    Experiment "0" is always present, as on a real server. Experiments use
    different metric sets so that the run table columns change with the
    experiment selection.

    Returns:
        Tuple of (experiment entries, runs)
    """
    rng = random.Random(seed)
    names = ["Default"] + [f"Example experiment {i}" for i in range(1, experiments + 1)]
    experiment_entries = [{"id": str(i), "name": name} for i, name in enumerate(names)]

    metric_pool = ["loss", "accuracy", "val_loss", "val_accuracy"] + [f"metric{i}" for i in range(1, metrics + 1)]
    now = datetime.now(timezone.utc).replace(microsecond=0)

    demo_runs = []
    for exp_index, experiment in enumerate(names):
        experiment_metrics = metric_pool[: 2 + (exp_index % (len(metric_pool) - 1))]
        for run_index in range(1, runs + 1):
            start = now - timedelta(hours=rng.randint(1, 72), seconds=rng.randint(0, 3599))
            finished = rng.random() > 0.2
            end = start + timedelta(seconds=rng.uniform(30, 7200)) if finished else None
            run = DemoRun(
                run_id=uuid.UUID(int=rng.getrandbits(128)).hex,
                name=f"Example run {run_index}",
                experiment=experiment,
                start=start,
                end=end,
                archived=rng.random() < 0.1,
                params={
                    "learning_rate": f"{0.01 * (1 + 0.2 * run_index):.4f}",
                    "optimizer": OPTIMIZERS[run_index % len(OPTIMIZERS)],
                    **{f"param{i}": f"{rng.random():f}" for i in range(1, params + 1)},
                },
                tags={"fruit": rng.choice(FRUITS)},
            )
            run.histories = {metric: generate_history(rng, metric, values) for metric in experiment_metrics}
            demo_runs.append(run)
    return experiment_entries, demo_runs


def run_table(runs: list[DemoRun]) -> pl.DataFrame:
    """Build the run search snapshot for the given runs."""
    metric_keys = sorted({metric for run in runs for metric in run.histories})
    param_keys = sorted({key for run in runs for key in run.params})
    tag_keys = sorted({key for run in runs for key in run.tags})

    columns: dict[str, pl.Series] = {
        "run_id": pl.Series([run.run_id for run in runs], dtype=pl.Utf8),
        "name": pl.Series([run.name for run in runs], dtype=pl.Utf8),
        "experiment_name": pl.Series([run.experiment for run in runs], dtype=pl.Utf8),
        "creation_time": pl.Series([run.start for run in runs], dtype=pl.Datetime("ms", "UTC")),
        "end_time": pl.Series([run.end for run in runs], dtype=pl.Datetime("ms", "UTC")),
        "archived": pl.Series([run.archived for run in runs], dtype=pl.Boolean),
        "active": pl.Series([run.end is None for run in runs], dtype=pl.Boolean),
    }
    for key in metric_keys:
        columns[f"metrics:{key}"] = pl.Series(
            [run.histories[key][-1] if key in run.histories else None for run in runs],
            dtype=pl.Float64,
        )
    for key in param_keys:
        columns[f"params:{key}"] = pl.Series([run.params.get(key) for run in runs], dtype=pl.Utf8)
    for key in tag_keys:
        columns[f"tags:{key}"] = pl.Series([run.tags.get(key) for run in runs], dtype=pl.Utf8)
    return pl.DataFrame(columns)


class HistoriesRequest(BaseModel):
    run_ids: list[str]
    metric_keys: list[str]


def create_app(experiments: list[dict[str, str]], runs: list[DemoRun]) -> FastAPI:
    """
    Create the demo gateway app.

    Every endpoint is also served below /ns/<namespace>, with the same data.
    """
    runs_by_id = {run.run_id: run for run in runs}
    router = APIRouter()

    @router.get(EXPERIMENTS_PATH)
    async def list_experiments() -> list[dict[str, str]]:
        return experiments

    @router.get(RUN_SEARCH_PATH)
    async def search_runs(request: Request, q: str = "", limit: int | None = None, offset: str | None = None) -> Response:
        match = EXPERIMENT_FILTER.search(q)
        selected = set(json.loads(match.group(1))) if match else {e["name"] for e in experiments}
        found = [run for run in runs if run.experiment in selected]
        if offset:
            ids = [run.run_id for run in found]
            found = found[ids.index(offset) + 1 :] if offset in ids else []
        if limit:
            found = found[:limit]
        return Response(content=encode_snapshot(run_table(found)), media_type=SNAPSHOT_MEDIA_TYPE)

    @router.post(METRIC_HISTORIES_PATH)
    async def get_histories(body: HistoriesRequest) -> Response:
        rows: dict[str, list] = {"run_id": [], "key": [], "step": [], "value": []}
        for run_id in body.run_ids:
            run = runs_by_id.get(run_id)
            if run is None:
                continue
            for key in body.metric_keys:
                for step, value in enumerate(run.histories.get(key, [])):
                    rows["run_id"].append(run_id)
                    rows["key"].append(key)
                    rows["step"].append(step)
                    rows["value"].append(value)
        table = pl.DataFrame(
            rows,
            schema={"run_id": pl.Utf8, "key": pl.Utf8, "step": pl.Int64, "value": pl.Float64},
        )
        return Response(content=encode_snapshot(table), media_type=SNAPSHOT_MEDIA_TYPE)

    app = FastAPI(title="FasterTrack demo gateway")
    app.include_router(router)
    app.include_router(router, prefix="/ns/{namespace}")
    return app


def main() -> None:
    """Main function: Generate data and serve it."""
    parser = argparse.ArgumentParser(description="Serve random example data for the FasterTrack dashboard")
    parser.add_argument("--host", default="127.0.0.1", help="Host name (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=5000, help="Port number (default: 5000)")
    parser.add_argument("--seed", type=int, default=0, help="Random seed (default: 0)")
    parser.add_argument("--experiments-amount", type=int, default=3, help="Experiments besides the default one")
    parser.add_argument("--runs-amount", type=int, default=5, help="Runs per experiment")
    parser.add_argument("--params-amount", type=int, default=3, help="Extra params per run")
    parser.add_argument("--metrics-amount", type=int, default=2, help="Extra metrics available to experiments")
    parser.add_argument("--values-amount", type=int, default=500, help="Steps per metric history")
    args = parser.parse_args()

    experiments, runs = generate_runs(
        seed=args.seed,
        experiments=args.experiments_amount,
        runs=args.runs_amount,
        params=args.params_amount,
        metrics=args.metrics_amount,
        values=args.values_amount,
    )
    print(f"Serving {len(experiments)} experiments and {len(runs)} runs on http://{args.host}:{args.port}")
    uvicorn.run(create_app(experiments, runs), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
