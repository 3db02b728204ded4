"""Tests for the command line interface."""

from __future__ import annotations

import io
import logging
import sys
from types import SimpleNamespace

import polars as pl
import pytest

from fastertrack import cli
from fastertrack.logger import installed_handlers, logger, reset_logger
from fastertrack.snapshot import encode_snapshot


@pytest.fixture(autouse=True)
def fresh_logger():
    reset_logger()
    yield
    reset_logger()


@pytest.fixture
def started(monkeypatch) -> list:
    """Configs passed to the TUI instead of starting it."""
    calls: list = []
    monkeypatch.setattr("fastertrack.tui.run_tui", lambda config=None: calls.append(config))
    return calls


class TestBuildConfig:
    """Tests for build_config function."""

    def test_environment_without_overrides(self, monkeypatch):
        monkeypatch.setenv("FASTERTRACK_URL", "http://env:5000")

        config = cli.build_config()

        assert config.base_url == "http://env:5000"

    def test_command_line_overrides_environment(self, monkeypatch):
        monkeypatch.setenv("FASTERTRACK_URL", "http://env:5000")
        monkeypatch.setenv("FASTERTRACK_NAMESPACE", "team-a")

        config = cli.build_config(url="http://cli:5000/", namespace="team-b", default_experiment="3")

        assert config.base_url == "http://cli:5000"
        assert config.namespace == "team-b"
        assert config.default_experiment_id == "3"

    def test_empty_default_experiment_disables_it(self):
        assert cli.build_config(default_experiment="").default_experiment_id is None


class TestMain:
    """Tests for main function."""

    def test_no_command_starts_tui(self, monkeypatch, started):
        monkeypatch.setattr(sys, "argv", ["fastertrack"])

        cli.main()

        assert len(started) == 1
        assert started[0].default_experiment_id == "0"

    def test_tui_command_with_options(self, started, tmp_path):
        log_file = tmp_path / "fastertrack.log"

        cli.main(["tui", "--url", "http://tracking:5000", "--namespace", "ns1", "--log-file", str(log_file), "--debug"])

        config = started[0]
        assert config.base_url == "http://tracking:5000"
        assert config.namespace == "ns1"
        assert [type(h) for h in installed_handlers()] == [logging.FileHandler]
        assert logger.level == logging.DEBUG

    def test_tui_logs_to_textual_by_default(self, started):
        from textual.logging import TextualHandler

        cli.main(["tui"])

        assert [type(h) for h in installed_handlers()] == [TextualHandler]
        assert logger.level == logging.INFO


class TestDecode:
    """Tests for the decode command."""

    def test_decode_file_prints_schema_and_rows(self, tmp_path, capsys):
        path = tmp_path / "runs.arrow"
        path.write_bytes(encode_snapshot(pl.DataFrame({"run_id": ["r1"], "metrics:acc": [0.5]})))

        with pytest.raises(SystemExit) as exc_info:
            cli.main(["decode", str(path)])

        assert exc_info.value.code == 0
        out = capsys.readouterr().out
        assert "run_id: String" in out
        assert "metrics:acc: Float64" in out
        assert "r1" in out

    def test_decode_reads_stdin(self, monkeypatch, capsys):
        payload = encode_snapshot(pl.DataFrame({"run_id": ["r9"]}))
        monkeypatch.setattr(sys, "stdin", SimpleNamespace(buffer=io.BytesIO(payload)))

        assert cli.run_decode() == 0
        assert "r9" in capsys.readouterr().out

    def test_decode_invalid_snapshot_fails(self, tmp_path, capsys):
        path = tmp_path / "broken.arrow"
        path.write_bytes(b"garbage")

        with pytest.raises(SystemExit) as exc_info:
            cli.main(["decode", str(path)])

        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err

    def test_decode_missing_file_fails(self, tmp_path, capsys):
        missing = tmp_path / "does-not-exist.arrow"

        assert cli.run_decode(str(missing)) == 1
        assert "Error:" in capsys.readouterr().err

    def test_decode_directory_fails(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["decode", str(tmp_path)])

        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err
