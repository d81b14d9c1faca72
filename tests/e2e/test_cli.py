"""End-to-end CLI coverage for the public commands exposed by lib_schema_config.

These tests drive the documented workflows (inspect, edit, document, validate,
generate, metadata lookups) against the demo schema and real files under
``tmp_path``. They double as regression tests for the README examples.
"""

from __future__ import annotations

import json
from pathlib import Path

import lib_cli_exit_tools
import pytest
import yaml
from click.testing import CliRunner

from lib_schema_config import cli
from lib_schema_config.adapters.codecs.yaml import read_file


def _runner() -> CliRunner:
    """Return a fresh CLI runner so each test starts from a clean state."""

    return CliRunner()


def _config(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "config.yml"
    path.write_text(body, encoding="utf-8")
    return path


def test_cli_get_prints_defaults_without_a_file() -> None:
    """`cli get` falls back to schema defaults when no file is given."""

    result = _runner().invoke(cli.cli, ["get", "daemon.port"])
    assert result.exit_code == 0
    assert result.output.strip() == "6666"


def test_cli_get_reads_the_file(tmp_path: Path) -> None:
    path = _config(tmp_path, "# version: 2\ndata:\n  ipfs:\n    ports: [4101, 5101]\n")
    result = _runner().invoke(cli.cli, ["--config", str(path), "get", "data.ipfs.ports"])
    assert result.exit_code == 0
    assert result.output.strip() == "4101 ;; 5101"


def test_cli_get_rejects_unknown_keys() -> None:
    result = _runner().invoke(cli.cli, ["get", "daemon.nope"])
    assert result.exit_code != 0
    assert "unknown key" in result.output


def test_cli_keys_lists_materialised_leaves() -> None:
    result = _runner().invoke(cli.cli, ["keys"])
    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert lines == sorted(lines)
    assert "daemon.port" in lines
    assert "mounts.default.path" in lines
    assert not any("*" in line for line in lines)


def test_cli_keys_limits_to_a_section() -> None:
    result = _runner().invoke(cli.cli, ["keys", "--section", "fs.compress"])
    assert result.exit_code == 0
    assert result.output.splitlines() == ["default_algo", "level"]


def test_cli_set_writes_the_file(tmp_path: Path) -> None:
    """`cli set` casts the text, validates it and persists the store."""

    path = tmp_path / "config.yml"
    runner = _runner()
    result = runner.invoke(cli.cli, ["--config", str(path), "set", "daemon.port", "7000"])
    assert result.exit_code == 0
    assert result.output.strip() == "daemon.port = 7000"

    version, tree = read_file(path).decode()
    assert version == 0
    assert tree["daemon"]["port"] == 7000
    assert tree["fs"]["compress"]["default_algo"] == "snappy"

    listed = runner.invoke(cli.cli, ["--config", str(path), "set", "repo.remotes", "origin ;; backup"])
    assert listed.exit_code == 0
    assert read_file(path).decode()[1]["repo"]["remotes"] == ["origin", "backup"]


def test_cli_set_creates_template_children(tmp_path: Path) -> None:
    path = tmp_path / "config.yml"
    result = _runner().invoke(cli.cli, ["--config", str(path), "set", "mounts.music.path", "/srv/music"])
    assert result.exit_code == 0
    mounts = read_file(path).decode()[1]["mounts"]
    assert mounts["music"] == {"path": "/srv/music"}
    assert "default" in mounts


def test_cli_set_refuses_invalid_values(tmp_path: Path) -> None:
    path = tmp_path / "config.yml"
    runner = _runner()
    not_a_number = runner.invoke(cli.cli, ["--config", str(path), "set", "daemon.port", "many"])
    assert not_a_number.exit_code != 0
    out_of_range = runner.invoke(cli.cli, ["--config", str(path), "set", "daemon.port", "70000"])
    assert out_of_range.exit_code != 0
    assert not path.exists()


def test_cli_set_refuses_keys_with_empty_segments(tmp_path: Path) -> None:
    """A stray dot must never reach the file, or the file could not be loaded again."""

    path = tmp_path / "config.yml"
    runner = _runner()
    for key in ("mounts..path", ".daemon.port", "daemon.port."):
        result = runner.invoke(cli.cli, ["--config", str(path), "set", key, "x"])
        assert result.exit_code != 0
        assert "unknown key" in result.output
    assert not path.exists()


def test_cli_set_requires_a_config_path() -> None:
    result = _runner().invoke(cli.cli, ["set", "daemon.port", "7000"])
    assert result.exit_code != 0
    assert "--config" in result.output


def test_cli_reset_restores_defaults(tmp_path: Path) -> None:
    path = _config(tmp_path, "# version: 1\ndaemon:\n  port: 7000\nfs:\n  compress:\n    level: 0.9\n")
    runner = _runner()
    leaf = runner.invoke(cli.cli, ["--config", str(path), "reset", "daemon.port"])
    assert leaf.exit_code == 0
    version, tree = read_file(path).decode()
    assert version == 1
    assert tree["daemon"]["port"] == 6666
    assert tree["fs"]["compress"]["level"] == 0.9

    everything = runner.invoke(cli.cli, ["--config", str(path), "reset"])
    assert everything.exit_code == 0
    assert read_file(path).decode()[1]["fs"]["compress"]["level"] == 0.5


def test_cli_docs_text_marks_restart_keys() -> None:
    result = _runner().invoke(cli.cli, ["docs"])
    assert result.exit_code == 0
    assert "daemon.port (int) = '6666' [restart]" in result.output
    assert "Port of the daemon process" in result.output


def test_cli_docs_json_lists_every_entry() -> None:
    result = _runner().invoke(cli.cli, ["docs", "--format", "json"])
    assert result.exit_code == 0
    rows = {row["key"]: row for row in json.loads(result.output)}
    assert rows["daemon.port"]["needs_restart"] is True
    assert rows["data.ipfs.ports"]["default"] == "4001 ;; 5001"
    assert rows["fs.sync.ignore_removed"]["type"] == "bool"


def test_cli_validate_accepts_a_good_file(tmp_path: Path) -> None:
    path = _config(tmp_path, "# version: 3\ndaemon:\n  port: 80\n")
    result = _runner().invoke(cli.cli, ["--config", str(path), "validate"])
    assert result.exit_code == 0
    assert result.output.strip() == f"{path}: ok (version 3)"


@pytest.mark.parametrize(
    "body",
    [
        "daemon:\n  port: 0\n",
        "daemon:\n  port: eighty\n",
        "daemon: [1, 2\n",
    ],
)
def test_cli_validate_rejects_bad_files(tmp_path: Path, body: str) -> None:
    path = _config(tmp_path, body)
    result = _runner().invoke(cli.cli, ["--config", str(path), "validate"])
    assert result.exit_code != 0


def test_cli_validate_reports_missing_files(tmp_path: Path) -> None:
    result = _runner().invoke(cli.cli, ["--config", str(tmp_path / "missing.yml"), "validate"])
    assert result.exit_code != 0


def test_cli_dump_prints_every_value() -> None:
    result = _runner().invoke(cli.cli, ["dump"])
    assert result.exit_code == 0
    assert result.output.startswith("# version: 0\n")
    tree = yaml.safe_load(result.output)
    assert tree["daemon"]["ping_interval"] == "15s"
    assert tree["mounts"]["default"]["read_only"] is False


def test_cli_generate_respects_force(tmp_path: Path) -> None:
    """`cli generate` writes once, refuses to overwrite, then overwrites with --force."""

    destination = tmp_path / "generated.yml"
    runner = _runner()
    first = runner.invoke(cli.cli, ["generate", str(destination)])
    assert first.exit_code == 0
    assert destination.exists()
    assert "# daemon.port: Port of the daemon process (needs restart)" in destination.read_text(encoding="utf-8")

    second = runner.invoke(cli.cli, ["generate", str(destination)])
    assert second.exit_code != 0
    assert "--force" in second.output

    forced = runner.invoke(cli.cli, ["generate", str(destination), "--force"])
    assert forced.exit_code == 0

    validated = runner.invoke(cli.cli, ["--config", str(destination), "validate"])
    assert validated.exit_code == 0


@pytest.mark.parametrize(
    "schema_path",
    ["no_colon", "lib_schema_config.examples:MISSING", "lib_schema_config.examples:render_default_config"],
)
def test_cli_rejects_bad_schema_paths(schema_path: str) -> None:
    result = _runner().invoke(cli.cli, ["--schema", schema_path, "keys"])
    assert result.exit_code != 0
    assert "--schema" in result.output


def test_cli_accepts_other_schemas() -> None:
    result = _runner().invoke(cli.cli, ["--schema", "tests.support:SCHEMA", "get", "repo.names"])
    assert result.exit_code == 0
    assert result.output.strip() == "a ;; b"


def test_cli_info_handles_missing_metadata(monkeypatch) -> None:
    """`cli info` must degrade gracefully when package metadata is unavailable."""

    def _raise_pkg_not_found(*_args, **_kwargs):
        raise cli.metadata.PackageNotFoundError()

    monkeypatch.setattr(cli.metadata, "metadata", _raise_pkg_not_found)
    result = _runner().invoke(cli.cli, ["info"])
    assert result.exit_code == 0
    assert "metadata unavailable" in result.output


def test_cli_main_restores_traceback_flag() -> None:
    """`cli main` should restore lib_cli_exit_tools tracebacks after execution."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    exit_code = cli.main(["--traceback", "--trace-id", "abc", "get", "daemon.port"], restore_traceback=True)
    assert exit_code == 0
    assert getattr(lib_cli_exit_tools.config, "traceback", False) == previous_traceback


def test_cli_main_reports_failures_with_a_nonzero_code(tmp_path: Path) -> None:
    path = _config(tmp_path, "daemon:\n  port: 0\n")
    assert cli.main(["--config", str(path), "validate"]) != 0
