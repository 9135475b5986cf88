from __future__ import annotations

"""CLI tests for the serve bootstrap and offline build command."""

import io
import json
import zipfile
from pathlib import Path

import pytest
from typer.testing import CliRunner

from file_zip_service import cli
from file_zip_service.config import ServerConfig

runner = CliRunner()


def _manifest(path: Path, items: list[dict[str, str]]) -> Path:
    path.write_text(json.dumps(items), encoding="utf-8")
    return path


@pytest.fixture
def captured_config(monkeypatch: pytest.MonkeyPatch) -> list[ServerConfig]:
    """Replace the server runner and logging setup so `serve` returns immediately."""

    seen: list[ServerConfig] = []
    monkeypatch.setattr(cli, "run", seen.append)
    monkeypatch.setattr(cli, "configure_logging", lambda level: None)
    return seen


def test_serve_defaults(captured_config: list[ServerConfig]) -> None:
    """Without flags the server binds 0.0.0.0:8080 with four workers."""

    result = runner.invoke(cli.app, ["serve"], env={})

    assert result.exit_code == 0, result.output
    assert len(captured_config) == 1
    config = captured_config[0]
    assert (config.host, config.port, config.workers) == ("0.0.0.0", 8080, 4)
    assert config.allowed_root is None
    assert config.strict_names is False


def test_serve_short_flags(captured_config: list[ServerConfig]) -> None:
    """Short flags -h/-p/-w map onto the configuration."""

    result = runner.invoke(cli.app, ["serve", "-h", "127.0.0.1", "-p", "9000", "-w", "2"])

    assert result.exit_code == 0, result.output
    config = captured_config[0]
    assert (config.host, config.port, config.workers) == ("127.0.0.1", 9000, 2)


def test_serve_long_flags_and_env(captured_config: list[ServerConfig], tmp_path: Path) -> None:
    """Long flags and ZIP_SERVICE_* variables both reach the configuration."""

    result = runner.invoke(
        cli.app,
        ["serve", "--host", "localhost", "--workers", "8", "--allowed-root", str(tmp_path), "--strict-names"],
        env={"ZIP_SERVICE_PORT": "9100", "ZIP_SERVICE_LOG_LEVEL": "debug"},
    )

    assert result.exit_code == 0, result.output
    config = captured_config[0]
    assert config.host == "localhost"
    assert config.port == 9100
    assert config.workers == 8
    assert config.allowed_root == tmp_path
    assert config.strict_names is True
    assert config.log_level == "DEBUG"


@pytest.mark.parametrize(
    "args", [["-p", "0"], ["-w", "0"], ["--chunk-size", "0"], ["--log-level", "warn"]]
)
def test_serve_rejects_invalid_values(captured_config: list[ServerConfig], args: list[str]) -> None:
    """Out-of-range settings stop the bootstrap before the server starts."""

    result = runner.invoke(cli.app, ["serve", *args])

    assert result.exit_code == 2
    assert captured_config == []


def test_build_writes_archive(tmp_path: Path) -> None:
    """The build command writes the same archive the endpoint would return."""

    src = tmp_path / "a.txt"
    src.write_bytes(b"hello")
    manifest = _manifest(tmp_path / "manifest.json", [{"path": str(src), "arcname": "dir/a.txt"}])
    out = tmp_path / "out" / "bundle.zip"

    result = runner.invoke(cli.app, ["build", str(manifest), "--out", str(out)])

    assert result.exit_code == 0, result.output
    with zipfile.ZipFile(io.BytesIO(out.read_bytes())) as archive:
        assert archive.namelist() == ["dir/a.txt"]
        assert archive.read("dir/a.txt") == b"hello"


def test_build_missing_source_writes_nothing(tmp_path: Path) -> None:
    """An unreadable source fails the command and leaves no output file."""

    manifest = _manifest(tmp_path / "manifest.json", [{"path": str(tmp_path / "missing"), "arcname": "x.txt"}])
    out = tmp_path / "bundle.zip"

    result = runner.invoke(cli.app, ["build", str(manifest), "-o", str(out)])

    assert result.exit_code == 1
    assert "SOURCE_UNREADABLE" in result.output
    assert not out.exists()


def test_build_malformed_manifest(tmp_path: Path) -> None:
    """A manifest that is not a JSON array fails with a clear code."""

    manifest = tmp_path / "manifest.json"
    manifest.write_text('{"not": "an array"}', encoding="utf-8")
    out = tmp_path / "bundle.zip"

    result = runner.invoke(cli.app, ["build", str(manifest), "-o", str(out)])

    assert result.exit_code == 1
    assert "MALFORMED_REQUEST" in result.output
    assert not out.exists()


def test_build_unreadable_manifest(tmp_path: Path) -> None:
    """A missing manifest file is reported without a traceback."""

    result = runner.invoke(cli.app, ["build", str(tmp_path / "nope.json")])

    assert result.exit_code == 1
    assert "Cannot read manifest" in result.output
