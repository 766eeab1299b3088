"""Tests for packagr/npm.py."""

import json
import shutil
import subprocess
from pathlib import Path

import pytest

from packagr.npm import NPM_LS_ARGS, NpmPackageManager, parse_parseable_output


def _completed(returncode: int, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(args=["npm"], returncode=returncode, stdout=stdout, stderr=stderr)


class TestParseParseableOutput:
    def test_blank_lines_are_dropped(self) -> None:
        stdout = "/w/api\n/w/api/node_modules/uuid\n\n  \n/w/api/node_modules/@a/b\n"

        assert parse_parseable_output(stdout) == [
            Path("/w/api"),
            Path("/w/api/node_modules/uuid"),
            Path("/w/api/node_modules/@a/b"),
        ]

    def test_empty_output(self) -> None:
        assert parse_parseable_output("") == []


class TestNpmPackageManager:
    """Tests for NpmPackageManager fallback behavior."""

    def test_runs_npm_ls_in_project_dir(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        seen: dict[str, object] = {}

        def fake_run(command: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
            seen["command"] = command
            seen["cwd"] = kwargs["cwd"]
            return _completed(0, f"{tmp_path}\n{tmp_path}/node_modules/uuid\n")

        monkeypatch.setattr(subprocess, "run", fake_run)

        paths = NpmPackageManager().list_production_dependencies(tmp_path)

        assert seen["command"] == ["npm", *NPM_LS_ARGS]
        assert seen["cwd"] == tmp_path
        assert paths == [tmp_path, tmp_path / "node_modules" / "uuid"]

    def test_non_zero_exit_gives_empty_list(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(
            subprocess,
            "run",
            lambda *args, **kwargs: _completed(1, f"{tmp_path}/node_modules/uuid\n", "npm ERR! missing"),
        )

        assert NpmPackageManager().list_production_dependencies(tmp_path) == []

    def test_timeout_gives_empty_list(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        def fake_run(*args: object, **kwargs: object) -> subprocess.CompletedProcess[str]:
            raise subprocess.TimeoutExpired(cmd="npm", timeout=1.0)

        monkeypatch.setattr(subprocess, "run", fake_run)

        assert NpmPackageManager(timeout=1.0).list_production_dependencies(tmp_path) == []

    def test_missing_executable_gives_empty_list(self, tmp_path: Path) -> None:
        manager = NpmPackageManager(executable="packagr-test-missing-npm")

        assert manager.list_production_dependencies(tmp_path) == []

    def test_missing_directory_gives_empty_list(self, tmp_path: Path) -> None:
        manager = NpmPackageManager()

        assert manager.list_production_dependencies(tmp_path / "nope") == []

    def test_command_lists_the_whole_tree(self) -> None:
        command = NpmPackageManager(executable="npm").command()

        assert command[:2] == ["npm", "ls"]
        assert "--all" in command
        assert "--prod=true" in command
        assert "--parseable=true" in command


def _write_package(directory: Path, payload: dict[str, object]) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "package.json").write_text(json.dumps(payload), encoding="utf-8")


@pytest.mark.skipif(shutil.which("npm") is None, reason="npm is not installed")
class TestNpmListingWithRealNpm:
    """Runs the real npm against a hand-built, already installed tree."""

    def test_transitive_dependencies_are_listed(self, tmp_path: Path) -> None:
        _write_package(tmp_path, {"name": "p", "version": "1.0.0", "dependencies": {"axios": "1.0.0"}})
        _write_package(
            tmp_path / "node_modules" / "axios",
            {"name": "axios", "version": "1.0.0", "dependencies": {"follow-redirects": "1.0.0"}},
        )
        _write_package(tmp_path / "node_modules" / "follow-redirects", {"name": "follow-redirects", "version": "1.0.0"})

        paths = NpmPackageManager(timeout=120.0).list_production_dependencies(tmp_path)

        names = {path.name for path in paths}
        assert "axios" in names
        assert "follow-redirects" in names
