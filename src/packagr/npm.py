"""Package-manager collaborator listing installed production dependencies."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Protocol

LOGGER = logging.getLogger(__name__)

NPM_LS_ARGS: tuple[str, ...] = ("ls", "--all", "--prod=true", "--parseable=true", "--long=false", "--silent")


class PackageManager(Protocol):
    """Anything able to list a project's installed production dependency paths."""

    def list_production_dependencies(self, project_dir: Path) -> list[Path]:
        """Return dependency paths for ``project_dir``; an empty list when the query fails."""
        ...


def parse_parseable_output(stdout: str) -> list[Path]:
    """Split ``npm ls --parseable`` output into paths, dropping blank lines."""

    return [Path(line.strip()) for line in stdout.splitlines() if line.strip()]


class NpmPackageManager:
    """Run ``npm ls`` in a project directory.

    Failures (non-zero exit, missing executable or directory, timeout) are never
    raised: the query falls back to an empty list so that one broken project does
    not abort the packaging run.
    """

    def __init__(
        self,
        executable: str = "npm",
        timeout: float | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.executable = executable
        self.timeout = timeout
        self._logger = logger or LOGGER

    def command(self) -> list[str]:
        return [self.executable, *NPM_LS_ARGS]

    def list_production_dependencies(self, project_dir: Path) -> list[Path]:
        try:
            completed = subprocess.run(
                self.command(),
                cwd=project_dir,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            self._logger.warning("npm.timeout project_dir=%s timeout=%s", project_dir, self.timeout)
            return []
        except OSError as exc:
            self._logger.warning("npm.unavailable project_dir=%s error=%s", project_dir, exc)
            return []

        if completed.returncode != 0:
            self._logger.warning(
                "npm.failed project_dir=%s returncode=%s stderr=%s",
                project_dir,
                completed.returncode,
                completed.stderr.strip()[:500],
            )
            return []

        paths = parse_parseable_output(completed.stdout)
        self._logger.debug("npm.listed project_dir=%s paths=%s", project_dir, len(paths))
        return paths
