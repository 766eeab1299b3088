"""Collect production dependencies of the project and its microservices."""

from __future__ import annotations

import glob
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Sequence

from packagr.classify import DEFAULT_DEPENDENCY_DIR, dependency_identity
from packagr.config import MicroserviceConfig
from packagr.npm import PackageManager

LOGGER = logging.getLogger(__name__)

CURRENT_PROJECT_SCOPE = "."


@dataclass(frozen=True, slots=True)
class DependencyPath:
    """Installed root directory of one production dependency."""

    path: Path
    identity: str
    scope: str


def _tag(paths: Sequence[Path], scope: str, dependency_dir: str) -> list[DependencyPath]:
    tagged: list[DependencyPath] = []
    for path in paths:
        identity = dependency_identity(path.as_posix(), dependency_dir)
        if identity is None:
            continue
        tagged.append(DependencyPath(path=path, identity=identity, scope=scope))
    return tagged


def collect_dependencies(
    project_root: Path,
    microservices: Mapping[str, MicroserviceConfig],
    package_manager: PackageManager,
    *,
    dependency_dir: str = DEFAULT_DEPENDENCY_DIR,
    logger: logging.Logger | None = None,
) -> list[DependencyPath]:
    """Return dependency roots with each package identity appearing once.

    The current project's dependencies are all kept. Microservices are queried
    one at a time in declaration order and only contribute identities not seen
    before, so a package shared by two services is attributed to the first one.
    """

    effective_logger = logger or LOGGER

    own = _tag(package_manager.list_production_dependencies(project_root), CURRENT_PROJECT_SCOPE, dependency_dir)
    seen: set[str] = {dependency.identity for dependency in own}
    effective_logger.info("collector.project dependencies=%s", len(own))

    collected = list(own)
    for name, service in microservices.items():
        service_dir = project_root / service.path
        reported = _tag(package_manager.list_production_dependencies(service_dir), name, dependency_dir)
        kept = 0
        for dependency in reported:
            if dependency.identity in seen:
                continue
            seen.add(dependency.identity)
            collected.append(dependency)
            kept += 1
        effective_logger.info(
            "collector.microservice service=%s kept=%s skipped=%s",
            name,
            kept,
            len(reported) - kept,
        )
    return collected


def dependency_root_patterns(dependencies: Sequence[DependencyPath], project_root: Path) -> list[str]:
    """Turn dependency roots into project-relative recursive glob patterns.

    The literal path is escaped so that directory names containing glob
    characters match only themselves.
    """

    patterns: list[str] = []
    for dependency in dependencies:
        relative = Path(os.path.relpath(dependency.path, project_root)).as_posix()
        patterns.append(f"{glob.escape(relative)}/**")
    return patterns
