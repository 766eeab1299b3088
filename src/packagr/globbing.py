"""Expand include patterns into concrete files under the project root."""

from __future__ import annotations

import glob
import logging
from pathlib import Path, PurePosixPath
from typing import Sequence

from packagr.collector import DependencyPath, dependency_root_patterns
from packagr.config import AppSettings, PackagingConfig

LOGGER = logging.getLogger(__name__)


def internal_library_pattern(package_name: str, dependency_dir: str, library_subpath: str) -> str:
    """Pattern matching a microservice's published library inside the dependency area."""

    subpath = PurePosixPath(library_subpath).as_posix().strip("/")
    prefix = glob.escape(f"{dependency_dir}/{package_name}/{subpath}")
    return f"{prefix}/**/*"


def build_include_patterns(
    config: PackagingConfig,
    dependencies: Sequence[DependencyPath],
    project_root: Path,
    settings: AppSettings,
) -> list[str]:
    """Return include patterns in their fixed order.

    Compiled sources first, then one root glob per collected dependency, then
    one internal-library pattern per declared microservice.
    """

    patterns = [config.compiled_sources_pattern]
    patterns.extend(dependency_root_patterns(dependencies, project_root))
    patterns.extend(
        internal_library_pattern(service.package_name, settings.dependency_dir, settings.internal_library_subpath)
        for service in config.microservices.values()
    )
    return patterns


def expand_pattern(pattern: str, project_root: Path) -> list[str]:
    """Return sorted project-relative POSIX paths of regular files matching ``pattern``."""

    matches = glob.glob(pattern, root_dir=project_root, recursive=True)
    files = [match for match in matches if (project_root / match).is_file()]
    return sorted(Path(match).as_posix() for match in files)


def resolve_patterns(
    patterns: Sequence[str],
    project_root: Path,
    logger: logging.Logger | None = None,
) -> list[str]:
    """Expand every pattern and concatenate matches in pattern order.

    Duplicates across patterns are kept; a pattern with no match adds nothing.
    """

    effective_logger = logger or LOGGER
    resolved: list[str] = []
    for pattern in patterns:
        matches = expand_pattern(pattern, project_root)
        effective_logger.debug("globbing.pattern pattern=%s matches=%s", pattern, len(matches))
        resolved.extend(matches)
    effective_logger.info("globbing.resolved patterns=%s files=%s", len(patterns), len(resolved))
    return resolved
