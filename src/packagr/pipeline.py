"""Packaging run orchestration."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from uuid import uuid4

from packagr.classify import compiled_root_from_pattern
from packagr.collector import DependencyPath, collect_dependencies
from packagr.config import AppSettings
from packagr.globbing import build_include_patterns, resolve_patterns
from packagr.npm import NpmPackageManager, PackageManager
from packagr.planner import ArchivePlan, plan_archive
from packagr.project import ProjectContext, load_project
from packagr.utils.time_utils import now_utc
from packagr.writer import ArchiveResult, prepare_output_directory, write_archive

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PackagingResult:
    """Return object for packaging run outcomes."""

    run_id: str
    started_ts: datetime
    elapsed_seconds: float
    project: ProjectContext
    dependencies: list[DependencyPath]
    patterns: list[str]
    files: list[str]
    plan: ArchivePlan
    archive: ArchiveResult | None


def default_package_manager(settings: AppSettings, logger: logging.Logger | None = None) -> NpmPackageManager:
    """Build the npm collaborator described by the settings."""

    return NpmPackageManager(
        executable=settings.npm_executable,
        timeout=settings.npm_timeout_seconds,
        logger=logger,
    )


def collect_project_dependencies(
    project: ProjectContext,
    settings: AppSettings,
    package_manager: PackageManager,
    logger: logging.Logger | None = None,
) -> list[DependencyPath]:
    """Collect deduplicated dependency roots for a loaded project."""

    return collect_dependencies(
        project.root,
        project.config.microservices,
        package_manager,
        dependency_dir=settings.dependency_dir,
        logger=logger,
    )


def run_packaging(
    project_root: Path,
    *,
    settings: AppSettings,
    package_manager: PackageManager | None = None,
    dry_run: bool = False,
    logger: logging.Logger | None = None,
) -> PackagingResult:
    """Load the project, plan the archive and, unless ``dry_run``, write it.

    Configuration errors are raised before the output directory is touched.
    """

    effective_logger = logger or LOGGER
    run_id = f"package-run-{uuid4().hex[:12]}"
    started_ts = now_utc()
    started_mono = time.monotonic()

    project = load_project(project_root, settings, logger=effective_logger)
    manager = package_manager or default_package_manager(settings, logger=effective_logger)

    dependencies = collect_project_dependencies(project, settings, manager, logger=effective_logger)
    patterns = build_include_patterns(project.config, dependencies, project.root, settings)
    files = resolve_patterns(patterns, project.root, logger=effective_logger)

    compiled_root = compiled_root_from_pattern(project.config.compiled_sources_pattern)
    plan = plan_archive(files, compiled_root, settings.dependency_dir)
    effective_logger.info(
        "pipeline.planned run_id=%s compiled_root=%s entries=%s replaced=%s",
        run_id,
        compiled_root,
        len(plan),
        plan.replaced,
    )

    archive: ArchiveResult | None = None
    if not dry_run:
        output_dir = project.config.output_directory(project.root)
        prepare_output_directory(output_dir, settings.dependency_dir, logger=effective_logger)
        archive = write_archive(
            plan.entries(),
            output_dir,
            project.root,
            archive_name=settings.archive_name,
            logger=effective_logger,
        )

    elapsed = time.monotonic() - started_mono
    effective_logger.info("pipeline.done run_id=%s dry_run=%s elapsed_s=%.3f", run_id, dry_run, elapsed)
    return PackagingResult(
        run_id=run_id,
        started_ts=started_ts,
        elapsed_seconds=elapsed,
        project=project,
        dependencies=dependencies,
        patterns=patterns,
        files=files,
        plan=plan,
        archive=archive,
    )
