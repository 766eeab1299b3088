"""Typer CLI entrypoint for packagr."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
import yaml

from packagr.config import AppSettings, load_settings
from packagr.errors import ConfigurationError, PackagrError
from packagr.logging_utils import configure_logging
from packagr.pipeline import collect_project_dependencies, default_package_manager, run_packaging
from packagr.project import load_project

TAG = "[Packagr]"

app = typer.Typer(
    add_completion=False,
    help="Package a serverless project and its microservice dependencies into one zip.",
    no_args_is_help=True,
)

PROJECT_ROOT_OPTION = typer.Option(
    Path("."),
    "--project-root",
    help="Project directory containing serverless.yml, package.json and packagr.json.",
    file_okay=False,
    dir_okay=True,
)
SETTINGS_FILE_OPTION = typer.Option(
    None,
    "--settings-file",
    help="Optional packagr settings YAML path.",
    exists=False,
    file_okay=True,
    dir_okay=False,
    readable=True,
)


def _load_and_configure_logger(
    settings_file: Path | None,
    project_root: Path,
) -> tuple[AppSettings, logging.Logger]:
    settings = load_settings(settings_file=settings_file, project_root=project_root.resolve())
    try:
        logger = configure_logging(settings.log_file, level=settings.log_level)
    except OSError as exc:
        raise ConfigurationError(f"Cannot open log file {settings.log_file}: {exc}") from exc
    return settings, logger


def _fail(exc: PackagrError) -> typer.Exit:
    typer.echo(f"{TAG} {exc}", err=True)
    return typer.Exit(code=1)


@app.command("show-config")
def show_config(
    project_root: Path = PROJECT_ROOT_OPTION,
    settings_file: Path | None = SETTINGS_FILE_OPTION,
) -> None:
    """Print the effective packagr settings after env overrides."""

    try:
        settings = load_settings(settings_file=settings_file, project_root=project_root.resolve())
    except PackagrError as exc:
        raise _fail(exc) from exc
    typer.echo(yaml.safe_dump(settings.as_dict(), sort_keys=False))


@app.command("package")
def package(
    project_root: Path = PROJECT_ROOT_OPTION,
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Resolve and plan entries without touching the package directory.",
    ),
    settings_file: Path | None = SETTINGS_FILE_OPTION,
) -> None:
    """Build the package archive for the project."""

    try:
        settings, logger = _load_and_configure_logger(settings_file, project_root)
        result = run_packaging(project_root, settings=settings, dry_run=dry_run, logger=logger)
    except PackagrError as exc:
        raise _fail(exc) from exc

    if result.archive is None:
        typer.echo(f"{TAG} Dry run: {len(result.plan)} entries planned, nothing written")
        return

    if result.archive.missing:
        typer.echo(f"{TAG} {len(result.archive.missing)} planned files were missing and skipped", err=True)
    typer.echo(f"{TAG} Zip file successfully created")
    typer.echo(f"{TAG} {result.archive.byte_count} total bytes")


@app.command("plan")
def plan(
    project_root: Path = PROJECT_ROOT_OPTION,
    settings_file: Path | None = SETTINGS_FILE_OPTION,
) -> None:
    """Print every planned `source -> destination` archive entry."""

    try:
        settings, logger = _load_and_configure_logger(settings_file, project_root)
        result = run_packaging(project_root, settings=settings, dry_run=True, logger=logger)
    except PackagrError as exc:
        raise _fail(exc) from exc

    for entry in result.plan.entries():
        typer.echo(f"{entry.source} -> {entry.destination}")
    typer.echo(f"entries: {len(result.plan)}")
    typer.echo(f"replaced: {result.plan.replaced}")


@app.command("dependencies")
def dependencies(
    project_root: Path = PROJECT_ROOT_OPTION,
    settings_file: Path | None = SETTINGS_FILE_OPTION,
) -> None:
    """List collected dependency roots with their identity and owning scope."""

    try:
        settings, logger = _load_and_configure_logger(settings_file, project_root)
        project = load_project(project_root, settings, logger=logger)
    except PackagrError as exc:
        raise _fail(exc) from exc

    manager = default_package_manager(settings, logger=logger)
    collected = collect_project_dependencies(project, settings, manager, logger=logger)
    for dependency in collected:
        typer.echo(f"{dependency.scope}\t{dependency.identity}\t{dependency.path}")
    typer.echo(f"dependencies: {len(collected)}")


def main() -> None:
    """CLI script entrypoint."""

    app()
