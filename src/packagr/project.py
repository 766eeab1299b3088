"""Read and validate the project files that drive a packaging run."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from packagr.classify import compiled_root_from_pattern
from packagr.config import AppSettings, PackagingConfig, format_validation_error
from packagr.errors import ConfigurationError

LOGGER = logging.getLogger(__name__)

_PATTERN_KEYS = ("compiledSourcesPattern", "compiledSources", "compiled_sources_pattern")


@dataclass(frozen=True, slots=True)
class ProjectContext:
    """Validated inputs for one packaging run."""

    root: Path
    service_name: str | None
    config: PackagingConfig


def _read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def _is_blank(value: Any) -> bool:
    return value is None or value == "" or value == {} or value == []


def read_service_name(manifest_path: Path) -> str | None:
    """Return the ``name`` field of a package manifest."""

    if not manifest_path.exists():
        raise ConfigurationError(f"Error: {manifest_path.name} not found")
    try:
        payload = _read_json(manifest_path)
    except (OSError, ValueError) as exc:
        raise ConfigurationError(f"Cannot read {manifest_path.name}: {exc}") from exc
    if not isinstance(payload, dict):
        return None
    name = payload.get("name")
    return str(name) if name is not None else None


def read_packaging_config(config_path: Path) -> PackagingConfig:
    """Load ``packagr.json`` and validate it into a :class:`PackagingConfig`."""

    try:
        payload = _read_json(config_path)
    except (OSError, ValueError) as exc:
        raise ConfigurationError(f"Cannot read packagr config file: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigurationError("Cannot read packagr config file: expected a JSON object")

    pattern = next(
        (payload[key] for key in _PATTERN_KEYS if key in payload),
        None,
    )
    if _is_blank(pattern):
        raise ConfigurationError("Please provide path to your compiled source code")
    if _is_blank(payload.get("microservices")):
        raise ConfigurationError("Please provide information on dependent services")

    try:
        return PackagingConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid packagr config: {format_validation_error(exc)}") from exc


def _overlaps(first: Path, second: Path) -> bool:
    return first == second or first in second.parents or second in first.parents


def validate_output_directory(config: PackagingConfig, root: Path, settings: AppSettings) -> Path:
    """Return the resolved package directory, refusing locations that reset would destroy.

    The package directory is removed at the start of every run, so it must not be
    the project root or one of its ancestors, nor overlap the compiled root or the
    dependency directory.
    """

    output_dir = config.output_directory(root)
    if output_dir == root or output_dir in root.parents:
        raise ConfigurationError(
            f"packageDirectory {config.package_directory!r} would remove the project directory {root}"
        )
    protected = [root / settings.dependency_dir]
    compiled_root = compiled_root_from_pattern(config.compiled_sources_pattern)
    if compiled_root is not None:
        protected.append((root / compiled_root).resolve())
    for directory in protected:
        if _overlaps(output_dir, directory):
            raise ConfigurationError(
                f"packageDirectory {config.package_directory!r} overlaps {directory}, which holds packaged files"
            )
    return output_dir


def load_project(
    project_root: Path,
    settings: AppSettings,
    logger: logging.Logger | None = None,
) -> ProjectContext:
    """Check the project marker files and load the packaging config.

    Checks run in a fixed order (descriptor, manifest, packagr config) and the
    first failure raises :class:`ConfigurationError`. Nothing is written.
    """

    effective_logger = logger or LOGGER
    root = project_root.resolve()

    if not (root / settings.descriptor_file).exists():
        raise ConfigurationError("You are not launching packagr in a serverless project")

    service_name = read_service_name(root / settings.manifest_file)
    effective_logger.info("project.loaded service=%s root=%s", service_name, root)

    config = read_packaging_config(root / settings.config_file)
    validate_output_directory(config, root, settings)
    effective_logger.info(
        "project.config compiled_sources=%s microservices=%s package_directory=%s",
        config.compiled_sources_pattern,
        len(config.microservices),
        config.package_directory,
    )
    return ProjectContext(root=root, service_name=service_name, config=config)
