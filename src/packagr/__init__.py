"""packagr: bundle a serverless project and its microservice dependencies into one zip."""

__version__ = "0.1.0"

from packagr.classify import ClassifiedPath, PathShape, classify_path, dependency_identity, destination_for
from packagr.collector import DependencyPath, collect_dependencies
from packagr.config import AppSettings, MicroserviceConfig, PackagingConfig, load_settings
from packagr.errors import ArchiveError, ConfigurationError, PackagrError
from packagr.globbing import build_include_patterns, resolve_patterns
from packagr.pipeline import PackagingResult, run_packaging
from packagr.planner import ArchiveEntry, ArchivePlan, plan_archive
from packagr.writer import ArchiveResult, prepare_output_directory, write_archive

__all__ = [
    "__version__",
    "AppSettings",
    "ArchiveEntry",
    "ArchiveError",
    "ArchivePlan",
    "ArchiveResult",
    "ClassifiedPath",
    "ConfigurationError",
    "DependencyPath",
    "MicroserviceConfig",
    "PackagingConfig",
    "PackagingResult",
    "PackagrError",
    "PathShape",
    "build_include_patterns",
    "classify_path",
    "collect_dependencies",
    "dependency_identity",
    "destination_for",
    "load_settings",
    "plan_archive",
    "prepare_output_directory",
    "resolve_patterns",
    "run_packaging",
    "write_archive",
]
