"""Write planned entries into the package zip archive."""

from __future__ import annotations

import logging
import os
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from packagr.classify import DEFAULT_DEPENDENCY_DIR
from packagr.errors import ArchiveError
from packagr.planner import ArchiveEntry
from packagr.utils.paths import atomic_temp_path, ensure_directories, reset_directory

LOGGER = logging.getLogger(__name__)

DEFAULT_ARCHIVE_NAME = "package.zip"


@dataclass(frozen=True, slots=True)
class ArchiveResult:
    """Outcome of one archive write."""

    archive_path: Path
    byte_count: int
    written: tuple[ArchiveEntry, ...]
    missing: tuple[ArchiveEntry, ...]


def prepare_output_directory(
    output_dir: Path,
    dependency_dir: str = DEFAULT_DEPENDENCY_DIR,
    logger: logging.Logger | None = None,
) -> Path:
    """Destroy any previous output directory and recreate it with its dependency subdirectory.

    Filesystem failures raise :class:`ArchiveError`.
    """

    effective_logger = logger or LOGGER
    existed = output_dir.exists()
    try:
        reset_directory(output_dir)
        ensure_directories([output_dir / dependency_dir])
    except OSError as exc:
        effective_logger.error("writer.output_dir_failed path=%s error=%s", output_dir, exc)
        raise ArchiveError(f"Cannot prepare output directory {output_dir}: {exc}") from exc
    effective_logger.info("writer.output_dir path=%s replaced=%s", output_dir, existed)
    return output_dir


def write_archive(
    entries: Iterable[ArchiveEntry],
    output_dir: Path,
    project_root: Path,
    *,
    archive_name: str = DEFAULT_ARCHIVE_NAME,
    logger: logging.Logger | None = None,
) -> ArchiveResult:
    """Stream every entry into a deflated zip at ``output_dir / archive_name``.

    Sources are read one at a time while the archive is written. A source that
    no longer exists is logged and skipped. Any other failure raises
    :class:`ArchiveError` and leaves no archive at the target path.
    """

    effective_logger = logger or LOGGER
    archive_path = output_dir / archive_name
    temp_path = atomic_temp_path(archive_path)
    written: list[ArchiveEntry] = []
    missing: list[ArchiveEntry] = []

    try:
        with zipfile.ZipFile(
            temp_path, mode="w", compression=zipfile.ZIP_DEFLATED, strict_timestamps=False
        ) as archive:
            for entry in entries:
                try:
                    archive.write(project_root / entry.source, arcname=entry.destination)
                except FileNotFoundError:
                    effective_logger.warning(
                        "writer.missing_source source=%s destination=%s",
                        entry.source,
                        entry.destination,
                    )
                    missing.append(entry)
                    continue
                written.append(entry)
        os.replace(temp_path, archive_path)
    except (OSError, ValueError, zipfile.LargeZipFile) as exc:
        effective_logger.error("writer.failed archive=%s error=%s", archive_path, exc)
        raise ArchiveError(f"Cannot write archive {archive_path}: {exc}") from exc
    finally:
        if temp_path.exists():
            temp_path.unlink()

    byte_count = archive_path.stat().st_size
    effective_logger.info(
        "writer.done archive=%s entries=%s missing=%s bytes=%s",
        archive_path,
        len(written),
        len(missing),
        byte_count,
    )
    return ArchiveResult(
        archive_path=archive_path,
        byte_count=byte_count,
        written=tuple(written),
        missing=tuple(missing),
    )
