"""Map resolved file paths to their destination inside the package archive."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath

DEFAULT_DEPENDENCY_DIR = "node_modules"
_GLOB_MAGIC = frozenset("*?[")


class PathShape(str, Enum):
    """Closed set of path shapes recognized by the classifier."""

    OUTSIDE_PROJECT_VIA_DEPENDENCY_DIR = "outside_project_via_dependency_dir"
    UNDER_COMPILED_ROOT = "under_compiled_root"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class ClassifiedPath:
    """Classification outcome for one resolved file path."""

    source: str
    shape: PathShape
    destination: str


def _parts(path: str) -> tuple[str, ...]:
    return PurePosixPath(path.replace("\\", "/")).parts


def _has_glob_magic(segment: str) -> bool:
    return any(char in _GLOB_MAGIC for char in segment)


def compiled_root_from_pattern(pattern: str) -> str | None:
    """Return the static directory prefix of a compiled-sources glob pattern.

    ``lib/**/*`` gives ``lib`` and ``dist/src/*.js`` gives ``dist/src``. A pattern
    that starts with a glob segment has no compiled root and ``None`` is returned.
    """

    static: list[str] = []
    parts = _parts(pattern)
    for segment in parts[:-1]:
        if _has_glob_magic(segment):
            break
        static.append(segment)
    if not static:
        return None
    return "/".join(static)


def dependency_identity(path: str, dependency_dir: str = DEFAULT_DEPENDENCY_DIR) -> str | None:
    """Return the package identity of an installed dependency root path.

    The identity is the install chain following the first dependency-directory
    segment: ``lodash``, ``@aws-sdk/client-s3`` or, for a copy nested under
    another package, ``a/node_modules/debug``. It names the installed package
    independently of which project directory it was found in. Paths with no
    package name after a dependency directory have no identity.
    """

    parts = _parts(path)
    try:
        index = parts.index(dependency_dir)
    except ValueError:
        return None
    chain = parts[index + 1 :]
    if not chain or chain[-1] == dependency_dir or chain[-1].startswith("@"):
        return None
    return "/".join(chain)


def _external_dependency_start(parts: tuple[str, ...], dependency_dir: str) -> int | None:
    leading = 0
    while leading < len(parts) and parts[leading] == "..":
        leading += 1
    if leading == 0:
        return None
    for index in range(leading, len(parts) - 1):
        if parts[index] == dependency_dir:
            return index
    return None


def classify_path(
    path: str,
    compiled_root: str | None,
    dependency_dir: str = DEFAULT_DEPENDENCY_DIR,
) -> ClassifiedPath:
    """Classify a project-relative path and compute its archive destination."""

    parts = _parts(path)
    normalized = "/".join(parts)

    start = _external_dependency_start(parts, dependency_dir)
    if start is not None:
        return ClassifiedPath(
            source=path,
            shape=PathShape.OUTSIDE_PROJECT_VIA_DEPENDENCY_DIR,
            destination="/".join(parts[start:]),
        )

    if compiled_root:
        root_parts = _parts(compiled_root)
        if len(parts) > len(root_parts) and parts[: len(root_parts)] == root_parts:
            return ClassifiedPath(
                source=path,
                shape=PathShape.UNDER_COMPILED_ROOT,
                destination="/".join(parts[len(root_parts) :]),
            )

    return ClassifiedPath(source=path, shape=PathShape.OTHER, destination=normalized)


def destination_for(
    path: str,
    compiled_root: str | None,
    dependency_dir: str = DEFAULT_DEPENDENCY_DIR,
) -> str:
    """Return only the archive destination for ``path``."""

    return classify_path(path, compiled_root, dependency_dir).destination
