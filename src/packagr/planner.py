"""Plan archive entries keyed by destination path."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, NamedTuple

from packagr.classify import DEFAULT_DEPENDENCY_DIR, destination_for


class ArchiveEntry(NamedTuple):
    """Source file and the name it is stored under in the archive."""

    source: str
    destination: str


@dataclass(slots=True)
class ArchivePlan:
    """Ordered destination -> source mapping with last-write-wins upserts.

    Destinations keep the position where they were first added; adding a second
    source for an existing destination replaces the source in place.
    """

    compiled_root: str | None
    dependency_dir: str = DEFAULT_DEPENDENCY_DIR
    replaced: int = 0
    _sources: dict[str, str] = field(default_factory=dict, init=False, repr=False)

    def add(self, source: str) -> str:
        """Classify ``source`` and record it, returning its destination."""

        destination = destination_for(source, self.compiled_root, self.dependency_dir)
        if destination in self._sources and self._sources[destination] != source:
            self.replaced += 1
        self._sources[destination] = source
        return destination

    def entries(self) -> list[ArchiveEntry]:
        return [ArchiveEntry(source, destination) for destination, source in self._sources.items()]

    def __iter__(self) -> Iterator[ArchiveEntry]:
        return iter(self.entries())

    def __len__(self) -> int:
        return len(self._sources)


def plan_archive(
    files: Iterable[str],
    compiled_root: str | None,
    dependency_dir: str = DEFAULT_DEPENDENCY_DIR,
) -> ArchivePlan:
    """Build the archive plan for resolved files, in order."""

    plan = ArchivePlan(compiled_root=compiled_root, dependency_dir=dependency_dir)
    for source in files:
        plan.add(source)
    return plan
