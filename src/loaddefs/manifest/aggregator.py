"""Manifest aggregation: destination entries grouped per destination and source."""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from loaddefs.extract.records import DestinationEntry, RegistrationRecord


@dataclass(frozen=True, slots=True)
class Section:
    """The records one source file contributes to one manifest, in file order."""

    source: Path
    module: str
    records: tuple[RegistrationRecord, ...]


@dataclass(frozen=True, slots=True)
class Manifest:
    destination: Path
    sections: tuple[Section, ...]

    @property
    def record_count(self) -> int:
        return sum(len(section.records) for section in self.sections)


def relative_source(source: Path, destination: Path) -> str:
    """Path of ``source`` relative to the manifest's directory, '/'-separated."""
    try:
        relative = os.path.relpath(source, destination.parent)
    except ValueError:
        return source.as_posix()
    return Path(relative).as_posix()


def _section_key(section: Section, destination: Path) -> tuple[str, str]:
    return section.source.stem, relative_source(section.source, destination)


def aggregate(
    entries: Iterable[DestinationEntry],
    *,
    destinations: Iterable[Path] = (),
) -> list[Manifest]:
    """Group entries into manifests.

    Manifests are sorted by destination path, sections by source base name
    with the relative path as tie-breaker. Records keep the order in which
    they were extracted. ``destinations`` are always present in the result,
    even without entries.
    """
    grouped: dict[Path, dict[Path, list[DestinationEntry]]] = {
        Path(destination): {} for destination in destinations
    }
    for entry in entries:
        grouped.setdefault(entry.destination, {}).setdefault(entry.source, []).append(entry)

    manifests: list[Manifest] = []
    for destination in sorted(grouped, key=lambda path: path.as_posix()):
        sections = [
            Section(
                source=source,
                module=source_entries[0].module,
                records=tuple(entry.record for entry in source_entries),
            )
            for source, source_entries in grouped[destination].items()
        ]
        sections.sort(key=lambda section: _section_key(section, destination))
        manifests.append(Manifest(destination=destination, sections=tuple(sections)))
    return manifests
