"""Generation runs: discover source files, extract, aggregate, write.

The orchestrator owns the policy decisions the extraction modules leave
open: which files are scanned, where the main manifest lives, and what
happens when one file fails (the whole run aborts unless ``keep_going``).
"""

from __future__ import annotations

import fnmatch
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from loaddefs.config.models import LoaddefsConfig
from loaddefs.core.errors import LoaddefsError
from loaddefs.core.logging import clear_run_id, get_logger, set_run_id
from loaddefs.core.progress import progress
from loaddefs.extract.extractor import FileExtractor
from loaddefs.extract.records import DestinationEntry
from loaddefs.manifest.aggregator import Manifest, aggregate
from loaddefs.manifest.render import render_manifest
from loaddefs.manifest.writer import write_if_changed

GENERATED_PATTERNS = ("*loaddefs.el", "*-autoloads.el")
"""Generated manifests are never scanned themselves."""


@dataclass
class GenerateResult:
    """Outcome of one generation run."""

    run_id: str
    main_outfile: Path
    files: list[Path] = field(default_factory=list)
    manifests: list[Manifest] = field(default_factory=list)
    written: list[Path] = field(default_factory=list)
    unchanged: list[Path] = field(default_factory=list)
    failed: dict[Path, LoaddefsError] = field(default_factory=dict)

    def to_dict(self) -> dict[str, object]:
        return {
            "run_id": self.run_id,
            "main_outfile": str(self.main_outfile),
            "files": len(self.files),
            "manifests": [
                {
                    "destination": str(manifest.destination),
                    "sections": len(manifest.sections),
                    "records": manifest.record_count,
                }
                for manifest in self.manifests
            ],
            "written": [str(path) for path in self.written],
            "unchanged": [str(path) for path in self.unchanged],
            "failed": {str(path): error.to_dict() for path, error in self.failed.items()},
        }


def _is_candidate(path: Path, suffixes: Sequence[str], excluded: Iterable[str]) -> bool:
    name = path.name
    if name.startswith((".", "=")) or path.suffix not in suffixes:
        return False
    if any(fnmatch.fnmatchcase(name, pattern) for pattern in GENERATED_PATTERNS):
        return False
    return name not in excluded


def discover_files(
    directories: Iterable[str | Path],
    *,
    config: LoaddefsConfig | None = None,
    recursive: bool = False,
    exclude: Iterable[Path] = (),
) -> list[Path]:
    """Source files in ``directories``, sorted.

    Args:
        directories: Directories to scan.
        config: Supplies the source suffixes and excluded file names.
        recursive: Descend into subdirectories.
        exclude: Files never returned, typically the destinations.
    """
    config = config or LoaddefsConfig()
    suffixes = config.extract.source_suffixes
    excluded_names = set(config.extract.excluded_files)
    excluded_paths = {Path(path).resolve() for path in exclude}

    found: set[Path] = set()
    for directory in directories:
        directory = Path(directory)
        candidates = directory.rglob("*") if recursive else directory.iterdir()
        for path in candidates:
            if not path.is_file() or not _is_candidate(path, suffixes, excluded_names):
                continue
            if path.resolve() in excluded_paths:
                continue
            found.add(path)
    return sorted(found, key=lambda path: path.as_posix())


def _is_version_only(path: Path, patterns: Sequence[str], directories: Sequence[Path]) -> bool:
    if not patterns:
        return False
    names = {path.name}
    for directory in directories:
        if path.is_relative_to(directory):
            names.add(path.relative_to(directory).as_posix())
    return any(name in patterns for name in names)


def generate(
    directories: Sequence[str | Path],
    output_file: str | Path | None = None,
    *,
    config: LoaddefsConfig | None = None,
    recursive: bool = False,
    dry_run: bool = False,
    keep_going: bool = False,
    extractor: FileExtractor | None = None,
) -> GenerateResult:
    """Generate the manifests for every source file in ``directories``.

    Args:
        directories: Directories to scan. The main manifest defaults to
            ``output.main_file`` in the first one.
        output_file: Main manifest path.
        config: Configuration; defaults to built-in defaults.
        recursive: Scan subdirectories too.
        dry_run: Render but do not write.
        keep_going: Skip files that fail to read instead of aborting.
        extractor: File extractor; defaults to one built from ``config``.

    Raises:
        LoaddefsError: A source file failed and ``keep_going`` is False.
    """
    if not directories:
        raise ValueError("at least one directory is required")
    config = config or LoaddefsConfig()
    extractor = extractor or FileExtractor(config.extract)
    dirs = [Path(directory) for directory in directories]
    main_outfile = Path(output_file) if output_file else dirs[0] / config.output.main_file

    log = get_logger("generate")
    result = GenerateResult(run_id=set_run_id(), main_outfile=main_outfile)
    try:
        result.files = discover_files(
            dirs, config=config, recursive=recursive, exclude=[main_outfile]
        )

        entries: list[DestinationEntry] = []
        version_only = config.extract.version_only_files
        for path in progress(result.files, desc="Extracting"):
            package_data = "only" if _is_version_only(path, version_only, dirs) else None
            try:
                entries.extend(extractor.parse_file(path, main_outfile, package_data=package_data))
            except LoaddefsError as e:
                if not keep_going:
                    raise
                log.error("file_failed", file=str(path), error=str(e))
                result.failed[path] = e

        result.manifests = aggregate(entries, destinations=[main_outfile])
        for manifest in result.manifests:
            text = render_manifest(
                manifest,
                timestamps=config.output.timestamps,
                escape_newlines=config.output.escape_newlines,
            )
            if dry_run:
                continue
            if write_if_changed(manifest.destination, text):
                result.written.append(manifest.destination)
                log.info(
                    "manifest_written",
                    destination=str(manifest.destination),
                    sections=len(manifest.sections),
                    records=manifest.record_count,
                )
            else:
                result.unchanged.append(manifest.destination)
                log.debug("manifest_unchanged", destination=str(manifest.destination))
    finally:
        clear_run_id()
    return result
