"""File-level extraction: one source file in, destination entries out.

Per file:
1. Resolve the module (load) name.
2. Read the Local Variables block and, if asked for, the version header.
3. Scan for autoload cookies outside string literals and classify the
   datum that follows each one.
4. Compute the covering prefix set of the file's definitions.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

from loaddefs.config.constants import COOKIE_REGEXP
from loaddefs.config.models import ExtractConfig
from loaddefs.core.errors import ExtractError, ReadError
from loaddefs.core.logging import get_logger
from loaddefs.extract.classifier import FormClassifier
from loaddefs.extract.expander import builtin_expander
from loaddefs.extract.headers import (
    is_true,
    read_header,
    read_local_variables,
    version_to_list,
)
from loaddefs.extract.names import file_load_name
from loaddefs.extract.prefixes import collect_definition_names, make_prefixes
from loaddefs.extract.records import (
    DestinationEntry,
    PackageVersion,
    RegistrationRecord,
    Verbatim,
)
from loaddefs.lisp import Reader, in_spans, string_spans

PackageData = Literal["none", "include", "only"]

_COOKIE_RE = re.compile(COOKIE_REGEXP, re.MULTILINE)


@dataclass(frozen=True, slots=True)
class SourceFile:
    """A source file with the settings it carries in its own text."""

    path: Path
    module: str
    text: str = field(repr=False)
    local_outfile: Path | None = None
    inhibit: bool = False
    compute_prefixes: bool = True
    package: str | None = None
    version: str | None = None

    @classmethod
    def read(cls, path: str | Path, main_outfile: str | Path) -> SourceFile:
        """Read ``path`` and its file-local settings.

        Raises:
            ExtractError: The file cannot be read or decoded.
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ExtractError.unreadable(str(path), str(e)) from e

        variables = read_local_variables(text)
        local_outfile = None
        outfile_value = variables.get("generated-autoload-file")
        if isinstance(outfile_value, str):
            local_outfile = Path(os.path.normpath(path.parent / outfile_value))

        module = file_load_name(path, local_outfile or main_outfile)
        load_name = variables.get("generated-autoload-load-name")
        if isinstance(load_name, str):
            module = load_name

        return cls(
            path=path,
            module=module,
            text=text,
            local_outfile=local_outfile,
            inhibit=is_true(variables.get("no-update-autoloads")),
            compute_prefixes=is_true(variables.get("autoload-compute-prefixes", True)),
            package=read_header(text, "Package"),
            version=read_header(text, "Version"),
        )

    def outfile(self, main_outfile: Path) -> Path:
        return self.local_outfile or main_outfile


class FileExtractor:
    """Extracts the registration records of single source files.

    Args:
        config: Extraction settings.
        classifier: Form classifier; defaults to one with the built-in
            macro expander.
    """

    def __init__(
        self,
        config: ExtractConfig | None = None,
        classifier: FormClassifier | None = None,
    ) -> None:
        self.config = config or ExtractConfig()
        self.classifier = classifier or FormClassifier(builtin_expander())

    def parse_file(
        self,
        path: str | Path,
        main_outfile: str | Path,
        *,
        package_data: PackageData | None = None,
    ) -> list[DestinationEntry]:
        """Destination entries for every record ``path`` contributes.

        Args:
            path: Source file.
            main_outfile: Default destination manifest.
            package_data: ``"include"`` adds a package version record when the
                file has a version header, ``"only"`` produces nothing else,
                ``"none"`` skips it. Defaults to the configured behavior.

        Raises:
            ExtractError: The file cannot be read.
            ReadError: The datum after a cookie is malformed.
        """
        if package_data is None:
            package_data = "include" if self.config.include_package_version else "none"
        main_outfile = Path(main_outfile)
        source = SourceFile.read(path, main_outfile)
        entries: list[DestinationEntry] = []

        def emit(destination: Path, record: RegistrationRecord) -> None:
            entries.append(DestinationEntry(destination, source.path, source.module, record))

        if package_data != "none":
            version = self.package_version(source)
            if version is not None:
                emit(source.outfile(main_outfile), version)

        if source.inhibit or package_data == "only":
            return entries

        for destination, record in self.scan_cookies(source, main_outfile):
            emit(destination, record)

        if self.config.compute_prefixes and source.compute_prefixes:
            names = collect_definition_names(source.text, self.config.ignored_definitions)
            prefixes = make_prefixes(names, source.module)
            if prefixes is not None:
                emit(self.prefix_destination(source, main_outfile), prefixes)

        get_logger("extractor").debug(
            "file_parsed", file=str(source.path), module=source.module, records=len(entries)
        )
        return entries

    def package_version(self, source: SourceFile) -> PackageVersion | None:
        """Version record for the file's ``;; Version:`` header, if parsable."""
        if source.version is None:
            return None
        try:
            version = version_to_list(source.version)
        except ValueError:
            return None
        return PackageVersion(package=source.package or source.path.stem, version=version)

    def scan_cookies(
        self, source: SourceFile, main_outfile: Path
    ) -> list[tuple[Path, RegistrationRecord]]:
        """Records for every autoload cookie of ``source``, in file order."""
        text = source.text
        spans = string_spans(text)
        reader = Reader(text)
        found: list[tuple[Path, RegistrationRecord]] = []

        pos = 0
        while m := _COOKIE_RE.search(text, pos):
            pos = m.end()
            if in_spans(spans, m.start()):
                continue
            if m.group(1):
                destination = source.path.parent / f"{m.group(1)}-loaddefs.el"
            else:
                destination = source.outfile(main_outfile)

            line_end = text.find("\n", pos)
            if line_end < 0:
                line_end = len(text)
            rest = text[pos:line_end].lstrip(" \t")
            if rest.strip():
                found.append((destination, Verbatim(rest)))
                pos = line_end
                continue

            try:
                datum, pos = reader.read_at(pos)
            except ReadError as e:
                raise e.with_source(str(source.path)) from e
            for record in self.records_for(datum, source.module):
                found.append((destination, record))
        return found

    def records_for(self, datum: Any, module: str) -> list[RegistrationRecord]:
        """Classified records of a cookie's datum, or the datum itself."""
        records = self.classifier.classify(datum, module)
        if records is None:
            return [Verbatim(datum)]
        return records

    def prefix_destination(self, source: SourceFile, main_outfile: Path) -> Path:
        posix = source.path.as_posix()
        for fragment, destination in self.config.prefix_destination_overrides.items():
            if fragment in posix:
                return main_outfile.parent / destination
        return source.outfile(main_outfile)


__all__ = [
    "FileExtractor",
    "PackageData",
    "SourceFile",
]
