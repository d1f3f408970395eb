"""Manifest text: rubric, one section per source file, trailer."""

from __future__ import annotations

from pathlib import Path

from loaddefs.config.constants import (
    END_OF_SCRAPED_DATA,
    PLACEHOLDER_TIMESTAMP,
    SECTION_TRAILER,
)
from loaddefs.extract.records import render_record
from loaddefs.lisp import print_string
from loaddefs.manifest.aggregator import Manifest, Section, relative_source

_TRAILER_VARIABLES = (
    "version-control: never",
    "no-byte-compile: t",
    "no-update-autoloads: t",
    "no-native-compile: t",
    "coding: utf-8-emacs-unix",
)


def heading(name: str) -> str:
    return (
        f";;; {name} --- automatically extracted autoloads  -*- lexical-binding: t -*-\n"
        ";; Generated by the `ldg generate' command.\n"
        "\n"
        ";;; Code:\n"
        "\n"
    )


def trailer(name: str) -> str:
    variables = "".join(f";; {variable}\n" for variable in _TRAILER_VARIABLES)
    return (
        f"\f\n{END_OF_SCRAPED_DATA}\n"
        "\n"
        ";; Local Variables:\n"
        f"{variables}"
        ";; End:\n"
        "\n"
        f";;; {name} ends here\n"
    )


def section_timestamp(source: Path, *, timestamps: bool) -> str:
    """Source modification time as an Emacs ``(HIGH LOW)`` time list."""
    if not timestamps:
        return PLACEHOLDER_TIMESTAMP
    seconds = int(source.stat().st_mtime)
    return f"({seconds >> 16} {seconds & 0xFFFF})"


def render_section(
    section: Section,
    destination: Path,
    *,
    timestamps: bool = False,
    escape_newlines: bool = True,
) -> str:
    relfile = relative_source(section.source, destination)
    timestamp = section_timestamp(section.source, timestamps=timestamps)
    generated = f";;; Generated autoloads from {relfile}\n"
    parts = [
        "\f\n",
        f";;;### (autoloads nil {print_string(section.module)} "
        f"{print_string(relfile)} {timestamp})\n",
        generated,
        "\n",
    ]
    for record in section.records:
        parts.append(render_record(record, escape_newlines=escape_newlines))
        parts.append("\n\n")
    parts.append(f"{SECTION_TRAILER}\n\n")
    text = "".join(parts)
    # Package version pushes sit right under the heading.
    return text.replace(f"{generated}\n(push ", f"{generated}(push ", 1)


def render_manifest(
    manifest: Manifest,
    *,
    timestamps: bool = False,
    escape_newlines: bool = True,
) -> str:
    """Full text of ``manifest``.

    With timestamps disabled the output only depends on the records, so
    rendering unchanged input twice gives identical bytes.
    """
    name = manifest.destination.name
    body = "".join(
        render_section(
            section,
            manifest.destination,
            timestamps=timestamps,
            escape_newlines=escape_newlines,
        )
        for section in manifest.sections
    )
    return heading(name) + body + trailer(name)
