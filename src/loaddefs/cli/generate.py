"""ldg generate command - write the manifests for source directories."""

import json
from contextlib import nullcontext
from pathlib import Path
from typing import Any

import click

from loaddefs.cli.utils import load_cli_config
from loaddefs.core.errors import LoaddefsError
from loaddefs.core.progress import pluralize, status, task
from loaddefs.generate import generate


@click.command()
@click.argument(
    "directories",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.option(
    "-o",
    "--output",
    "output_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Main manifest (default: loaddefs.el in the first directory)",
)
@click.option("--recursive", is_flag=True, help="Scan subdirectories too")
@click.option(
    "--version-only",
    "version_only",
    multiple=True,
    help="File scanned for its package version only (repeatable)",
)
@click.option("--no-prefixes", is_flag=True, help="Do not register definition prefixes")
@click.option(
    "--include-package-version/--no-package-version",
    default=None,
    help="Record ';; Version:' headers",
)
@click.option("--dry-run", is_flag=True, help="Render manifests without writing them")
@click.option("--keep-going", is_flag=True, help="Skip unreadable files instead of failing")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def generate_command(
    ctx: click.Context,
    directories: tuple[Path, ...],
    output_file: Path | None,
    recursive: bool,
    version_only: tuple[str, ...],
    no_prefixes: bool,
    include_package_version: bool | None,
    dry_run: bool,
    keep_going: bool,
    as_json: bool,
) -> None:
    """Generate autoload manifests.

    DIRECTORIES are scanned for source files; every file with autoload
    cookies gets a section in its destination manifest.
    """
    extract: dict[str, Any] = {}
    if version_only:
        extract["version_only_files"] = list(version_only)
    if no_prefixes:
        extract["compute_prefixes"] = False
    if include_package_version is not None:
        extract["include_package_version"] = include_package_version
    overrides = {"extract": extract} if extract else {}
    config = load_cli_config(ctx, directories[0], **overrides)

    progress_context = nullcontext() if as_json else task("Generating autoloads")
    try:
        with progress_context:
            result = generate(
                directories,
                output_file,
                config=config,
                recursive=recursive,
                dry_run=dry_run,
                keep_going=keep_going,
            )
    except LoaddefsError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    status(f"Scanned {pluralize(len(result.files), 'file')}")
    for path, error in result.failed.items():
        status(f"{path}: {error.message}", style="warning")
    for manifest in result.manifests:
        if dry_run:
            state = "would write"
        elif manifest.destination in result.written:
            state = "written"
        else:
            state = "unchanged"
        status(
            f"{manifest.destination} ({pluralize(manifest.record_count, 'record')}, {state})",
            style="success" if state == "written" else "info",
        )
