"""ldg extract command - show the records one source file produces."""

import json
from pathlib import Path

import click

from loaddefs.cli.utils import load_cli_config
from loaddefs.core.errors import LoaddefsError
from loaddefs.extract import FileExtractor, render_record


@click.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-o",
    "--output",
    "output_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Main manifest the file is resolved against (default: loaddefs.el beside it)",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def extract_command(
    ctx: click.Context, path: Path, output_file: Path | None, as_json: bool
) -> None:
    """Print the registration records of one source file.

    Records going to a manifest other than the main one are preceded by a
    comment naming it.
    """
    config = load_cli_config(ctx, path.parent)
    main_outfile = output_file or path.parent / config.output.main_file
    try:
        entries = FileExtractor(config.extract).parse_file(path, main_outfile)
    except LoaddefsError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        "destination": str(entry.destination),
                        "module": entry.module,
                        "record": entry.record.to_dict(),
                    }
                    for entry in entries
                ],
                indent=2,
            )
        )
        return

    destination = main_outfile
    for entry in entries:
        if entry.destination != destination:
            destination = entry.destination
            click.echo(f";; -> {destination}")
        click.echo(render_record(entry.record, escape_newlines=config.output.escape_newlines))
