"""ldg prefixes command - show the prefix set of one source file."""

from pathlib import Path

import click

from loaddefs.cli.utils import load_cli_config
from loaddefs.core.errors import LoaddefsError
from loaddefs.extract import SourceFile, collect_definition_names, make_prefixes


@click.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def prefixes_command(ctx: click.Context, path: Path) -> None:
    """Print the definition prefixes PATH registers, one per line."""
    config = load_cli_config(ctx, path.parent)
    try:
        source = SourceFile.read(path, path.parent / config.output.main_file)
    except LoaddefsError as e:
        raise click.ClickException(str(e)) from e

    names = collect_definition_names(source.text, config.extract.ignored_definitions)
    decl = make_prefixes(names, source.module)
    if decl is None:
        return
    for prefix in decl.prefixes:
        click.echo(prefix)
