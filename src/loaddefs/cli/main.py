"""loaddefs CLI - ldg command."""

import click

from loaddefs.cli.extract import extract_command
from loaddefs.cli.generate import generate_command
from loaddefs.cli.prefixes import prefixes_command
from loaddefs.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="ldg")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """loaddefs - Generate autoload manifests for Emacs Lisp source trees."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "WARNING")


cli.add_command(generate_command, name="generate")
cli.add_command(extract_command, name="extract")
cli.add_command(prefixes_command, name="prefixes")


if __name__ == "__main__":
    cli()
