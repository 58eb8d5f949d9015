"""Main CLI entry point for the service broker tooling."""

import sys

import click

from osbapi_broker import __version__
from osbapi_broker.cli.catalog_commands import catalog_cli
from osbapi_broker.logging_config import setup_logging


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.pass_context
def cli(ctx, verbose):
    """OSBAPI broker CLI - Inspect and validate service catalogs."""

    # Setup logging
    if verbose:
        setup_logging()

    ctx.ensure_object(dict)


@cli.command()
def version():
    """Show version information."""
    click.echo("OSBAPI Broker CLI")
    click.echo(f"Version: {__version__}")


# Add command groups
cli.add_command(catalog_cli, name='catalog')


def main():
    """Main entry point."""
    try:
        cli()
    except KeyboardInterrupt:
        click.echo("\n👋 Operation cancelled by user")
        sys.exit(1)


if __name__ == '__main__':
    main()
