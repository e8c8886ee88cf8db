"""sqlaudit CLI - Main entry point and command registration hub."""
# ruff: noqa: E402 - Intentional lazy loading: commands imported after cli group definition

import click

from sqlaudit import __version__


@click.group()
@click.version_option(version=__version__, prog_name="sqlaudit")
@click.help_option("-h", "--help")
def cli():
    """sqlaudit - Embedded SQL inventory for Perl codebases

    \b
    QUICK START:
      sqlaudit scan                 # Report SQL literals and DBI calls
      sqlaudit scan --fail-on-missing
      sqlaudit catalog              # Export named statements as YAML

    \b
    For detailed options: sqlaudit <command> --help"""
    pass


from sqlaudit.commands.catalog import catalog
from sqlaudit.commands.scan import scan

cli.add_command(scan)
cli.add_command(catalog)


def main():
    """Main entry point for console script."""
    cli()


if __name__ == "__main__":
    main()
