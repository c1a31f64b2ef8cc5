"""
notifsync CLI entry point.

Main command group for the notification sync engine CLI.
"""

import click

from notifsync import __version__


@click.group()
@click.version_option(version=__version__, prog_name="notifsync")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """
    notifsync - Hotel notification synchronization engine.

    Keeps your notifications in sync with the hotel backend and lets you
    read, mark and delete them from the terminal.

    Use 'notifsync COMMAND --help' for more information on a command.
    """
    ctx.ensure_object(dict)


# Import and register subcommands
from notifsync.cli.session import login, logout  # noqa: E402
from notifsync.cli.config import config  # noqa: E402
from notifsync.cli.notifications import (  # noqa: E402
    delete,
    list_notifications,
    read,
    read_all,
    watch,
)
from notifsync.cli.prefs import prefs  # noqa: E402

cli.add_command(login)
cli.add_command(logout)
cli.add_command(config)
cli.add_command(list_notifications)
cli.add_command(read)
cli.add_command(read_all)
cli.add_command(delete)
cli.add_command(prefs)
cli.add_command(watch)


def main() -> None:
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
