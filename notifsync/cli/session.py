"""
Session CLI commands.

Stores or removes the bearer token used by every other command.
"""

import click

from notifsync.credential_store import TokenStore
from notifsync.session import is_valid_token


@click.command()
@click.option(
    "--token",
    prompt="Session token",
    hide_input=True,
    help="Bearer token issued by the hotel backend at login.",
)
def login(token: str) -> None:
    """
    Store the session token locally (encrypted).

    Example:

        notifsync login --token eyJhbGciOi...
    """
    token = token.strip()
    if not is_valid_token(token):
        click.echo(click.style("Error: ", fg="red", bold=True) + "Invalid token.")
        raise SystemExit(1)

    TokenStore().set_token(token)
    click.echo(click.style("Session token stored.", fg="green"))


@click.command()
def logout() -> None:
    """
    Remove the stored session token.

    A running 'notifsync watch' stops at its next refresh tick.
    """
    if TokenStore().clear_token():
        click.echo(click.style("Logged out.", fg="green"))
    else:
        click.echo("No stored session token.")
