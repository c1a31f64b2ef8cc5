"""
Config CLI commands.

Shows and changes the sync engine configuration file.
"""

import click

from notifsync.config import ConfigValidationError, SyncConfig

# Settable keys and the type their value is parsed as.
SETTABLE_KEYS = {
    "server_url": str,
    "api_base_path": str,
    "unread_interval_seconds": float,
    "list_interval_seconds": float,
    "page_size": int,
    "request_timeout_seconds": float,
    "log_level": str,
    "user_id": str,
    "user_role": str,
}


@click.group()
@click.pass_context
def config(ctx: click.Context) -> None:
    """
    Manage sync engine configuration.
    """
    ctx.ensure_object(dict)


@config.command("show")
def show() -> None:
    """
    Display the effective configuration.

    Environment variables override values from the configuration file.
    """
    sync_config = SyncConfig()
    click.echo(f"Config file: {sync_config.config_path}")
    for key, value in sync_config.to_dict().items():
        click.echo(f"  {key}: {value}")


@config.command("set")
@click.argument("key", type=click.Choice(sorted(SETTABLE_KEYS)))
@click.argument("value")
def set_value(key: str, value: str) -> None:
    """
    Set one configuration value and save it.

    Example:

        notifsync config set server_url http://hotel.local:5000
    """
    sync_config = SyncConfig()

    try:
        parsed = SETTABLE_KEYS[key](value)
    except ValueError:
        click.echo(
            click.style("Error: ", fg="red", bold=True)
            + f"Invalid value for {key}: {value}"
        )
        raise SystemExit(1)

    setattr(sync_config, key, parsed)

    try:
        sync_config.validate()
    except ConfigValidationError as e:
        click.echo(click.style("Error: ", fg="red", bold=True) + str(e))
        raise SystemExit(1)

    sync_config.save()
    click.echo(click.style(f"{key} updated.", fg="green"))
