"""
Preference CLI commands.

Preferences map each notification type to per-channel switches.
"""

import json
import sys
from typing import Any

import click

from notifsync.center import NotificationCenter
from notifsync.cli.common import load_ready_config, run_with_center
from notifsync.presentation import is_channel_enabled, set_channel_preference
from notifsync.store import NotificationState


@click.group()
@click.pass_context
def prefs(ctx: click.Context) -> None:
    """
    Show and change notification preferences.
    """
    ctx.ensure_object(dict)


@prefs.command("show")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def show(as_json: bool) -> None:
    """
    Display your notification preferences.
    """
    config = load_ready_config()

    async def _fetch(center: NotificationCenter) -> NotificationState:
        await center.fetch_preferences()
        return center.state

    state = run_with_center(config, _fetch)
    if state.error:
        sys.exit(2)

    preferences = state.preferences or {}
    if as_json:
        click.echo(json.dumps(preferences, indent=2))
        return

    if not preferences:
        click.echo("No preferences set.")
        return

    for notification_type, channels in sorted(preferences.items()):
        click.echo(f"{notification_type}:")
        if not isinstance(channels, dict):
            click.echo(f"  {channels}")
            continue
        for channel in channels:
            enabled = is_channel_enabled(preferences, notification_type, channel)
            status = click.style("on", fg="green") if enabled else click.style("off", fg="yellow")
            click.echo(f"  {channel}: {status}")


@prefs.command("set")
@click.argument("notification_type")
@click.argument("channel")
@click.argument("state", type=click.Choice(["on", "off"]))
def set_preference(notification_type: str, channel: str, state: str) -> None:
    """
    Turn one channel of one notification type on or off.

    Example:

        notifsync prefs set task_assigned email off
    """
    config = load_ready_config()

    async def _update(center: NotificationCenter) -> dict[str, Any]:
        await center.fetch_preferences()
        if center.state.error:
            return {}
        updated = set_channel_preference(
            center.state.preferences, notification_type, channel, state == "on"
        )
        await center.update_preferences(updated)
        if center.state.error:
            return {}
        return updated

    if not run_with_center(config, _update):
        sys.exit(2)
