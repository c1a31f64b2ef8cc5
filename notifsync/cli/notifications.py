"""
Notification CLI commands.

One-shot operations against the notification API plus the long-running
'watch' command.
"""

import json
import sys
from typing import Optional

import click

from notifsync.center import NotificationCenter
from notifsync.cli.common import (
    echo_notice,
    format_notification,
    load_ready_config,
    run_with_center,
)
from notifsync.main import run_sync
from notifsync.models import NotificationChannel
from notifsync.presentation import badge_label, filter_notifications
from notifsync.store import NotificationState

KNOWN_CHANNELS = ", ".join(c.value for c in NotificationChannel)


@click.command("list")
@click.option("--unread", "unread_only", is_flag=True, help="Show unread notifications only.")
@click.option("--type", "notification_type", default=None, help="Show only this notification type.")
@click.option(
    "--channel",
    default=None,
    help=f"Show only this delivery channel ({KNOWN_CHANNELS}).",
)
@click.option("--limit", type=int, default=None, help="Number of notifications to request.")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def list_notifications(
    unread_only: bool,
    notification_type: Optional[str],
    channel: Optional[str],
    limit: Optional[int],
    as_json: bool,
) -> None:
    """
    List your notifications.

    Example:

        notifsync list --unread --type task_assigned
    """
    config = load_ready_config()
    params = {"limit": limit} if limit else None

    async def _fetch(center: NotificationCenter) -> NotificationState:
        await center.fetch_notifications(params)
        await center.fetch_unread_count()
        return center.state

    state = run_with_center(config, _fetch)
    if state.error:
        sys.exit(2)

    visible = filter_notifications(
        state.notifications,
        user_id=config.user_id or None,
        user_role=config.user_role or None,
        unread_only=unread_only,
        notification_type=notification_type,
        channel=channel,
    )

    if as_json:
        click.echo(json.dumps([n.to_wire() for n in visible], indent=2))
        return

    badge = badge_label(state.unread_count)
    click.echo(f"Notifications ({badge or 0} unread)")
    if not visible:
        click.echo("  No notifications.")
        return
    for notification in visible:
        click.echo(format_notification(notification))


@click.command("read")
@click.argument("notification_id")
def read(notification_id: str) -> None:
    """
    Mark a notification as read.
    """
    config = load_ready_config()

    async def _mark(center: NotificationCenter) -> None:
        await center.mark_as_read(notification_id)

    run_with_center(config, _mark)


@click.command("read-all")
def read_all() -> None:
    """
    Mark all notifications as read.
    """
    config = load_ready_config()

    async def _mark_all(center: NotificationCenter) -> None:
        await center.mark_all_as_read()

    run_with_center(config, _mark_all)


@click.command("delete")
@click.argument("notification_id")
def delete(notification_id: str) -> None:
    """
    Delete a notification.
    """
    config = load_ready_config()

    async def _delete(center: NotificationCenter) -> None:
        await center.delete_notification(notification_id)

    run_with_center(config, _delete)


@click.command()
def watch() -> None:
    """
    Run the sync engine in the foreground.

    Loads your notifications, keeps them refreshed in the background and
    prints new notifications and notices as they arrive. Stop with Ctrl+C.
    """
    load_ready_config()
    seen: set[str] = set()
    first = True

    def on_state(state: NotificationState) -> None:
        nonlocal first
        fresh = [n for n in state.notifications if n.id not in seen]
        seen.update(n.id for n in fresh)
        # The first load is the backlog, only print what is unread.
        for notification in fresh:
            if not first or not notification.is_read:
                click.echo(format_notification(notification))
        if state.notifications:
            first = False

    click.echo("Watching notifications. Press Ctrl+C to stop.")
    sys.exit(run_sync(on_state=on_state, on_notice=echo_notice))
