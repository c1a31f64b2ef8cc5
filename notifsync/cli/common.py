"""
Helpers shared by the CLI commands.
"""

import asyncio
import sys
from typing import Awaitable, Callable, TypeVar

import click

from notifsync.center import NotificationCenter
from notifsync.config import SyncConfig
from notifsync.credential_store import TokenStore
from notifsync.models import Notification
from notifsync.notices import Notice, NoticeLevel
from notifsync.presentation import type_icon
from notifsync.session import SessionGate

T = TypeVar("T")

NOTICE_STYLES = {
    NoticeLevel.INFO: "cyan",
    NoticeLevel.SUCCESS: "green",
    NoticeLevel.ERROR: "red",
}

PRIORITY_STYLES = {
    "critical": "red",
    "high": "yellow",
    "medium": "blue",
    "low": "green",
}


def echo_error(message: str) -> None:
    click.echo(click.style("Error: ", fg="red", bold=True) + message)


def echo_notice(notice: Notice) -> None:
    """Print a notice the way a toast would show it."""
    click.echo(click.style(notice.message, fg=NOTICE_STYLES[notice.level]))


def format_notification(notification: Notification) -> str:
    """One-line rendering of a notification."""
    marker = " " if notification.is_read else click.style("●", fg="blue")
    priority = notification.priority.value if notification.priority else "-"
    created = (
        notification.created_at.strftime("%Y-%m-%d %H:%M")
        if notification.created_at
        else "-"
    )
    return (
        f"{marker} {type_icon(notification.type)} "
        f"{click.style(notification.title or '(untitled)', bold=not notification.is_read)}"
        f"  [{click.style(priority, fg=PRIORITY_STYLES.get(priority))}]"
        f"  {created}  {notification.id}"
    )


def load_ready_config() -> SyncConfig:
    """
    Load configuration and require a server URL and a valid session.

    Exits with code 1 when either is missing.
    """
    config = SyncConfig()
    if not config.is_configured:
        echo_error("No server URL configured.")
        click.echo("Run 'notifsync config set server_url URL' first.")
        sys.exit(1)

    if not SessionGate(TokenStore().get_token).has_valid_credential():
        echo_error("Not logged in.")
        click.echo("Run 'notifsync login' first.")
        sys.exit(1)

    return config


def run_with_center(
    config: SyncConfig,
    operation: Callable[[NotificationCenter], Awaitable[T]],
) -> T:
    """
    Run one operation against a freshly built center, printing its notices.

    The center is not mounted: only the calls made by ``operation`` reach
    the server.
    """

    async def _run() -> T:
        center = NotificationCenter.from_config(config)
        center.notices.subscribe(echo_notice)
        try:
            return await operation(center)
        finally:
            await center.close()

    return asyncio.run(_run())
