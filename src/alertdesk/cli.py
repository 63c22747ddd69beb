"""Terminal dashboard for browsing alerts and changing their status."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from .alerts import Alert, LocalBackedAlert, Priority
from .client import AlertSourceClient
from .dispatcher import ActionDispatcher
from .display import (
    ACTION_LABELS,
    format_timestamp,
    humanize_key,
    priority_style,
    profile_path,
    status_label,
    status_style,
    type_count_rows,
    type_label,
)
from .errors import AlertDeskError
from .lifecycle import AlertAction, AlertStatus
from .logging_utils import configure_logging
from .overlay import OverlayStore
from .permissions import User, allowed_actions
from .settings import LoadMoreMode, Settings, get_settings
from .views import AlertBoard

LOGGER = logging.getLogger(__name__)
CONSOLE = Console()


def build_board(settings: Settings, mode: LoadMoreMode | None = None) -> AlertBoard:
    return AlertBoard(
        AlertSourceClient.from_settings(settings),
        OverlayStore(Path(settings.overlay_path)),
        page_limit=settings.page_limit,
        load_more_mode=mode or settings.load_more_mode,
    )


async def locate(board: AlertBoard, alert_id: str) -> Alert | None:
    """Page through the unfiltered list until ``alert_id`` is loaded."""

    await board.refresh()
    while (alert := board.find(alert_id)) is None:
        if not await board.load_more():
            return None
    return alert


def render_board(board: AlertBoard) -> None:
    overall = board.overall_summary
    counts = Table(title="Alert Summary")
    counts.add_column("Total")
    counts.add_column("High", style=priority_style(Priority.HIGH))
    counts.add_column("Medium", style=priority_style(Priority.MEDIUM))
    counts.add_column("Low", style=priority_style(Priority.LOW))
    by_priority = overall.by_priority if overall else None
    counts.add_row(
        str(board.total_count),
        str(by_priority.high if by_priority else 0),
        str(by_priority.medium if by_priority else 0),
        str(by_priority.low if by_priority else 0),
    )
    CONSOLE.print(counts)

    types = Table(title="Alert Types Distribution")
    types.add_column("Type")
    types.add_column("Count")
    for label, count in type_count_rows(board.type_counts()):
        types.add_row(label, str(count))
    CONSOLE.print(types)

    statuses = board.status_counts()
    states = Table(title="Alert Status")
    for status in AlertStatus:
        states.add_column(status_label(status), style=status_style(status))
    states.add_row(*(str(getattr(statuses, status.value)) for status in AlertStatus))
    CONSOLE.print(states)

    title = "Alerts"
    if board.priority_filter is not None:
        title += f" (filtered by {board.priority_filter.value} priority)"
    table = Table(title=title)
    for column in ("ID", "Priority", "Type", "Title", "Entity", "Status", "When"):
        table.add_column(column)
    for alert in board.alerts:
        table.add_row(
            alert.id,
            f"[{priority_style(alert.priority)}]{alert.priority.value}[/]",
            type_label(alert.type),
            alert.title,
            alert.entity_id,
            f"[{status_style(alert.status)}]{status_label(alert.status)}[/]",
            format_timestamp(alert.timestamp),
        )
    if board.alerts:
        CONSOLE.print(table)
    elif board.priority_filter is not None:
        CONSOLE.print(f"No {board.priority_filter.value.lower()} priority alerts detected.")
    else:
        CONSOLE.print("No advanced alerts detected at this time.")

    pagination = board.pagination
    more = " (more available)" if pagination.has_more else ""
    CONSOLE.print(f"Page {pagination.page}{more}")


def render_detail(alert: Alert, user: User | None) -> None:
    table = Table(title=alert.title or alert.id, show_header=False)
    table.add_column("Field")
    table.add_column("Value")
    table.add_row("ID", alert.id)
    table.add_row("Priority", alert.priority.value)
    table.add_row("Type", type_label(alert.type))
    table.add_row("Status", status_label(alert.status))
    table.add_row("Entity", alert.entity_id)
    table.add_row("Description", alert.description)
    table.add_row("When", format_timestamp(alert.timestamp))
    for key, value in alert.details.items():
        rendered = json.dumps(value) if isinstance(value, (dict, list)) else str(value)
        table.add_row(humanize_key(key), rendered)
    if isinstance(alert, LocalBackedAlert):
        for record in alert.actions:
            table.add_row(
                "History",
                f"{record.type.value} by {record.actor} at {record.timestamp.isoformat()}",
            )
    actions = ", ".join(ACTION_LABELS[action] for action in allowed_actions(user, alert))
    table.add_row("Actions", actions or "none")
    if path := profile_path(alert.entity_id):
        table.add_row("Profile", path)
    CONSOLE.print(table)


def _user(user_id: str | None, role: str | None) -> User | None:
    if not user_id or not role:
        return None
    return User(id=user_id, role=role)


user_options = [
    click.option("--user", "user_id", envvar="ALERTDESK_USER", help="Acting user id"),
    click.option("--role", envvar="ALERTDESK_ROLE", help="Role of the acting user"),
]


def with_user(func):
    for option in reversed(user_options):
        func = option(func)
    return func


@click.group()
@click.option("--log-level", default=None, help="Override ALERTDESK_LOG_LEVEL")
def main(log_level: str | None) -> None:
    """Browse alerts and manage their lifecycle."""
    configure_logging(log_level or get_settings().log_level)


@main.command("list")
@click.option(
    "--priority",
    type=click.Choice([p.value for p in Priority], case_sensitive=False),
    default=None,
    help="Only show alerts of this priority",
)
@click.option("--page", type=int, default=1, show_default=True)
@click.option("--all", "load_all", is_flag=True, help="Keep loading while more pages exist")
def list_alerts(priority: str | None, page: int, load_all: bool) -> None:
    """Show one page of alerts with the overall summary."""
    settings = get_settings()
    mode = LoadMoreMode.APPEND if load_all else None
    board = build_board(settings, mode)

    async def runner() -> None:
        board.priority_filter = Priority(priority.upper()) if priority else None
        await board.load(page=page)
        if load_all:
            while await board.load_more():
                pass

    try:
        asyncio.run(runner())
    except AlertDeskError as exc:
        raise click.ClickException(f"Error loading alerts: {exc}") from exc
    render_board(board)


@main.command("show")
@click.argument("alert_id")
@with_user
def show_alert(alert_id: str, user_id: str | None, role: str | None) -> None:
    """Show one alert with the actions available to the user."""
    board = build_board(get_settings())
    try:
        alert = asyncio.run(locate(board, alert_id))
    except AlertDeskError as exc:
        raise click.ClickException(str(exc)) from exc
    if alert is None:
        raise click.ClickException(f"Alert {alert_id} not found")
    render_detail(alert, _user(user_id, role))


def _action_command(action: AlertAction):
    @with_user
    @click.argument("alert_id")
    def command(alert_id: str, user_id: str | None, role: str | None) -> None:
        settings = get_settings()
        board = build_board(settings)
        dispatcher = ActionDispatcher(
            board, board.source, board.overlay, _user(user_id, role)
        )

        async def runner():
            if await locate(board, alert_id) is None:
                raise click.ClickException(f"Alert {alert_id} not found")
            return await dispatcher.dispatch(alert_id, action)

        try:
            outcome = asyncio.run(runner())
        except AlertDeskError as exc:
            raise click.ClickException(str(exc)) from exc

        label = ACTION_LABELS[action]
        if not outcome.applied:
            CONSOLE.print(f"{label} already in progress for {alert_id}")
            return
        CONSOLE.print(
            f"Alert {alert_id} is now "
            f"[bold green]{status_label(outcome.status)}[/bold green]"
        )
        if not outcome.persisted:
            CONSOLE.print("[yellow]Warning: change was not saved locally[/yellow]")

    command.__doc__ = f"{ACTION_LABELS[action]} an alert."
    return command


for _action in AlertAction:
    main.command(_action.value)(_action_command(_action))


@main.group("overlay")
def overlay_group() -> None:
    """Inspect the local status overlay."""


@overlay_group.command("show")
def overlay_show() -> None:
    store = OverlayStore(Path(get_settings().overlay_path))
    table = Table(title="Local overlay")
    table.add_column("Alert")
    table.add_column("Status")
    table.add_column("Actions")
    for key, entry in store.load_all().items():
        table.add_row(
            key,
            entry.status.value if entry.status else "-",
            str(len(entry.actions)),
        )
    CONSOLE.print(table)


@overlay_group.command("reset")
@click.confirmation_option(prompt="Discard every locally stored alert status?")
def overlay_reset() -> None:
    store = OverlayStore(Path(get_settings().overlay_path))
    try:
        store.reset()
    except AlertDeskError as exc:
        raise click.ClickException(str(exc)) from exc
    CONSOLE.print("Overlay cleared")


if __name__ == "__main__":  # pragma: no cover
    main()
