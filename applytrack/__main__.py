"""Main entry point for ApplyTrack."""

import argparse
import asyncio
import getpass
import json
import sys
from pathlib import Path
from typing import Any

from applytrack import __version__
from applytrack.config.settings import Settings
from applytrack.tracker.errors import TrackerError
from applytrack.tracker.models import ApplicationStatus, Priority
from applytrack.utils.logging import configure_logging

DATA_MODES = {"apps", "reminders", "stats", "export"}


def _reminder_days(value: str) -> int:
    days = int(value)
    if not (1 <= days <= 365):
        raise argparse.ArgumentTypeError("--reminder-days must be between 1 and 365")
    return days


def _add_application_fields(parser: argparse.ArgumentParser, *, required: bool) -> None:
    parser.add_argument("--company", required=required, help="Company name")
    parser.add_argument("--position", required=required, help="Position title")
    parser.add_argument("--url", help="Job posting URL")
    parser.add_argument("--city", help="Location city")
    parser.add_argument("--description", help="Job description")
    parser.add_argument("--notes", help="Free-form notes")
    parser.add_argument(
        "--status",
        choices=[status.value for status in ApplicationStatus],
        default=None,
        help="Application status",
    )
    parser.add_argument(
        "--priority",
        choices=[priority.value for priority in Priority],
        default=None,
        help="Application priority",
    )
    parser.add_argument(
        "--reminder-days",
        type=_reminder_days,
        default=None,
        help="Follow-up cadence in days (1-365)",
    )
    reminders = parser.add_mutually_exclusive_group()
    reminders.add_argument(
        "--reminders",
        dest="reminder_enabled",
        action="store_const",
        const=True,
        default=None,
        help="Enable follow-up reminders",
    )
    reminders.add_argument(
        "--no-reminders",
        dest="reminder_enabled",
        action="store_const",
        const=False,
        help="Disable follow-up reminders",
    )


def _application_payload(parsed: argparse.Namespace) -> dict[str, Any]:
    fields = {
        "company_name": parsed.company,
        "position_title": parsed.position,
        "job_url": parsed.url,
        "location_city": parsed.city,
        "job_description": parsed.description,
        "notes": parsed.notes,
        "status": parsed.status,
        "priority": parsed.priority,
        "reminder_days": parsed.reminder_days,
        "reminder_enabled": parsed.reminder_enabled,
    }
    return {name: value for name, value in fields.items() if value is not None}


def _password(parsed: argparse.Namespace, prompt: str = "Password: ") -> str:
    return parsed.password if parsed.password is not None else getpass.getpass(prompt)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="applytrack",
        description="ApplyTrack: track job applications, follow-ups and outcomes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m applytrack serve
  python -m applytrack guest
  python -m applytrack apps add --company Acme --position Engineer
  python -m applytrack reminders list
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set the log level (overrides settings)",
    )

    subparsers = parser.add_subparsers(
        dest="mode",
        title="modes",
        description="Available commands",
    )

    # Server
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API server")
    serve_parser.add_argument("--host", default=None, help="Bind address")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port")

    # Session
    subparsers.add_parser("guest", help="Start a guest session (data stays local)")

    register_parser = subparsers.add_parser("register", help="Create an account")
    register_parser.add_argument("email", help="Account email")
    register_parser.add_argument("--password", default=None, help="Password (prompted if omitted)")
    register_parser.add_argument("--first-name", default=None)
    register_parser.add_argument("--last-name", default=None)

    login_parser = subparsers.add_parser("login", help="Sign in to an account")
    login_parser.add_argument("email", help="Account email")
    login_parser.add_argument("--password", default=None, help="Password (prompted if omitted)")

    logout_parser = subparsers.add_parser("logout", help="End the current session")
    logout_parser.add_argument(
        "--clear-guest-data",
        action="store_true",
        help="Also discard applications stored locally in guest mode",
    )

    subparsers.add_parser("whoami", help="Show the current session")

    password_parser = subparsers.add_parser("passwd", help="Change the account password")
    password_parser.add_argument("--current", default=None, help="Current password")
    password_parser.add_argument("--new", default=None, help="New password")

    # Applications
    apps_parser = subparsers.add_parser("apps", help="Manage tracked applications")
    apps_sub = apps_parser.add_subparsers(dest="apps_command")

    apps_list = apps_sub.add_parser("list", help="List applications")
    apps_list.add_argument(
        "--status",
        choices=[status.value for status in ApplicationStatus],
        default=None,
        help="Only show applications with this status",
    )

    apps_show = apps_sub.add_parser("show", help="Show one application as JSON")
    apps_show.add_argument("id")

    apps_add = apps_sub.add_parser("add", help="Record a new application")
    _add_application_fields(apps_add, required=True)

    apps_update = apps_sub.add_parser("update", help="Change fields of an application")
    apps_update.add_argument("id")
    _add_application_fields(apps_update, required=False)

    apps_delete = apps_sub.add_parser("delete", help="Delete an application")
    apps_delete.add_argument("id")

    # Reminders
    reminders_parser = subparsers.add_parser("reminders", help="Follow-up reminders")
    reminders_sub = reminders_parser.add_subparsers(dest="reminders_command")
    reminders_sub.add_parser("list", help="List applications due for follow-up")
    reminders_ack = reminders_sub.add_parser("ack", help="Acknowledge a reminder")
    reminders_ack.add_argument("id")

    subparsers.add_parser("stats", help="Show application statistics")

    export_parser = subparsers.add_parser("export", help="Export applications")
    export_parser.add_argument("format", choices=["csv", "html"])
    export_parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Output file (defaults to applications.<format>)",
    )

    return parser


async def _run_session_command(parsed: argparse.Namespace, client) -> int:
    session = client.session

    if parsed.mode == "guest":
        context = session.start_guest()
        print(f"Guest session started ({context.user_id}); data is stored locally.")
        return 0

    if parsed.mode == "register":
        response, report = await client.accounts.register(
            parsed.email,
            _password(parsed),
            first_name=parsed.first_name,
            last_name=parsed.last_name,
        )
        print(f"Registered {response.user.email}")
        if report is not None:
            print(f"Migrated {len(report.migrated)} guest application(s)")
            if not report.complete:
                print(
                    f"{len(report.failed)} application(s) could not be migrated "
                    "and remain stored locally",
                    file=sys.stderr,
                )
        return 0

    if parsed.mode == "login":
        response = await client.accounts.login(parsed.email, _password(parsed))
        print(f"Signed in as {response.user.email}")
        return 0

    if parsed.mode == "logout":
        await client.accounts.logout(clear_guest_data=parsed.clear_guest_data)
        print("Signed out")
        return 0

    if parsed.mode == "whoami":
        context = session.current()
        print(f"Mode: {context.mode.value}")
        if context.user_id:
            print(f"User: {context.display_name} <{context.email}>")
        return 0

    if parsed.mode == "passwd":
        if not session.current().is_authenticated:
            print("Error: sign in to change your password", file=sys.stderr)
            return 1
        current = parsed.current or getpass.getpass("Current password: ")
        new = parsed.new or getpass.getpass("New password: ")
        print(await client.accounts.change_password(current, new))
        return 0

    return 1


async def _run_data_command(parsed: argparse.Namespace, client) -> int:
    from applytrack.client.export import export_csv, export_html
    from applytrack.tracker.analytics import compute_stats

    facade = client.facade

    if parsed.mode == "apps":
        if parsed.apps_command == "list":
            records = await facade.list_all()
            if parsed.status:
                records = [r for r in records if r.status.value == parsed.status]
            for record in records:
                print(
                    f"{record.id}  {record.status.value:<20} "
                    f"{record.company_name} - {record.position_title}"
                )
            return 0
        if parsed.apps_command == "show":
            record = await facade.get_by_id(parsed.id)
            print(json.dumps(record.to_dict(), indent=2))
            return 0
        if parsed.apps_command == "add":
            record = await facade.create(_application_payload(parsed))
            print(f"Created {record.id}")
            return 0
        if parsed.apps_command == "update":
            payload = _application_payload(parsed)
            if not payload:
                print("Error: nothing to update", file=sys.stderr)
                return 1
            record = await facade.update(parsed.id, payload)
            print(f"Updated {record.id}")
            return 0
        if parsed.apps_command == "delete":
            await facade.delete(parsed.id)
            print("ok")
            return 0
        print("Unknown apps command", file=sys.stderr)
        return 1

    if parsed.mode == "reminders":
        if parsed.reminders_command == "list":
            for reminder in await client.reminders.due():
                print(
                    f"{reminder.id}  {reminder.company_name} - {reminder.position_title} "
                    f"({reminder.status.value}, every {reminder.reminder_days} days)"
                )
            return 0
        if parsed.reminders_command == "ack":
            await client.reminders.acknowledge(parsed.id)
            print("ok")
            return 0
        print("Unknown reminders command", file=sys.stderr)
        return 1

    if parsed.mode == "stats":
        stats = compute_stats(await facade.list_all())
        print(f"Total: {stats.total_applications}")
        for item in stats.by_status:
            print(f"{item.status.value}: {item.count}")
        return 0

    if parsed.mode == "export":
        records = await facade.list_all()
        out = parsed.out or Path(f"applications.{parsed.format}")
        if parsed.format == "csv":
            path = export_csv(records, out)
        else:
            path = export_html(records, out)
        print(f"Wrote: {path}")
        return 0

    return 1


async def _run_client(parsed: argparse.Namespace, settings: Settings) -> int:
    from applytrack.client import open_client

    async with open_client(settings) as client:
        if parsed.mode in DATA_MODES:
            if client.session.current().user_id is None:
                print(
                    "Error: no active session; run 'applytrack guest' or 'applytrack login'",
                    file=sys.stderr,
                )
                return 1
            return await _run_data_command(parsed, client)
        return await _run_session_command(parsed, client)


def main(args: list[str] | None = None) -> int:
    """Main entry point for the application.

    Args:
        args: Command line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    # Load settings
    try:
        settings = Settings()
    except Exception as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    # Configure logging
    log_level = parsed.log_level or settings.log_level
    logger = configure_logging(level=log_level, json_lines=settings.log_format == "json")

    # If no mode specified, show help
    if parsed.mode is None:
        parser.print_help()
        return 0

    if parsed.mode == "serve":
        import uvicorn

        from applytrack.api import create_app

        host = parsed.host or settings.host
        port = parsed.port or settings.port
        logger.info(f"Serving API on {host}:{port}")
        uvicorn.run(create_app(settings), host=host, port=port, log_level=log_level.lower())
        return 0

    try:
        return asyncio.run(_run_client(parsed, settings))
    except TrackerError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        for detail in getattr(e, "details", None) or []:
            print(f"- {detail.get('field')}: {detail.get('message')}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
