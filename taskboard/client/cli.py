"""
taskboard-cli - terminal front end for the Taskboard API.

Usage:
    taskboard-cli <command> [options]

Commands:
    register  - Create an account
    login     - Start a session (cookie kept in TASKBOARD_SESSION_FILE)
    logout    - End the session
    me        - Show the logged-in user
    list      - Show tasks, optionally filtered by status
    add       - Create a task
    edit      - Change title, description or status of a task
    toggle    - Flip a task between pending and completed
    delete    - Remove a task
"""

import argparse
import asyncio
import getpass
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from taskboard.client.api import ApiError, TaskboardClient
from taskboard.client.config import ClientSettings
from taskboard.client.session import SessionState
from taskboard.client.views import Notification, TaskFilter, TaskListView
from taskboard.logger import configure_logging
from taskboard.models.task import TaskStatus
from taskboard.schemas import TaskResponse

STATUS_MARKS = {TaskStatus.PENDING: "[ ]", TaskStatus.COMPLETED: "[x]"}


def load_cookies(path: Path) -> dict[str, str]:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return {str(k): str(v) for k, v in data.items()} if isinstance(data, dict) else {}


def save_cookies(path: Path, cookies: dict[str, str]) -> None:
    if not cookies:
        path.unlink(missing_ok=True)
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(cookies), encoding="utf-8")
    path.chmod(0o600)


def render_task(task: TaskResponse) -> str:
    line = f"{STATUS_MARKS[task.status]} {task.title}  ({task.id})"
    if task.description:
        line += f"\n      {task.description}"
    return line


def render_tasks(view: TaskListView) -> str:
    header = "  ".join(f"{name.value}: {count}" for name, count in view.counts.items())
    tasks = view.visible
    if not tasks:
        return f"{header}\nNo tasks."
    return "\n".join([header, *(render_task(task) for task in tasks)])


def render_notification(notification: Notification) -> str:
    return f"{notification.title} {notification.message}"


def _report(view: TaskListView, result: object) -> int:
    """Print the latest notification; non-zero exit when the change failed."""
    if view.notifications:
        stream = sys.stderr if result is None else sys.stdout
        print(render_notification(view.notifications[-1]), file=stream)
    return 0 if result is not None else 1


async def _require_session(session: SessionState) -> bool:
    await session.initialize()
    if not session.is_authenticated:
        print("Not logged in. Run `taskboard-cli login` first.", file=sys.stderr)
        return False
    return True


async def run_command(args: argparse.Namespace, client: TaskboardClient) -> int:
    session = SessionState(client)
    view = TaskListView(client, session)

    if args.command == "register":
        password = args.password or getpass.getpass("Password: ")
        user = await session.register(args.username, args.email, password)
        print(f"Registered {user.email}. You can now log in.")
        return 0

    if args.command == "login":
        password = args.password or getpass.getpass("Password: ")
        user = await session.login(args.email, password)
        print(f"Logged in as {user.username} <{user.email}>")
        return 0

    if args.command == "logout":
        await session.logout()
        print("Logged out.")
        return 0

    if not await _require_session(session):
        return 1

    if args.command == "me":
        print(f"{session.user.username} <{session.user.email}>")
        return 0

    if args.command == "list":
        await view.load()
        view.set_filter(args.filter)
        print(render_tasks(view))
        return 0

    if args.command == "add":
        return _report(view, await view.create(args.title, args.description or ""))

    if args.command == "edit":
        fields = {
            name: value
            for name, value in (
                ("title", args.title),
                ("description", args.description),
                ("status", args.status),
            )
            if value is not None
        }
        if not fields:
            print("Nothing to change.", file=sys.stderr)
            return 1
        return _report(view, await view.update(args.task_id, **fields))

    if args.command == "toggle":
        return _report(view, await view.toggle(args.task_id))

    if args.command == "delete":
        return _report(view, await view.delete(args.task_id))

    raise ValueError(f"Unknown command: {args.command}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="taskboard-cli", description="Taskboard terminal client")
    parser.add_argument("--api-url", help="API base URL (default: TASKBOARD_API_URL)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    register = subparsers.add_parser("register", help="Create an account")
    register.add_argument("--username", required=True)
    register.add_argument("--email", required=True)
    register.add_argument("--password", help="Prompted for when omitted")

    login = subparsers.add_parser("login", help="Start a session")
    login.add_argument("--email", required=True)
    login.add_argument("--password", help="Prompted for when omitted")

    subparsers.add_parser("logout", help="End the session")
    subparsers.add_parser("me", help="Show the logged-in user")

    list_cmd = subparsers.add_parser("list", help="Show tasks")
    list_cmd.add_argument(
        "--filter", choices=[f.value for f in TaskFilter], default=TaskFilter.ALL.value
    )

    add = subparsers.add_parser("add", help="Create a task")
    add.add_argument("title")
    add.add_argument("--description")

    edit = subparsers.add_parser("edit", help="Change a task")
    edit.add_argument("task_id")
    edit.add_argument("--title")
    edit.add_argument("--description")
    edit.add_argument("--status", choices=[s.value for s in TaskStatus])

    toggle = subparsers.add_parser("toggle", help="Flip pending/completed")
    toggle.add_argument("task_id")

    delete = subparsers.add_parser("delete", help="Remove a task")
    delete.add_argument("task_id")

    return parser


async def _main(args: argparse.Namespace, config: ClientSettings) -> int:
    async with TaskboardClient(
        args.api_url or config.api_url,
        cookies=load_cookies(config.session_file),
        timeout=config.timeout_seconds,
    ) as client:
        try:
            return await run_command(args, client)
        except ApiError as exc:
            print(exc.message, file=sys.stderr)
            return 1
        finally:
            save_cookies(config.session_file, client.cookies)


def main(argv: Sequence[str] | None = None) -> int:
    configure_logging(level=logging.WARNING, stream=sys.stderr)
    args = build_parser().parse_args(argv)
    return asyncio.run(_main(args, ClientSettings()))


if __name__ == "__main__":
    sys.exit(main())
