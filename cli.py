#!/usr/bin/env python3
"""TaskFlow CLI."""
from __future__ import annotations

import argparse
import asyncio
import getpass
import logging
import sys
from typing import Iterable, List, Optional, Sequence

from dotenv import load_dotenv

from taskflow.config import ConfigError, Settings, load_settings
from taskflow.identity import (
    AuthenticationError,
    FirebaseAuthClient,
    IdentityProvider,
    StaticIdentity,
)
from taskflow.task_store import (
    Subtask,
    Task,
    TaskCategory,
    TaskListController,
    TaskRepository,
    TaskStoreError,
    get_document_store,
)

COMPLETED_PREFIX = "[x] "


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="taskflow",
        description="Track your tasks and subtasks in the cloud.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show debug logging.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("signup", "Create an account and sign in."),
        ("login", "Sign in with email and password."),
    ):
        auth_parser = subparsers.add_parser(name, help=help_text)
        auth_parser.add_argument("email", help="Account email.")
        auth_parser.add_argument(
            "--password",
            help="Account password (prompted for when omitted).",
        )

    subparsers.add_parser("logout", help="Sign out and forget the saved session.")
    subparsers.add_parser("whoami", help="Show the signed-in user.")
    subparsers.add_parser("list", help="List your tasks.")
    subparsers.add_parser("categories", help="Show the available task categories.")

    add_parser = subparsers.add_parser("add", help="Create a task.")
    add_parser.add_argument("text", help="Task title.")
    add_parser.add_argument("--description", default="", help="Optional details.")
    add_parser.add_argument(
        "--category",
        choices=[c.value for c in TaskCategory],
        help="Task category.",
    )
    add_parser.add_argument(
        "--subtask",
        action="append",
        default=[],
        help=f"Subtask name; prefix with '{COMPLETED_PREFIX}' to mark it done. Repeatable.",
    )

    edit_parser = subparsers.add_parser("edit", help="Update a task by its list position.")
    edit_parser.add_argument("index", type=int, help="Position shown by 'list' (1-based).")
    edit_parser.add_argument("--text", help="New title (unchanged when omitted).")
    edit_parser.add_argument("--description", help="New description (unchanged when omitted).")
    edit_parser.add_argument(
        "--subtask",
        action="append",
        default=None,
        help="Replace the subtasks; same format as 'add'. Repeatable.",
    )
    edit_parser.add_argument(
        "--clear-subtasks",
        action="store_true",
        help="Remove all subtasks.",
    )

    delete_parser = subparsers.add_parser("delete", help="Delete a task by its list position.")
    delete_parser.add_argument("index", type=int, help="Position shown by 'list' (1-based).")

    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    settings = load_settings()

    if args.command in ("signup", "login"):
        return _cmd_sign_in(settings, args.email, args.password, create=args.command == "signup")
    if args.command == "logout":
        return _cmd_logout(settings)
    if args.command == "whoami":
        return _cmd_whoami(settings)
    if args.command == "categories":
        return _cmd_categories()
    if args.command == "list":
        return asyncio.run(_cmd_list(settings))
    if args.command == "add":
        return asyncio.run(
            _cmd_add(
                settings,
                text=args.text,
                description=args.description,
                category=args.category,
                subtasks=_parse_subtasks(args.subtask),
            )
        )
    if args.command == "edit":
        subtasks: Optional[List[Subtask]] = None
        if args.clear_subtasks:
            subtasks = []
        elif args.subtask is not None:
            subtasks = _parse_subtasks(args.subtask)
        return asyncio.run(
            _cmd_edit(
                settings,
                position=args.index,
                text=args.text,
                description=args.description,
                subtasks=subtasks,
            )
        )
    if args.command == "delete":
        return asyncio.run(_cmd_delete(settings, position=args.index))

    parser.error(f"Unknown command: {args.command}")
    return 2


# =============================================================================
# Wiring
# =============================================================================

def _build_identity(settings: Settings) -> IdentityProvider:
    if settings.dev_user_email:
        return StaticIdentity(settings.dev_user_email)
    return FirebaseAuthClient(
        settings.firebase_api_key or "",
        session_path=settings.session_path,
    )


def _build_controller(settings: Settings) -> TaskListController:
    repository = TaskRepository(get_document_store(settings), collection=settings.collection)
    return TaskListController(repository, _build_identity(settings), notify=print)


def _parse_subtasks(raw: Iterable[str]) -> List[Subtask]:
    subtasks: List[Subtask] = []
    for item in raw:
        if item.startswith(COMPLETED_PREFIX):
            subtasks.append(Subtask(name=item[len(COMPLETED_PREFIX):].strip(), is_completed=True))
        else:
            subtasks.append(Subtask(name=item.strip()))
    return subtasks


def format_tasks(tasks: Sequence[Task]) -> str:
    """Render tasks as numbered rows with their subtasks."""
    if not tasks:
        return "No tasks yet."
    lines: List[str] = []
    for position, task in enumerate(tasks, 1):
        header = f"{position}. {task.text}"
        if task.category:
            header += f" [{task.category}]"
        lines.append(header)
        if task.description:
            lines.append(f"   {task.description}")
        for subtask in task.subtasks:
            mark = "x" if subtask.is_completed else " "
            lines.append(f"   [{mark}] {subtask.name}")
    return "\n".join(lines)


# =============================================================================
# Commands
# =============================================================================

def _cmd_sign_in(settings: Settings, email: str, password: Optional[str], *, create: bool) -> int:
    try:
        api_key = settings.require_api_key()
    except ConfigError as exc:
        print(exc, file=sys.stderr)
        return 1

    client = FirebaseAuthClient(api_key, session_path=settings.session_path)
    if password is None:
        password = getpass.getpass("Password: ")

    try:
        if create:
            session = client.sign_up(email, password)
        else:
            session = client.sign_in(email, password)
    except AuthenticationError as exc:
        prefix = "Account creation failed" if create else "Authentication failed"
        print(f"{prefix}: {exc}", file=sys.stderr)
        return 1

    print("Account created successfully." if create else "Login successful.")
    print(f"Signed in as {session.email}")
    return 0


def _cmd_logout(settings: Settings) -> int:
    _build_identity(settings).sign_out()
    print("Signed out.")
    return 0


def _cmd_whoami(settings: Settings) -> int:
    email = _build_identity(settings).current_identity()
    if not email:
        print("Not signed in.", file=sys.stderr)
        return 1
    print(email)
    return 0


def _cmd_categories() -> int:
    for category in TaskCategory:
        print(category.value)
    return 0


async def _cmd_list(settings: Settings) -> int:
    controller = _build_controller(settings)
    try:
        await controller.load()
    except TaskStoreError:
        return 1
    finally:
        controller.close()
    print(format_tasks(controller.tasks))
    return 0


async def _cmd_add(
    settings: Settings,
    *,
    text: str,
    description: str,
    category: Optional[str],
    subtasks: List[Subtask],
) -> int:
    controller = _build_controller(settings)
    try:
        await controller.add(text, description, category, subtasks)
    except TaskStoreError:
        return 1
    finally:
        controller.close()
    return 0


async def _cmd_edit(
    settings: Settings,
    *,
    position: int,
    text: Optional[str],
    description: Optional[str],
    subtasks: Optional[List[Subtask]],
) -> int:
    controller = _build_controller(settings)
    try:
        await controller.load()
        index = position - 1
        current = controller.select_for_edit(index)
        await controller.edit(
            index,
            current.text if text is None else text,
            current.description if description is None else description,
            current.subtasks if subtasks is None else subtasks,
        )
    except IndexError:
        print(f"No task at position {position}.", file=sys.stderr)
        return 1
    except TaskStoreError:
        return 1
    finally:
        controller.close()
    return 0


async def _cmd_delete(settings: Settings, *, position: int) -> int:
    controller = _build_controller(settings)
    try:
        await controller.load()
        await controller.remove(position - 1)
    except IndexError:
        print(f"No task at position {position}.", file=sys.stderr)
        return 1
    except TaskStoreError:
        return 1
    finally:
        controller.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
