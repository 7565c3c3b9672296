# src/tasktrack/cli/commands.py

from __future__ import annotations

import inspect
import logging
import shlex
from collections.abc import Awaitable, Callable

from ..core.errors import AppError, AuthError, ValidationError
from ..core.state import AppState
from ..tasks.task_models import (
    FilterPriority,
    FilterStatus,
    Task,
    TaskDraft,
    TaskPriority,
    TaskSort,
    TaskStatus,
    TaskUpdate,
)

CommandResult = str | Awaitable[str]
CommandHandler = Callable[[AppState, list[str]], CommandResult]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError as e:
            return f"Could not parse command: {e}"
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            result = handler(state, args)
            if inspect.isawaitable(result):
                result = await result
            return result
        except AuthError as e:
            return f"{e.message} Use /login to sign in."
        except ValidationError as e:
            return _format_validation_error(e)
        except AppError as e:
            return f"Error: {e.message}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----


def _format_validation_error(err: ValidationError) -> str:
    lines = [f"Error: {err.message}"]
    for field_name, problems in err.field_errors.items():
        lines.append(f"  {field_name}: {'; '.join(str(p) for p in problems)}")
    for problem in err.global_errors:
        lines.append(f"  {problem}")
    return "\n".join(lines)


def _split_options(args: list[str], keys: set[str]) -> tuple[list[str], dict[str, str]]:
    """Separate `key=value` options from positional words."""
    words: list[str] = []
    opts: dict[str, str] = {}
    for arg in args:
        key, sep, value = arg.partition("=")
        if sep and key.lower() in keys:
            opts[key.lower()] = value
        else:
            words.append(arg)
    return words, opts


def format_task(task: Task) -> str:
    created = task.created_at.astimezone().strftime("%Y-%m-%d %H:%M")
    line = f"[{task.id}] {task.title} ({task.status.label}, {task.priority.label}) created {created}"
    if task.description:
        line += f"\n      {task.description}"
    return line


def _render_view(state: AppState) -> str:
    prefs = state.tasks.preferences
    view = state.tasks.view
    header = (
        f"Tasks: {len(view)} shown of {len(state.tasks.tasks)} "
        f"(status={prefs.filter_status}, priority={prefs.filter_priority}, sort={prefs.sort}"
        + (f", search={prefs.search_query!r}" if prefs.search_query else "")
        + ")"
    )
    if not view:
        return header + "\n  (no tasks)"
    return "\n".join([header, *(f"  {format_task(t)}" for t in view)])


def _upper_enum(enum_cls, raw: str):
    try:
        return enum_cls(raw.strip().upper())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValueError(f"'{raw}' is not one of: {allowed}") from None


# ---- auth ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


async def cmd_login(state: AppState, args: list[str]) -> str:
    if len(args) != 2:
        return "Usage: /login <username> <password>"
    session = await state.session.login(args[0], args[1])
    await state.tasks.list()
    user = session.user.username if session.user else args[0]
    return f"Logged in as {user}.\n{_render_view(state)}"


async def cmd_register(state: AppState, args: list[str]) -> str:
    if len(args) != 3:
        return "Usage: /register <name> <username> <password>"
    message = await state.session.register(args[0], args[1], args[2])
    return f"{message} You can now /login."


def cmd_logout(state: AppState, args: list[str]) -> str:
    state.session.logout()
    return "Logged out."


def cmd_whoami(state: AppState, args: list[str]) -> str:
    session = state.session.session
    if not session.authenticated or session.user is None:
        return f"Not logged in ({session.status})."
    user = session.user
    extra = f" ({user.name})" if user.name else ""
    return f"Logged in as {user.username}{extra}."


# ---- tasks ----


async def cmd_list(state: AppState, args: list[str]) -> str:
    await state.tasks.list()
    err = state.tasks.last_load_error
    if err is not None:
        return f"Could not load tasks: {err.message}"
    return _render_view(state)


def cmd_show(state: AppState, args: list[str]) -> str:
    return _render_view(state)


async def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <title...> [priority=LOW|MEDIUM|HIGH] [status=...] [desc=...]
    """
    words, opts = _split_options(args, {"priority", "status", "desc"})
    title = " ".join(words).strip()
    if not title:
        return "Usage: /add <title> [priority=LOW|MEDIUM|HIGH] [status=PENDING|IN_PROGRESS|COMPLETED] [desc=...]"
    try:
        draft = TaskDraft(
            title=title,
            priority=_upper_enum(TaskPriority, opts["priority"]) if "priority" in opts else TaskPriority.MEDIUM,
            status=_upper_enum(TaskStatus, opts["status"]) if "status" in opts else TaskStatus.PENDING,
            description=opts.get("desc") or None,
        )
    except ValueError as e:
        return str(e)
    task = await state.tasks.create(draft)
    return f"Created {format_task(task)}"


async def cmd_edit(state: AppState, args: list[str]) -> str:
    """
    /edit <id> [title=...] [desc=...] [priority=...] [status=...]
    """
    words, opts = _split_options(args, {"title", "desc", "priority", "status"})
    if len(words) != 1 or not opts:
        return "Usage: /edit <id> [title=...] [desc=...] [priority=...] [status=...]"
    try:
        update = TaskUpdate(
            title=opts.get("title"),
            description=opts.get("desc"),
            priority=_upper_enum(TaskPriority, opts["priority"]) if "priority" in opts else None,
            status=_upper_enum(TaskStatus, opts["status"]) if "status" in opts else None,
        )
    except ValueError as e:
        return str(e)
    task = await state.tasks.update(words[0], update)
    return f"Updated {format_task(task)}"


async def cmd_status(state: AppState, args: list[str]) -> str:
    if len(args) != 2:
        return "Usage: /status <id> <PENDING|IN_PROGRESS|COMPLETED>"
    try:
        status = _upper_enum(TaskStatus, args[1])
    except ValueError as e:
        return str(e)
    task = await state.tasks.set_status(args[0], status)
    return f"Updated {format_task(task)}"


async def cmd_delete(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /delete <id>"
    await state.tasks.delete(args[0])
    return f"Deleted task {args[0]}."


# ---- view ----


def cmd_filter(state: AppState, args: list[str]) -> str:
    """
    /filter status <ALL|PENDING|IN_PROGRESS|COMPLETED>
    /filter priority <ALL|LOW|MEDIUM|HIGH>
    """
    if len(args) != 2 or args[0].lower() not in ("status", "priority"):
        return (
            "Usage:\n"
            "  /filter status <ALL|PENDING|IN_PROGRESS|COMPLETED>\n"
            "  /filter priority <ALL|LOW|MEDIUM|HIGH>"
        )
    try:
        if args[0].lower() == "status":
            state.tasks.set_filter_status(_upper_enum(FilterStatus, args[1]))
        else:
            state.tasks.set_filter_priority(_upper_enum(FilterPriority, args[1]))
    except ValueError as e:
        return str(e)
    return _render_view(state)


def cmd_sort(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /sort <created|priority|title>"
    try:
        state.tasks.set_sort(TaskSort(args[0].strip().lower()))
    except ValueError:
        return f"'{args[0]}' is not one of: created, priority, title"
    return _render_view(state)


def cmd_search(state: AppState, args: list[str]) -> str:
    """/search <text>; /search with no text clears the query."""
    state.tasks.set_search_query(" ".join(args))
    return _render_view(state)


def cmd_prefs(state: AppState, args: list[str]) -> str:
    prefs = state.tasks.preferences
    return (
        "View preferences:\n"
        f"  status filter: {prefs.filter_status}\n"
        f"  priority filter: {prefs.filter_priority}\n"
        f"  sort: {prefs.sort}\n"
        f"  search: {prefs.search_query!r} (not saved)"
    )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("login", cmd_login, help_text="Sign in: /login <username> <password>.")
registry.register("register", cmd_register, help_text="Create an account: /register <name> <username> <password>.")
registry.register("logout", cmd_logout, help_text="Sign out and forget the saved token.")
registry.register("whoami", cmd_whoami, help_text="Show the signed-in user.")
registry.register("list", cmd_list, help_text="Reload tasks from the server and show them.", aliases=["ls"])
registry.register("show", cmd_show, help_text="Show the current view without reloading.")
registry.register("add", cmd_add, help_text="Create a task: /add <title> [priority=..] [status=..] [desc=..].")
registry.register("edit", cmd_edit, help_text="Update a task: /edit <id> [title=..] [desc=..] [priority=..] [status=..].")
registry.register("status", cmd_status, help_text="Change status: /status <id> <STATUS>.")
registry.register("delete", cmd_delete, help_text="Delete a task: /delete <id>.", aliases=["rm"])
registry.register("filter", cmd_filter, help_text="Filter: /filter status <..> | /filter priority <..>.")
registry.register("sort", cmd_sort, help_text="Sort: /sort created | priority | title.")
registry.register("search", cmd_search, help_text="Search title/description: /search <text> (empty clears).")
registry.register("prefs", cmd_prefs, help_text="Show the current filter/sort/search settings.")
