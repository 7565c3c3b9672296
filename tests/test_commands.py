# tests/test_commands.py

from __future__ import annotations

import pytest

from tasktrack.cli.bootstrap import create_initial_state, shutdown_state, start_state
from tasktrack.cli.commands import CommandRegistry, registry
from tasktrack.core.errors import NotFoundError, ServerError, ValidationError
from tasktrack.core.state import AppState
from tasktrack.tasks.task_models import FilterStatus, TaskSort

from .fakes import FakeTaskServer


@pytest.mark.asyncio
async def test_command_registry_routes_sync_and_async(state) -> None:
    reg = CommandRegistry()
    called = {"sync": 0, "async": 0}

    def h_sync(state, args):
        called["sync"] += 1
        return f"sync {args}"

    async def h_async(state, args):
        called["async"] += 1
        return f"async {args}"

    reg.register("a", h_sync, "a", aliases=["aa"])
    reg.register("b", h_async, "b")

    assert await reg.handle(state, "/a x") == "sync ['x']"
    assert await reg.handle(state, "/AA 'two words'") == "sync ['two words']"
    assert await reg.handle(state, "/b y") == "async ['y']"
    assert called == {"sync": 2, "async": 1}


@pytest.mark.asyncio
async def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert await reg.handle(state, "hello") is None
    assert "Unknown command" in (await reg.handle(state, "/nope") or "")
    assert "Empty command" in (await reg.handle(state, "/") or "")
    assert "Could not parse" in (await reg.handle(state, '/a "unterminated') or "")


@pytest.mark.asyncio
async def test_command_registry_formats_app_errors(state) -> None:
    reg = CommandRegistry()

    def not_found(state, args):
        raise NotFoundError("Task not found with id: 9")

    def invalid(state, args):
        raise ValidationError("Validation failed", field_errors={"title": ["must not be blank"]})

    reg.register("nf", not_found, "nf")
    reg.register("bad", invalid, "bad")

    assert await reg.handle(state, "/nf") == "Error: Task not found with id: 9"
    assert await reg.handle(state, "/bad") == "Error: Validation failed\n  title: must not be blank"


@pytest.mark.asyncio
async def test_help_lists_registered_commands(state) -> None:
    reply = await registry.handle(state, "/help")
    assert reply is not None
    for name in ("login", "logout", "add", "edit", "status", "delete", "filter", "sort", "search"):
        assert f"/{name} " in reply


@pytest.mark.asyncio
async def test_console_session_end_to_end(state: AppState, server: FakeTaskServer) -> None:
    server.seed_task("alice", "Pay rent", priority="HIGH")

    assert "Not logged in" in (await registry.handle(state, "/whoami") or "")

    reply = await registry.handle(state, "/login alice secret1")
    assert reply is not None and reply.startswith("Logged in as alice.")
    assert "Pay rent" in reply
    assert await registry.handle(state, "/whoami") == "Logged in as alice (Alice)."

    reply = await registry.handle(state, "/add Buy milk priority=low desc='2 litres'")
    assert reply is not None and "Buy milk (To Do, Low priority)" in reply
    new_id = state.tasks.view[0].id

    reply = await registry.handle(state, f"/status {new_id} completed")
    assert reply is not None and "(Completed, Low priority)" in reply

    reply = await registry.handle(state, "/filter status COMPLETED")
    assert state.tasks.preferences.filter_status is FilterStatus.COMPLETED
    assert reply is not None and "Buy milk" in reply and "Pay rent" not in reply

    await registry.handle(state, "/filter status all")
    await registry.handle(state, "/sort title")
    assert state.tasks.preferences.sort is TaskSort.TITLE
    assert [t.title for t in state.tasks.view] == ["Buy milk", "Pay rent"]

    reply = await registry.handle(state, "/search RENT")
    assert reply is not None and "Pay rent" in reply and "Buy milk" not in reply

    reply = await registry.handle(state, "/edit 999 title=Nope")
    assert reply == "Error: Task not found with id: 999"

    assert await registry.handle(state, f"/delete {new_id}") == f"Deleted task {new_id}."
    assert state.tasks.get(new_id) is None

    assert await registry.handle(state, "/logout") == "Logged out."
    assert not state.session.session.authenticated


@pytest.mark.asyncio
async def test_bad_arguments_reply_with_usage(state: AppState) -> None:
    assert (await registry.handle(state, "/login alice") or "").startswith("Usage:")
    assert (await registry.handle(state, "/add") or "").startswith("Usage:")
    assert "is not one of" in (await registry.handle(state, "/sort sideways") or "")
    assert "is not one of" in (await registry.handle(state, "/filter priority URGENT") or "")


@pytest.mark.asyncio
async def test_rejected_session_suggests_login(state: AppState, server: FakeTaskServer) -> None:
    server.seed_task("alice", "A")
    await registry.handle(state, "/login alice secret1")
    server.revoke_all()

    reply = await registry.handle(state, "/delete 1")

    assert reply is not None and reply.endswith("Use /login to sign in.")
    assert not state.session.session.authenticated
    assert state.tasks.tasks == []
    assert state.tasks.view == []


@pytest.mark.asyncio
async def test_list_reports_load_failure(state: AppState, server: FakeTaskServer) -> None:
    await registry.handle(state, "/login alice secret1")
    server.down = True

    reply = await registry.handle(state, "/list")

    assert reply is not None and reply.startswith("Could not load tasks:")


@pytest.mark.asyncio
async def test_startup_restores_session_and_preferences(state: AppState, server: FakeTaskServer, settings) -> None:
    server.seed_task("alice", "Persisted")
    await registry.handle(state, "/login alice secret1")
    await registry.handle(state, "/sort priority")
    await registry.handle(state, "/search persisted")
    await shutdown_state(state)

    restarted = create_initial_state(settings=settings, transport=server.transport())
    await start_state(restarted)

    assert restarted.session.session.authenticated
    assert restarted.tasks.preferences.sort is TaskSort.PRIORITY
    assert restarted.tasks.preferences.search_query == ""
    assert [t.title for t in restarted.tasks.tasks] == ["Persisted"]
    await shutdown_state(restarted)


@pytest.mark.asyncio
async def test_forced_logout_empties_the_view(state: AppState, server: FakeTaskServer) -> None:
    server.seed_task("alice", "alice secret task")
    await registry.handle(state, "/login alice secret1")
    assert [t.title for t in state.tasks.view] == ["alice secret task"]

    server.revoke_all()
    await state.tasks.list()

    assert not state.session.session.authenticated
    assert state.tasks.view == []
    assert "(no tasks)" in (await registry.handle(state, "/show") or "")


@pytest.mark.asyncio
async def test_next_user_never_sees_previous_tasks(state: AppState, server: FakeTaskServer) -> None:
    server.add_user("bob", "pw123456", name="Bob")
    server.seed_task("alice", "alice secret task")
    await registry.handle(state, "/login alice secret1")
    await registry.handle(state, "/logout")
    assert state.tasks.tasks == []

    server.next_error = (500, {"message": "db down"})
    reply = await registry.handle(state, "/login bob pw123456")

    assert reply is not None and reply.startswith("Logged in as bob.")
    assert isinstance(state.tasks.last_load_error, ServerError)

    assert state.session.session.user is not None
    assert state.session.session.user.username == "bob"
    assert state.tasks.view == []
