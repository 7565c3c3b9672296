# src/tasktrack/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..auth.models import Session
from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def _prompt(state: AppState) -> str:
    user = state.session.session.user
    who = user.username if user is not None else "guest"
    return f"{who}> "


async def run_console_loop(state: AppState) -> None:
    """Interactive REPL. Input is read in a worker thread so the event loop stays free."""
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Use /help for commands. Use /exit to quit.\n")

    def _on_session_change(session: Session) -> None:
        # Forced logout happens inside a request; tell the user where they stand.
        if not session.authenticated and not session.loading:
            _print_ts("[SESSION] Signed out.")

    unsubscribe = state.session.subscribe(_on_session_change)

    if not state.session.session.authenticated:
        _print_ts("Not logged in. Use /login <username> <password> or /register.")
    else:
        print(await command_registry.handle(state, "/show"))

    try:
        while True:
            try:
                user_input = (await asyncio.to_thread(input, _prompt(state))).strip()
            except EOFError:
                logger.info("Console EOF received, exiting.")
                break
            except KeyboardInterrupt:
                logger.info("Console KeyboardInterrupt, exiting.")
                print()
                break

            if not user_input:
                continue

            if user_input.lower() in ("/exit", "/quit"):
                logger.info("Console exit command received.")
                break

            if not user_input.startswith("/"):
                print("Commands start with '/'. Use /help to list them.")
                continue

            try:
                reply = await command_registry.handle(state, user_input)
            except Exception:
                logger.exception("Command handler crashed.")
                reply = "Internal error while handling a command."

            if reply is not None:
                print(reply)
    finally:
        unsubscribe()
        logger.info("Console connector finished.")
