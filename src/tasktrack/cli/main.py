# src/tasktrack/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, resolves the session, then runs the
console REPL on one asyncio event loop.
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import create_initial_state, shutdown_state, start_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _run(settings) -> None:
    state = create_initial_state(settings=settings)
    try:
        await start_state(state)
        if settings.console_enabled:
            await run_console_loop(state)
        else:
            logger.info("Console disabled; nothing to run.")
    finally:
        await shutdown_state(state)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    setup_logging(log_dir=settings.log_dir, console_level=console_level)

    logger.info("Starting %s (api=%s)...", settings.app_name, settings.api_base_url)

    try:
        asyncio.run(_run(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    logger.info("Bye.")


if __name__ == "__main__":
    main()
