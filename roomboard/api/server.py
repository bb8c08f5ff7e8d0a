"""roomboard.api.server - asyncio HTTP server for room availability displays.

This module wires the request pipeline into an aiohttp application:

- fonts are loaded once before the listener starts (a failure aborts startup)
- one shared httpx client downloads calendar feeds for all requests
- ``GET /clock?display=<id>`` returns the display bitmap, ``GET /health`` a
  small JSON status

Requests share no mutable state; each one rebuilds its grid from scratch.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
import sys
from typing import Any, Optional

from aiohttp import web

from roomboard.api.middleware import request_logging_middleware
from roomboard.api.routes import register_display_routes
from roomboard.calendar.fetcher import CalendarFetcher
from roomboard.core.config_manager import (
    DEFAULT_COLUMNS_PER_ROW,
    DEFAULT_FONT_BOLD,
    DEFAULT_FONT_REGULAR,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_ROWS,
    DEFAULT_SERVER_PORT,
    ConfigManager,
    get_config_value,
)
from roomboard.core.exceptions import FontLoadError
from roomboard.core.http_client import build_timeout, close_all_clients, get_shared_client
from roomboard.core.log_config import configure_logging
from roomboard.domain.pipeline import GridPipeline
from roomboard.rendering.fonts import FontSet, load_fonts
from roomboard.rendering.grid_renderer import GridRenderer

logger = logging.getLogger(__name__)

SHUTDOWN_GRACE_SECONDS = 5.0


def _build_default_config_from_env() -> dict[str, Any]:
    """Load .env defaults and build the server config from the environment."""
    return ConfigManager().load_full_config()


async def _make_app(
    config: Any,
    fonts: FontSet,
    config_manager: Optional[ConfigManager] = None,
    fetcher: Optional[CalendarFetcher] = None,
) -> web.Application:
    """Create the aiohttp application.

    Args:
        config: Server configuration (dict or attribute object)
        fonts: Loaded font faces
        config_manager: Per-display configuration lookup (defaults to environment)
        fetcher: Calendar fetcher (defaults to one on the shared HTTP client)
    """
    timeout = float(get_config_value(config, "request_timeout", DEFAULT_REQUEST_TIMEOUT))
    if fetcher is None:
        client = await get_shared_client("calendar", timeout=build_timeout(timeout))
        fetcher = CalendarFetcher(client, timeout=timeout)

    pipeline = GridPipeline(
        renderer=GridRenderer(fonts),
        fetcher=fetcher,
        rows=int(get_config_value(config, "rows", DEFAULT_ROWS)),
        columns=int(get_config_value(config, "columns_per_row", DEFAULT_COLUMNS_PER_ROW)),
    )

    app = web.Application(middlewares=[request_logging_middleware])
    register_display_routes(app, pipeline, config_manager or ConfigManager())

    async def _shutdown(_app: web.Application) -> None:
        logger.info("Application shutdown requested")
        await close_all_clients()

    app.on_shutdown.append(_shutdown)
    return app


async def _serve(
    config: Any,
    fonts: FontSet,
    external_stop_event: asyncio.Event | None = None,
) -> None:
    """Run the server until signalled to stop.

    Args:
        config: Server configuration
        fonts: Loaded font faces
        external_stop_event: Optional event to signal shutdown. If provided,
            signal handlers are not registered (the caller owns them).
    """
    stop_event = external_stop_event or asyncio.Event()
    app = await _make_app(config, fonts)

    runner = web.AppRunner(app, shutdown_timeout=SHUTDOWN_GRACE_SECONDS)
    await runner.setup()

    host = get_config_value(config, "server_bind", "127.0.0.1")
    port = int(get_config_value(config, "server_port", DEFAULT_SERVER_PORT))
    site = web.TCPSite(runner, host=host, port=port)
    try:
        await site.start()
    except OSError:
        logger.exception("Failed to start server on %s:%d", host, port)
        await runner.cleanup()
        raise

    logger.info("Listening on %s:%d", host, port)

    if external_stop_event is None:
        loop = asyncio.get_running_loop()

        def _on_signal() -> None:
            logger.info("Shutdown signal received")
            stop_event.set()

        for sig in (signal.SIGINT, signal.SIGTERM):
            with contextlib.suppress(NotImplementedError):
                loop.add_signal_handler(sig, _on_signal)

    await stop_event.wait()
    logger.info("Stopping server, allowing %.0fs for in-flight requests", SHUTDOWN_GRACE_SECONDS)
    await runner.cleanup()
    logger.info("Server gracefully stopped")


def start_server(config: Any) -> None:
    """Load fonts, then run the event loop and HTTP server until SIGINT/SIGTERM.

    Args:
        config: dict or attribute object with keys:
            - server_bind / server_port: listen address
            - request_timeout: calendar download timeout in seconds
            - font_regular / font_bold: font file paths
            - rows / columns_per_row: grid shape
            - debug_logging: enable debug logging for roomboard (bool)

    Exits the process with status 1 when a font cannot be loaded.
    """
    configure_logging(debug_mode=bool(get_config_value(config, "debug_logging", False)))

    try:
        fonts = load_fonts(
            get_config_value(config, "font_regular", DEFAULT_FONT_REGULAR),
            get_config_value(config, "font_bold", DEFAULT_FONT_BOLD),
        )
    except FontLoadError as e:
        logger.critical("Cannot start without fonts: %s", e)
        sys.exit(1)

    try:
        asyncio.run(_serve(config, fonts))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
