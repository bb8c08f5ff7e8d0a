"""Display image and health routes."""

from __future__ import annotations

import logging

from aiohttp import web

from roomboard.core.config_manager import ConfigManager
from roomboard.core.exceptions import ConfigurationError
from roomboard.domain.pipeline import GridPipeline

logger = logging.getLogger(__name__)

BMP_CONTENT_TYPE = "image/bmp"


def register_display_routes(
    app: web.Application,
    pipeline: GridPipeline,
    config_manager: ConfigManager,
) -> None:
    """Register ``GET /clock`` and ``GET /health``.

    Args:
        app: aiohttp web application
        pipeline: Grid pipeline shared by all requests
        config_manager: Source of per-display configuration
    """

    async def serve_clock(request: web.Request) -> web.Response:
        """Render the display named by the ``display`` query parameter."""
        display = config_manager.get_display_config(request.query.get("display"))
        try:
            body = await pipeline.render(display)
        except ConfigurationError:
            logger.exception(
                "Configuration error for display %s", display.display_id if display else "-"
            )
            return web.Response(status=500)
        return web.Response(
            body=body,
            content_type=BMP_CONTENT_TYPE,
            headers={"Cache-Control": "no-store"},
        )

    async def serve_health(_request: web.Request) -> web.Response:
        return web.json_response(
            {
                "status": "ok",
                "rows": pipeline.rows,
                "columns_per_row": pipeline.columns,
            }
        )

    app.router.add_get("/clock", serve_clock)
    app.router.add_get("/health", serve_health)
    logger.debug("Display routes registered")
