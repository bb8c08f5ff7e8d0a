"""Request id and access logging middleware.

The request id is taken from ``X-Request-ID`` / ``X-Correlation-ID`` or
generated, kept in a context variable for log records, and echoed back in the
``X-Request-ID`` response header.
"""

import logging
import time
import uuid
from collections.abc import Awaitable, Callable
from contextvars import ContextVar

from aiohttp import web

logger = logging.getLogger(__name__)

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


@web.middleware
async def request_logging_middleware(
    request: web.Request, handler: Handler
) -> web.StreamResponse:
    request_id = (
        request.headers.get("X-Request-ID")
        or request.headers.get("X-Correlation-ID")
        or str(uuid.uuid4())
    )
    token = request_id_var.set(request_id)
    started = time.perf_counter()
    logger.info("url=%s remote=%s", request.rel_url, request.remote)

    try:
        response = await handler(request)
    except web.HTTPException as exc:
        exc.headers["X-Request-ID"] = request_id
        raise
    finally:
        logger.debug(
            "Handled %s in %.1fms", request.rel_url, (time.perf_counter() - started) * 1000
        )
        request_id_var.reset(token)

    response.headers["X-Request-ID"] = request_id
    return response


def get_request_id() -> str:
    """Current request id, or "no-request-id" outside a request."""
    request_id = request_id_var.get()
    return request_id if request_id else "no-request-id"
