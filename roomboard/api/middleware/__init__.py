"""aiohttp middleware for roomboard."""

from .request_logging import get_request_id, request_logging_middleware

__all__ = ["get_request_id", "request_logging_middleware"]
