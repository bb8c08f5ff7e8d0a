"""
Central logging configuration for roomboard.

Keeps roomboard's own loggers at INFO (or DEBUG on request) while quieting the
chatty third-party libraries used by the server and renderer.
"""

import logging
import os
from typing import Optional


class RequestIdFilter(logging.Filter):
    """Add the current request id to every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        # Imported lazily so logging can be configured before aiohttp loads
        try:
            from roomboard.api.middleware.request_logging import get_request_id

            record.request_id = get_request_id()
        except ImportError:
            record.request_id = "no-request-id"
        return True


def configure_logging(debug_mode: bool = False, force_debug: Optional[bool] = None) -> None:
    """
    Configure log levels for roomboard and its dependencies.

    Args:
        debug_mode: Whether to enable debug logging for roomboard modules
        force_debug: Override debug mode setting (None to use env var detection)

    Environment Variables:
        ROOMBOARD_DEBUG: Set to '1', 'true', 'yes' to force debug logging
        ROOMBOARD_LOG_LEVEL: Override root log level (DEBUG, INFO, WARNING, ERROR)
    """
    env_debug = os.getenv("ROOMBOARD_DEBUG", "").lower() in ("1", "true", "yes", "on")
    env_log_level = os.getenv("ROOMBOARD_LOG_LEVEL", "").upper()

    if force_debug is not None:
        final_debug = force_debug
    else:
        final_debug = env_debug or debug_mode

    root_level = logging.DEBUG if final_debug else logging.INFO
    if env_log_level in ("DEBUG", "INFO", "WARNING", "ERROR"):
        root_level = getattr(logging, env_log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)

    request_filter = RequestIdFilter()
    if not root_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter(
                "[%(asctime)s] [%(request_id)s] %(levelname)s - %(name)s - %(message)s"
            )
        )
        root_logger.addHandler(handler)

    for existing_handler in root_logger.handlers:
        if not any(isinstance(f, RequestIdFilter) for f in existing_handler.filters):
            existing_handler.addFilter(request_filter)

    logger_config: dict[str, int] = {
        "aiohttp.access": logging.WARNING,
        "aiohttp.server": logging.WARNING,
        "aiohttp.web": logging.INFO,
        "httpx": logging.WARNING,
        "httpcore": logging.WARNING,
        "asyncio": logging.WARNING,
        "PIL": logging.INFO,
        "roomboard": logging.DEBUG if final_debug else logging.INFO,
    }
    for logger_name, level in logger_config.items():
        logging.getLogger(logger_name).setLevel(level)

    if final_debug:
        root_logger.info("Debug logging enabled for roomboard modules")
    else:
        root_logger.debug("Production logging configuration applied")
