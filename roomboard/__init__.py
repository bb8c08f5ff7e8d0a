"""roomboard - room availability display server.

Renders the next few hours of a room calendar as a bitmap for low-power
e-paper displays. Imports here stay light so the package can be inspected
without pulling in the server stack.
"""

__version__ = "1.0.0"

from typing import Optional


def _init_logging(level_name: Optional[str]) -> None:
    """Install a colorized console handler on the root logger.

    ROOMBOARD_DEBUG (truthy: "1", "true", "yes", "on") forces DEBUG.
    """
    import logging
    import os
    import sys

    from colorlog import ColoredFormatter

    debug_env = os.environ.get("ROOMBOARD_DEBUG", "")
    if debug_env.strip().lower() in ("1", "true", "yes", "on"):
        level_name = "DEBUG"

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(stream=sys.stderr)
        # HH:MM:SS  LEVEL   logger.name: message  (only the level is colorized)
        fmt = "%(asctime)s %(log_color)s%(levelname)-7s%(reset)s %(name)s: %(message)s"
        log_colors = {
            "DEBUG": "cyan",
            "INFO": "green",
            "WARNING": "yellow",
            "ERROR": "red",
            "CRITICAL": "bold_red",
        }
        handler.setFormatter(ColoredFormatter(fmt, datefmt="%H:%M:%S", log_colors=log_colors))
        root.addHandler(handler)

    level = logging.INFO
    if isinstance(level_name, str):
        level = getattr(logging, level_name.upper(), logging.INFO)
    root.setLevel(level)
    logging.getLogger(__name__).debug(
        "Logging initialized at level %s", logging.getLevelName(level)
    )


def run_server(args: Optional[object] = None) -> None:
    """Start the roomboard server.

    Args:
        args: Optional parsed CLI namespace with ``port``, ``host`` and ``debug``

    Configuration comes from the environment (and a local .env file); CLI
    arguments override it.
    """
    import logging
    import os

    _init_logging(os.environ.get("ROOMBOARD_LOG_LEVEL"))
    logger = logging.getLogger(__name__)

    from roomboard.api import server

    cfg = server._build_default_config_from_env()

    if args is not None:
        port = getattr(args, "port", None)
        if port is not None:
            cfg["server_port"] = int(port)
            logger.debug("Applied command line port override: %d", cfg["server_port"])
            if not (os.environ.get("ROOMBOARD_WEB_HOST") or os.environ.get("ROOMBOARD_SERVER_BIND")):
                cfg["server_bind"] = "0.0.0.0"  # nosec B104
        host = getattr(args, "host", None)
        if host:
            cfg["server_bind"] = host
        if getattr(args, "debug", False):
            cfg["debug_logging"] = True

    logger.debug(
        "Resolved configuration (diagnostic): %s",
        {k: cfg.get(k) for k in ("server_bind", "server_port", "request_timeout", "columns_per_row")},
    )
    server.start_server(cfg)
