"""Command-line entry for roomboard."""

from __future__ import annotations

import argparse
import sys
from typing import NoReturn, Optional

from . import run_server


def _create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="roomboard",
        description="Room availability display server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Displays are configured through environment variables:
  DISPLAY_<ID>_NAME   room name shown in the header
  DISPLAY_<ID>_URL    ICS feed URL
  DISPLAY_<ID>_TZ     label timezone (IANA name)
  DISPLAY_<ID>_OTZ    optional timezone for slot boundaries

Examples:
  python -m roomboard                 # listen on 127.0.0.1:8080
  python -m roomboard --port 3000     # listen on all interfaces, port 3000
        """,
    )
    parser.add_argument(
        "--port",
        type=int,
        metavar="PORT",
        help="Port for the web server (default: 8080, or ROOMBOARD_WEB_PORT / PORT)",
    )
    parser.add_argument(
        "--host",
        metavar="HOST",
        help="Address to bind (default: 127.0.0.1 unless a port is configured)",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[list[str]] = None) -> NoReturn:
    """Run the roomboard CLI."""
    args = _create_parser().parse_args(argv)
    run_server(args)
    sys.exit(0)


if __name__ == "__main__":
    main()
