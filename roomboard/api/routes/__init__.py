"""Route modules for the roomboard server."""

from .display_routes import register_display_routes

__all__ = ["register_display_routes"]
