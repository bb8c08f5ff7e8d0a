"""Configuration management for the roomboard server."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

DEFAULT_SERVER_PORT = 8080
DEFAULT_LOCAL_BIND = "127.0.0.1"
DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_ROWS = 4
DEFAULT_COLUMNS_PER_ROW = 12
DEFAULT_FONT_REGULAR = "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"
DEFAULT_FONT_BOLD = "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"

DISPLAY_ENV_PREFIX = "DISPLAY_"

_NOT_WHITELISTED = re.compile(r"[^0-9A-Z]")


def sanitize_display_id(raw: Optional[str]) -> str:
    """Uppercase a display identifier and drop everything outside [0-9A-Z]."""
    if not raw:
        return ""
    return _NOT_WHITELISTED.sub("", raw.upper())


def parse_env_file(path: Path) -> dict[str, str]:
    """Parse a .env file and return key-value pairs.

    Args:
        path: Path to .env file

    Returns:
        Dictionary of key-value pairs, empty if the file is missing or unreadable.
        Blank lines and ``#`` comments are skipped; surrounding quotes are stripped.
    """
    if not path.exists():
        return {}

    result: dict[str, str] = {}
    try:
        content = path.read_text(encoding="utf-8")
    except OSError:
        logger.debug("Failed to read .env file (continuing): %s", path, exc_info=True)
        return {}

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, val = line.split("=", 1)
        key = key.strip()
        if key:
            result[key] = val.strip().strip('"').strip("'")

    return result


class DisplayConfig(BaseModel):
    """Configuration of a single room display, keyed by its sanitized id."""

    model_config = ConfigDict(frozen=True)

    display_id: str = Field(..., description="Sanitized display identifier")
    name: str = Field(..., min_length=1, description="Room name shown in the header")
    url: str = Field(..., min_length=1, description="ICS calendar feed URL")
    timezone: str = Field(..., min_length=1, description="Label timezone (IANA name)")
    override_timezone: Optional[str] = Field(
        default=None, description="Timezone used only for bucket boundaries"
    )

    @field_validator("override_timezone")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value


class ConfigManager:
    """Manages application configuration from environment variables and .env files."""

    def __init__(
        self,
        env_file_path: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ):
        """Initialize configuration manager.

        Args:
            env_file_path: Optional path to .env file (defaults to .env in current directory)
            environ: Optional environment mapping (defaults to ``os.environ``)
        """
        self.env_file_path = env_file_path or Path.cwd() / ".env"
        self._environ = environ

    @property
    def environ(self) -> Mapping[str, str]:
        return os.environ if self._environ is None else self._environ

    def load_env_file(self) -> list[str]:
        """Load the .env file into ``os.environ`` without overriding existing keys.

        Returns:
            Keys that were loaded from the file
        """
        if not self.env_file_path.exists():
            logger.debug("No .env file found at %s", self.env_file_path)
            return []

        set_keys = []
        for key, val in parse_env_file(self.env_file_path).items():
            if key not in os.environ:
                os.environ[key] = val
                set_keys.append(key)

        if set_keys:
            logger.debug("Loaded .env defaults for keys: %s", ", ".join(set_keys))
        return set_keys

    def build_config_from_env(self) -> dict[str, Any]:
        """Build the server configuration dictionary from environment variables.

        Recognizes:
        - ROOMBOARD_WEB_HOST or ROOMBOARD_SERVER_BIND -> 'server_bind'
        - ROOMBOARD_WEB_PORT or PORT -> 'server_port' (int)
        - ROOMBOARD_REQUEST_TIMEOUT -> 'request_timeout' (float seconds)
        - ROOMBOARD_FONT_REGULAR / ROOMBOARD_FONT_BOLD -> font paths
        - ROOMBOARD_COLUMNS_PER_ROW -> 'columns_per_row' (int dividing 60)
        - ROOMBOARD_LOG_LEVEL -> 'log_level'
        """
        env = self.environ
        cfg: dict[str, Any] = {
            "server_port": DEFAULT_SERVER_PORT,
            "request_timeout": DEFAULT_REQUEST_TIMEOUT,
            "font_regular": env.get("ROOMBOARD_FONT_REGULAR") or DEFAULT_FONT_REGULAR,
            "font_bold": env.get("ROOMBOARD_FONT_BOLD") or DEFAULT_FONT_BOLD,
            "rows": DEFAULT_ROWS,
            "columns_per_row": DEFAULT_COLUMNS_PER_ROW,
        }

        port = env.get("ROOMBOARD_WEB_PORT") or env.get("PORT")
        port_configured = False
        if port:
            try:
                cfg["server_port"] = int(port)
                port_configured = True
            except ValueError:
                logger.warning("Invalid server port %r; using %d", port, DEFAULT_SERVER_PORT)
        else:
            logger.info("No port configured, listening locally on %d", DEFAULT_SERVER_PORT)

        host = env.get("ROOMBOARD_WEB_HOST") or env.get("ROOMBOARD_SERVER_BIND")
        if host:
            cfg["server_bind"] = host
        else:
            cfg["server_bind"] = "0.0.0.0" if port_configured else DEFAULT_LOCAL_BIND  # nosec B104

        timeout = env.get("ROOMBOARD_REQUEST_TIMEOUT")
        if timeout:
            try:
                value = float(timeout)
                if value <= 0:
                    raise ValueError(timeout)
                cfg["request_timeout"] = value
            except ValueError:
                logger.warning("Invalid ROOMBOARD_REQUEST_TIMEOUT=%r; ignoring", timeout)

        columns = env.get("ROOMBOARD_COLUMNS_PER_ROW")
        if columns:
            try:
                value = int(columns)
                if value <= 0 or 60 % value:
                    raise ValueError(columns)
                cfg["columns_per_row"] = value
            except ValueError:
                logger.warning("Invalid ROOMBOARD_COLUMNS_PER_ROW=%r; ignoring", columns)

        log_level = env.get("ROOMBOARD_LOG_LEVEL")
        if log_level:
            cfg["log_level"] = log_level

        return cfg

    def load_full_config(self) -> dict[str, Any]:
        """Load the .env file, then build configuration from the environment."""
        self.load_env_file()
        return self.build_config_from_env()

    def get_display_config(self, raw_display_id: Optional[str]) -> Optional[DisplayConfig]:
        """Look up the configuration entries of one display.

        Args:
            raw_display_id: Display identifier as received from the client

        Returns:
            DisplayConfig, or None when the id is empty or a required entry
            (NAME, URL, TZ) is missing
        """
        display_id = sanitize_display_id(raw_display_id)
        if not display_id:
            return None

        env = self.environ
        prefix = f"{DISPLAY_ENV_PREFIX}{display_id}_"
        name = env.get(prefix + "NAME", "")
        url = env.get(prefix + "URL", "")
        tz = env.get(prefix + "TZ", "")

        if not (name and url and tz):
            logger.info("No configuration for display %s", display_id)
            return None

        return DisplayConfig(
            display_id=display_id,
            name=name,
            url=url,
            timezone=tz,
            override_timezone=env.get(prefix + "OTZ") or None,
        )


def get_config_value(config: Any, key: str, default: Any = None) -> Any:
    """Get configuration value supporting both dict and attribute-style objects."""
    if isinstance(config, dict):
        return config.get(key, default)
    return getattr(config, key, default)
