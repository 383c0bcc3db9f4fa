"""
Runtime settings for net-watcher.

Values come from python-decouple (environment first, then a .env or
settings.ini file) and are validated with Pydantic before anything touches
the network.
"""

import socket
from pathlib import Path

from decouple import config
from loguru import logger
from pydantic import BaseModel, Field, field_validator

DEFAULT_ENDPOINT = "www.google.com"
DEFAULT_HOSTNAME_FILE = "hostname"
DEFAULT_LOG_DIR = "logs"


class InfluxSettings(BaseModel):
    """Where heartbeat points are written."""

    enabled: bool = False
    url: str = Field("http://masterpi.localdomain:8086", description="InfluxDB base URL")
    token: str = Field("admin:password", description="API token, or user:password on 1.8")
    org: str = ""
    bucket: str = Field("homedb", min_length=1)
    timeout: float = Field(5.0, gt=0)

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Only plain HTTP(S) write endpoints are supported."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Invalid InfluxDB URL: {v}. Must start with http:// or https://")
        return v.rstrip("/")


class WatchSettings(BaseModel):
    """Validated configuration for one monitoring run."""

    endpoint: str = Field(DEFAULT_ENDPOINT, min_length=1, max_length=253)
    source: str = Field(..., min_length=1, description="Hostname label for telemetry tags")
    timeout: float = Field(1.0, gt=0, description="Per-probe timeout in seconds")
    payload_size: int = Field(56, ge=0, le=65500)
    privileged: bool = True
    influx: InfluxSettings = Field(default_factory=InfluxSettings)

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        """Reject targets with embedded whitespace."""
        v = v.strip()
        if not v or any(ch.isspace() for ch in v):
            raise ValueError(f"Invalid endpoint: {v!r}")
        return v


def get_endpoint(argv: list[str] | None = None) -> str:
    """
    Pick the ping target.

    Order: first positional argument, WATCH_ENDPOINT, then the default.
    """
    if argv:
        return argv[0]

    return config("WATCH_ENDPOINT", default=DEFAULT_ENDPOINT)


def get_log_dir() -> str:
    """Directory for the debug log; read before the other settings so their errors get logged."""
    return config("WATCH_LOG_DIR", default=DEFAULT_LOG_DIR)


def get_hostname(path: str | Path = DEFAULT_HOSTNAME_FILE) -> str:
    """
    Hostname label for telemetry.

    Uses the first non-empty line of `path`; falls back to the system
    hostname with a warning when the file is missing, unreadable or blank.
    """
    fallback = socket.gethostname()
    path = Path(path)

    try:
        with open(path) as f:
            for line in f:
                line = line.strip()
                if line:
                    logger.debug(f"Using hostname '{line}' from {path}")
                    return line
    except OSError as e:
        logger.bind(console=True).warning(f"WARN: {e} - using '{fallback}'")
        return fallback

    logger.bind(console=True).warning(f"WARN: hostname file was empty, using '{fallback}'")
    return fallback


def load_settings(argv: list[str] | None = None) -> WatchSettings:
    """
    Build WatchSettings from CLI args and decouple-managed config.

    Raises:
        ValidationError: If any value is out of range
    """
    influx = InfluxSettings(
        enabled=config("WATCH_INFLUX_ENABLED", default=False, cast=bool),
        url=config("WATCH_INFLUX_URL", default="http://masterpi.localdomain:8086"),
        token=config("WATCH_INFLUX_TOKEN", default="admin:password"),
        org=config("WATCH_INFLUX_ORG", default=""),
        bucket=config("WATCH_INFLUX_BUCKET", default="homedb"),
        timeout=config("WATCH_INFLUX_TIMEOUT", default=5.0, cast=float),
    )

    return WatchSettings(
        endpoint=get_endpoint(argv),
        source=get_hostname(config("WATCH_HOSTNAME_FILE", default=DEFAULT_HOSTNAME_FILE)),
        timeout=config("WATCH_TIMEOUT", default=1.0, cast=float),
        payload_size=config("WATCH_PAYLOAD_SIZE", default=56, cast=int),
        privileged=config("WATCH_PRIVILEGED", default=True, cast=bool),
        influx=influx,
    )
