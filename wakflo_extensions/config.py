"""
Runtime settings for connectors.

Settings are read from ``WAKFLO_*`` environment variables once per
process. Hosts that need different values per invocation pass their own
ConnectorSettings through the invocation context instead.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache

from pydantic import BaseModel, Field

DEFAULT_USER_AGENT = "WakfloIntegration/1.0"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ConnectorSettings(BaseModel):
    """Settings shared by every connector client."""

    # HTTP
    http_timeout: float = Field(default=30.0, gt=0, description="Per-request timeout in seconds")
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="User-Agent sent on outbound requests")

    # Observability
    log_requests: bool = False
    log_responses: bool = False
    log_level: str = "INFO"


def _env_flag(name: str) -> bool:
    return os.getenv(name, "false").lower() in ("1", "true", "yes")


@lru_cache()
def get_settings() -> ConnectorSettings:
    """
    Get connector settings from environment.

    Uses lru_cache for singleton pattern.
    """
    return ConnectorSettings(
        http_timeout=float(os.getenv("WAKFLO_HTTP_TIMEOUT", "30")),
        user_agent=os.getenv("WAKFLO_USER_AGENT", DEFAULT_USER_AGENT),
        log_requests=_env_flag("WAKFLO_LOG_REQUESTS"),
        log_responses=_env_flag("WAKFLO_LOG_RESPONSES"),
        log_level=os.getenv("WAKFLO_LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(settings: ConnectorSettings | None = None) -> None:
    """Configure root logging for a host process embedding the connectors."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format=LOG_FORMAT,
    )
