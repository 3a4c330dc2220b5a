from __future__ import annotations

import os
from typing import Any, Dict

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Settings field -> environment variable.
_ENV_VARS: Dict[str, str] = {
    "morpho_graphql_url": "MORPHO_GRAPHQL_URL",
    "chain_id": "MORPHO_CHAIN_ID",
    "http_timeout_seconds": "MORPHO_HTTP_TIMEOUT",
    "display_units": "MORPHO_DISPLAY_UNITS",
    "log_level": "MORPHO_LOG_LEVEL",
}


class Settings(BaseModel):
    """Centralized configuration for the Morpho MCP server."""

    morpho_graphql_url: str = Field(default="https://api.morpho.org/graphql")
    chain_id: int = Field(default=1)
    http_timeout_seconds: float = Field(default=30.0, gt=0)
    display_units: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from MORPHO_* environment variables, reading a .env file first."""
        load_dotenv()
        values: Dict[str, Any] = {}
        for field_name, env_name in _ENV_VARS.items():
            raw = os.getenv(env_name)
            if raw:
                values[field_name] = raw
        return cls.model_validate(values)

    @property
    def log_level_name(self) -> str:
        """Return the log level normalized as an upper-case level name."""
        return self.log_level.upper()
