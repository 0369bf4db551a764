"""Environment-driven settings for the API-Football MCP server."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

DEFAULT_BASE_URL = "https://v3.football.api-sports.io"
SERVER_NAME = "api-football-mcp"
SERVER_VERSION = "1.0.0"
PROTOCOL_VERSION = "2025-03-26"


def _int_env(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    return int(value)


def _float_env(name: str, default: float) -> float:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    return float(value)


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 8000
    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    upstream_timeout: float = 15.0
    result_limit: int = 10
    odds_limit: int = 5
    heartbeat_seconds: float = 25.0
    session_ttl_seconds: int = 3600
    session_max_entries: int = 1000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment (and a .env file if present)."""
        load_dotenv()
        return cls(
            host=os.environ.get("HOST", "0.0.0.0"),
            port=_int_env("PORT", 8000),
            api_key=os.environ.get("API_FOOTBALL_KEY", ""),
            base_url=os.environ.get("API_FOOTBALL_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
            upstream_timeout=_float_env("UPSTREAM_TIMEOUT", 15.0),
            result_limit=_int_env("RESULT_LIMIT", 10),
            odds_limit=_int_env("ODDS_LIMIT", 5),
            heartbeat_seconds=_float_env("SSE_HEARTBEAT_SECONDS", 25.0),
            session_ttl_seconds=_int_env("SESSION_TTL_SECONDS", 3600),
            session_max_entries=_int_env("SESSION_MAX_ENTRIES", 1000),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()


def configure_logging(settings: Settings) -> None:
    level = getattr(logging, settings.log_level, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # basicConfig is a no-op once the root logger has handlers (uvicorn, pytest)
    logging.getLogger("api_football_mcp").setLevel(level)
