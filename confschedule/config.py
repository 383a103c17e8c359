"""Environment-driven settings for the conference schedule service."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    # LLM
    openai_api_key: str | None = field(default_factory=lambda: os.getenv("OPENAI_API_KEY"))
    router_model: str = field(default_factory=lambda: os.getenv("ROUTER_MODEL", "gpt-4o-mini"))
    search_model: str = field(default_factory=lambda: os.getenv("SEARCH_MODEL", "gpt-4o"))
    info_model: str = field(default_factory=lambda: os.getenv("INFO_MODEL", "gpt-4o-mini"))
    assistant_max_steps: int = field(
        default_factory=lambda: int(os.getenv("ASSISTANT_MAX_STEPS", "5"))
    )

    # Sessions
    session_ttl_hours: int = field(
        default_factory=lambda: int(os.getenv("SESSION_TTL_HOURS", "168"))
    )
    session_cookie_secure: bool = field(
        default_factory=lambda: _env_bool("SESSION_COOKIE_SECURE", False)
    )

    # Conference
    conference_timezone: str = field(
        default_factory=lambda: os.getenv("CONFERENCE_TIMEZONE", "America/Los_Angeles")
    )

    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())


settings = Settings()
