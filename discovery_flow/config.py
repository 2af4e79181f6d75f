"""Configuration helpers for the Project Assist backend."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Mapping

from dotenv import load_dotenv

ENV_PREFIX = "PROJECT_ASSIST_"

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:3001",
    "http://127.0.0.1:3001",
]

load_dotenv(override=False)


@dataclass(frozen=True)
class Settings:
    """Settings container for the discovery backend.

    Only the OpenAI key is required for live conversations; without it the
    runners fall back to the scripted facilitator.
    """

    openai_api_key: str | None = None
    llm_model: str = DEFAULT_MODEL
    llm_temperature: float = 0.7
    max_tool_rounds: int = 6
    # 0 keeps every runner until the process exits.
    runner_cache_size: int = 0
    allowed_origins: List[str] = field(default_factory=lambda: list(DEFAULT_ALLOWED_ORIGINS))
    log_level: str = "INFO"

    @property
    def llm_enabled(self) -> bool:
        """True when a live model can be called."""

        return bool(self.openai_api_key)


def _env(environ: Mapping[str, str], name: str) -> str | None:
    value = environ.get(f"{ENV_PREFIX}{name}")
    if value is None or not value.strip():
        return None
    return value.strip()


def _parse_float(raw: str | None, default: float) -> float:
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _parse_int(raw: str | None, default: int) -> int:
    if raw is None:
        return default
    try:
        return max(0, int(raw))
    except ValueError:
        return default


def _parse_origins(raw: str | None) -> List[str]:
    if not raw:
        return list(DEFAULT_ALLOWED_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Read environment variables and return cached settings."""

    environ = os.environ
    return Settings(
        openai_api_key=environ.get("OPENAI_API_KEY") or None,
        llm_model=_env(environ, "LLM_MODEL") or DEFAULT_MODEL,
        llm_temperature=_parse_float(_env(environ, "LLM_TEMPERATURE"), 0.7),
        max_tool_rounds=max(1, _parse_int(_env(environ, "MAX_TOOL_ROUNDS"), 6)),
        runner_cache_size=_parse_int(_env(environ, "RUNNER_CACHE_SIZE"), 0),
        allowed_origins=_parse_origins(_env(environ, "ALLOWED_ORIGINS")),
        log_level=(_env(environ, "LOG_LEVEL") or "INFO").upper(),
    )
