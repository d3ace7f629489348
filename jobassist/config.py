"""Load settings and the default profile from env / YAML."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from jobassist.log import get_logger

log = get_logger(__name__)

CONFIG_DIR: Path = Path(__file__).resolve().parent.parent / "config"
PROFILE_PATH: Path = CONFIG_DIR / "profile.yaml"

DEFAULT_AI_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_AI_MODEL = "llama-3.3-70b-versatile"


@dataclass(frozen=True)
class Settings:
    """Credentials and pipeline limits, passed explicitly to the adapter."""

    ai_api_key: str = ""
    ai_model: str = DEFAULT_AI_MODEL
    ai_base_url: str = DEFAULT_AI_BASE_URL
    jsearch_api_key: str = ""
    remotive_enabled: bool = False
    youtube_api_key: str = ""
    http_timeout: float = 15.0
    breaker_failure_threshold: int = 1
    breaker_reset_seconds: float = 300.0
    retry_attempts: int = 1
    retry_base_delay: float = 1.0
    page_size: int = 20
    max_fanout: int = 3
    max_title_variants: int = 3
    max_videos: int = 9

    @property
    def ai_configured(self) -> bool:
        return bool(self.ai_api_key)


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def _env_bool(key: str, default: bool) -> bool:
    raw = get_env(key)
    if not raw:
        return default
    return raw.lower() in ("1", "true", "yes", "on")


def _env_number(key: str, default: float, cast=float):
    raw = get_env(key)
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        log.warning("Ignoring invalid %s=%r, using %s", key, raw, default)
        return default


def load_settings(dotenv: bool = True) -> Settings:
    """Build Settings from the process environment (and ``.env`` if present)."""
    if dotenv:
        load_dotenv()

    ai_key = get_env("GROQ_API_KEY") or get_env("AI_API_KEY")
    # the placeholder from .env.example counts as unset
    if ai_key.startswith("your_"):
        ai_key = ""

    return Settings(
        ai_api_key=ai_key,
        ai_model=get_env("GROQ_LLM_MODEL", DEFAULT_AI_MODEL) or DEFAULT_AI_MODEL,
        ai_base_url=get_env("AI_BASE_URL", DEFAULT_AI_BASE_URL) or DEFAULT_AI_BASE_URL,
        jsearch_api_key=get_env("JSEARCH_API_KEY") or get_env("RAPIDAPI_KEY"),
        remotive_enabled=_env_bool("REMOTIVE_ENABLED", True),
        youtube_api_key=get_env("YOUTUBE_API_KEY"),
        http_timeout=_env_number("HTTP_TIMEOUT", 15.0),
        breaker_failure_threshold=_env_number("BREAKER_FAILURE_THRESHOLD", 1, int),
        breaker_reset_seconds=_env_number("BREAKER_RESET_SECONDS", 300.0),
        retry_attempts=_env_number("RETRY_ATTEMPTS", 1, int),
        page_size=_env_number("PAGE_SIZE", 20, int),
        max_fanout=_env_number("MAX_FANOUT", 3, int),
    )


def load_profile_data(path: Path | None = None) -> dict[str, Any]:
    """Raw default-profile mapping from YAML; empty when the file is missing."""
    path = path or PROFILE_PATH
    if not path.exists():
        log.debug("No profile file at %s, using built-in defaults", path)
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    # Accept the nested layout written by older profile files
    if "profile" in data and isinstance(data["profile"], dict):
        nested = data.pop("profile")
        for key, value in nested.items():
            data.setdefault(key, value)

    return data
