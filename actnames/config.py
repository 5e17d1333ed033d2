import json
from enum import StrEnum
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from actnames.constants import (
    BIOGRAPHY_PREVIEW_LENGTH,
    DEFAULT_LAYER_URL,
    DEFAULT_SUMMARY_URL,
    FETCH_PAGE_SIZE,
    HTTP_TIMEOUT,
    MAX_RECORD_COUNT,
    POPUP_PREVIEW_LENGTH,
    SEARCH_LIMIT,
)
from actnames.logging import get_logger

ACTNAMES_DIR = Path.home() / ".actnames"
SETTINGS_PATH = ACTNAMES_DIR / "settings.json"

_logger = get_logger(__name__)


class Theme(StrEnum):
    LIGHT = "light"
    DARK = "dark"


def load_user_settings() -> dict:
    if not SETTINGS_PATH.exists():
        return {}
    try:
        settings = json.loads(SETTINGS_PATH.read_text())
    except (json.JSONDecodeError, OSError):
        _logger.warning("Failed to load user settings", path=str(SETTINGS_PATH), exc_info=True)
        return {}
    if not isinstance(settings, dict):
        _logger.warning("Ignoring malformed user settings", path=str(SETTINGS_PATH))
        return {}
    return settings


def save_user_settings(settings: dict) -> None:
    ACTNAMES_DIR.mkdir(parents=True, exist_ok=True)
    SETTINGS_PATH.write_text(json.dumps(settings, indent=2))


class Config(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ACTNAMES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Data sources
    layer_url: str = DEFAULT_LAYER_URL
    summary_url: str = DEFAULT_SUMMARY_URL

    # Paging
    search_limit: int = Field(default=SEARCH_LIMIT, ge=1, le=MAX_RECORD_COUNT)
    page_size: int = Field(default=FETCH_PAGE_SIZE, ge=1, le=MAX_RECORD_COUNT)

    http_timeout: float = Field(default=HTTP_TIMEOUT, gt=0)

    # Display
    preview_length: int = Field(default=BIOGRAPHY_PREVIEW_LENGTH, ge=1)
    popup_preview_length: int = Field(default=POPUP_PREVIEW_LENGTH, ge=1)
    theme: Theme = Theme.LIGHT

    log_level: str = "INFO"

    @field_validator("layer_url", "summary_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Expected an http(s) URL, got: {v!r}")
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unsupported log level: {v}")
        return level

    @property
    def settings_path(self) -> Path:
        return SETTINGS_PATH


PERSIST_KEYS = frozenset({"theme"})


def get_config(**overrides) -> Config:
    settings = load_user_settings()

    # init args > settings.json > env vars > defaults
    persisted = {k: settings[k] for k in PERSIST_KEYS if k in settings}
    return Config(**{**persisted, **overrides})


def save_theme(theme: Theme) -> None:
    settings = load_user_settings()
    settings["theme"] = str(theme)
    save_user_settings(settings)
