"""Application configuration: loads .env, then overrides from settings.json."""

import json
import os
from pathlib import Path

from dotenv import load_dotenv

# Project root is where .env and data/ live
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

# Runtime settings written by the office workstation
_SETTINGS_FILE = _PROJECT_ROOT / "data" / "settings.json"


def _load_settings() -> dict:
    """Load saved runtime settings from JSON file."""
    if _SETTINGS_FILE.exists():
        try:
            return json.loads(_SETTINGS_FILE.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            return {}
    return {}


def _save_settings(settings: dict):
    """Persist runtime settings to JSON file."""
    _SETTINGS_FILE.parent.mkdir(parents=True, exist_ok=True)
    _SETTINGS_FILE.write_text(
        json.dumps(settings, indent=2), encoding="utf-8"
    )


def _as_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


# Load saved settings once at import time
_runtime = _load_settings()


class Config:
    """Central configuration: .env defaults, settings.json overrides."""

    # Paths
    PROJECT_ROOT: Path = _PROJECT_ROOT
    DATABASE_PATH: Path = Path(
        os.getenv("DATABASE_PATH", str(_PROJECT_ROOT / "data" / "autofix.db"))
    )
    BACKUP_PATH: Path = Path(
        os.getenv("DATABASE_BACKUP_PATH", str(_PROJECT_ROOT / "data" / "backups"))
    )

    # Recognition service (any OpenAI-compatible endpoint)
    LLM_BASE_URL: str = _runtime.get(
        "llm_base_url",
        os.getenv("LLM_BASE_URL", "http://localhost:1234/v1"),
    )
    LLM_API_KEY: str = _runtime.get(
        "llm_api_key",
        os.getenv("LLM_API_KEY", "lm-studio"),
    )
    LLM_MODEL: str = _runtime.get(
        "llm_model",
        os.getenv("LLM_MODEL", "local-model"),
    )
    LLM_TIMEOUT: int = int(_runtime.get(
        "llm_timeout",
        os.getenv("LLM_TIMEOUT", "60"),
    ))

    # Shop floor defaults
    DEFAULT_LOW_STOCK_THRESHOLD: int = int(_runtime.get(
        "default_low_stock_threshold",
        os.getenv("DEFAULT_LOW_STOCK_THRESHOLD", "5"),
    ))
    DEFAULT_HOURS_SPENT: float = float(_runtime.get(
        "default_hours_spent",
        os.getenv("DEFAULT_HOURS_SPENT", "2.5"),
    ))

    # Reject stale whole-record writes instead of last-writer-wins
    OPTIMISTIC_LOCKING: bool = _as_bool(_runtime.get(
        "optimistic_locking",
        os.getenv("OPTIMISTIC_LOCKING", "false"),
    ))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def update_llm_settings(cls, base_url: str, api_key: str,
                            model: str, timeout: int):
        """Update recognition service settings and persist to disk."""
        cls.LLM_BASE_URL = base_url
        cls.LLM_API_KEY = api_key
        cls.LLM_MODEL = model
        cls.LLM_TIMEOUT = timeout

        settings = _load_settings()
        settings["llm_base_url"] = base_url
        settings["llm_api_key"] = api_key
        settings["llm_model"] = model
        settings["llm_timeout"] = timeout
        _save_settings(settings)

    @classmethod
    def update_shop_settings(cls, low_stock_threshold: int,
                             hours_spent: float,
                             optimistic_locking: bool):
        """Update shop floor defaults and persist."""
        cls.DEFAULT_LOW_STOCK_THRESHOLD = low_stock_threshold
        cls.DEFAULT_HOURS_SPENT = hours_spent
        cls.OPTIMISTIC_LOCKING = optimistic_locking

        settings = _load_settings()
        settings["default_low_stock_threshold"] = low_stock_threshold
        settings["default_hours_spent"] = hours_spent
        settings["optimistic_locking"] = optimistic_locking
        _save_settings(settings)
