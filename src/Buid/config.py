"""Settings loader for Buid."""

import os
from pathlib import Path
from typing import Any

import tomllib
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from Buid.layout import MAX_PROCESS_ID


def _norm_level(v: Any, default: str) -> str:
    if isinstance(v, str):
        return v.upper()
    if isinstance(v, bool):
        return default if v else "NONE"
    return default


def _toml_settings_source() -> dict[str, Any]:
    """Load settings from config.toml with keys mapped to Settings fields.

    This source has LOWER priority than env/.env so those can override TOML.
    BUID_CONFIG_FILE points at a different file.
    """
    cfg_path = Path(os.environ.get("BUID_CONFIG_FILE", "config.toml"))
    if not cfg_path.exists():
        return {}
    with cfg_path.open("rb") as f:
        t = tomllib.load(f)

    out: dict[str, Any] = {}

    # [process]
    # id = 12
    process_cfg = t.get("process", {}) or {}
    if "id" in process_cfg:
        out["process_id"] = process_cfg["id"]

    log_cfg = t.get("logging", {}) or {}
    overall = _norm_level(log_cfg.get("level"), "INFO")
    if "level" in log_cfg:
        out["logging_level"] = overall
    # console/to_file accept a level string or a bool (True -> overall level, False -> NONE)
    if "console" in log_cfg:
        out["logging_console"] = _norm_level(log_cfg["console"], overall)
    if "to_file" in log_cfg:
        out["logging_file"] = _norm_level(log_cfg["to_file"], overall)
    if "file_path" in log_cfg:
        out["logging_file_path"] = log_cfg["file_path"]
    if "max_bytes" in log_cfg:
        out["logging_max_bytes"] = log_cfg["max_bytes"]
    if "backup_count" in log_cfg:
        out["logging_backup_count"] = log_cfg["backup_count"]
    return out


class Settings(BaseSettings):
    # --- Generator identity ---
    # Must be unique among concurrently running generators.
    process_id: int = Field(default=0, ge=0, le=MAX_PROCESS_ID)

    # --- Logging ---
    # Per-handler levels: INFO|DEBUG|WARNING|ERROR|CRITICAL|NONE
    logging_level: str = "INFO"
    logging_console: str = "INFO"
    logging_file: str = "NONE"
    logging_file_path: str = "logs/buid.jsonl"
    logging_max_bytes: int = 5_000_000
    logging_backup_count: int = 5

    model_config = SettingsConfigDict(
        env_prefix="BUID_",
        case_sensitive=False,
        env_file=".env",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Precedence (highest to lowest):
        # 1) init_settings (explicit overrides in code/tests)
        # 2) dotenv (.env in cwd)
        # 3) env_settings (OS env, BUID_ prefix)
        # 4) TOML (config.toml) — project defaults
        # 5) file_secret_settings
        return (
            init_settings,
            dotenv_settings,
            env_settings,
            _toml_settings_source,
            file_secret_settings,
        )


def load_settings() -> Settings:
    return Settings()
