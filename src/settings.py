import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field

from logger_config import logger


def _env_flag(name: str, default: str) -> bool:
    return (os.getenv(name, default) or default).strip().lower() in {"1", "true", "yes", "y"}


class AppSettings(BaseModel):
    # Paths
    contracts_path: Optional[str] = Field(default_factory=lambda: os.getenv("GENERATION_CONTRACTS_PATH"))
    config_path: Optional[str] = Field(default_factory=lambda: os.getenv("APP_CONFIG_PATH"))

    # Review defaults
    default_field_key: str = Field(default_factory=lambda: os.getenv("DEFAULT_FIELD_KEY", "valueProp"))

    # Feature flags
    auto_repair: bool = Field(default_factory=lambda: _env_flag("AUTO_REPAIR", "1"))
    log_validation_events: bool = Field(default_factory=lambda: _env_flag("LOG_VALIDATION_EVENTS", "1"))

    @classmethod
    def load(cls) -> "AppSettings":
        path = os.getenv("APP_CONFIG_PATH") or _resolve_default_config_path()
        base = cls()
        if not path:
            return base
        try:
            with open(path, "r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh) or {}
        except (OSError, yaml.YAMLError) as exc:
            logger.warning("Failed to read settings from %s: %s. Using environment defaults.", path, exc)
            return base
        if not isinstance(data, dict):
            logger.warning("Settings file %s must be a mapping; ignoring it.", path)
            return base

        env_map = {
            "contracts_path": "GENERATION_CONTRACTS_PATH",
            "default_field_key": "DEFAULT_FIELD_KEY",
            "auto_repair": "AUTO_REPAIR",
            "log_validation_events": "LOG_VALIDATION_EVENTS",
        }
        merged = base.model_dump()
        for k, v in data.items():
            if k not in env_map:
                continue
            # explicit env vars win over file values
            if os.getenv(env_map[k]):
                continue
            merged[k] = v
        merged["config_path"] = path
        return cls(**merged)


def _resolve_default_config_path() -> Optional[str]:
    """Infer a config file path when APP_CONFIG_PATH is unset."""
    repo_root = Path(__file__).resolve().parent.parent
    config_dir = repo_root / "config"
    env_key = os.getenv("APP_CONFIG_ENV", "dev").strip().lower()
    candidates = []
    if env_key:
        candidates.append(config_dir / f"settings.{env_key}.yaml")
    candidates.append(config_dir / "settings.yaml")
    for candidate in candidates:
        if candidate.is_file():
            return str(candidate)
    return None
