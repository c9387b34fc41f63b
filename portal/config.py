"""Load portal settings from config/portal.yaml and the environment."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from portal.log import get_logger

log = get_logger(__name__)

load_dotenv()

ROOT: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = ROOT / "config"
SETTINGS_PATH: Path = CONFIG_DIR / "portal.yaml"
DATA_DIR: Path = ROOT / "data"
SESSION_DIR: Path = DATA_DIR / "session"

DEFAULT_API_URL = "https://joyful-reflection-production-1049.up.railway.app/api"
STORAGE_BACKENDS: tuple[str, ...] = ("file", "memory")


@dataclass
class Settings:
    api_url: str = DEFAULT_API_URL
    request_timeout: float = 15.0
    session_storage: str = "memory"
    dashboard_preview: int = 5
    max_workers: int = 4


# env var -> (settings field, converter)
_ENV_OVERRIDES: dict[str, tuple[str, Any]] = {
    "PORTAL_API_URL": ("api_url", str),
    "PORTAL_REQUEST_TIMEOUT": ("request_timeout", float),
    "PORTAL_SESSION_STORAGE": ("session_storage", str),
    "PORTAL_DASHBOARD_PREVIEW": ("dashboard_preview", int),
    "PORTAL_MAX_WORKERS": ("max_workers", int),
}


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path.name} must contain a mapping, got {type(data).__name__}")
    # Accept both a flat file and one nested under "portal:"
    return data.get("portal", data)


def load_settings(path: Path | None = None) -> Settings:
    """YAML defaults first, then environment overrides."""
    settings = Settings()
    known = set(Settings.__dataclass_fields__)

    for key, value in _read_yaml(path or SETTINGS_PATH).items():
        if key not in known:
            log.warning("Ignoring unknown setting %r in %s", key, (path or SETTINGS_PATH).name)
            continue
        setattr(settings, key, value)

    for env_key, (field_name, convert) in _ENV_OVERRIDES.items():
        raw = get_env(env_key)
        if not raw:
            continue
        try:
            setattr(settings, field_name, convert(raw))
        except ValueError:
            log.warning("Ignoring invalid %s=%r", env_key, raw)

    settings.api_url = str(settings.api_url).rstrip("/")
    settings.request_timeout = float(settings.request_timeout)
    settings.dashboard_preview = int(settings.dashboard_preview)
    settings.max_workers = max(1, int(settings.max_workers))
    if settings.session_storage not in STORAGE_BACKENDS:
        log.warning(
            "Unknown session storage %r, falling back to 'memory'", settings.session_storage
        )
        settings.session_storage = "memory"
    return settings


def ensure_dirs() -> None:
    for d in (DATA_DIR, SESSION_DIR):
        d.mkdir(parents=True, exist_ok=True)
