"""Configuration loading utilities for YAML-based application settings."""

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from .logging_config import get_logger


logger = get_logger(__name__)
_BASE_DIR = Path(__file__).resolve().parent.parent
_CONFIG_PATH = _BASE_DIR / "config.yml"
CONFIG_ENV_VAR = "GENESIS_CONFIG"
JWT_SECRET_ENV_VAR = "JWT_SECRET"

STORAGE_BACKENDS = ("memory", "firestore")


@dataclass(frozen=True)
class AppSettings:
    """Application settings loaded from YAML configuration file."""

    app_name: str = "GENESIS API"
    debug: bool = False
    host: str = "127.0.0.1"
    port: int = 5000
    cors_origins: list[str] = field(default_factory=list)
    storage_backend: str = "memory"
    firestore_project_id: Optional[str] = None
    firestore_credentials_path: Optional[str] = None
    users_collection: str = "users"
    loans_collection: str = "loans"
    jwt_secret: str = "jwtSecret"
    jwt_algorithm: str = "HS256"
    token_ttl_minutes: int = 60


def _to_bool(value: Any, default: bool = False) -> bool:
    """Convert value to bool with a default fallback."""
    try:
        if isinstance(value, bool):
            return value
        return value.strip().lower() in {"1", "true", "yes", "on"}
    except (AttributeError, ValueError):
        logger.warning("Invalid boolean value '%s'. Using default=%s", value, default)
        return default


def _to_int(value: Any, default: int) -> int:
    """Convert value to int with a default fallback."""
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Invalid integer value '%s'. Using default=%s", value, default)
        return default


def _to_list(value: Any) -> list[str]:
    """Convert list-like or comma-separated value to list[str]."""
    if value is None:
        return []
    if isinstance(value, list):
        return [str(item).strip() for item in value if str(item).strip()]
    return [item.strip() for item in str(value).split(",") if item.strip()]


def _to_backend(value: Any, default: str = "memory") -> str:
    """Normalize the storage backend name, falling back on unknown values."""
    normalized = str(value or default).strip().lower()
    if normalized not in STORAGE_BACKENDS:
        logger.warning("Unknown storage backend '%s'. Using default=%s", value, default)
        return default
    return normalized


def _resolve_config_path(path: Optional[Union[str, Path]] = None) -> Path:
    """Pick the explicit path, then $GENESIS_CONFIG, then the bundled file."""
    if path is not None:
        return Path(path)
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return _CONFIG_PATH


def _read_config(path: Optional[Union[str, Path]] = None) -> dict:
    """Read and parse YAML configuration."""
    config_path = _resolve_config_path(path)
    try:
        with config_path.open("r", encoding="utf-8") as config_file:
            config_data = yaml.safe_load(config_file) or {}
        logger.info("Configuration loaded from %s", config_path)
        return config_data
    except FileNotFoundError:
        logger.warning("Config file not found at %s. Falling back to defaults.", config_path)
        return {}
    except Exception:
        logger.exception("Failed to load config file from %s", config_path)
        return {}


def load_settings(path: Optional[Union[str, Path]] = None) -> AppSettings:
    """Load and validate application settings from `config.yml`."""
    config = _read_config(path)
    app_cfg = config.get("app") or {}
    storage_cfg = config.get("storage") or {}
    auth_cfg = config.get("auth") or {}

    defaults = AppSettings()

    jwt_secret = os.environ.get(JWT_SECRET_ENV_VAR) or auth_cfg.get("jwt_secret") or defaults.jwt_secret
    if jwt_secret == defaults.jwt_secret:
        logger.warning("Using the built-in development JWT secret. Set %s in production.", JWT_SECRET_ENV_VAR)

    return AppSettings(
        app_name=str(app_cfg.get("name", defaults.app_name)),
        debug=_to_bool(app_cfg.get("debug", defaults.debug), defaults.debug),
        host=str(app_cfg.get("host", defaults.host)),
        port=_to_int(app_cfg.get("port", defaults.port), defaults.port),
        cors_origins=_to_list(app_cfg.get("cors_origins", [])),
        storage_backend=_to_backend(storage_cfg.get("backend"), defaults.storage_backend),
        firestore_project_id=storage_cfg.get("project_id"),
        firestore_credentials_path=storage_cfg.get("credentials_path"),
        users_collection=str(storage_cfg.get("users_collection", defaults.users_collection)),
        loans_collection=str(storage_cfg.get("loans_collection", defaults.loans_collection)),
        jwt_secret=str(jwt_secret),
        jwt_algorithm=str(auth_cfg.get("jwt_algorithm", defaults.jwt_algorithm)),
        token_ttl_minutes=_to_int(
            auth_cfg.get("token_ttl_minutes", defaults.token_ttl_minutes),
            defaults.token_ttl_minutes,
        ),
    )
