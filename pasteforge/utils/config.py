"""
Configuration management with schema validation.
Settings are built once at start-up and handed to every component that
needs store credentials or the signing key.
"""

import copy
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field
from pydantic import ValidationError as SchemaError

from .exceptions import ConfigError


CONFIG_DIR = Path("config")
SETTINGS_FILE = CONFIG_DIR / "settings.yaml"

# Values not present in settings.yaml fall back to these; ${VAR} entries
# without a default resolve to "" and are caught by _check_required.
DEFAULT_SETTINGS: Dict[str, Any] = {
    "app": {
        "name": "PasteForge",
        "version": "1.0.0",
        "environment": "${ENVIRONMENT:development}",
    },
    "store": {
        "base_url": "${JSONBIN_BASE_URL:https://api.jsonbin.io/v3}",
        "api_key": "${JSONBIN_API_KEY}",
        "users_document_id": "${USERS_BIN_ID}",
        "pastes_collection_id": "${JSONBIN_COLLECTION_ID}",
    },
    "auth": {
        "jwt_secret": "${JWT_SECRET}",
    },
    "logging": {
        "level": "${LOG_LEVEL:INFO}",
    },
}

REQUIRED_FIELDS = (
    ("store", "api_key"),
    ("store", "users_document_id"),
    ("store", "pastes_collection_id"),
    ("auth", "jwt_secret"),
)


class AppSettings(BaseModel):
    name: str = "PasteForge"
    version: str = "1.0.0"
    environment: str = "development"

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"


class StoreSettings(BaseModel):
    """Hosted JSON document store (JSONBin v3 API)"""
    base_url: str = "https://api.jsonbin.io/v3"
    api_key: str = ""
    users_document_id: str = ""
    pastes_collection_id: str = ""
    connect_timeout: float = 10.0
    read_timeout: float = 30.0


class AuthSettings(BaseModel):
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    session_days: int = 7
    cookie_name: str = "auth-token"
    min_password_length: int = 6
    hash_passwords: bool = False


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = "json"
    file_path: Optional[str] = None
    max_bytes: int = 10485760
    backup_count: int = 5


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def _substitute_env_vars(value: Any) -> Any:
    """Recursively substitute ${VAR} and ${VAR:default} from the environment"""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            var_expr = value[2:-1]
            if ":" in var_expr:
                var_name, default = var_expr.split(":", 1)
                return os.getenv(var_name.strip(), default.strip())
            return os.getenv(var_expr.strip(), "")
    elif isinstance(value, dict):
        return {k: _substitute_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_substitute_env_vars(item) for item in value]
    return value


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _check_required(settings: Settings) -> None:
    missing = [
        f"{section}.{field}"
        for section, field in REQUIRED_FIELDS
        if not str(getattr(getattr(settings, section), field) or "").strip()
    ]
    if missing:
        raise ConfigError(f"Missing required settings: {', '.join(missing)}")


def load_settings(
    config_path: Optional[Union[str, Path]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Settings:
    """
    Load and validate settings.

    Order of precedence (lowest first): built-in defaults with environment
    placeholders, settings.yaml, then ``overrides``.

    Raises:
        ConfigError: If the file is unreadable, a value fails validation,
            or a credential / signing secret is missing.
    """
    load_dotenv()

    path = Path(config_path) if config_path else SETTINGS_FILE
    raw_data: Dict[str, Any] = {}
    if path.exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw_data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to read settings from {path}: {str(e)}")
    elif config_path:
        raise ConfigError(f"Settings file not found: {path}")

    merged = _deep_merge(DEFAULT_SETTINGS, raw_data)
    processed = _substitute_env_vars(merged)
    if overrides:
        processed = _deep_merge(processed, overrides)

    try:
        settings = Settings(**processed)
    except SchemaError as e:
        raise ConfigError(f"Invalid settings: {str(e)}")

    _check_required(settings)
    return settings
