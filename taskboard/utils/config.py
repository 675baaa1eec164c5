"""
Configuration management with schema validation.

Settings are resolved in three layers: model defaults, an optional YAML
settings file (with ${VAR} / ${VAR:default} substitution) and finally
environment variables, which always win.
"""

import os
import secrets
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ConfigError
from .logger import get_logger

logger = get_logger(__name__)

DEFAULT_SETTINGS_FILE = Path("config") / "settings.yaml"


class AppSettings(BaseModel):
    name: str = "Taskboard"
    version: str = "1.0.0"
    environment: str = "development"


class AuthSettings(BaseModel):
    secret_key: Optional[str] = None
    token_ttl_days: int = Field(default=30, gt=0)
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)


class StorageSettings(BaseModel):
    backend: Literal["json", "mongo"] = "json"
    data_dir: str = "data"
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db: str = "taskboard"


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = "json"
    file_path: Optional[str] = None
    max_bytes: int = 10485760
    backup_count: int = 5


class WebSettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 5000
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    web: WebSettings = Field(default_factory=WebSettings)

    @property
    def is_production(self) -> bool:
        return self.app.environment.lower() == "production"


# env var -> (section, key)
ENV_OVERRIDES = {
    "ENVIRONMENT": ("app", "environment"),
    "JWT_SECRET": ("auth", "secret_key"),
    "SECRET_KEY": ("auth", "secret_key"),
    "TOKEN_TTL_DAYS": ("auth", "token_ttl_days"),
    "BCRYPT_ROUNDS": ("auth", "bcrypt_rounds"),
    "STORAGE_BACKEND": ("storage", "backend"),
    "DATA_DIR": ("storage", "data_dir"),
    "MONGO_URI": ("storage", "mongo_uri"),
    "MONGO_DB": ("storage", "mongo_db"),
    "LOG_LEVEL": ("logging", "level"),
    "LOG_FORMAT": ("logging", "format"),
    "LOG_FILE": ("logging", "file_path"),
    "HOST": ("web", "host"),
    "PORT": ("web", "port"),
    "CORS_ORIGINS": ("web", "cors_origins"),
}


def _substitute_env_vars(value: Any, environ: Dict[str, str]) -> Any:
    """Recursively substitute environment variables"""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            var_expr = value[2:-1]
            if ":" in var_expr:
                var_name, default = var_expr.split(":", 1)
                return environ.get(var_name.strip(), default.strip())
            env_value = environ.get(var_expr.strip())
            if env_value is None:
                raise ConfigError(f"Environment variable {var_expr} not found")
            return env_value
    elif isinstance(value, dict):
        return {k: _substitute_env_vars(v, environ) for k, v in value.items()}
    elif isinstance(value, list):
        return [_substitute_env_vars(item, environ) for item in value]
    return value


def _read_settings_file(path: Path, environ: Dict[str, str]) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw_data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}")
    except OSError as e:
        raise ConfigError(f"Failed to read settings file {path}: {e}")
    if not isinstance(raw_data, dict):
        raise ConfigError(f"Settings file {path} must contain a mapping")
    return _substitute_env_vars(raw_data, environ)


def _apply_env_overrides(data: Dict[str, Any], environ: Dict[str, str]) -> Dict[str, Any]:
    # SECRET_KEY is listed after JWT_SECRET so it takes precedence
    for env_name, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value is None or value == "":
            continue
        if env_name == "CORS_ORIGINS":
            value = [origin.strip() for origin in value.split(",") if origin.strip()]
        data.setdefault(section, {})[key] = value
    return data


def load_settings(
    config_file: Optional[str] = None,
    environ: Optional[Dict[str, str]] = None,
) -> Settings:
    """
    Load and validate settings.

    Args:
        config_file: Explicit YAML path. Defaults to $CONFIG_FILE, then
            config/settings.yaml when it exists.
        environ: Environment mapping, mainly for tests. Defaults to os.environ
            after loading .env.

    Raises:
        ConfigError: unreadable file, invalid values, or a missing secret key
            in production.
    """
    if environ is None:
        load_dotenv()
        environ = dict(os.environ)

    path_value = config_file or environ.get("CONFIG_FILE")
    data: Dict[str, Any] = {}
    if path_value:
        path = Path(path_value)
        if not path.exists():
            raise ConfigError(f"Settings file not found: {path}")
        data = _read_settings_file(path, environ)
    elif DEFAULT_SETTINGS_FILE.exists():
        data = _read_settings_file(DEFAULT_SETTINGS_FILE, environ)

    data = _apply_env_overrides(data, environ)

    try:
        settings = Settings(**data)
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}")

    if not settings.auth.secret_key:
        if settings.is_production:
            raise ConfigError("SECRET_KEY must be set in production")
        settings.auth.secret_key = secrets.token_urlsafe(32)
        logger.warning(
            "No SECRET_KEY configured, using a random per-process key",
            environment=settings.app.environment,
        )

    if settings.is_production and settings.web.cors_origins == ["*"]:
        logger.warning("CORS allows every origin in production")

    return settings
