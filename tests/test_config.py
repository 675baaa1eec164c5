"""Tests for settings loading"""

from pathlib import Path

import pytest

from taskboard.utils.config import load_settings
from taskboard.utils.exceptions import ConfigError


def test_defaults_with_empty_environment(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    settings = load_settings(environ={})

    assert settings.storage.backend == "json"
    assert settings.auth.token_ttl_days == 30
    assert settings.auth.bcrypt_rounds == 12
    # development gets a random key instead of failing
    assert settings.auth.secret_key


def test_environment_overrides(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    settings = load_settings(
        environ={
            "JWT_SECRET": "legacy",
            "SECRET_KEY": "preferred",
            "TOKEN_TTL_DAYS": "7",
            "STORAGE_BACKEND": "mongo",
            "MONGO_URI": "mongodb://db:27017",
            "PORT": "8080",
            "CORS_ORIGINS": "https://a.example, https://b.example",
        }
    )

    assert settings.auth.secret_key == "preferred"
    assert settings.auth.token_ttl_days == 7
    assert settings.storage.backend == "mongo"
    assert settings.storage.mongo_uri == "mongodb://db:27017"
    assert settings.web.port == 8080
    assert settings.web.cors_origins == ["https://a.example", "https://b.example"]


def test_yaml_file_with_substitution(tmp_path: Path):
    config_file = tmp_path / "settings.yaml"
    config_file.write_text(
        "app:\n"
        "  environment: production\n"
        "auth:\n"
        "  secret_key: ${APP_SECRET}\n"
        "  token_ttl_days: 14\n"
        "storage:\n"
        "  data_dir: ${DATA_PATH:/var/lib/taskboard}\n",
        encoding="utf-8",
    )

    settings = load_settings(str(config_file), environ={"APP_SECRET": "from-env"})
    assert settings.is_production
    assert settings.auth.secret_key == "from-env"
    assert settings.auth.token_ttl_days == 14
    assert settings.storage.data_dir == "/var/lib/taskboard"


def test_environment_beats_yaml(tmp_path: Path):
    config_file = tmp_path / "settings.yaml"
    config_file.write_text("auth:\n  secret_key: file-secret\n  token_ttl_days: 14\n", encoding="utf-8")

    settings = load_settings(str(config_file), environ={"TOKEN_TTL_DAYS": "3"})
    assert settings.auth.secret_key == "file-secret"
    assert settings.auth.token_ttl_days == 3


def test_production_requires_secret(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ConfigError):
        load_settings(environ={"ENVIRONMENT": "production"})


@pytest.mark.parametrize(
    "environ",
    [
        {"STORAGE_BACKEND": "postgres"},
        {"PORT": "not-a-number"},
        {"TOKEN_TTL_DAYS": "0"},
        {"BCRYPT_ROUNDS": "2"},
    ],
)
def test_invalid_values(tmp_path: Path, monkeypatch, environ):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ConfigError):
        load_settings(environ=environ)


def test_missing_or_broken_file(tmp_path: Path):
    with pytest.raises(ConfigError):
        load_settings(str(tmp_path / "absent.yaml"), environ={})

    broken = tmp_path / "broken.yaml"
    broken.write_text("auth: [unclosed", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_settings(str(broken), environ={})

    missing_var = tmp_path / "missing_var.yaml"
    missing_var.write_text("auth:\n  secret_key: ${NOT_SET_ANYWHERE}\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_settings(str(missing_var), environ={})
