# tests/test_settings.py
import pytest
from pydantic import ValidationError

from app.core.settings import ConfigurationError, config, load_settings


def test_loaded_config_is_grouped():
    assert config.is_test
    assert not config.is_production
    assert config.storage.anon_key
    assert config.queue.base_url == "https://inn.gs"
    assert config.queue.enabled is False


def test_config_is_read_only():
    with pytest.raises(ValidationError):
        config.app.env = "production"


@pytest.mark.parametrize("missing", ["OPENAI_API_KEY", "SUPABASE_SERVICE_ROLE_KEY", "DATABASE_URL", "APP_URL"])
def test_missing_required_variable_is_fatal(monkeypatch, missing):
    monkeypatch.delenv(missing, raising=False)
    with pytest.raises(ConfigurationError):
        load_settings(_env_file=None)


def test_empty_required_variable_is_fatal(monkeypatch):
    monkeypatch.setenv("REDIS_TOKEN", "")
    with pytest.raises(ConfigurationError):
        load_settings(_env_file=None)


def test_unknown_app_env_is_rejected(monkeypatch):
    monkeypatch.setenv("APP_ENV", "staging")
    with pytest.raises(ConfigurationError):
        load_settings(_env_file=None)


def test_malformed_url_is_rejected(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "not a url")
    with pytest.raises(ConfigurationError):
        load_settings(_env_file=None)


def test_optional_analytics_may_be_absent(monkeypatch):
    monkeypatch.delenv("SENTRY_DSN", raising=False)
    monkeypatch.delenv("ANALYTICS_ID", raising=False)
    cfg = load_settings(_env_file=None).as_config()
    assert cfg.analytics.sentry_dsn is None
    assert cfg.analytics.analytics_id is None


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("postgres://u:p@db:5432/docx", "postgresql+psycopg2://u:p@db:5432/docx"),
        ("postgresql://u:p@db:5432/docx", "postgresql+psycopg2://u:p@db:5432/docx"),
        ("postgresql+psycopg2://u:p@db/docx", "postgresql+psycopg2://u:p@db/docx"),
    ],
)
def test_database_url_is_normalized(raw, expected):
    s = load_settings(_env_file=None, DATABASE_URL=raw)
    assert s.SQLALCHEMY_DATABASE_URL == expected
    assert s.as_config().storage.database_url == expected


def test_cors_origins_from_json_list(monkeypatch):
    monkeypatch.setenv("BACKEND_CORS_ORIGINS", '["http://c.test"]')
    assert load_settings(_env_file=None).CORS_ORIGINS == ["http://c.test"]


def test_cors_origins_from_csv(monkeypatch):
    monkeypatch.setenv("BACKEND_CORS_ORIGINS", "https://a.test/, http://b.test")
    assert load_settings(_env_file=None).CORS_ORIGINS == ["https://a.test", "http://b.test"]


def test_cors_origins_default_to_app_url(monkeypatch):
    monkeypatch.delenv("BACKEND_CORS_ORIGINS", raising=False)
    s = load_settings(_env_file=None, APP_URL="https://docs.example.com")
    assert s.CORS_ORIGINS == ["https://docs.example.com"]


def test_cors_origins_must_be_a_list(monkeypatch):
    monkeypatch.setenv("BACKEND_CORS_ORIGINS", '{"origin": "https://a.test"}')
    with pytest.raises(ConfigurationError):
        load_settings(_env_file=None)
