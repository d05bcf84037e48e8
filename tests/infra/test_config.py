"""Tests for configuration loading."""

from taskboard.config import Settings, parse_comma_list


def test_parse_comma_list():
    assert parse_comma_list("a, b,,c ", ["x"]) == ["a", "b", "c"]
    assert parse_comma_list(None, ["x"]) == ["x"]
    assert parse_comma_list(["y"], ["x"]) == ["y"]


def test_defaults(monkeypatch):
    for name in (
        "API_PREFIX",
        "SESSION_COOKIE_NAME",
        "ACCESS_TOKEN_EXPIRE_MINUTES",
        "CORS_ORIGINS",
    ):
        monkeypatch.delenv(name, raising=False)

    config = Settings(_env_file=None)

    assert config.api_prefix == "/api"
    assert config.session_cookie_name == "token"
    assert config.access_token_expire_minutes == 60 * 24 * 7
    assert config.access_token_max_age == 7 * 24 * 3600
    assert config.cors_origins == ["http://localhost:3000", "http://127.0.0.1:3000"]


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", "https://app.example.com, https://admin.example.com")
    monkeypatch.setenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30")
    monkeypatch.setenv("SESSION_COOKIE_SECURE", "true")
    monkeypatch.setenv("ENV", "staging")

    config = Settings(_env_file=None)

    assert config.cors_origins == ["https://app.example.com", "https://admin.example.com"]
    assert config.access_token_max_age == 1800
    assert config.session_cookie_secure is True
    assert config.environment == "testing"  # ENVIRONMENT wins over ENV


def test_env_alias_used_when_environment_unset(monkeypatch):
    monkeypatch.delenv("ENVIRONMENT", raising=False)
    monkeypatch.setenv("ENV", "staging")

    assert Settings(_env_file=None).environment == "staging"
