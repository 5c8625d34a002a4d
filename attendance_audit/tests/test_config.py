"""
Tests for configuration validation
"""
import pytest
from pydantic import ValidationError
from attendance_audit.core.config import Settings


def _settings(**overrides):
    values = dict(DATABASE_URL="postgresql://test", JWT_SECRET_KEY="test-key")
    values.update(overrides)
    return Settings(**values)


def test_prod_settings_rejects_wildcard_origins():
    """Production settings reject wildcard origins"""
    settings = _settings(JWT_SECRET_KEY="a" * 32, APP_ENV="prod", ALLOWED_ORIGINS="*")
    with pytest.raises(ValueError, match="ALLOWED_ORIGINS"):
        settings.validate_production()


def test_prod_settings_rejects_short_jwt_secret():
    """Production settings reject short JWT secret"""
    settings = _settings(JWT_SECRET_KEY="short", APP_ENV="prod", ALLOWED_ORIGINS="https://example.com")
    with pytest.raises(ValueError, match="JWT_SECRET_KEY"):
        settings.validate_production()


def test_local_settings_allows_wildcard_origins():
    settings = _settings(APP_ENV="local", ALLOWED_ORIGINS="*")
    settings.validate_production()  # Should pass for local
    assert settings.get_allowed_origins_list() == ["*"]


def test_get_allowed_origins_list():
    settings = _settings(ALLOWED_ORIGINS="https://example.com, https://app.example.com,")
    assert settings.get_allowed_origins_list() == ["https://example.com", "https://app.example.com"]


def test_invalid_app_env_rejected():
    with pytest.raises(ValidationError):
        _settings(APP_ENV="production")


def test_log_level_normalized():
    assert _settings(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"


def test_adjustment_defaults():
    settings = _settings()
    assert settings.DEFAULT_ADJUSTMENT_WINDOW_DAYS == 30
    assert settings.MAX_LATE_MINUTES == 180
    assert settings.AUDIT_RECENT_DAYS == 7


def test_late_minutes_cap_cannot_exceed_180():
    with pytest.raises(ValidationError):
        _settings(MAX_LATE_MINUTES=240)


def test_org_timezone_default_and_validation():
    assert _settings().ORG_TIMEZONE == "Asia/Kolkata"
    assert _settings(ORG_TIMEZONE="Europe/Berlin").ORG_TIMEZONE == "Europe/Berlin"
    with pytest.raises(ValidationError):
        _settings(ORG_TIMEZONE="Mars/Olympus_Mons")
