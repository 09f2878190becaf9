# tests/test_config.py
"""
Settings Tests - defaults, environment overrides, production validation
"""

import pytest
from pydantic import ValidationError

from speechcoach.config import Settings


class TestSettings:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("FINAL_SCORE_SCALE", raising=False)
        settings = Settings(_env_file=None)
        assert settings.FINAL_SCORE_SCALE == 110.0
        assert settings.DEFAULT_SKILL_MAX_SCORE == 10.0
        assert settings.DEFAULT_SKILL_WEIGHT == 1.0
        assert settings.API_V1_PREFIX == "/api/v1"

    def test_env_override_case_insensitive(self, monkeypatch):
        monkeypatch.setenv("final_score_scale", "100")
        monkeypatch.setenv("LOG_FORMAT", "console")
        settings = Settings(_env_file=None)
        assert settings.FINAL_SCORE_SCALE == 100.0
        assert settings.LOG_FORMAT == "console"

    def test_scale_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, FINAL_SCORE_SCALE=0)

    def test_production_requires_snowflake(self, monkeypatch):
        for name in ("SNOWFLAKE_ACCOUNT", "SNOWFLAKE_USER", "SNOWFLAKE_PASSWORD"):
            monkeypatch.delenv(name, raising=False)
        with pytest.raises(ValidationError, match="Snowflake credentials"):
            Settings(_env_file=None, APP_ENV="production")

    def test_production_rejects_debug(self):
        with pytest.raises(ValidationError, match="DEBUG"):
            Settings(
                _env_file=None,
                APP_ENV="production",
                DEBUG=True,
                SNOWFLAKE_ACCOUNT="acct",
                SNOWFLAKE_USER="user",
                SNOWFLAKE_PASSWORD="secret",
            )

    def test_snowflake_configured(self):
        settings = Settings(
            _env_file=None,
            SNOWFLAKE_ACCOUNT="acct",
            SNOWFLAKE_USER="user",
            SNOWFLAKE_PASSWORD="secret",
        )
        assert settings.snowflake_configured
        assert settings.SNOWFLAKE_PASSWORD.get_secret_value() == "secret"
