"""
Configuration tests: APNS_* settings loaded from the environment.

Run with: pytest tests/test_config.py -v
"""

import importlib
from unittest.mock import patch

import pytest

import apns_messaging.core.config as config


@pytest.fixture
def reload_config(monkeypatch):
    """Reload the config module after changing environment variables."""

    def _reload(**env):
        for name in ("APNS_AUTH_KEY_PATH", "APNS_KEY_ID", "APNS_TEAM_ID", "APNS_USE_SANDBOX"):
            monkeypatch.delenv(name, raising=False)
        for name, value in env.items():
            monkeypatch.setenv(name, value)
        return importlib.reload(config)

    yield _reload

    monkeypatch.undo()
    importlib.reload(config)


class TestEnvironmentLoading:
    """Module-level settings are read from os.environ."""

    def test_reads_credentials(self, reload_config):
        settings = reload_config(
            APNS_AUTH_KEY_PATH="/keys/AuthKey.p8",
            APNS_KEY_ID="KEY123",
            APNS_TEAM_ID="TEAM123",
        )
        assert settings.APNS_AUTH_KEY_PATH == "/keys/AuthKey.p8"
        assert settings.APNS_KEY_ID == "KEY123"
        assert settings.APNS_TEAM_ID == "TEAM123"

    @pytest.mark.parametrize("value", ["true", "True", "1", "yes"])
    def test_sandbox_truthy_values(self, reload_config, value):
        assert reload_config(APNS_USE_SANDBOX=value).APNS_USE_SANDBOX is True

    @pytest.mark.parametrize("value", ["false", "0", "no", ""])
    def test_sandbox_falsy_values(self, reload_config, value):
        assert reload_config(APNS_USE_SANDBOX=value).APNS_USE_SANDBOX is False


class TestValidateApnsConfig:
    """validate_apns_config() names every missing variable."""

    @patch("apns_messaging.core.config.APNS_AUTH_KEY_PATH", "/keys/AuthKey.p8")
    @patch("apns_messaging.core.config.APNS_KEY_ID", "KEY123")
    @patch("apns_messaging.core.config.APNS_TEAM_ID", "TEAM123")
    def test_complete_config_is_valid(self):
        assert config.validate_apns_config() is True

    @patch("apns_messaging.core.config.APNS_AUTH_KEY_PATH", "")
    @patch("apns_messaging.core.config.APNS_KEY_ID", "KEY123")
    @patch("apns_messaging.core.config.APNS_TEAM_ID", "")
    def test_missing_variables_are_listed(self):
        with pytest.raises(EnvironmentError) as exc_info:
            config.validate_apns_config()

        message = str(exc_info.value)
        assert "APNS_AUTH_KEY_PATH" in message
        assert "APNS_TEAM_ID" in message
        assert "APNS_KEY_ID" not in message
