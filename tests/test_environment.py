"""
Environment tests: device token to endpoint URI resolution.

Run with: pytest tests/test_environment.py -v
"""

import httpx
import pytest

from apns_messaging.core.errors import InvalidArgumentError
from apns_messaging.services.environment import (
    AppleEnvironment,
    BaseUrlEnvironment,
    Environment,
)

DEVICE_TOKEN = "cc566d1c79f4470f96015b0e3b402abb"


class TestAppleEnvironment:
    """Built-in development and production gateways."""

    def test_production_uri(self):
        uri = AppleEnvironment.PRODUCTION.create_uri(DEVICE_TOKEN)
        assert str(uri) == f"https://api.push.apple.com/3/device/{DEVICE_TOKEN}"

    def test_development_uri(self):
        uri = AppleEnvironment.DEVELOPMENT.create_uri(DEVICE_TOKEN)
        assert str(uri) == f"https://api.development.push.apple.com/3/device/{DEVICE_TOKEN}"

    def test_returns_httpx_url(self):
        uri = AppleEnvironment.PRODUCTION.create_uri(DEVICE_TOKEN)
        assert isinstance(uri, httpx.URL)
        assert uri.scheme == "https"
        assert uri.path == f"/3/device/{DEVICE_TOKEN}"

    @pytest.mark.parametrize("token", [None, ""])
    def test_missing_token_raises_invalid_argument(self, token):
        with pytest.raises(InvalidArgumentError, match="Token must not be null"):
            AppleEnvironment.PRODUCTION.create_uri(token)

    def test_satisfies_environment_protocol(self):
        assert isinstance(AppleEnvironment.DEVELOPMENT, Environment)


class TestBaseUrlEnvironment:
    """Caller-supplied hosts, e.g. a local stub server."""

    def test_appends_device_path(self):
        env = BaseUrlEnvironment("http://localhost:8080")
        assert str(env.create_uri(DEVICE_TOKEN)) == (
            f"http://localhost:8080/3/device/{DEVICE_TOKEN}"
        )

    def test_trailing_slash_is_ignored(self):
        env = BaseUrlEnvironment("http://localhost:8080/")
        assert env.create_uri("abc").path == "/3/device/abc"

    def test_missing_token_raises_invalid_argument(self):
        with pytest.raises(InvalidArgumentError):
            BaseUrlEnvironment("http://localhost:8080").create_uri(None)

    def test_missing_base_url_raises_invalid_argument(self):
        with pytest.raises(InvalidArgumentError):
            BaseUrlEnvironment("")

    def test_satisfies_environment_protocol(self):
        assert isinstance(BaseUrlEnvironment("http://localhost"), Environment)
