"""
Environment: maps a device token to the APNs endpoint it is posted to.

Apple runs two gateways: development (sandbox builds) and production.
Anything implementing `create_uri` can stand in for them, such as a local
stub server in tests or an outbound proxy.
"""

from enum import Enum
from typing import Protocol, runtime_checkable

import httpx

from apns_messaging.core.errors import InvalidArgumentError

DEVICE_PATH = "/3/device/"


@runtime_checkable
class Environment(Protocol):
    """Resolves the request URI for a device token."""

    def create_uri(self, device_token: str) -> httpx.URL:
        ...


def _require_token(device_token: str) -> None:
    if not device_token:
        raise InvalidArgumentError("Token must not be null")


class AppleEnvironment(Enum):
    """Apple's built-in APNs gateways."""

    DEVELOPMENT = "https://api.development.push.apple.com/3/device/"
    PRODUCTION = "https://api.push.apple.com/3/device/"

    @property
    def url(self) -> str:
        return self.value

    def create_uri(self, device_token: str) -> httpx.URL:
        """
        Build the request URI for a device token.

        Raises:
            InvalidArgumentError: If the device token is missing.
        """
        _require_token(device_token)
        return httpx.URL(self.url + device_token)


class BaseUrlEnvironment:
    """A caller-supplied APNs-compatible host, e.g. http://localhost:8080."""

    def __init__(self, base_url: str) -> None:
        if not base_url:
            raise InvalidArgumentError("Base url must not be null")
        self.base_url = base_url.rstrip("/")

    def __repr__(self) -> str:
        return f"BaseUrlEnvironment({self.base_url!r})"

    def create_uri(self, device_token: str) -> httpx.URL:
        _require_token(device_token)
        return httpx.URL(f"{self.base_url}{DEVICE_PATH}{device_token}")
