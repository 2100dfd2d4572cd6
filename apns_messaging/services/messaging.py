"""
APNs Messaging: builds and sends token-authenticated push requests.

Composes the other services into one HTTP/2 request per message:
1. Obtain a valid bearer token from the TokenCache (re-signing if stale)
2. Resolve the device URI from the Environment
3. Serialize the message's allow-listed payload fields as JSON
4. Attach the authorization and apns-* headers
5. POST over HTTP/2 with a fixed 30 second timeout

No retries are performed here. httpx transport errors reach the caller
unmodified and the raw httpx.Response is returned as-is.

Usage:
    key = SigningKey.from_file("AuthKey_ABC123.p8", "ABC123", "TEAM123")
    with ApnsMessaging(key, AppleEnvironment.DEVELOPMENT) as apns:
        response = apns.send(message)
"""

import json
import logging
import threading
from typing import Awaitable, Optional

import httpx

from apns_messaging.core.errors import InvalidArgumentError
from apns_messaging.models.payload import Message
from apns_messaging.services.environment import AppleEnvironment, Environment
from apns_messaging.services.signing_key import SigningKey
from apns_messaging.services.token_cache import TokenCache

logger = logging.getLogger(__name__)

CONNECTION_TIMEOUT = 30.0  # seconds, per request


class ApnsMessaging:
    """
    Entry point for sending notifications to APNs.

    One instance owns the signing key, the environment and the token
    cache, and keeps one sync and one async HTTP/2 client for its lifetime
    so concurrent sends share a connection pool. Clients passed in by the
    caller are used as-is and never closed here.
    """

    def __init__(
        self,
        signing_key: SigningKey,
        environment: Environment = AppleEnvironment.PRODUCTION,
        *,
        client: Optional[httpx.Client] = None,
        async_client: Optional[httpx.AsyncClient] = None,
        token_cache: Optional[TokenCache] = None,
    ) -> None:
        if signing_key is None:
            raise InvalidArgumentError("Apns key must not be null")
        if environment is None:
            raise InvalidArgumentError("Environment must not be null")
        if not isinstance(environment, Environment):
            raise InvalidArgumentError(
                f"Environment must provide create_uri(), got {type(environment).__name__}"
            )

        self._signing_key = signing_key
        self._environment = environment
        self._token_cache = token_cache or TokenCache(signing_key)

        self._client = client
        self._async_client = async_client
        self._owns_client = client is None
        self._owns_async_client = async_client is None
        self._client_lock = threading.Lock()

    @classmethod
    def from_config(cls) -> "ApnsMessaging":
        """
        Build an instance from the APNS_* settings in core.config.

        Raises:
            EnvironmentError: If any APNS_* credential is missing.
            FileNotFoundError: If the .p8 key file is missing.
        """
        # Imported here so .env is only read when configuration is requested
        from apns_messaging.core import config

        config.validate_apns_config()

        signing_key = SigningKey.from_file(
            config.APNS_AUTH_KEY_PATH, config.APNS_KEY_ID, config.APNS_TEAM_ID
        )
        environment = (
            AppleEnvironment.DEVELOPMENT if config.APNS_USE_SANDBOX else AppleEnvironment.PRODUCTION
        )
        return cls(signing_key, environment)

    @property
    def environment(self) -> Environment:
        return self._environment

    @property
    def token_cache(self) -> TokenCache:
        return self._token_cache

    # ------------------------------------------------------------------
    # Request construction
    # ------------------------------------------------------------------

    def build_request(self, message: Message) -> httpx.Request:
        """
        Build the POST request for a message without sending it.

        Raises:
            InvalidArgumentError: If message is None.
            TokenGenerationError: If a new token had to be signed and
                signing failed.
        """
        if message is None:
            raise InvalidArgumentError("Message must not be null")

        token = self._token_cache.get_valid_token()
        url = self._environment.create_uri(message.token)

        headers = {
            "authorization": f"bearer {token}",
            "content-type": "application/json",
            "apns-priority": message.priority.code,
            "apns-topic": message.topic,
        }
        if message.is_identifiable:
            headers["apns-id"] = str(message.id)
        if message.is_collapsable:
            headers["apns-collapse-id"] = message.collapse_id
        if message.has_expiration:
            headers["apns-expiration"] = str(message.expiration)

        body = json.dumps(
            message.to_payload(),
            ensure_ascii=False,
            separators=(",", ":"),
        ).encode("utf-8")

        logger.debug(
            "Built APNs request: device=%s..., priority=%s, topic=%s",
            message.token[:8],
            message.priority.code,
            message.topic,
        )

        return httpx.Request(
            "POST",
            url,
            headers=headers,
            content=body,
            extensions={"timeout": httpx.Timeout(CONNECTION_TIMEOUT).as_dict()},
        )

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def send(self, message: Message) -> httpx.Response:
        """
        Send a notification and block until APNs responds.

        Returns:
            The raw httpx.Response (status_code, headers, text).

        Raises:
            InvalidArgumentError: If message is None.
            TokenGenerationError: If the provider token cannot be signed.
            httpx.HTTPError: Transport failures, propagated unmodified.
        """
        request = self.build_request(message)
        response = self._get_client().send(request)
        _log_response(message, response)
        return response

    def send_async(self, message: Message) -> Awaitable[httpx.Response]:
        """
        Send a notification asynchronously.

        Validation, token refresh and request construction happen right
        away; the returned awaitable completes when APNs responds.

        Raises:
            InvalidArgumentError: If message is None (raised immediately).
            TokenGenerationError: If the provider token cannot be signed.
        """
        request = self.build_request(message)
        return self._dispatch_async(message, request)

    async def _dispatch_async(self, message: Message, request: httpx.Request) -> httpx.Response:
        response = await self._get_async_client().send(request)
        _log_response(message, response)
        return response

    # ------------------------------------------------------------------
    # Client lifecycle
    # ------------------------------------------------------------------

    def _get_client(self) -> httpx.Client:
        with self._client_lock:
            if self._client is None:
                self._client = httpx.Client(http2=True)
            return self._client

    def _get_async_client(self) -> httpx.AsyncClient:
        with self._client_lock:
            if self._async_client is None:
                self._async_client = httpx.AsyncClient(http2=True)
            return self._async_client

    def close(self) -> None:
        """Close the sync client if this instance created it."""
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None

    async def aclose(self) -> None:
        """Close the async client if this instance created it."""
        if self._owns_async_client and self._async_client is not None:
            await self._async_client.aclose()
            self._async_client = None

    def __enter__(self) -> "ApnsMessaging":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    async def __aenter__(self) -> "ApnsMessaging":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


def _log_response(message: Message, response: httpx.Response) -> None:
    apns_id = response.headers.get("apns-id")
    if response.status_code == 200:
        logger.info(
            "Push notification delivered: apns_id=%s, device=%s...",
            apns_id,
            message.token[:8],
        )
    else:
        logger.warning(
            "APNs delivery failed: status=%d, device=%s..., apns_id=%s",
            response.status_code,
            message.token[:8],
            apns_id,
        )
