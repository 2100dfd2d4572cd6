"""
Token Cache: generates and caches the APNs provider authentication token.

APNs rejects provider tokens older than one hour and also throttles
providers that re-sign too often, so a token is reused until it is
TOKEN_TTL_MS old and then replaced. Token includes:
- header kid: the signing key id
- iss: team id
- iat: issued-at timestamp (UTC epoch seconds)

The (token, generated_at) pair is the only mutable state shared between
concurrent sends; a lock serializes check-and-refresh so two threads never
sign at the same time or observe a half-updated pair.
"""

import logging
import threading
import time
from typing import Callable, Optional

import jwt

from apns_messaging.core.errors import TokenGenerationError
from apns_messaging.services.signing_key import SigningKey

logger = logging.getLogger(__name__)

TOKEN_TTL_MS = 55 * 60 * 1000  # 55 minutes (APNs rejects tokens after 60)


class TokenCache:
    """Holds the current bearer token for one signing key."""

    def __init__(
        self,
        signing_key: SigningKey,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._signing_key = signing_key
        self._clock = clock
        self._lock = threading.Lock()
        self._cached_token: Optional[str] = None
        self._token_generated_at: int = 0  # epoch milliseconds

    @property
    def generated_at(self) -> int:
        """Epoch milliseconds of the cached token, 0 when unset."""
        return self._token_generated_at

    def get_valid_token(self) -> str:
        """
        Return the cached token, re-signing it first when missing or stale.

        Raises:
            TokenGenerationError: If signing fails. The cache is left as it
                was, so the next call tries again.
        """
        with self._lock:
            now_ms = int(self._clock() * 1000)
            if self._cached_token is None or now_ms - self._token_generated_at > TOKEN_TTL_MS:
                self._cached_token = self._generate_token(now_ms)
                self._token_generated_at = now_ms
            return self._cached_token

    def invalidate(self) -> None:
        """Drop the cached token so the next call signs a fresh one."""
        with self._lock:
            self._cached_token = None
            self._token_generated_at = 0

    def _generate_token(self, now_ms: int) -> str:
        """Sign a new ES256 JWT for the configured key."""
        key = self._signing_key
        try:
            token = jwt.encode(
                {"iss": key.team_id, "iat": now_ms // 1000},
                key.private_key,
                algorithm="ES256",
                headers={"kid": key.key_id},
            )
        except Exception as exc:
            logger.error("Failed to sign APNs token (key_id=%s): %s", key.key_id, exc)
            raise TokenGenerationError("Wasn't possible to generate the token") from exc

        logger.debug("Generated new APNs JWT token (key_id=%s)", key.key_id)
        return token
