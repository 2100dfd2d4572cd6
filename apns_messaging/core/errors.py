"""
APNs Errors: exception taxonomy for the messaging client.

Argument and key errors are raised synchronously where the contract is
violated. Transport errors are not wrapped: httpx exceptions
(httpx.TimeoutException, httpx.ConnectError, ...) reach the caller as-is.
"""


class ApnsError(Exception):
    """Base class for every error raised by this package."""

    pass


class InvalidArgumentError(ApnsError):
    """A required argument is absent or structurally invalid."""

    pass


class InvalidKeyFormatError(ApnsError):
    """Signing key material could not be decoded or parsed as an EC key."""

    pass


class TokenGenerationError(ApnsError):
    """Signing the provider token failed. The token cache is left unset."""

    pass
