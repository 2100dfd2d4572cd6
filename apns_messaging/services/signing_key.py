"""
Signing Key: the APNs auth key plus the identifiers needed for token claims.

Apple issues the auth key as a .p8 file: a PEM-armored PKCS8 EC private
key on the P-256 curve. The key id (kid header) and team id (iss claim)
come from the Apple Developer portal.
"""

import base64
import binascii
import logging
import re
from pathlib import Path

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric.ec import SECP256R1, EllipticCurvePrivateKey
from cryptography.hazmat.primitives.serialization import load_der_private_key

from apns_messaging.core.errors import InvalidArgumentError, InvalidKeyFormatError

logger = logging.getLogger(__name__)

_LINE_BREAKS = re.compile(r"\r\n|\r|\n")
_PEM_DELIMITERS = re.compile(r"-----.*?-----")


def _is_pkcs8(der: bytes) -> bool:
    """
    PrivateKeyInfo opens with SEQUENCE { INTEGER 0, SEQUENCE AlgorithmIdentifier }.

    SEC1 ECPrivateKey (BEGIN EC PRIVATE KEY) opens with INTEGER 1 followed
    by an OCTET STRING, which load_der_private_key would also accept.
    """
    if len(der) < 2 or der[0] != 0x30:
        return False
    length_octets = der[1] & 0x7F if der[1] & 0x80 else 0
    offset = 2 + length_octets
    return der[offset:offset + 4] == b"\x02\x01\x00\x30"


def _parse_private_key(raw_key: str) -> EllipticCurvePrivateKey:
    """
    Strip the PEM armor from raw key text and parse the PKCS8 DER bytes.

    Raises:
        InvalidKeyFormatError: If the text is not valid base64 or does not
            hold a PKCS8 EC private key on the P-256 curve.
    """
    clean_key = _PEM_DELIMITERS.sub("", _LINE_BREAKS.sub("", raw_key))

    try:
        key_bytes = base64.b64decode(clean_key, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidKeyFormatError(f"Key is not valid base64: {exc}") from exc

    try:
        private_key = load_der_private_key(key_bytes, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise InvalidKeyFormatError(f"Key is not a PKCS8 private key: {exc}") from exc

    if not _is_pkcs8(key_bytes):
        raise InvalidKeyFormatError("Key is not a PKCS8 PrivateKeyInfo")

    if not isinstance(private_key, EllipticCurvePrivateKey):
        raise InvalidKeyFormatError(
            f"Key must be an EC private key, got {type(private_key).__name__}"
        )
    if not isinstance(private_key.curve, SECP256R1):
        raise InvalidKeyFormatError(
            f"Key must use the P-256 curve, got {private_key.curve.name}"
        )
    return private_key


class SigningKey:
    """
    Immutable triple of parsed EC private key, key id and team id.

    Built once and reused for every token the cache signs.

    Raises:
        InvalidArgumentError: If any of the three arguments is missing.
        InvalidKeyFormatError: If the key material cannot be parsed.
    """

    def __init__(self, key: str, key_id: str, team_id: str) -> None:
        if not key:
            raise InvalidArgumentError("Key must not be null")
        if not key_id:
            raise InvalidArgumentError("Key id must not be null")
        if not team_id:
            raise InvalidArgumentError("Team id must not be null")

        self._private_key = _parse_private_key(key)
        self._key_id = key_id
        self._team_id = team_id

    def __repr__(self) -> str:
        return f"SigningKey(key_id={self._key_id!r}, team_id={self._team_id!r})"

    @classmethod
    def from_file(cls, path: str | Path, key_id: str, team_id: str) -> "SigningKey":
        """
        Load the APNs .p8 private key from disk.

        Raises:
            FileNotFoundError: If the key file does not exist.
        """
        key_path = Path(path)
        if not key_path.exists():
            raise FileNotFoundError(f"APNs auth key file not found: {path}")

        logger.debug("Loading APNs auth key from %s (key_id=%s)", key_path, key_id)
        return cls(key_path.read_text(), key_id, team_id)

    @property
    def private_key(self) -> EllipticCurvePrivateKey:
        return self._private_key

    @property
    def key_id(self) -> str:
        return self._key_id

    @property
    def team_id(self) -> str:
        return self._team_id
