"""Shared fixtures: throwaway P-256 keys generated per test session."""

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from apns_messaging.services.signing_key import SigningKey

TEST_KEY_ID = "A1B2C3D4F5"
TEST_TEAM_ID = "TEAM123456"


def generate_p8_pem() -> str:
    """Return a fresh PKCS8 PEM EC key, formatted like Apple's .p8 files."""
    private_key = ec.generate_private_key(ec.SECP256R1())
    return private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")


@pytest.fixture(scope="session")
def p8_pem() -> str:
    return generate_p8_pem()


@pytest.fixture
def signing_key(p8_pem) -> SigningKey:
    return SigningKey(p8_pem, TEST_KEY_ID, TEST_TEAM_ID)


class FakeClock:
    """Manually advanced replacement for time.time()."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
