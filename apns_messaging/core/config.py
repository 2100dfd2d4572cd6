"""
Application Configuration

Loads environment variables and provides typed settings
for the APNs client. Uses python-dotenv to load from .env file.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file from the repository root
_env_path = Path(__file__).resolve().parent.parent.parent / ".env"
load_dotenv(dotenv_path=_env_path)

# --- APNs token authentication ---
APNS_AUTH_KEY_PATH: str = os.getenv("APNS_AUTH_KEY_PATH", "")
APNS_KEY_ID: str = os.getenv("APNS_KEY_ID", "")
APNS_TEAM_ID: str = os.getenv("APNS_TEAM_ID", "")

# --- APNs endpoint selection ---
APNS_USE_SANDBOX: bool = os.getenv("APNS_USE_SANDBOX", "false").strip().lower() in (
    "1", "true", "yes",
)


def validate_apns_config() -> bool:
    """Check that all required APNs credentials are present and non-empty."""
    missing = []
    if not APNS_AUTH_KEY_PATH:
        missing.append("APNS_AUTH_KEY_PATH")
    if not APNS_KEY_ID:
        missing.append("APNS_KEY_ID")
    if not APNS_TEAM_ID:
        missing.append("APNS_TEAM_ID")
    if missing:
        raise EnvironmentError(
            f"Missing required APNs environment variables: {', '.join(missing)}. "
            f"Please fill in your .env file at: {_env_path}"
        )
    return True
