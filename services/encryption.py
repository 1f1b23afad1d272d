"""Encryption of integration secrets at rest.

Secrets are encrypted with Fernet. The master key lives in the OS keychain
when one is available and in a private key file otherwise.
"""

import base64
import json
import logging

import keyring
from cryptography.fernet import Fernet, InvalidToken
from keyring.errors import KeyringError

from core.config import settings

logger = logging.getLogger(__name__)

KEY_NAME = "master-key"

# Credential fields that are never stored in plain text
SENSITIVE_FIELDS = {
    "secret_key",
    "session_token",
    "password",
}

ENCRYPTED_MARKER = "_encrypted"


def _load_key() -> bytes | None:
    try:
        stored = keyring.get_password(settings.KEYRING_SERVICE, KEY_NAME)
    except KeyringError as e:
        logger.debug(f"Keyring unavailable: {e}")
        stored = None
    if stored:
        return base64.b64decode(stored)

    if settings.KEYFILE_PATH.exists():
        return settings.KEYFILE_PATH.read_bytes()
    return None


def _store_key(key: bytes) -> None:
    try:
        keyring.set_password(settings.KEYRING_SERVICE, KEY_NAME, base64.b64encode(key).decode())
        logger.info("Master key stored in OS keychain")
        return
    except KeyringError as e:
        logger.warning(f"Could not store key in keychain: {e}")

    keyfile = settings.KEYFILE_PATH
    keyfile.parent.mkdir(parents=True, exist_ok=True)
    keyfile.write_bytes(key)
    keyfile.chmod(0o600)
    logger.warning(f"Master key stored in fallback file: {keyfile}")


def get_master_key() -> bytes:
    """Get the master encryption key, generating one on first use."""
    key = _load_key()
    if key is None:
        key = Fernet.generate_key()
        _store_key(key)
    return key


def _encrypt_value(fernet: Fernet, value) -> dict:
    token = fernet.encrypt(json.dumps(value).encode())
    return {ENCRYPTED_MARKER: base64.b64encode(token).decode()}


def _decrypt_value(fernet: Fernet, field: str, value: dict):
    try:
        plain = fernet.decrypt(base64.b64decode(value[ENCRYPTED_MARKER]))
    except (InvalidToken, ValueError) as e:
        # Unreadable after a key change; the integration must be re-entered
        logger.error(f"Failed to decrypt {field}: {e}")
        return None
    return json.loads(plain.decode())


def encrypt_config(config: dict) -> dict:
    """Encrypt the sensitive fields of a credential dict.

    Sensitive fields become ``{"_encrypted": "<base64 token>"}``. Other
    fields and None values are kept as they are.
    """
    if not config:
        return config

    fernet = Fernet(get_master_key())
    return {
        field: _encrypt_value(fernet, value)
        if field in SENSITIVE_FIELDS and value is not None
        else value
        for field, value in config.items()
    }


def decrypt_config(config: dict) -> dict:
    """Reverse ``encrypt_config``. Fields that fail to decrypt become None."""
    if not config:
        return config

    fernet = Fernet(get_master_key())
    return {
        field: _decrypt_value(fernet, field, value)
        if isinstance(value, dict) and ENCRYPTED_MARKER in value
        else value
        for field, value in config.items()
    }
