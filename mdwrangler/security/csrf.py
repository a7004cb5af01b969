"""Signed, time-boxed CSRF tokens for every mutating form.

A token is ``"{timestamp}:{nonce}:{signature}"`` where the signature is
HMAC-SHA256 over ``"{timestamp}:{nonce}"`` keyed with the process secret.
"""

import hashlib
import hmac
import logging
import re
import secrets
import time
from dataclasses import dataclass

logger = logging.getLogger(__name__)

TOKEN_MAX_AGE_SECONDS = 3600
MAX_CLOCK_SKEW_SECONDS = 60

_TIMESTAMP_RE = re.compile(r"[0-9]{1,20}")
_SIGNATURE_RE = re.compile(r"[0-9a-f]{64}")


class InvalidCsrfToken(Exception):
    """Raised for any missing, malformed, expired or forged token."""

    def __init__(self) -> None:
        super().__init__("Invalid CSRF Token")


@dataclass(frozen=True)
class CsrfSecret:
    key: bytes

    @classmethod
    def generate(cls) -> "CsrfSecret":
        """Draw a fresh 256-bit secret. Never persisted."""
        return cls(secrets.token_bytes(32))

    def __repr__(self) -> str:
        return "CsrfSecret(<redacted>)"


def _sign(secret: CsrfSecret, payload: str) -> bytes:
    return hmac.new(secret.key, payload.encode(), hashlib.sha256).digest()


def issue_token(secret: CsrfSecret, now: int | None = None) -> str:
    timestamp = int(time.time()) if now is None else now
    nonce = secrets.randbits(64)
    payload = f"{timestamp}:{nonce}"
    return f"{payload}:{_sign(secret, payload).hex()}"


def verify_token(token: str, secret: CsrfSecret, now: int | None = None) -> None:
    """Raise InvalidCsrfToken unless ``token`` was issued with ``secret`` within the last hour."""
    parts = token.split(":")
    if len(parts) != 3:
        raise InvalidCsrfToken()
    timestamp_str, nonce, signature_hex = parts

    if not _TIMESTAMP_RE.fullmatch(timestamp_str):
        raise InvalidCsrfToken()
    timestamp = int(timestamp_str)
    current = int(time.time()) if now is None else now

    if current - timestamp > TOKEN_MAX_AGE_SECONDS:
        logger.debug("CSRF token expired (issued %s, now %s)", timestamp, current)
        raise InvalidCsrfToken()
    if timestamp - current > MAX_CLOCK_SKEW_SECONDS:
        logger.debug("CSRF token issued in the future (issued %s, now %s)", timestamp, current)
        raise InvalidCsrfToken()

    if not _SIGNATURE_RE.fullmatch(signature_hex):
        raise InvalidCsrfToken()

    expected = _sign(secret, f"{timestamp_str}:{nonce}")
    if not hmac.compare_digest(expected, bytes.fromhex(signature_hex)):
        raise InvalidCsrfToken()
