"""TeamTailor v2 webhook signatures.

The header value is base64 of ``t=<unix timestamp>,v2=<hex digest>`` where the
digest is HMAC-SHA256 over ``<timestamp>.<raw body>`` keyed with the shared
webhook secret.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import logging
import time
from dataclasses import dataclass
from typing import Optional, Union

logger = logging.getLogger(__name__)

BytesLike = Union[bytes, str]


class WebhookAuthenticationError(Exception):
    """Inbound event failed signature verification."""


@dataclass(frozen=True)
class SignatureToken:
    timestamp: str
    digest: str


def _to_bytes(value: BytesLike) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else value


def parse_signature(token: Optional[str]) -> Optional[SignatureToken]:
    """Decode a signature header; None when it is missing or malformed."""

    if not token:
        return None
    try:
        # header folding may insert whitespace or line breaks into the token
        decoded = base64.b64decode("".join(token.split()), validate=True).decode("utf-8")
    except (binascii.Error, ValueError):
        logger.warning("signature is not valid base64")
        return None

    parts = decoded.split(",")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        logger.warning("signature has %d parts, expected 2", len(parts))
        return None
    timestamp_part, digest_part = parts
    if not timestamp_part.startswith("t=") or not digest_part.startswith("v2="):
        logger.warning("signature parts are missing t=/v2= prefixes")
        return None
    return SignatureToken(timestamp=timestamp_part[2:], digest=digest_part[3:])


def compute_digest(payload: BytesLike, timestamp: str, secret: str) -> str:
    """Hex HMAC-SHA256 of ``timestamp + "." + payload``."""

    signed = timestamp.encode("utf-8") + b"." + _to_bytes(payload)
    return hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()


def build_signature(payload: BytesLike, secret: str, timestamp: Optional[int] = None) -> str:
    """Produce a header value the way the sender does. Used by tests and scripts."""

    ts = str(int(time.time()) if timestamp is None else timestamp)
    raw = f"t={ts},v2={compute_digest(payload, ts, secret)}"
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


def verify(payload: BytesLike, token: Optional[str], secret: Optional[str]) -> bool:
    """Check a signature token against the raw payload. Never raises."""

    if not secret:
        return False
    parsed = parse_signature(token)
    if parsed is None:
        return False
    expected = compute_digest(payload, parsed.timestamp, secret)
    # compare_digest only accepts ASCII str, so compare bytes
    return hmac.compare_digest(expected.encode("ascii"), parsed.digest.encode("utf-8"))


def is_fresh(token: Optional[str], max_age_seconds: int, now: Optional[float] = None) -> bool:
    """Replay window check on the signed timestamp; ``max_age_seconds <= 0`` disables it."""

    if max_age_seconds <= 0:
        return True
    parsed = parse_signature(token)
    if parsed is None:
        return False
    try:
        signed_at = int(parsed.timestamp)
    except ValueError:
        return False
    current = time.time() if now is None else now
    return abs(current - signed_at) <= max_age_seconds


class SignatureVerifier:
    """Verifier bound to the configured secret and replay window."""

    def __init__(self, secret: Optional[str], max_age_seconds: int = 0) -> None:
        self._secret = secret
        self._max_age_seconds = max_age_seconds
        if not secret:
            logger.error("webhook secret is not configured, every inbound event will be rejected")

    def verify(self, payload: BytesLike, token: Optional[str]) -> bool:
        return verify(payload, token, self._secret) and is_fresh(token, self._max_age_seconds)

    def ensure_valid(self, payload: BytesLike, token: Optional[str]) -> None:
        """Raise WebhookAuthenticationError unless the signature checks out."""

        if not token:
            raise WebhookAuthenticationError("missing signature")
        if not verify(payload, token, self._secret):
            raise WebhookAuthenticationError("invalid signature")
        if not is_fresh(token, self._max_age_seconds):
            raise WebhookAuthenticationError("signature timestamp outside allowed window")
