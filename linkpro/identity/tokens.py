"""
Session token helpers.

Tokens have the shape of a JWT (`header.payload.signature`, base64url JSON
segments) but are not cryptographically verifiable: the signature is a plain
SHA-256 digest of `header.payload`. It catches accidental corruption, not forgery.

Note:
    This is only for demo purposes.
    In production, sign with a secret (e.g. python-jose / PyJWT with HS256).
"""

import base64
import hashlib
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..errors import InvalidCredentials
from ..models import SessionToken, User

_HEADER = {"alg": "SHA256", "typ": "JWT"}


def _b64encode(data: Dict[str, Any]) -> str:
    raw = json.dumps(data, separators=(",", ":"), sort_keys=True).encode("utf-8")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64decode(segment: str) -> Dict[str, Any]:
    padded = segment + "=" * (-len(segment) % 4)
    return json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))


def _digest(signing_input: str) -> str:
    return hashlib.sha256(signing_input.encode("utf-8")).hexdigest()


def encode_token(user: User, issued_at: Optional[datetime] = None) -> SessionToken:
    """Build the token for `user`; the same inputs always give the same value."""
    issued_at = issued_at or datetime.now(timezone.utc)
    payload = {
        "sub": user.id,
        "username": user.username,
        "iat": int(issued_at.timestamp()),
    }
    signing_input = f"{_b64encode(_HEADER)}.{_b64encode(payload)}"
    return SessionToken(
        user_id=user.id,
        username=user.username,
        issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
        value=f"{signing_input}.{_digest(signing_input)}",
    )


def decode_token(value: str) -> Dict[str, Any]:
    """
    Return the payload claims of a token.

    Raises:
        InvalidCredentials: If the token is malformed, its digest does not match,
            or a claim is missing or of the wrong type.
    """
    parts = (value or "").split(".")
    if len(parts) != 3:
        raise InvalidCredentials("Invalid session. Please log in again.")
    header, payload, signature = parts
    if _digest(f"{header}.{payload}") != signature:
        raise InvalidCredentials("Invalid session. Please log in again.")
    try:
        claims = _b64decode(payload)
    except ValueError as exc:
        raise InvalidCredentials("Invalid session. Please log in again.") from exc
    if not isinstance(claims, dict) or not {"sub", "username", "iat"} <= claims.keys():
        raise InvalidCredentials("Invalid session. Please log in again.")
    # bool is an int subclass but never a valid issue time
    if (
        not isinstance(claims["sub"], str)
        or not isinstance(claims["username"], str)
        or not isinstance(claims["iat"], int)
        or isinstance(claims["iat"], bool)
    ):
        raise InvalidCredentials("Invalid session. Please log in again.")
    return claims
