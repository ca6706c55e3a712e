"""Authentication utilities: JWT tokens and password hashing.

Uses a pure-Python HMAC-SHA256 JWT implementation. HS256 only needs
stdlib's hmac module.
"""
from __future__ import annotations

import base64
import hashlib
import hmac
import json
import time
from datetime import timedelta
from typing import Any, Dict, Optional

from passlib.context import CryptContext

from core.config import get_settings
from core.exceptions import ConfigurationError
from core.types import SessionUser, TokenClaims
from core.utils import utcnow

SETTINGS = get_settings()

ACCESS_TOKEN_TYPE = "access"


def _signing_key() -> str:
    if not SETTINGS.jwt_secret_key:
        raise ConfigurationError("JWT_SECRET_KEY is not configured")
    return SETTINGS.jwt_secret_key


# ---------------------------------------------------------------------------
# Pure-Python HS256 JWT
# ---------------------------------------------------------------------------

def _b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode()


def _b64url_decode(s: str) -> bytes:
    padding = 4 - len(s) % 4
    if padding != 4:
        s += "=" * padding
    return base64.urlsafe_b64decode(s)


def _jwt_encode(payload: Dict[str, Any], secret: str) -> str:
    header = {"alg": "HS256", "typ": "JWT"}
    segments = [
        _b64url_encode(json.dumps(header, separators=(",", ":")).encode()),
        _b64url_encode(json.dumps(payload, separators=(",", ":"), default=str).encode()),
    ]
    signing_input = f"{segments[0]}.{segments[1]}"
    sig = hmac.new(secret.encode(), signing_input.encode(), hashlib.sha256).digest()
    segments.append(_b64url_encode(sig))
    return ".".join(segments)


def _jwt_decode(token: str, secret: str) -> Optional[Dict[str, Any]]:
    parts = token.split(".")
    if len(parts) != 3:
        return None

    try:
        signing_input = f"{parts[0]}.{parts[1]}"
        expected_sig = hmac.new(secret.encode(), signing_input.encode(), hashlib.sha256).digest()
        actual_sig = _b64url_decode(parts[2])

        if not hmac.compare_digest(expected_sig, actual_sig):
            return None

        payload = json.loads(_b64url_decode(parts[1]))
    except (ValueError, TypeError):
        # Malformed base64 or JSON
        return None

    if not isinstance(payload, dict):
        return None

    exp = payload.get("exp")
    if isinstance(exp, (int, float)) and exp < time.time():
        return None

    return payload


# ---------------------------------------------------------------------------
# Password Hashing (passlib)
# ---------------------------------------------------------------------------

_pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash a password with PBKDF2-SHA256."""
    return _pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash. Unknown hash formats never match."""
    try:
        return _pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


# ---------------------------------------------------------------------------
# Token Creation/Decoding
# ---------------------------------------------------------------------------

def create_access_token(user: SessionUser, expires_minutes: Optional[int] = None) -> str:
    """
    Create a JWT access token for a principal.

    The effective role is not part of the claims; it is recomputed from
    ``is_master`` and ``current_org_role`` on every use.
    """
    minutes = expires_minutes if expires_minutes is not None else SETTINGS.jwt_access_token_expire_minutes
    expire = utcnow() + timedelta(minutes=minutes)
    payload = {
        "sub": user.id,
        "email": user.email,
        "name": user.name,
        "is_master": user.is_master,
        "current_org_id": user.current_org_id,
        "current_org_role": user.current_org_role,
        "exp": int(expire.timestamp()),
        "type": ACCESS_TOKEN_TYPE,
    }
    return _jwt_encode(payload, _signing_key())


def decode_access_token(token: str) -> Optional[TokenClaims]:
    """
    Decode and validate a JWT access token.

    Returns:
        TokenClaims, or None if invalid/expired.
    """
    if not token:
        return None
    payload = _jwt_decode(token, _signing_key())
    if payload is None:
        return None
    if payload.get("type") != ACCESS_TOKEN_TYPE or not payload.get("sub"):
        return None
    return TokenClaims.from_payload(payload)


__all__ = [
    "hash_password",
    "verify_password",
    "create_access_token",
    "decode_access_token",
]
