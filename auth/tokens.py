"""
auth/tokens.py -- Bearer token codec and password hashing.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry the
       user id, the issuance time and an expiry of TOKEN_EXPIRE_SECONDS
       (7 days by default). Verification raises TokenError with a closed
       TokenErrorKind -- MALFORMED, BAD_SIGNATURE or EXPIRED -- so callers
       decide on the message without inspecting exception names.

       There is no revocation list. A token is valid exactly when its
       signature verifies under the current key and its expiry has not
       passed. Rotating SECRET_KEY invalidates every outstanding token.

  Passwords: bcrypt directly (no passlib wrapper). The _DUMMY_HASH constant
       enables timing equalization in auth/service.login() so response time
       does not reveal whether an email is registered.

  SECRET_KEY: sourced from core.config.get_settings() once, at module load.

Layer rule: no imports from api/ or articles/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from enum import Enum

import bcrypt
from jose import JWTError, jwt
from jose.utils import base64url_decode, base64url_encode

from core.config import get_settings

logger = logging.getLogger("blogapi.auth")

# ---------------------------------------------------------------------------
# Config -- read once at module load via the lru_cache singleton
# ---------------------------------------------------------------------------

_settings = get_settings()

_ALGORITHM = "HS256"

# bcrypt input limit, in UTF-8 bytes (not characters).
MAX_PASSWORD_BYTES = 72

# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    bcrypt accepts at most MAX_PASSWORD_BYTES of input (newer releases raise
    ValueError past it). auth/service.signup() rejects longer passwords
    before they get here.
    """
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash.
        return False


# Timing equalization dummy hash.
# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones.
_DUMMY_HASH: str = hash_password("blogapi_timing_dummy")


# ---------------------------------------------------------------------------
# Token codec
# ---------------------------------------------------------------------------


class TokenErrorKind(str, Enum):
    MALFORMED = "malformed"
    BAD_SIGNATURE = "bad_signature"
    EXPIRED = "expired"


class TokenError(Exception):
    """Raised by verify_token(). kind says why the token was rejected."""

    def __init__(self, kind: TokenErrorKind, message: str = "") -> None:
        super().__init__(message or kind.value)
        self.kind = kind


def _is_canonical_segment(segment: str) -> bool:
    """True if segment is the unpadded base64url encoding of the bytes it decodes to.

    python-jose ignores the unused low bits of the final character, so two
    different signature strings can decode to the same HMAC. Only the
    canonical spelling is accepted.
    """
    try:
        raw = base64url_decode(segment.encode("ascii"))
    except ValueError:
        return False
    return base64url_encode(raw).decode("ascii") == segment


def issue_token(
    user_id: int,
    issued_at: datetime | None = None,
    secret_key: str | None = None,
) -> str:
    """Encode a signed JWT for user_id that expires TOKEN_EXPIRE_SECONDS after issuance.

    Args:
        user_id:    Database id of the authenticated user.
        issued_at:  Issuance time. Defaults to now (UTC).
        secret_key: Signing key. Defaults to Settings.secret_key.
    """
    iat = issued_at or datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "user_id": user_id,
        "iat": iat,
        "exp": iat + timedelta(seconds=_settings.token_expire_seconds),
    }
    return jwt.encode(payload, secret_key or _settings.secret_key, algorithm=_ALGORITHM)


def verify_token(
    token: str,
    now: datetime | None = None,
    secret_key: str | None = None,
) -> int:
    """Verify a JWT and return the user id it carries.

    Checks run in a fixed order, and the first failure wins:
      1. The token must parse into header, claims and signature -> MALFORMED.
      2. The signature segment must be canonical base64url and verify under
         the key with HS256 -> BAD_SIGNATURE.
      3. The claims must carry an integer user_id and exp -> MALFORMED.
      4. now must not be past exp -> EXPIRED.

    Expiry is checked here rather than by python-jose so the clock can be
    supplied by the caller.
    """
    try:
        jwt.get_unverified_claims(token)
    except JWTError as exc:
        raise TokenError(TokenErrorKind.MALFORMED, "Token could not be decoded.") from exc

    if not _is_canonical_segment(token.rsplit(".", 1)[-1]):
        raise TokenError(TokenErrorKind.BAD_SIGNATURE, "Token signature verification failed.")

    try:
        payload = jwt.decode(
            token,
            secret_key or _settings.secret_key,
            algorithms=[_ALGORITHM],
            options={"verify_exp": False},
        )
    except JWTError as exc:
        raise TokenError(TokenErrorKind.BAD_SIGNATURE, "Token signature verification failed.") from exc

    user_id = payload.get("user_id")
    exp = payload.get("exp")
    if not isinstance(user_id, int) or not isinstance(exp, int):
        raise TokenError(TokenErrorKind.MALFORMED, "Token is missing required claims.")

    current = now or datetime.now(timezone.utc)
    if current.timestamp() > exp:
        raise TokenError(TokenErrorKind.EXPIRED, "Token has expired.")
    return user_id
