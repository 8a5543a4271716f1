"""
auth/service.py -- Signup, login and token resolution.

Each operation takes the UserStore as its first argument (same shape as the
store-first helpers in auth/tokens.py) and either returns a result or raises
core.errors.AppError with one of the closed ErrorKinds. HTTP concerns --
headers, status overrides, response bodies -- stay in api/ and
auth/dependencies.py.

Security:
  login() returns the same INVALID_CREDENTIALS error for an unknown email and
  for a wrong password, and runs bcrypt in both cases so response time does
  not tell them apart either.

  signup() reports DUPLICATE_USER when either the email or the username is
  taken, without saying which one. This still reveals that *some* account
  uses one of the two values; see DESIGN.md for the trade-off.

  Plaintext passwords are never stored, logged, or returned.

Layer rule: no imports from api/ or articles/.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError

from auth.models import User
from auth.store import UserStore
from auth.tokens import (
    _DUMMY_HASH,
    MAX_PASSWORD_BYTES,
    TokenError,
    TokenErrorKind,
    hash_password,
    issue_token,
    verify_password,
    verify_token,
)
from core.errors import AppError, ErrorKind

logger = logging.getLogger("blogapi.auth")

MIN_PASSWORD_LENGTH = 6

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

_TOKEN_MESSAGES: dict[TokenErrorKind, str] = {
    TokenErrorKind.MALFORMED: "Invalid token.",
    TokenErrorKind.BAD_SIGNATURE: "Invalid token.",
    TokenErrorKind.EXPIRED: "Token expired.",
}


@dataclass
class AuthResult:
    """A freshly issued bearer token and the user it identifies."""

    token: str
    user: User


def signup(
    store: UserStore,
    username: str | None,
    email: str | None,
    password: str | None,
    first_name: str | None = None,
    last_name: str | None = None,
) -> AuthResult:
    """Register a new user and issue a token for them.

    Order: validate -> duplicate lookup -> hash -> persist -> issue token.
    Nothing is written unless every earlier step succeeded.
    """
    username = (username or "").strip()
    email = (email or "").strip().lower()
    if not username or not email or not password:
        raise AppError(ErrorKind.VALIDATION_ERROR, "Username, email, and password are required.")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise AppError(
            ErrorKind.VALIDATION_ERROR,
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long.",
        )
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise AppError(
            ErrorKind.VALIDATION_ERROR,
            f"Password must be at most {MAX_PASSWORD_BYTES} bytes long.",
        )
    if not _EMAIL_RE.match(email):
        raise AppError(ErrorKind.VALIDATION_ERROR, "Email address is not valid.")

    if store.find_by_email_or_username(email, username) is not None:
        raise AppError(ErrorKind.DUPLICATE_USER, "User with this email or username already exists.")

    user = User(
        username=username,
        email=email,
        hashed_password=hash_password(password),
        first_name=(first_name or "").strip(),
        last_name=(last_name or "").strip(),
    )
    try:
        user.id = store.create_user(user)
    except IntegrityError as exc:
        # Lost a race with a concurrent signup for the same email/username.
        raise AppError(ErrorKind.DUPLICATE_USER, "User with this email or username already exists.") from exc

    logger.info("User registered (user_id=%s)", user.id)
    return AuthResult(token=issue_token(user.id), user=user)


def login(store: UserStore, email: str | None, password: str | None) -> AuthResult:
    """Authenticate by email and password and issue a token.

    Always runs bcrypt whether or not the email exists:
    - Unknown email: bcrypt runs against _DUMMY_HASH (same cost as real check)
    - Wrong password: bcrypt runs against the real hash (same cost)
    """
    email = (email or "").strip().lower()
    if not email or not password:
        raise AppError(ErrorKind.VALIDATION_ERROR, "Email and password are required.")

    user = store.get_by_email(email)
    if user is None:
        # Equalize timing -- do NOT return early before running bcrypt
        verify_password(password, _DUMMY_HASH)
        raise AppError(ErrorKind.INVALID_CREDENTIALS, "Invalid email or password.")
    if not verify_password(password, user.hashed_password):
        raise AppError(ErrorKind.INVALID_CREDENTIALS, "Invalid email or password.")

    logger.info("User logged in (user_id=%s)", user.id)
    return AuthResult(token=issue_token(user.id), user=user)


def resolve_current_user(store: UserStore, token: str | None) -> User:
    """Turn a bearer token into the User it names.

    Raises UNAUTHENTICATED when the token is missing, malformed, forged or
    expired, and USER_NOT_FOUND when the token is valid but its user is gone.
    Store failures propagate unchanged.
    """
    if not token:
        raise AppError(ErrorKind.UNAUTHENTICATED, "No token provided.")
    try:
        user_id = verify_token(token)
    except TokenError as exc:
        raise AppError(ErrorKind.UNAUTHENTICATED, _TOKEN_MESSAGES[exc.kind]) from exc

    user = store.get_by_id(user_id)
    if user is None:
        raise AppError(ErrorKind.USER_NOT_FOUND, "User not found.")
    return user
