"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

get_current_user() is the access guard for every protected route:
  1. Extract the bearer token from the Authorization header.
  2. Verify it and resolve it to a User (auth/service.resolve_current_user).
  3. Attach the User to request.state.user and return it.

Any failure ends the request before the route body runs:
  no token               -> 401 unauthenticated  "Access denied. No token provided."
  forged / malformed     -> 401 unauthenticated  "Invalid token."
  expired                -> 401 unauthenticated  "Token expired."
  user no longer exists  -> 401 user_not_found   "Invalid token. User not found."
  store failure          -> 500 server_error     (detail logged, not returned)

The guard only authenticates. Ownership checks belong to
articles/permissions.py and run after it.

Layer rule: no imports from api/ or articles/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

import logging

from fastapi import Request

from auth.models import User
from auth.service import resolve_current_user
from auth.store import UserStore
from core.errors import AppError, ErrorKind

logger = logging.getLogger("blogapi.auth")


def bearer_token(request: Request) -> str | None:
    """Return the token from "Authorization: Bearer <token>", or None.

    The header is split on whitespace and the second segment is the token.
    A missing header, a different scheme, or a header without a second
    segment all count as "no token".
    """
    parts = request.headers.get("Authorization", "").split()
    if len(parts) < 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]


def get_current_user(request: Request) -> User:
    """Require a valid bearer token. Raises AppError (401/500) otherwise.

    Use as a FastAPI dependency:
        @router.post("/articles")
        def route(user: User = Depends(get_current_user)): ...
    """
    token = bearer_token(request)
    if token is None:
        raise AppError(ErrorKind.UNAUTHENTICATED, "Access denied. No token provided.")

    user_store: UserStore = request.app.state.user_store
    try:
        user = resolve_current_user(user_store, token)
    except AppError as exc:
        if exc.kind is ErrorKind.USER_NOT_FOUND:
            raise AppError(ErrorKind.USER_NOT_FOUND, "Invalid token. User not found.", status_code=401) from exc
        raise
    except Exception as exc:
        logger.exception("User lookup failed while authenticating %s %s", request.method, request.url.path)
        raise AppError(ErrorKind.SERVER_ERROR, "Server error.") from exc

    request.state.user = user
    return user
