"""
core/errors.py -- Closed error taxonomy shared by auth/, articles/ and api/.

Every failure a route can report is one ErrorKind. Route handlers and the
exception handlers in api/main.py switch on the kind, never on exception class
names or message strings.

The status code normally follows from the kind (_DEFAULT_STATUS). USER_NOT_FOUND
is the one kind whose status depends on the call site: the access guard reports
it as 401, GET /auth/me as 404. AppError accepts an explicit override for that.

Layer rule: core/ is the kernel. No imports from api/, auth/, or articles/.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION_ERROR = "validation_error"
    DUPLICATE_USER = "duplicate_user"
    INVALID_CREDENTIALS = "invalid_credentials"
    UNAUTHENTICATED = "unauthenticated"
    USER_NOT_FOUND = "user_not_found"
    UNAUTHORIZED_OWNERSHIP = "unauthorized_ownership"
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"


_DEFAULT_STATUS: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION_ERROR: 400,
    ErrorKind.DUPLICATE_USER: 400,
    ErrorKind.INVALID_CREDENTIALS: 401,
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.USER_NOT_FOUND: 404,
    ErrorKind.UNAUTHORIZED_OWNERSHIP: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.SERVER_ERROR: 500,
}


class AppError(Exception):
    """A failure that is reported to the client as {"error": {code, message}}."""

    def __init__(self, kind: ErrorKind, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code if status_code is not None else _DEFAULT_STATUS[kind]

    def to_dict(self) -> dict:
        return {"code": self.kind.value, "message": self.message}
