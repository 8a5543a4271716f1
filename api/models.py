"""
API request and response models for the blog REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
articles/models.py, which own the internal domain representation. Route
handlers map between the two.

JSON field names are camelCase (firstName, createdBy, ...) to match what the
single-page frontend sends and expects; Python attribute names stay
snake_case. populate_by_name lets route code build models with either.

Separation of concerns: domain dataclasses = domain truth; api/ models = API contract.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from articles.models import Article
from articles.store import normalize_tags
from auth.models import User

# ---------------------------------------------------------------------------
# Shared config
# ---------------------------------------------------------------------------

_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)
_CAMEL_FROZEN = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]


# ---------------------------------------------------------------------------
# Auth -- requests
#
# Required fields are typed Optional on purpose: presence and length checks
# happen in auth/service.py so a missing field is a 400 validation_error with
# the same message whether the key is absent, null or empty.
# ---------------------------------------------------------------------------


class SignupRequest(BaseModel):
    """Request body for POST /auth/signup."""

    model_config = _CAMEL

    username: Optional[str] = Field(default=None, max_length=50)
    email: Optional[str] = Field(default=None, max_length=255)
    # Character cap only; the 72-byte bcrypt limit is enforced in auth/service.signup().
    password: Optional[str] = Field(default=None, max_length=72)
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)


class LoginRequest(BaseModel):
    """Request body for POST /auth/login."""

    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=72)


# ---------------------------------------------------------------------------
# Auth -- responses
# ---------------------------------------------------------------------------


class PublicUser(BaseModel):
    """The part of a user record that is safe to send to clients.

    There is no field for the password hash, so it cannot leak through
    serialization even by accident.
    """

    model_config = _CAMEL_FROZEN

    id: int
    username: str
    email: str
    first_name: str = ""
    last_name: str = ""

    @classmethod
    def from_user(cls, user: User) -> "PublicUser":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
        )


class AuthResponse(BaseModel):
    """Response for POST /auth/signup and POST /auth/login."""

    model_config = ConfigDict(frozen=True)

    message: str
    token: str
    user: PublicUser


class MeResponse(BaseModel):
    """Response for GET /auth/me."""

    model_config = ConfigDict(frozen=True)

    user: PublicUser


# ---------------------------------------------------------------------------
# Articles -- requests
# ---------------------------------------------------------------------------


class ArticleCreate(BaseModel):
    """Request body for POST /articles.

    author is optional; the route fills in the caller's username when it is
    missing or blank. Tags are normalized to a set-like list.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    author: Optional[str] = Field(default=None, max_length=255)
    tags: list[str] = Field(default_factory=list, max_length=50)

    @field_validator("tags")
    @classmethod
    def dedupe_tags(cls, values: list[str]) -> list[str]:
        return normalize_tags(values)


class ArticleUpdate(BaseModel):
    """Request body for PUT /articles/{id}. Only the fields sent are changed.

    There is no createdBy field: extra keys are ignored, so the creator of an
    article cannot be changed through the API.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    content: Optional[str] = Field(default=None, min_length=1)
    author: Optional[str] = Field(default=None, max_length=255)
    tags: Optional[list[str]] = Field(default=None, max_length=50)

    @field_validator("tags")
    @classmethod
    def dedupe_tags(cls, values: Optional[list[str]]) -> Optional[list[str]]:
        return normalize_tags(values) if values is not None else None


# ---------------------------------------------------------------------------
# Articles -- responses
# ---------------------------------------------------------------------------


class ArticleResponse(BaseModel):
    """Full article representation."""

    model_config = _CAMEL_FROZEN

    id: int
    title: str
    content: str
    author: str
    tags: list[str]
    created_by: int
    created_at: str
    updated_at: str

    @classmethod
    def from_article(cls, article: Article) -> "ArticleResponse":
        """Build an ArticleResponse from an articles.models.Article."""
        return cls(
            id=article.id,
            title=article.title,
            content=article.content,
            author=article.author,
            tags=article.tags,
            created_by=article.created_by,
            created_at=article.created_at,
            updated_at=article.updated_at,
        )
