"""
api/routes/auth.py -- Signup, login and current-user endpoints.

Routes:
  POST /auth/signup  -- create account; 201 {message, token, user}
  POST /auth/login   -- email + password; 200 {message, token, user}
  GET  /auth/me      -- current user from the bearer token; 200 {user}

Security:
  POST /auth/login and POST /auth/signup are rate-limited per client IP.
  auth/service.login() does timing equalization -- use it, never inline
  get_by_email() + verify_password().
  Cache-Control: no-store on every response that carries a token.

Unlike the access guard, GET /auth/me reports a valid token whose user no
longer exists as 404 user_not_found, not 401.
"""

from fastapi import APIRouter, Request, Response

from api.limiter import limiter
from api.models import AuthResponse, LoginRequest, MeResponse, PublicUser, SignupRequest
from auth import service
from auth.dependencies import bearer_token
from auth.store import UserStore
from core.config import get_settings

# Auth policy:
# - POST /auth/signup: public -- creates the account
# - POST /auth/login:  public -- must be reachable unauthenticated
# - GET  /auth/me:     bearer token, resolved inline (404 when the user is gone)
router = APIRouter()

_settings = get_settings()


@router.post("/auth/signup", response_model=AuthResponse, status_code=201)
@limiter.limit(_settings.signup_rate_limit)
def signup(request: Request, response: Response, body: SignupRequest) -> AuthResponse:
    """Register a new user and return a token for them."""
    user_store: UserStore = request.app.state.user_store
    result = service.signup(
        user_store,
        username=body.username,
        email=body.email,
        password=body.password,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    response.headers["Cache-Control"] = "no-store"
    return AuthResponse(
        message="User created successfully",
        token=result.token,
        user=PublicUser.from_user(result.user),
    )


@router.post("/auth/login", response_model=AuthResponse)
@limiter.limit(_settings.login_rate_limit)
def login(request: Request, response: Response, body: LoginRequest) -> AuthResponse:
    """Authenticate with email and password.

    Returns the same invalid_credentials error for an unknown email and a
    wrong password to avoid leaking which emails are registered.
    """
    user_store: UserStore = request.app.state.user_store
    result = service.login(user_store, body.email, body.password)
    response.headers["Cache-Control"] = "no-store"
    return AuthResponse(
        message="Login successful",
        token=result.token,
        user=PublicUser.from_user(result.user),
    )


@router.get("/auth/me", response_model=MeResponse)
def me(request: Request) -> MeResponse:
    """Return the public view of the user named by the bearer token."""
    user_store: UserStore = request.app.state.user_store
    user = service.resolve_current_user(user_store, bearer_token(request))
    return MeResponse(user=PublicUser.from_user(user))
