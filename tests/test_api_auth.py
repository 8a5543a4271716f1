"""
tests/test_api_auth.py -- Integration tests for /auth routes.

These tests exercise the full stack: FastAPI routing -> request validation ->
auth/service -> UserStore -> response model serialization -> error envelope.

Coverage:
  - End-to-end scenario: signup -> login -> /auth/me -> truncated token 401
  - Signup: 201 shape, no password hash in the body, validation and duplicates
  - Login: identical 401 for unknown email and wrong password, no-store header
  - /auth/me: missing / malformed / expired token 401, deleted user 404

Fixtures used (from conftest.py):
  - api_client: (client, user_store, article_store)
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from auth.tokens import issue_token


def _auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class TestAuthScenario:
    def test_signup_login_me_truncated(self, api_client) -> None:
        client, _users, _articles = api_client

        resp = client.post("/auth/signup", json={"username": "alice", "email": "a@x.com", "password": "secret1"})
        assert resp.status_code == 201, resp.text

        resp = client.post("/auth/login", json={"email": "a@x.com", "password": "secret1"})
        assert resp.status_code == 200, resp.text
        token = resp.json()["token"]
        assert token

        resp = client.get("/auth/me", headers=_auth(token))
        assert resp.status_code == 200, resp.text
        assert resp.json()["user"]["username"] == "alice"

        resp = client.get("/auth/me", headers=_auth(token[:-1]))
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "unauthenticated"


class TestSignupRoute:
    def test_response_shape(self, api_client) -> None:
        client, _users, _articles = api_client
        resp = client.post(
            "/auth/signup",
            json={"username": "bob", "email": "bob@x.com", "password": "secret1", "firstName": "Bob", "lastName": "B"},
        )
        assert resp.status_code == 201, resp.text
        data = resp.json()
        assert data["message"] == "User created successfully"
        assert set(data["user"]) == {"id", "username", "email", "firstName", "lastName"}
        assert data["user"]["firstName"] == "Bob"
        assert "password" not in resp.text
        assert "$2" not in resp.text
        assert resp.headers["cache-control"] == "no-store"

    def test_token_resolves_to_new_user(self, api_client) -> None:
        client, _users, _articles = api_client
        resp = client.post("/auth/signup", json={"username": "carol", "email": "carol@x.com", "password": "secret1"})
        body = resp.json()
        me = client.get("/auth/me", headers=_auth(body["token"])).json()
        assert me["user"]["id"] == body["user"]["id"]

    def test_short_password(self, api_client) -> None:
        client, users, _articles = api_client
        before = users.count_users()
        resp = client.post("/auth/signup", json={"username": "dan", "email": "dan@x.com", "password": "12345"})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "validation_error"
        assert users.count_users() == before

    def test_missing_fields(self, api_client) -> None:
        client, _users, _articles = api_client
        resp = client.post("/auth/signup", json={"username": "dan"})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "validation_error"

    def test_oversized_password(self, api_client) -> None:
        client, _users, _articles = api_client
        resp = client.post("/auth/signup", json={"username": "dan", "email": "dan@x.com", "password": "x" * 100})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "validation_error"

    def test_multibyte_password_over_72_bytes(self, api_client) -> None:
        client, users, _articles = api_client
        before = users.count_users()
        resp = client.post("/auth/signup", json={"username": "hal", "email": "hal@x.com", "password": "é" * 40})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "validation_error"
        assert users.count_users() == before

    def test_duplicate(self, api_client) -> None:
        client, users, _articles = api_client
        client.post("/auth/signup", json={"username": "erin", "email": "erin@x.com", "password": "secret1"})
        before = users.count_users()
        resp = client.post("/auth/signup", json={"username": "erin2", "email": "erin@x.com", "password": "secret1"})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "duplicate_user"
        assert users.count_users() == before


class TestLoginRoute:
    def test_unknown_email_and_wrong_password_indistinguishable(self, api_client) -> None:
        client, _users, _articles = api_client
        client.post("/auth/signup", json={"username": "frank", "email": "frank@x.com", "password": "secret1"})
        wrong_pw = client.post("/auth/login", json={"email": "frank@x.com", "password": "nope-nope"})
        unknown = client.post("/auth/login", json={"email": "ghost@x.com", "password": "secret1"})
        assert wrong_pw.status_code == unknown.status_code == 401
        assert wrong_pw.json() == unknown.json()
        assert wrong_pw.json()["error"]["code"] == "invalid_credentials"

    def test_missing_fields(self, api_client) -> None:
        client, _users, _articles = api_client
        resp = client.post("/auth/login", json={"email": "frank@x.com"})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "validation_error"

    def test_success_headers_and_body(self, api_client) -> None:
        client, _users, _articles = api_client
        client.post("/auth/signup", json={"username": "gina", "email": "gina@x.com", "password": "secret1"})
        resp = client.post("/auth/login", json={"email": "gina@x.com", "password": "secret1"})
        assert resp.status_code == 200
        assert resp.json()["message"] == "Login successful"
        assert resp.json()["user"]["email"] == "gina@x.com"
        assert resp.headers["cache-control"] == "no-store"


class TestMeRoute:
    def test_no_header(self, api_client) -> None:
        client, _users, _articles = api_client
        resp = client.get("/auth/me")
        assert resp.status_code == 401
        assert resp.json()["error"] == {"code": "unauthenticated", "message": "No token provided."}

    def test_wrong_scheme_is_no_token(self, make_user, api_client) -> None:
        client, _users, _articles = api_client
        _uid, token = make_user()
        resp = client.get("/auth/me", headers={"Authorization": f"Token {token}"})
        assert resp.status_code == 401
        assert resp.json()["error"]["message"] == "No token provided."

    def test_expired(self, make_user, api_client) -> None:
        client, _users, _articles = api_client
        uid, _token = make_user()
        old = issue_token(uid, issued_at=datetime.now(timezone.utc) - timedelta(days=7, seconds=5))
        resp = client.get("/auth/me", headers=_auth(old))
        assert resp.status_code == 401
        assert resp.json()["error"]["message"] == "Token expired."

    def test_user_deleted(self, api_client) -> None:
        client, _users, _articles = api_client
        resp = client.get("/auth/me", headers=_auth(issue_token(987654)))
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "user_not_found"
