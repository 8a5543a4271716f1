"""Unit tests for auth/tokens.py -- bearer token codec and password hashing.

Covers:
- issue_token() / verify_token() round trip returns the embedded user id
- 7-day expiry boundary: one second before passes, one second after is EXPIRED
- any changed character in the signature segment is BAD_SIGNATURE
- a forged payload under the original signature is BAD_SIGNATURE
- a different signing key (rotation) is BAD_SIGNATURE
- unparseable tokens and tokens without required claims are MALFORMED
- bcrypt hashing is salted and verify_password() never raises
"""

import base64
import json
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from auth.tokens import TokenError, TokenErrorKind, hash_password, issue_token, verify_password, verify_token
from core.config import get_settings

_ISSUED = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
_LIFETIME = timedelta(days=7)


def _b64(data: dict) -> str:
    raw = json.dumps(data, separators=(",", ":")).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


class TestTokenRoundTrip:
    def test_verify_returns_user_id(self) -> None:
        token = issue_token(42)
        assert verify_token(token) == 42

    def test_token_has_three_segments(self) -> None:
        assert issue_token(1).count(".") == 2

    def test_expiry_is_seven_days_after_issuance(self) -> None:
        claims = jwt.get_unverified_claims(issue_token(7, issued_at=_ISSUED))
        assert claims["exp"] - claims["iat"] == int(_LIFETIME.total_seconds())
        assert claims["user_id"] == 7


class TestTokenExpiry:
    def test_one_second_before_expiry_succeeds(self) -> None:
        token = issue_token(5, issued_at=_ISSUED)
        assert verify_token(token, now=_ISSUED + _LIFETIME - timedelta(seconds=1)) == 5

    def test_one_second_after_expiry_fails(self) -> None:
        token = issue_token(5, issued_at=_ISSUED)
        with pytest.raises(TokenError) as excinfo:
            verify_token(token, now=_ISSUED + _LIFETIME + timedelta(seconds=1))
        assert excinfo.value.kind is TokenErrorKind.EXPIRED

    def test_token_issued_eight_days_ago_is_expired_now(self) -> None:
        token = issue_token(5, issued_at=datetime.now(timezone.utc) - timedelta(days=8))
        with pytest.raises(TokenError) as excinfo:
            verify_token(token)
        assert excinfo.value.kind is TokenErrorKind.EXPIRED


class TestTokenTampering:
    def test_every_signature_character_is_checked(self) -> None:
        """Changing any one character of the signature must fail verification."""
        token = issue_token(9)
        header, payload, signature = token.split(".")
        for i in range(len(signature)):
            replacement = "A" if signature[i] != "A" else "B"
            forged = f"{header}.{payload}.{signature[:i]}{replacement}{signature[i + 1:]}"
            with pytest.raises(TokenError) as excinfo:
                verify_token(forged)
            assert excinfo.value.kind is TokenErrorKind.BAD_SIGNATURE, f"position {i}"

    @pytest.mark.parametrize("user_id", range(1, 25))
    def test_last_signature_character_siblings_rejected(self, user_id) -> None:
        """Characters that differ only in the unused low bits decode to the same HMAC."""
        alphabet = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"
        token = issue_token(user_id, issued_at=_ISSUED)
        head, last = token[:-1], token[-1]
        idx = alphabet.index(last)
        for flip in (1, 2, 3):
            forged = head + alphabet[idx ^ flip]
            with pytest.raises(TokenError) as excinfo:
                verify_token(forged, now=_ISSUED)
            assert excinfo.value.kind is TokenErrorKind.BAD_SIGNATURE

    def test_forged_payload_fails(self) -> None:
        token = issue_token(9, issued_at=_ISSUED)
        header, _payload, signature = token.split(".")
        claims = jwt.get_unverified_claims(token)
        claims["user_id"] = 10
        with pytest.raises(TokenError) as excinfo:
            verify_token(f"{header}.{_b64(claims)}.{signature}", now=_ISSUED)
        assert excinfo.value.kind is TokenErrorKind.BAD_SIGNATURE

    def test_rotated_secret_rejects_old_tokens(self) -> None:
        token = issue_token(3)
        with pytest.raises(TokenError) as excinfo:
            verify_token(token, secret_key="r" * 64)
        assert excinfo.value.kind is TokenErrorKind.BAD_SIGNATURE

    def test_token_signed_with_other_secret_fails(self) -> None:
        token = issue_token(3, secret_key="o" * 64)
        with pytest.raises(TokenError) as excinfo:
            verify_token(token)
        assert excinfo.value.kind is TokenErrorKind.BAD_SIGNATURE


class TestMalformedTokens:
    @pytest.mark.parametrize("token", ["not-a-token", "abc.def", "a.b.c", "...."])
    def test_unparseable(self, token: str) -> None:
        with pytest.raises(TokenError) as excinfo:
            verify_token(token)
        assert excinfo.value.kind is TokenErrorKind.MALFORMED

    def test_missing_user_id_claim(self) -> None:
        exp = datetime.now(timezone.utc) + timedelta(hours=1)
        token = jwt.encode({"sub": "1", "exp": exp}, get_settings().secret_key, algorithm="HS256")
        with pytest.raises(TokenError) as excinfo:
            verify_token(token)
        assert excinfo.value.kind is TokenErrorKind.MALFORMED


class TestPasswordHashing:
    def test_hash_is_not_plaintext(self) -> None:
        hashed = hash_password("secret1")
        assert hashed != "secret1"
        assert hashed.startswith("$2")

    def test_hashes_are_salted(self) -> None:
        assert hash_password("secret1") != hash_password("secret1")

    def test_verify_correct_and_wrong(self) -> None:
        hashed = hash_password("secret1")
        assert verify_password("secret1", hashed) is True
        assert verify_password("secret2", hashed) is False

    def test_verify_against_garbage_hash_returns_false(self) -> None:
        assert verify_password("secret1", "not-a-bcrypt-hash") is False
