"""
Unit tests for session tokens and the session guard.
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt

from tradewire.auth.dependencies import AdvisorIdentity, verify_session_token
from tradewire.auth.jwt import create_access_token, decode_token
from tradewire.auth.password import hash_password, verify_password
from tradewire.config import settings
from tradewire.core.exceptions import AuthMissing, AuthInvalid


def _bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


def _signed(claims: dict, secret: str = None) -> str:
    return jwt.encode(claims, secret or settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


class TestAccessToken:
    def test_claims(self):
        payload = decode_token(create_access_token(7, "a@b.com"))

        assert payload["sub"] == "7"
        assert payload["email"] == "a@b.com"
        assert payload["type"] == "access"
        assert "exp" in payload
        assert "jti" in payload

    def test_tokens_are_unique(self):
        assert create_access_token(1, "a@b.com") != create_access_token(1, "a@b.com")


class TestVerifySessionToken:
    def test_valid_token(self):
        identity = verify_session_token(_bearer(create_access_token(3, "adv@x.com")))
        assert identity == AdvisorIdentity(id=3, email="adv@x.com")

    def test_missing_credentials(self):
        with pytest.raises(AuthMissing):
            verify_session_token(None)

    def test_empty_token(self):
        with pytest.raises(AuthMissing):
            verify_session_token(_bearer(""))

    def test_garbage_token(self):
        with pytest.raises(AuthInvalid):
            verify_session_token(_bearer("not-a-jwt"))

    def test_wrong_secret(self):
        token = _signed(
            {"sub": "1", "email": "a@b.com", "type": "access",
             "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
            secret="some-other-secret",
        )
        with pytest.raises(AuthInvalid):
            verify_session_token(_bearer(token))

    def test_expired_token(self):
        token = _signed({
            "sub": "1", "email": "a@b.com", "type": "access",
            "exp": datetime.now(timezone.utc) - timedelta(minutes=1),
        })
        with pytest.raises(AuthInvalid):
            verify_session_token(_bearer(token))

    def test_wrong_token_type(self):
        token = _signed({
            "sub": "1", "email": "a@b.com", "type": "refresh",
            "exp": datetime.now(timezone.utc) + timedelta(minutes=5),
        })
        with pytest.raises(AuthInvalid):
            verify_session_token(_bearer(token))

    def test_missing_email_claim(self):
        token = _signed({
            "sub": "1", "type": "access",
            "exp": datetime.now(timezone.utc) + timedelta(minutes=5),
        })
        with pytest.raises(AuthInvalid):
            verify_session_token(_bearer(token))

    def test_non_numeric_subject(self):
        token = _signed({
            "sub": "abc", "email": "a@b.com", "type": "access",
            "exp": datetime.now(timezone.utc) + timedelta(minutes=5),
        })
        with pytest.raises(AuthInvalid):
            verify_session_token(_bearer(token))


class TestPasswordHashing:
    def test_verify(self):
        hashed = hash_password("Advisor123")
        assert verify_password("Advisor123", hashed)
        assert not verify_password("advisor123", hashed)

    def test_hash_is_salted(self):
        assert hash_password("Advisor123") != hash_password("Advisor123")


class TestGuardedEndpoints:
    @pytest.mark.asyncio
    async def test_no_token_is_401(self, client):
        r = await client.post("/api/send-trade", json={"clientEmail": "c@x.com", "tradeDetails": "Buy"})

        assert r.status_code == 401
        assert r.json()["detail"] == "Access denied: no token provided"

    @pytest.mark.asyncio
    async def test_non_bearer_scheme_is_401(self, client):
        r = await client.post(
            "/api/send-trade",
            json={"clientEmail": "c@x.com", "tradeDetails": "Buy"},
            headers={"Authorization": "Basic dXNlcjpwYXNz"},
        )

        assert r.status_code == 401
        assert r.headers["WWW-Authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_invalid_token_is_403(self, client):
        r = await client.post(
            "/api/generate-auth-link",
            json={"clientName": "Jane", "clientEmail": "c@x.com", "brokerEmail": "broker@y.com"},
            headers={"Authorization": "Bearer not-a-jwt"},
        )

        assert r.status_code == 403
        assert r.json()["detail"] == "Invalid token"

    @pytest.mark.asyncio
    async def test_expired_token_is_403(self, client, oauth_client, gmail_client):
        token = _signed({
            "sub": "1", "email": "a@b.com", "type": "access",
            "exp": datetime.now(timezone.utc) - timedelta(seconds=30),
        })
        r = await client.post(
            "/api/send-trade",
            json={"clientEmail": "c@x.com", "tradeDetails": "Buy"},
            headers={"Authorization": f"Bearer {token}"},
        )

        assert r.status_code == 403
        oauth_client.refresh_access_token.assert_not_called()
        gmail_client.send_raw.assert_not_called()
