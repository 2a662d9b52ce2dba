#!/usr/bin/env python3
"""
Account and authentication tests for Vinscan.

These tests verify:
1. Password hashing and verification (bcrypt, 72-byte limit)
2. Registration error codes
3. Login and bearer-token handling, including expired tokens
4. Optional email verification
5. Password reset
6. Profile read and account deletion

Usage:
    pytest vinscan/tests/test_users.py -v
"""

from __future__ import annotations

from datetime import timedelta

import bcrypt
import pytest

from vinscan.models.user import User
from vinscan.services import user as user_service
from vinscan.utils.auth import create_access_token, create_verification_token

API = "/api/v1"

LOGIN_CREDS = {"email": "admin@example.com", "password": "password"}


# =============================================================================
# UNIT TESTS - Password Hashing
# =============================================================================

class TestPasswordHashing:
    """Test the User model's password hashing methods."""

    def test_set_password_creates_valid_hash(self):
        user = User(email="a@example.com")
        user.set_password("mysecretpassword")

        assert user.password_hash.startswith("$2")
        assert len(user.password_hash) == 60

    def test_verify_password(self):
        user = User(email="a@example.com")
        user.set_password("correctpassword")

        assert user.verify_password("correctpassword") is True
        assert user.verify_password("wrongpassword") is False
        assert user.verify_password("") is False

    def test_password_hash_is_salted(self):
        user1 = User(email="a@example.com")
        user2 = User(email="b@example.com")
        user1.set_password("samepassword")
        user2.set_password("samepassword")

        assert user1.password_hash != user2.password_hash

    def test_long_password_truncated_at_72_bytes(self):
        """Passwords beyond 72 bytes must not raise; bytes past the limit are ignored."""
        user = User(email="a@example.com")
        long_password = "x" * 72 + "tail"
        user.set_password(long_password)

        assert user.verify_password(long_password) is True
        assert user.verify_password("x" * 72) is True

    def test_hash_readable_by_bcrypt(self):
        user = User(email="a@example.com")
        user.set_password("interop")
        assert bcrypt.checkpw(b"interop", user.password_hash.encode("utf-8"))


# =============================================================================
# REGISTRATION
# =============================================================================

class TestRegistration:

    def test_register_returns_uid(self, client):
        r = client.post(f"{API}/register", json=LOGIN_CREDS)
        assert r.status_code == 201
        body = r.json()
        assert body["uid"]
        assert "message" in body

    def test_duplicate_email_rejected(self, client):
        client.post(f"{API}/register", json=LOGIN_CREDS)
        r = client.post(f"{API}/register", json=LOGIN_CREDS)
        assert r.status_code == 401
        assert r.json()["detail"] == "Email already in use"

    def test_duplicate_email_is_case_insensitive(self, client):
        client.post(f"{API}/register", json=LOGIN_CREDS)
        r = client.post(f"{API}/register", json={**LOGIN_CREDS, "email": "ADMIN@example.com"})
        assert r.status_code == 401

    def test_weak_password_rejected(self, client):
        r = client.post(f"{API}/register", json={"email": "weak@example.com", "password": "123"})
        assert r.status_code == 401

    @pytest.mark.parametrize("body", [
        {"email": "not-an-email", "password": "password"},
        {"email": "x@example.com"},
        {"password": "password"},
        {},
    ])
    def test_malformed_input_is_400(self, client, body):
        r = client.post(f"{API}/register", json=body)
        assert r.status_code == 400


# =============================================================================
# LOGIN AND TOKENS
# =============================================================================

class TestLogin:

    def test_login_success(self, client):
        r = client.post(f"{API}/register", json=LOGIN_CREDS)
        uid = r.json()["uid"]

        r = client.post(f"{API}/login", json=LOGIN_CREDS)
        assert r.status_code == 200
        assert r.json()["uid"] == uid
        assert r.json()["token"]

    def test_wrong_password(self, client):
        client.post(f"{API}/register", json=LOGIN_CREDS)
        r = client.post(f"{API}/login", json={**LOGIN_CREDS, "password": "wrongpass"})
        assert r.status_code == 401

    def test_unknown_email(self, client):
        r = client.post(f"{API}/login", json=LOGIN_CREDS)
        assert r.status_code == 401

    def test_protected_routes_need_token(self, client):
        for path in ("/user", "/assets", "/records"):
            assert client.get(f"{API}{path}").status_code == 401

    def test_garbage_token(self, client):
        r = client.get(f"{API}/user", headers={"Authorization": "Bearer not.a.jwt"})
        assert r.status_code == 401
        assert r.json()["detail"] == "Invalid token"

    def test_expired_token(self, client):
        uid = client.post(f"{API}/register", json=LOGIN_CREDS).json()["uid"]
        token = create_access_token({"sub": uid}, expires_delta=timedelta(minutes=-1))
        r = client.get(f"{API}/user", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 401
        assert r.json()["detail"] == "Token expired"

    def test_verification_token_is_not_an_access_token(self, client):
        uid = client.post(f"{API}/register", json=LOGIN_CREDS).json()["uid"]
        token = create_verification_token(uid)
        r = client.get(f"{API}/user", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 401


# =============================================================================
# EMAIL VERIFICATION
# =============================================================================

class TestEmailVerification:

    def test_unverified_login_blocked_when_required(self, client, monkeypatch):
        sent = {}
        monkeypatch.setenv("REQUIRE_EMAIL_VERIFICATION", "true")
        monkeypatch.setattr(
            user_service, "send_verification_email",
            lambda user, token: sent.update(token=token),
        )

        client.post(f"{API}/register", json=LOGIN_CREDS)
        r = client.post(f"{API}/login", json=LOGIN_CREDS)
        assert r.status_code == 401
        assert r.json()["detail"] == "Email not verified"

        r = client.post(f"{API}/verify-email", json={"token": sent["token"]})
        assert r.status_code == 200

        r = client.post(f"{API}/login", json=LOGIN_CREDS)
        assert r.status_code == 200

    def test_access_token_cannot_verify(self, client):
        uid = client.post(f"{API}/register", json=LOGIN_CREDS).json()["uid"]
        token = create_access_token({"sub": uid})
        r = client.post(f"{API}/verify-email", json={"token": token})
        assert r.status_code == 401

    def test_verification_not_required_by_default(self, client, monkeypatch):
        monkeypatch.delenv("REQUIRE_EMAIL_VERIFICATION", raising=False)
        client.post(f"{API}/register", json=LOGIN_CREDS)
        r = client.post(f"{API}/login", json=LOGIN_CREDS)
        assert r.status_code == 200


# =============================================================================
# PASSWORD RESET, PROFILE, DELETION
# =============================================================================

class TestAccount:

    def test_reset_password(self, client, auth_headers):
        r = client.post(f"{API}/reset-password", json={"password": "newsecret"}, headers=auth_headers)
        assert r.status_code == 201

        old = client.post(f"{API}/login", json=LOGIN_CREDS)
        assert old.status_code == 401
        new = client.post(f"{API}/login", json={**LOGIN_CREDS, "password": "newsecret"})
        assert new.status_code == 200

    def test_reset_password_weak(self, client, auth_headers):
        r = client.post(f"{API}/reset-password", json={"password": "123"}, headers=auth_headers)
        assert r.status_code == 400

    def test_reset_password_needs_auth(self, client):
        r = client.post(f"{API}/reset-password", json={"password": "newsecret"})
        assert r.status_code == 401

    def test_profile_includes_assets_and_records(self, client, auth_headers, make_asset):
        asset_id = make_asset("BCA", 100)
        client.post(
            f"{API}/records",
            json={"day": 1, "month": 2, "year": 2024, "assetId": asset_id,
                  "type": "Expense", "category": "Makanan", "amount": 10},
            headers=auth_headers,
        )

        r = client.get(f"{API}/user", headers=auth_headers)
        assert r.status_code == 200
        profile = r.json()
        assert profile["email"] == LOGIN_CREDS["email"]
        assert "password_hash" not in profile
        assert set(profile) == {"id", "email", "email_verified", "created_at", "assets", "records"}
        assert [a["id"] for a in profile["assets"]] == [asset_id]
        assert len(profile["records"]) == 1

    def test_delete_user_cascades(self, client, auth_headers, make_asset, db):
        make_asset("BCA", 100)
        r = client.delete(f"{API}/user", headers=auth_headers)
        assert r.status_code == 200

        assert client.get(f"{API}/user", headers=auth_headers).status_code == 401
        assert db.query(User).count() == 0

        from vinscan.models.asset import Asset
        assert db.query(Asset).count() == 0

        # The email is free again
        r = client.post(f"{API}/register", json=LOGIN_CREDS)
        assert r.status_code == 201
