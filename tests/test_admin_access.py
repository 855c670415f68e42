"""Tests for admin access verification."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from nanjil.app.core.config import settings
from nanjil.app.main import create_app
from nanjil.app.services.admin_access import AdminIdentity, verify_admin_access
from nanjil.app.services.photo_service import PhotoService


class TestVerifyAdminAccess:
    def test_admin_role(self):
        access = verify_admin_access(AdminIdentity("u1", "someone@example.com", "admin"))
        assert access.is_admin is True

    def test_allow_listed_email(self):
        access = verify_admin_access(
            AdminIdentity("u1", "Owner@Example.com", None),
            admin_emails=["owner@example.com"],
        )
        assert access.is_admin is True

    def test_regular_user(self):
        access = verify_admin_access(
            AdminIdentity("u1", "customer@example.com", "customer"),
            admin_emails=["owner@example.com"],
        )
        assert access.is_admin is False
        assert access.to_response() == {
            "isAdmin": False,
            "userId": "u1",
            "email": "customer@example.com",
            "role": "customer",
        }

    def test_missing_email_is_not_admin(self):
        assert verify_admin_access(AdminIdentity("u1"), ["owner@example.com"]).is_admin is False

    def test_anonymous_identity_raises(self):
        with pytest.raises(ValueError):
            verify_admin_access(AdminIdentity(None))


class TestVerifyAccessAPI:
    @pytest.fixture
    def client(self, tmp_path, monkeypatch):
        monkeypatch.setattr(settings, "admin_emails", ["owner@example.com"])
        return TestClient(create_app(photo_service=PhotoService(tmp_path)))

    def test_anonymous_gets_401(self, client):
        resp = client.post("/api/admin/verify-access")
        assert resp.status_code == 401
        assert resp.json() == {"isAdmin": False}

    def test_blank_user_header_is_anonymous(self, client):
        resp = client.post("/api/admin/verify-access", headers={"X-User-Id": "  "})
        assert resp.status_code == 401

    def test_admin_role_header(self, client):
        resp = client.post(
            "/api/admin/verify-access",
            headers={"X-User-Id": "user_1", "X-User-Email": "tech@example.com", "X-User-Role": "admin"},
        )
        assert resp.status_code == 200
        assert resp.json() == {
            "isAdmin": True,
            "userId": "user_1",
            "email": "tech@example.com",
            "role": "admin",
        }

    def test_allow_listed_email_header(self, client):
        resp = client.post(
            "/api/admin/verify-access",
            headers={"X-User-Id": "user_2", "X-User-Email": "owner@example.com"},
        )
        assert resp.status_code == 200
        assert resp.json()["isAdmin"] is True
        assert resp.json()["role"] is None

    def test_non_admin(self, client):
        resp = client.post(
            "/api/admin/verify-access",
            headers={"X-User-Id": "user_3", "X-User-Email": "customer@example.com"},
        )
        assert resp.status_code == 200
        assert resp.json()["isAdmin"] is False

    def test_verification_failure_keeps_flat_shape(self, client):
        with patch(
            "nanjil.app.api.admin.verify_admin_access",
            side_effect=RuntimeError("identity store unavailable"),
        ):
            resp = client.post("/api/admin/verify-access", headers={"X-User-Id": "user_4"})
        assert resp.status_code == 500
        assert resp.json() == {"isAdmin": False, "error": "Verification failed"}
