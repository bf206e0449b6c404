"""Tests for passwords, tokens and capability checks."""

import uuid
from datetime import timedelta
from types import SimpleNamespace

import pytest
from fastapi import HTTPException

from app.core.security import (
    Principal,
    Role,
    can_manage_job,
    can_view_application,
    create_access_token,
    decode_token,
    get_password_hash,
    is_admin,
    is_self,
    require_role,
    verify_password,
)


def _principal(role: Role, user_id=None) -> Principal:
    return Principal(user_id=user_id or uuid.uuid4(), role=role)


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = get_password_hash("secret123")

        assert hashed != "secret123"
        assert verify_password("secret123", hashed)
        assert not verify_password("wrong-secret", hashed)

    def test_missing_or_malformed_hash(self):
        assert not verify_password("secret123", None)
        assert not verify_password("secret123", "not-a-bcrypt-hash")


class TestTokens:
    def test_create_and_decode(self):
        user_id = str(uuid.uuid4())
        token = create_access_token({"sub": user_id, "role": "employee"})

        payload = decode_token(token)
        assert payload["sub"] == user_id
        assert payload["role"] == "employee"
        assert payload["type"] == "access"
        assert "exp" in payload

    def test_expired_token(self):
        token = create_access_token({"sub": "x"}, expires_delta=timedelta(seconds=-5))

        with pytest.raises(HTTPException) as exc:
            decode_token(token)
        assert exc.value.status_code == 401

    def test_garbage_token(self):
        with pytest.raises(HTTPException):
            decode_token("not.a.token")


class TestCapabilities:
    def test_is_admin(self):
        assert is_admin(_principal(Role.ADMIN))
        assert not is_admin(_principal(Role.EMPLOYEE))

    def test_is_self(self):
        principal = _principal(Role.JOB_SEEKER)
        assert is_self(principal, principal.user_id)
        assert not is_self(principal, uuid.uuid4())

    def test_can_manage_job(self):
        poster = _principal(Role.EMPLOYEE)
        job = SimpleNamespace(posted_by_user_id=poster.user_id)

        assert can_manage_job(poster, job)
        assert can_manage_job(_principal(Role.ADMIN), job)
        assert not can_manage_job(_principal(Role.EMPLOYEE), job)

    def test_can_view_application(self):
        poster = _principal(Role.EMPLOYEE)
        applicant = _principal(Role.JOB_SEEKER)
        job = SimpleNamespace(posted_by_user_id=poster.user_id)
        application = SimpleNamespace(user_id=applicant.user_id)

        assert can_view_application(applicant, application, job)
        assert can_view_application(poster, application, job)
        assert can_view_application(_principal(Role.ADMIN), application, job)
        assert not can_view_application(_principal(Role.JOB_SEEKER), application, job)


class TestRequireRole:
    async def test_allowed_role(self):
        checker = require_role(Role.EMPLOYEE, Role.ADMIN)
        principal = _principal(Role.ADMIN)
        assert await checker(principal=principal) is principal

    async def test_forbidden_role(self):
        checker = require_role(Role.ADMIN)
        with pytest.raises(HTTPException) as exc:
            await checker(principal=_principal(Role.JOB_SEEKER))
        assert exc.value.status_code == 403
