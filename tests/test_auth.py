import time
import uuid

import jwt
import pytest
from fastapi import HTTPException
from starlette.requests import Request

import tubely.auth as auth_mod
from conftest import OWNER_ID, make_token


def _request(headers: dict) -> Request:
    raw = [(k.lower().encode(), v.encode()) for k, v in headers.items()]
    return Request({"type": "http", "method": "GET", "path": "/", "headers": raw})


# ====== _safe_token_id ======

def test_safe_token_id_is_deterministic_and_short():
    t1 = auth_mod._safe_token_id("abc")
    assert t1 == auth_mod._safe_token_id("abc")
    assert t1 != auth_mod._safe_token_id("xyz")
    assert len(t1) == 8


# ====== get_bearer_token ======

def test_get_bearer_token_ok():
    assert auth_mod.get_bearer_token({"Authorization": "Bearer abc.def"}) == "abc.def"


def test_get_bearer_token_case_insensitive_scheme():
    assert auth_mod.get_bearer_token({"authorization": "bearer   tok "}) == "tok"


@pytest.mark.parametrize("headers", [
    {},
    {"Authorization": ""},
    {"Authorization": "Bearer"},
    {"Authorization": "Bearer    "},
    {"Authorization": "Basic dXNlcjpwYXNz"},
])
def test_get_bearer_token_missing_or_malformed(headers):
    with pytest.raises(auth_mod.MissingTokenError):
        auth_mod.get_bearer_token(headers)


# ====== validate_jwt ======

def test_validate_jwt_returns_subject_uuid():
    assert auth_mod.validate_jwt(make_token(), "test-secret") == OWNER_ID


def test_validate_jwt_wrong_secret():
    with pytest.raises(jwt.InvalidTokenError):
        auth_mod.validate_jwt(make_token(secret="other"), "test-secret")


def test_validate_jwt_expired():
    with pytest.raises(jwt.InvalidTokenError):
        auth_mod.validate_jwt(make_token(expires_in=-10), "test-secret")


def test_validate_jwt_wrong_issuer():
    with pytest.raises(jwt.InvalidTokenError):
        auth_mod.validate_jwt(make_token(issuer="someone-else"), "test-secret")


def test_validate_jwt_subject_not_uuid():
    now = int(time.time())
    token = jwt.encode(
        {"iss": "tubely-access", "sub": "not-a-uuid", "exp": now + 60},
        "test-secret",
        algorithm="HS256",
    )
    with pytest.raises(jwt.InvalidTokenError):
        auth_mod.validate_jwt(token, "test-secret")


def test_validate_jwt_missing_exp():
    token = jwt.encode({"iss": "tubely-access", "sub": str(uuid.uuid4())}, "test-secret", algorithm="HS256")
    with pytest.raises(jwt.InvalidTokenError):
        auth_mod.validate_jwt(token, "test-secret")


def test_validate_jwt_garbage():
    with pytest.raises(jwt.InvalidTokenError):
        auth_mod.validate_jwt("not.a.jwt", "test-secret")


# ====== require_user (dependência FastAPI) ======

@pytest.mark.asyncio
async def test_require_user_ok(monkeypatch):
    monkeypatch.setattr(auth_mod.settings, "jwt_secret", "test-secret", raising=False)
    req = _request({"Authorization": f"Bearer {make_token()}"})
    assert await auth_mod.require_user(req) == OWNER_ID


@pytest.mark.asyncio
async def test_require_user_missing_header_401():
    with pytest.raises(HTTPException) as ex:
        await auth_mod.require_user(_request({}))
    assert ex.value.status_code == 401
    assert ex.value.detail == "Couldn't find JWT"


@pytest.mark.asyncio
async def test_require_user_invalid_token_401(monkeypatch):
    monkeypatch.setattr(auth_mod.settings, "jwt_secret", "test-secret", raising=False)
    req = _request({"Authorization": f"Bearer {make_token(secret='wrong')}"})
    with pytest.raises(HTTPException) as ex:
        await auth_mod.require_user(req)
    assert ex.value.status_code == 401
    assert ex.value.detail == "Couldn't validate JWT"
