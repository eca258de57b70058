"""Tests for Supabase token verification, sign-out and the unauthenticated response."""

import time
import uuid

import httpx
import jwt
import pytest
from fastapi import HTTPException
from httpx import ASGITransport, AsyncClient

from app.core.config import Settings, get_settings
from app.core.exceptions import NotAuthenticatedError
from app.core.security import get_current_user, get_user, sign_out
from app.db.session import get_db

SECRET = "test-secret"


def _settings(**overrides):
    values = {
        "supabase_jwt_secret": SECRET,
        "supabase_url": "https://project.supabase.co",
        "supabase_anon_key": "anon",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def _token(sub, secret=SECRET, aud="authenticated", expires_in=3600, **claims):
    payload = {"sub": sub, "aud": aud, "exp": int(time.time()) + expires_in, **claims}
    return jwt.encode(payload, secret, algorithm="HS256")


@pytest.fixture
def db_calls():
    return []


@pytest.fixture
async def anonymous_client(app, db_calls):
    """Client without the signed-in user override; records in ``db_calls`` whether a DB session was requested."""

    async def tracking_db():
        db_calls.append(True)
        yield None

    app.dependency_overrides.pop(get_current_user)
    app.dependency_overrides[get_db] = tracking_db
    app.dependency_overrides[get_settings] = lambda: _settings()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


def test_get_user_from_valid_token():
    user_id = uuid.uuid4()

    user = get_user(_token(str(user_id), email="lifter@example.com"), _settings())

    assert user.id == user_id
    assert user.email == "lifter@example.com"


@pytest.mark.parametrize(
    "token",
    [
        _token(str(uuid.uuid4()), secret="someone-elses-secret"),
        _token(str(uuid.uuid4()), aud="anon"),
        _token(str(uuid.uuid4()), expires_in=-60),
        _token("not-a-uuid"),
        "garbage",
    ],
)
def test_get_user_rejects_bad_tokens(token):
    with pytest.raises(NotAuthenticatedError):
        get_user(token, _settings())


def test_get_user_without_configured_secret():
    with pytest.raises(NotAuthenticatedError):
        get_user(_token(str(uuid.uuid4())), _settings(supabase_jwt_secret=""))


@pytest.mark.parametrize(
    "path",
    ["/api/v1/workouts", "/api/v1/dashboard", "/api/v1/lift-types", "/api/v1/workouts/stats"],
)
async def test_unauthenticated_request_gets_login_url_without_db(anonymous_client, db_calls, path):
    response = await anonymous_client.get(path)

    assert response.status_code == 401
    assert response.json() == {"detail": "Not authenticated", "login_url": "/auth/login"}
    assert response.headers["www-authenticate"] == "Bearer"
    assert db_calls == []


async def test_expired_token_is_unauthenticated(anonymous_client):
    token = _token(str(uuid.uuid4()), expires_in=-60)

    response = await anonymous_client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["login_url"] == "/auth/login"


async def test_me_with_valid_token(anonymous_client):
    user_id = uuid.uuid4()
    token = _token(str(user_id), email="lifter@example.com")

    response = await anonymous_client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert response.json() == {"id": str(user_id), "email": "lifter@example.com"}


async def test_health_needs_no_session(anonymous_client):
    response = await anonymous_client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


async def test_signout_endpoint_forwards_token(anonymous_client, monkeypatch):
    forwarded = []

    async def fake_sign_out(token, settings):
        forwarded.append(token)

    monkeypatch.setattr("app.api.v1.endpoints.auth.sign_out", fake_sign_out)
    token = _token(str(uuid.uuid4()))

    response = await anonymous_client.post("/api/v1/auth/signout", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 204
    assert forwarded == [token]


async def test_sign_out_calls_logout():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(204)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        await sign_out("access-token", _settings(), client=client)

    assert len(requests) == 1
    assert str(requests[0].url) == "https://project.supabase.co/auth/v1/logout"
    assert requests[0].headers["authorization"] == "Bearer access-token"
    assert requests[0].headers["apikey"] == "anon"


async def test_sign_out_failure_is_bad_gateway():
    def handler(request):
        return httpx.Response(500, json={"msg": "boom"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(HTTPException) as exc_info:
            await sign_out("access-token", _settings(), client=client)

    assert exc_info.value.status_code == 502


async def test_sign_out_network_error_is_bad_gateway():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(HTTPException) as exc_info:
            await sign_out("access-token", _settings(), client=client)

    assert exc_info.value.status_code == 502
