from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import MagicMock

import httpx
import pytest
from asgi_lifespan import LifespanManager
from bson import ObjectId

from hundred_days.app.core.security import get_password_hash
from hundred_days.app.db.mongo import USERS_COL
from hundred_days.app.dependencies import get_mongo_db, get_redis
from hundred_days.app.main import app

PASSWORD = "loginpassword123"


async def _request(method: str, url: str, **kwargs) -> httpx.Response:
    async with LifespanManager(app):
        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver") as client:
            response = await client.request(method, url, **kwargs)
            await response.aread()
            return response


def _refresh_cookie(response: httpx.Response) -> str:
    for header in response.headers.get_list("set-cookie"):
        name, _, rest = header.partition("=")
        if name == "refresh_token":
            return rest.split(";", 1)[0]
    raise AssertionError("no refresh cookie set")


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_doc() -> dict:
    return {
        "_id": ObjectId(),
        "email": "loginuser@example.com",
        "password_hash": get_password_hash(PASSWORD),
        "display_name": "Login User",
        "timezone": "UTC",
        "is_pro": False,
        "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }


@pytest.fixture(autouse=True)
def backing_stores(mock_db, memory_redis):
    async def _db():
        yield mock_db

    async def _redis():
        yield memory_redis

    app.dependency_overrides[get_mongo_db] = _db
    app.dependency_overrides[get_redis] = _redis
    yield
    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_signup_lowercases_email(collections) -> None:
    collections[USERS_COL].find_one.return_value = None
    collections[USERS_COL].insert_one.return_value = MagicMock(inserted_id=ObjectId())

    response = await _request(
        "POST", "/api/auth/signup", json={"email": "New.User@Example.com", "password": PASSWORD, "display_name": "New"}
    )

    assert response.status_code == 201
    assert response.json()["user"]["email"] == "new.user@example.com"
    stored = collections[USERS_COL].insert_one.await_args.args[0]
    assert stored["password_hash"] != PASSWORD


@pytest.mark.asyncio
async def test_signup_duplicate_email(collections, user_doc) -> None:
    collections[USERS_COL].find_one.return_value = user_doc
    response = await _request("POST", "/api/auth/signup", json={"email": user_doc["email"], "password": PASSWORD})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_short_password_rejected() -> None:
    response = await _request("POST", "/api/auth/signup", json={"email": "a@example.com", "password": "short"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_login_wrong_password(collections, user_doc) -> None:
    collections[USERS_COL].find_one.return_value = user_doc
    response = await _request("POST", "/api/auth/login", json={"email": user_doc["email"], "password": "nope-nope"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Incorrect email or password."


@pytest.mark.asyncio
async def test_session_lifecycle(collections, user_doc) -> None:
    collections[USERS_COL].find_one.return_value = user_doc

    login = await _request("POST", "/api/auth/login", json={"email": user_doc["email"], "password": PASSWORD})
    assert login.status_code == 200
    access_token = login.json()["access_token"]
    first_refresh = _refresh_cookie(login)

    me = await _request("GET", "/api/auth/me", headers=_bearer(access_token))
    assert me.status_code == 200
    assert me.json()["email"] == user_doc["email"]

    sessions = await _request("GET", "/api/auth/sessions", headers=_bearer(access_token))
    assert [s["is_current"] for s in sessions.json()] == [True]

    refreshed = await _request("POST", "/api/auth/refresh", headers={"Cookie": f"refresh_token={first_refresh}"})
    assert refreshed.status_code == 200
    new_access = refreshed.json()["access_token"]
    second_refresh = _refresh_cookie(refreshed)

    # rotation invalidates the previous pair
    reused = await _request("POST", "/api/auth/refresh", headers={"Cookie": f"refresh_token={first_refresh}"})
    assert reused.status_code == 401
    stale = await _request("GET", "/api/auth/me", headers=_bearer(access_token))
    assert stale.status_code == 401

    logout = await _request("POST", "/api/auth/logout", headers={"Cookie": f"refresh_token={second_refresh}"})
    assert logout.status_code == 200
    after = await _request("GET", "/api/auth/me", headers=_bearer(new_access))
    assert after.status_code == 401
    assert after.json()["detail"] == "Session expired or signed out."


@pytest.mark.asyncio
async def test_refresh_without_cookie() -> None:
    response = await _request("POST", "/api/auth/refresh")
    assert response.status_code == 401
    assert response.json()["detail"] == "Missing refresh token."


@pytest.mark.asyncio
async def test_password_change_signs_out_other_devices(collections, user_doc) -> None:
    collections[USERS_COL].find_one.return_value = user_doc
    collections[USERS_COL].find_one_and_update.return_value = user_doc

    phone = await _request("POST", "/api/auth/login", json={"email": user_doc["email"], "password": PASSWORD})
    laptop = await _request("POST", "/api/auth/login", json={"email": user_doc["email"], "password": PASSWORD})
    phone_token = phone.json()["access_token"]
    laptop_token = laptop.json()["access_token"]

    wrong = await _request(
        "PUT",
        "/api/users/me/password",
        headers=_bearer(phone_token),
        json={"current_password": "not-my-password", "new_password": "brandnewpassword1"},
    )
    assert wrong.status_code == 400
    assert wrong.json()["detail"] == "Current password is incorrect."

    changed = await _request(
        "PUT",
        "/api/users/me/password",
        headers=_bearer(phone_token),
        json={"current_password": PASSWORD, "new_password": "brandnewpassword1"},
    )
    assert changed.status_code == 200
    assert changed.json()["revoked_sessions"] == 1

    stored = collections[USERS_COL].find_one_and_update.await_args.args[1]["$set"]["password_hash"]
    assert stored != "brandnewpassword1"

    assert (await _request("GET", "/api/auth/me", headers=_bearer(phone_token))).status_code == 200
    signed_out = await _request("GET", "/api/auth/me", headers=_bearer(laptop_token))
    assert signed_out.status_code == 401
