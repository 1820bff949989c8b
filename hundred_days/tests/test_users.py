from __future__ import annotations

from datetime import datetime, timezone

import pytest
from bson import ObjectId
from fastapi import HTTPException
from pymongo.errors import DuplicateKeyError

from hundred_days.app.core.errors import InvalidUsernameError, UsernameTakenError
from hundred_days.app.db.mongo import USERS_COL
from hundred_days.app.schemas.user import ProfileUpdate
from hundred_days.app.services import users as user_service
from hundred_days.app.services.subscriptions import is_pro_user


def _user_doc(**overrides) -> dict:
    doc = {
        "_id": ObjectId(),
        "email": "runner@example.com",
        "timezone": "Europe/Berlin",
        "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }
    doc.update(overrides)
    return doc


@pytest.mark.parametrize("name", ["abc", "Runner42", "a" * 20])
def test_valid_usernames(name: str) -> None:
    assert user_service.validate_username(name)


@pytest.mark.parametrize("name", ["", "ab", "a" * 21, "with space", "dash-name", "ünï"])
def test_invalid_usernames(name: str) -> None:
    assert not user_service.validate_username(name)


@pytest.mark.asyncio
async def test_username_lookup_is_case_insensitive(mock_db, collections) -> None:
    owner = _user_doc(username="Runner", username_lower="runner")
    collections[USERS_COL].find_one.return_value = owner

    assert not await user_service.is_username_available(mock_db, "RUNNER")
    assert collections[USERS_COL].find_one.await_args.args[0] == {"username_lower": "runner"}
    # a user may keep their own name
    assert await user_service.is_username_available(mock_db, "runner", exclude_user_id=str(owner["_id"]))


@pytest.mark.asyncio
async def test_set_username_rejects_invalid(mock_db) -> None:
    with pytest.raises(InvalidUsernameError):
        await user_service.set_username(mock_db, str(ObjectId()), "no")


@pytest.mark.asyncio
async def test_set_username_rejects_taken(mock_db, collections) -> None:
    collections[USERS_COL].find_one.return_value = _user_doc(username_lower="taken")
    with pytest.raises(UsernameTakenError):
        await user_service.set_username(mock_db, str(ObjectId()), "Taken")


@pytest.mark.asyncio
async def test_set_username_maps_index_race(mock_db, collections) -> None:
    collections[USERS_COL].find_one.return_value = None
    collections[USERS_COL].find_one_and_update.side_effect = DuplicateKeyError("dup")
    with pytest.raises(UsernameTakenError):
        await user_service.set_username(mock_db, str(ObjectId()), "Fresh")


@pytest.mark.asyncio
async def test_set_username_stores_lowercase_copy(mock_db, collections) -> None:
    user_id = ObjectId()
    collections[USERS_COL].find_one.return_value = None
    collections[USERS_COL].find_one_and_update.return_value = _user_doc(_id=user_id, username="Fresh")

    user = await user_service.set_username(mock_db, str(user_id), " Fresh ")

    update = collections[USERS_COL].find_one_and_update.await_args.args[1]["$set"]
    assert update["username"] == "Fresh"
    assert update["username_lower"] == "fresh"
    assert user.username == "Fresh"


@pytest.mark.asyncio
async def test_update_profile_rejects_unknown_timezone(mock_db) -> None:
    with pytest.raises(HTTPException) as exc_info:
        await user_service.update_profile(mock_db, str(ObjectId()), ProfileUpdate(timezone="Mars/Olympus"))
    assert exc_info.value.status_code == 422


@pytest.mark.asyncio
async def test_update_profile_sets_fields(mock_db, collections) -> None:
    user_id = ObjectId()
    collections[USERS_COL].find_one_and_update.return_value = _user_doc(_id=user_id, display_name="Sam")

    user = await user_service.update_profile(
        mock_db, str(user_id), ProfileUpdate(display_name="Sam", timezone="Europe/Berlin")
    )

    update = collections[USERS_COL].find_one_and_update.await_args.args[1]["$set"]
    assert update["display_name"] == "Sam"
    assert update["timezone"] == "Europe/Berlin"
    assert user.display_name == "Sam"


def test_unknown_timezone_falls_back_to_default(sample_user) -> None:
    user = sample_user.model_copy(update={"timezone": "Not/AZone"})
    assert user_service.user_timezone(user).key == "UTC"


def test_pro_entitlement_respects_expiry(sample_user) -> None:
    now = datetime(2024, 6, 1, tzinfo=timezone.utc)
    assert not is_pro_user(sample_user, now)
    assert is_pro_user(sample_user.model_copy(update={"is_pro": True}), now)
    expired = sample_user.model_copy(update={"is_pro": True, "pro_expires_at": datetime(2024, 5, 1, tzinfo=timezone.utc)})
    assert not is_pro_user(expired, now)
