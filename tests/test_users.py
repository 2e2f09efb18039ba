# =============================================================================
# tests/test_users.py - Onboarding, recommendations and chat tokens
# =============================================================================

import pytest

from app.core.security import create_access_token
from app.core.stream import get_chat_provider
from app.main import app
from app.repositories.user import UserRepository
from app.schemas.user import OnboardingRequest
from app.services.user import UserService
from app.utils.exceptions import ConfigurationError, NotFoundError, ValidationError
from tests.conftest import bearer

ONBOARDING = {
    "full_name": "Maria Silva",
    "bio": "Coffee and grammar",
    "native_language": "portuguese",
    "learning_language": "english",
    "location": "Porto",
}


class TestOnboarding:

    async def test_completes_profile_and_syncs_chat(self, client, make_user, chat_provider, session_factory):
        user = await make_user("maria@example.com")

        response = await client.post(
            "/api/v1/auth/onboarding",
            json=ONBOARDING,
            headers=bearer(create_access_token(user.id)),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["is_onboarded"] is True
        assert data["full_name"] == "Maria Silva"
        assert data["location"] == "Porto"
        assert chat_provider.upserts == [(user.id, "Maria Silva", data["profile_pic"])]

        async with session_factory() as session:
            stored = await UserRepository(session).get_by_id(user.id)
        assert stored.is_onboarded is True
        assert stored.native_language == "portuguese"

    async def test_missing_fields_are_listed(self, client, make_user):
        user = await make_user("partial@example.com")

        response = await client.post(
            "/api/v1/auth/onboarding",
            json={**ONBOARDING, "bio": "  ", "location": ""},
            headers=bearer(create_access_token(user.id)),
        )

        assert response.status_code == 400
        assert "bio" in response.json()["message"]
        assert "location" in response.json()["message"]

    async def test_chat_failure_keeps_user_not_onboarded(self, client, make_user, chat_provider, session_factory):
        user = await make_user("sync@example.com")
        chat_provider.fail_upsert = True

        response = await client.post(
            "/api/v1/auth/onboarding",
            json=ONBOARDING,
            headers=bearer(create_access_token(user.id)),
        )

        assert response.status_code == 500
        async with session_factory() as session:
            stored = await UserRepository(session).get_by_id(user.id)
        assert stored.is_onboarded is False

    async def test_requires_session(self, client):
        response = await client.post("/api/v1/auth/onboarding", json=ONBOARDING)

        assert response.status_code == 401

    async def test_vanished_user(self, db_session, chat_provider):
        service = UserService(db_session, chat_provider)

        with pytest.raises(NotFoundError):
            await service.complete_onboarding(4242, OnboardingRequest(**ONBOARDING))

    async def test_onboarding_without_chat_provider(self, db_session, make_user):
        user = await make_user("noprovider-onboard@example.com")
        service = UserService(db_session)

        with pytest.raises(ConfigurationError):
            await service.complete_onboarding(user.id, OnboardingRequest(**ONBOARDING))

    async def test_validation_happens_before_lookup(self, db_session, chat_provider):
        service = UserService(db_session, chat_provider)

        with pytest.raises(ValidationError):
            await service.complete_onboarding(4242, OnboardingRequest(full_name="Only a name"))


class TestRecommendations:

    async def test_excludes_self_friends_and_non_onboarded(self, client, make_user, session_factory):
        me = await make_user("me@example.com", onboarded=True)
        friend = await make_user("friend@example.com", onboarded=True)
        stranger = await make_user("stranger@example.com", onboarded=True)
        await make_user("newbie@example.com", onboarded=False)

        async with session_factory() as session:
            repo = UserRepository(session)
            await repo.add_friend(me.id, friend.id)
            await repo.add_friend(friend.id, me.id)
            await session.commit()

        response = await client.get("/api/v1/users", headers=bearer(create_access_token(me.id)))

        assert response.status_code == 200
        assert [u["id"] for u in response.json()["data"]] == [stranger.id]

    async def test_recommendations_hide_email_and_account_state(self, client, make_user):
        me = await make_user("viewer@example.com", onboarded=True)
        other = await make_user("other@example.com", full_name="Other", onboarded=True)

        response = await client.get("/api/v1/users", headers=bearer(create_access_token(me.id)))

        [profile] = response.json()["data"]
        assert profile["id"] == other.id
        assert profile["bio"] == "Hello"
        assert profile["location"] == "Lisbon"
        assert "email" not in profile
        assert "is_onboarded" not in profile

    async def test_empty_when_nobody_else(self, client, make_user):
        me = await make_user("alone@example.com", onboarded=True)

        response = await client.get("/api/v1/users", headers=bearer(create_access_token(me.id)))

        assert response.json()["data"] == []


class TestFriendsSet:

    async def test_add_friend_is_idempotent(self, db_session, make_user):
        a = await make_user("a@example.com")
        b = await make_user("b@example.com")
        repo = UserRepository(db_session)

        await repo.add_friend(a.id, b.id)
        await repo.add_friend(a.id, b.id)

        assert await repo.get_friend_ids(a.id) == {b.id}
        assert await repo.get_friend_ids(b.id) == set()

    async def test_friends_list_is_empty_by_default(self, client, make_user):
        me = await make_user("nofriends@example.com")

        response = await client.get("/api/v1/users/friends", headers=bearer(create_access_token(me.id)))

        assert response.status_code == 200
        assert response.json()["data"] == []


class TestStreamToken:

    async def test_returns_provider_token(self, client, make_user):
        me = await make_user("chatter@example.com")

        response = await client.get("/api/v1/chat/stream-token", headers=bearer(create_access_token(me.id)))

        assert response.status_code == 200
        assert response.json()["data"] == {"token": f"chat-token-{me.id}"}

    async def test_unconfigured_provider(self, client, make_user):
        me = await make_user("noprovider@example.com")
        app.dependency_overrides.pop(get_chat_provider)

        response = await client.get("/api/v1/chat/stream-token", headers=bearer(create_access_token(me.id)))

        assert response.status_code == 500
        assert response.json()["message"] == "Chat provider is not configured"

    async def test_requires_session(self, client):
        response = await client.get("/api/v1/chat/stream-token")

        assert response.status_code == 401
