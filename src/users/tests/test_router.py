"""Tests for the user endpoints."""

from src.users.router import DEMOTE_USER_URL, ME_URL, PROMOTE_USER_URL
from src.users.roles import Role


async def test_profile_is_created_on_first_update(client):
    missing = await client.get(ME_URL, headers={"X-Installation-Id": "u1"})
    updated = await client.put(
        ME_URL,
        json={"name": "Ada", "email": "ada@example.com", "system_notifications": False},
        headers={"X-Installation-Id": "u1"},
    )
    me = await client.get(ME_URL, headers={"X-Installation-Id": "u1"})

    assert missing.status_code == 404
    assert updated.status_code == 200
    assert me.json()["name"] == "Ada"
    assert me.json()["role"] == "entrant"
    assert me.json()["system_notifications"] is False
    assert me.json()["organizer_notifications"] is True


async def test_profile_rejects_invalid_email(client):
    response = await client.put(
        ME_URL, json={"email": "not-an-email"}, headers={"X-Installation-Id": "u1"}
    )

    assert response.status_code == 422


async def test_blank_installation_id(client):
    response = await client.get(ME_URL, headers={"X-Installation-Id": "   "})

    assert response.status_code == 422
    assert response.json()["kind"] == "InvalidArgument"


async def test_admin_promotes_and_demotes(client, make_user):
    await make_user("admin1", role=Role.ADMIN)
    await make_user("u1")

    promoted = await client.post(
        PROMOTE_USER_URL.format(user_id="u1"), headers={"X-Installation-Id": "admin1"}
    )
    demoted = await client.post(
        DEMOTE_USER_URL.format(user_id="u1"), headers={"X-Installation-Id": "admin1"}
    )

    assert promoted.json()["role"] == "organizer"
    assert demoted.json()["role"] == "entrant"
    assert demoted.json()["demoted"] is True


async def test_only_admins_change_roles(client, make_user):
    await make_user("org1", role=Role.ORGANIZER)
    await make_user("u1")

    response = await client.post(
        PROMOTE_USER_URL.format(user_id="u1"), headers={"X-Installation-Id": "org1"}
    )

    assert response.status_code == 403
