"""Tests for the invitation read endpoints, served from the test database."""

from uuid import uuid4

from src.invitations.features.observe.router import render_invitations
from src.invitations.repository.read_models import SqlInvitationReadModel
from src.invitations.repository.write_models import SqlInvitationWriteModel
from src.invitations.urls import EVENT_INVITATIONS_URL, INVITATION_URL, MY_INVITATIONS_URL


async def test_create_and_list_event_invitations(client, make_event):
    event = await make_event()
    url = EVENT_INVITATIONS_URL.format(event_id=event.event_id)

    created = await client.post(
        url, json={"recipient_ids": ["u1", "u2"]}, headers={"X-Installation-Id": "org1"}
    )
    listed = await client.get(url, headers={"X-Installation-Id": "org1"})

    assert created.status_code == 201
    assert len(created.json()["invitation_ids"]) == 2
    assert listed.json()["total"] == 2
    assert {i["state"] for i in listed.json()["invitations"]} == {"pending"}


async def test_only_the_organizer_lists_event_invitations(client, make_event):
    event = await make_event()

    response = await client.get(
        EVENT_INVITATIONS_URL.format(event_id=event.event_id), headers={"X-Installation-Id": "u1"}
    )

    assert response.status_code == 403


async def test_my_invitations(client, make_event):
    event = await make_event()
    await SqlInvitationWriteModel().create_invites(event.event_id, "org1", ["u1", "u2"])

    response = await client.get(MY_INVITATIONS_URL, headers={"X-Installation-Id": "u1"})

    assert response.json()["total"] == 1
    assert response.json()["invitations"][0]["recipient_id"] == "u1"


async def test_get_invitation_visibility(client, make_event):
    event = await make_event()
    (invitation_id,) = await SqlInvitationWriteModel().create_invites(event.event_id, "org1", ["u1"])
    url = INVITATION_URL.format(invitation_id=invitation_id)

    as_recipient = await client.get(url, headers={"X-Installation-Id": "u1"})
    as_organizer = await client.get(url, headers={"X-Installation-Id": "org1"})
    as_stranger = await client.get(url, headers={"X-Installation-Id": "u2"})
    missing = await client.get(
        INVITATION_URL.format(invitation_id=uuid4()), headers={"X-Installation-Id": "u1"}
    )

    assert as_recipient.status_code == 200
    assert as_organizer.status_code == 200
    assert as_stranger.status_code == 403
    assert missing.status_code == 404


async def test_render_invitations(make_event):
    event = await make_event()
    await SqlInvitationWriteModel().create_invites(event.event_id, "org1", ["u1"])
    invitations = await SqlInvitationReadModel().list_event_invitations(event.event_id)

    rendered = render_invitations(invitations)

    assert '"total":1' in rendered
    assert '"state":"pending"' in rendered
