"""Tests for the accept, reject and cancel endpoints."""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from src.errors import AlreadyRespondedError, ForbiddenError, InvitationCancelledError
from src.invitations.dtos import InvitationDTO
from src.invitations.features.cancel.router import get_cancel_invitation_write_model
from src.invitations.features.cancel.write_model import CancelInvitationWriteModel
from src.invitations.features.respond.router import get_respond_write_model
from src.invitations.features.respond.write_model import RespondWriteModel
from src.invitations.urls import (
    ACCEPT_INVITATION_URL,
    CANCEL_INVITATION_URL,
    REJECT_INVITATION_URL,
)


class InMemoryInvitations(RespondWriteModel, CancelInvitationWriteModel):
    """One pending invitation from org1 to u1."""

    def __init__(self):
        self.invitation = InvitationDTO(
            invitation_id=uuid4(),
            event_id=uuid4(),
            organizer_id="org1",
            recipient_id="u1",
            send_time=datetime(2026, 10, 17, 9, 0, tzinfo=UTC),
        )

    def _answer(self, invitation_id: UUID, user_id: str, **changes) -> InvitationDTO:
        if user_id != self.invitation.recipient_id:
            raise ForbiddenError()
        if self.invitation.cancelled:
            raise InvitationCancelledError()
        if self.invitation.accepted is not None:
            raise AlreadyRespondedError()
        self.invitation = InvitationDTO(**{**self.invitation.__dict__, **changes})
        return self.invitation

    async def accept(self, invitation_id, user_id) -> InvitationDTO:
        return self._answer(invitation_id, user_id, accepted=True)

    async def reject(self, invitation_id, user_id) -> InvitationDTO:
        return self._answer(invitation_id, user_id, accepted=False)

    async def cancel(self, invitation_id, organizer_id) -> InvitationDTO:
        if organizer_id != self.invitation.organizer_id:
            raise ForbiddenError()
        self.invitation = InvitationDTO(**{**self.invitation.__dict__, "cancelled": True})
        return self.invitation


def _overrides(invitations: InMemoryInvitations) -> dict:
    return {
        get_respond_write_model: lambda: invitations,
        get_cancel_invitation_write_model: lambda: invitations,
    }


async def test_accept_invitation(client_factory):
    invitations = InMemoryInvitations()
    url = ACCEPT_INVITATION_URL.format(invitation_id=invitations.invitation.invitation_id)

    async with client_factory(_overrides(invitations)) as client:
        response = await client.post(url, headers={"X-Installation-Id": "u1"})

    assert response.status_code == 200
    assert response.json()["state"] == "accepted"
    assert response.json()["accepted"] is True


async def test_second_answer_is_a_conflict(client_factory):
    invitations = InMemoryInvitations()
    invitation_id = invitations.invitation.invitation_id

    async with client_factory(_overrides(invitations)) as client:
        await client.post(
            REJECT_INVITATION_URL.format(invitation_id=invitation_id),
            headers={"X-Installation-Id": "u1"},
        )
        response = await client.post(
            ACCEPT_INVITATION_URL.format(invitation_id=invitation_id),
            headers={"X-Installation-Id": "u1"},
        )

    assert response.status_code == 409
    assert response.json()["kind"] == "AlreadyResponded"
    assert invitations.invitation.accepted is False


async def test_answering_someone_elses_invitation(client_factory):
    invitations = InMemoryInvitations()
    url = ACCEPT_INVITATION_URL.format(invitation_id=invitations.invitation.invitation_id)

    async with client_factory(_overrides(invitations)) as client:
        response = await client.post(url, headers={"X-Installation-Id": "u2"})

    assert response.status_code == 403


async def test_cancel_then_accept(client_factory):
    invitations = InMemoryInvitations()
    invitation_id = invitations.invitation.invitation_id

    async with client_factory(_overrides(invitations)) as client:
        cancelled = await client.post(
            CANCEL_INVITATION_URL.format(invitation_id=invitation_id),
            headers={"X-Installation-Id": "org1"},
        )
        accepted = await client.post(
            ACCEPT_INVITATION_URL.format(invitation_id=invitation_id),
            headers={"X-Installation-Id": "u1"},
        )

    assert cancelled.json()["state"] == "cancelled"
    assert accepted.status_code == 409
    assert accepted.json()["kind"] == "Cancelled"
