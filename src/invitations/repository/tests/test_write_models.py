"""Tests for the invitation state machine."""

import asyncio
from uuid import uuid4

import pytest

from src.config.database import async_session_manager
from src.errors import (
    AlreadyInvitedError,
    AlreadyRespondedError,
    EventFullError,
    ForbiddenError,
    InvalidArgumentError,
    InvitationCancelledError,
    NotFoundError,
)
from src.events.repository.orm_models import Event
from src.invitations.dtos import InvitationState
from src.invitations.repository.read_models import SqlInvitationReadModel
from src.invitations.repository.write_models import SqlInvitationWriteModel
from src.realtime.change_bus import ChangeBus, event_invitations_topic


@pytest.fixture
async def invitation(make_event):
    event = await make_event(waiting_list=["u1", "u2"])
    (invitation_id,) = await SqlInvitationWriteModel().create_invites(event.event_id, "org1", ["u1"])
    return invitation_id


async def test_create_invites_starts_pending(make_event):
    event = await make_event()

    ids = await SqlInvitationWriteModel().create_invites(event.event_id, "org1", ["u1", "u2"])

    invitations = await SqlInvitationReadModel().list_event_invitations(event.event_id)
    assert {i.invitation_id for i in invitations} == set(ids)
    for created in invitations:
        assert created.state == InvitationState.PENDING
        assert created.accepted is None
        assert created.cancelled is False
        assert created.response_time is None
        assert created.organizer_id == "org1"


@pytest.mark.parametrize("recipients", [[], ["u1", ""], ["u1", "u1"]])
async def test_create_invites_validates_recipients(make_event, recipients):
    event = await make_event()

    with pytest.raises(InvalidArgumentError):
        await SqlInvitationWriteModel().create_invites(event.event_id, "org1", recipients)

    assert await SqlInvitationReadModel().list_event_invitations(event.event_id) == []


async def test_create_invites_checks_the_event(make_event):
    event = await make_event()

    with pytest.raises(NotFoundError):
        await SqlInvitationWriteModel().create_invites(uuid4(), "org1", ["u1"])
    with pytest.raises(ForbiddenError):
        await SqlInvitationWriteModel().create_invites(event.event_id, "org2", ["u1"])


async def test_create_invites_wakes_subscribers(make_event):
    bus = ChangeBus()
    event = await make_event()
    waiter = bus.register(event_invitations_topic(event.event_id))

    await SqlInvitationWriteModel(bus=bus).create_invites(event.event_id, "org1", ["u1"])

    assert waiter.is_set()


async def test_create_invites_respects_capacity(make_event):
    event = await make_event(max_attendees=1)
    write_model = SqlInvitationWriteModel()

    with pytest.raises(EventFullError):
        await write_model.create_invites(event.event_id, "org1", ["a", "b", "c"])
    assert await SqlInvitationReadModel().list_event_invitations(event.event_id) == []

    (a,) = await write_model.create_invites(event.event_id, "org1", ["a"])
    await write_model.accept(a, "a")
    with pytest.raises(EventFullError):
        await write_model.create_invites(event.event_id, "org1", ["b"])


async def test_declined_and_cancelled_invitations_free_their_place(make_event):
    event = await make_event(max_attendees=1)
    write_model = SqlInvitationWriteModel()

    (a,) = await write_model.create_invites(event.event_id, "org1", ["a"])
    await write_model.reject(a, "a")
    (b,) = await write_model.create_invites(event.event_id, "org1", ["b"])
    await write_model.cancel(b, "org1")
    (c,) = await write_model.create_invites(event.event_id, "org1", ["c"])

    assert len(await SqlInvitationReadModel().list_event_invitations(event.event_id)) == 3
    assert c not in (a, b)


async def test_create_invites_skips_nobody_already_invited(make_event):
    event = await make_event(max_attendees=5)
    write_model = SqlInvitationWriteModel()
    (a,) = await write_model.create_invites(event.event_id, "org1", ["a"])

    with pytest.raises(AlreadyInvitedError, match="a"):
        await write_model.create_invites(event.event_id, "org1", ["b", "a"])
    await write_model.accept(a, "a")
    with pytest.raises(AlreadyInvitedError):
        await write_model.create_invites(event.event_id, "org1", ["a"])

    # b was not invited by the failed call
    assert len(await SqlInvitationReadModel().list_event_invitations(event.event_id)) == 1


async def test_create_invites_bumps_the_event_version(make_event):
    event = await make_event()

    async def version() -> int:
        async with async_session_manager() as session:
            return (await session.get(Event, event.event_id)).version

    before = await version()
    await SqlInvitationWriteModel().create_invites(event.event_id, "org1", ["u1"])

    assert await version() == before + 1


async def test_concurrent_invites_never_overfill(make_event):
    event = await make_event(max_attendees=1)

    results = await asyncio.gather(
        *(
            SqlInvitationWriteModel().create_invites(event.event_id, "org1", [user_id])
            for user_id in ("a", "b", "c")
        ),
        return_exceptions=True,
    )

    created = [result for result in results if isinstance(result, list)]
    assert len(created) == 1
    failures = [result for result in results if not isinstance(result, list)]
    assert all(isinstance(failure, EventFullError) for failure in failures)
    assert len(await SqlInvitationReadModel().list_event_invitations(event.event_id)) == 1


async def test_accept(invitation):
    accepted = await SqlInvitationWriteModel().accept(invitation, "u1")

    assert accepted.state == InvitationState.ACCEPTED
    assert accepted.response_time is not None


async def test_reject(invitation):
    rejected = await SqlInvitationWriteModel().reject(invitation, "u1")

    assert rejected.state == InvitationState.REJECTED
    assert rejected.accepted is False


async def test_responses_are_final(invitation):
    write_model = SqlInvitationWriteModel()
    await write_model.accept(invitation, "u1")

    with pytest.raises(AlreadyRespondedError):
        await write_model.reject(invitation, "u1")
    with pytest.raises(AlreadyRespondedError):
        await write_model.accept(invitation, "u1")

    stored = await SqlInvitationReadModel().get_invitation(invitation)
    assert stored.state == InvitationState.ACCEPTED


async def test_only_the_recipient_can_respond(invitation):
    with pytest.raises(ForbiddenError):
        await SqlInvitationWriteModel().accept(invitation, "u2")


async def test_respond_to_unknown_invitation():
    with pytest.raises(NotFoundError):
        await SqlInvitationWriteModel().accept(uuid4(), "u1")


async def test_racing_accept_and_reject(invitation):
    """Exactly one of two simultaneous answers is applied."""
    write_model = SqlInvitationWriteModel()

    results = await asyncio.gather(
        write_model.accept(invitation, "u1"),
        write_model.reject(invitation, "u1"),
        return_exceptions=True,
    )

    applied = [result for result in results if not isinstance(result, Exception)]
    refused = [result for result in results if isinstance(result, Exception)]
    assert len(applied) == 1
    assert len(refused) == 1
    assert isinstance(refused[0], AlreadyRespondedError)
    stored = await SqlInvitationReadModel().get_invitation(invitation)
    assert stored.state == applied[0].state


async def test_cancel_pending_invitation(invitation):
    cancelled = await SqlInvitationWriteModel().cancel(invitation, "org1")

    assert cancelled.state == InvitationState.CANCELLED
    assert cancelled.cancel_time is not None


async def test_cancelled_invitation_cannot_be_answered(invitation):
    write_model = SqlInvitationWriteModel()
    await write_model.cancel(invitation, "org1")

    with pytest.raises(InvitationCancelledError):
        await write_model.accept(invitation, "u1")
    with pytest.raises(InvitationCancelledError):
        await write_model.cancel(invitation, "org1")


async def test_answered_invitation_cannot_be_cancelled(invitation):
    write_model = SqlInvitationWriteModel()
    await write_model.reject(invitation, "u1")

    with pytest.raises(AlreadyRespondedError):
        await write_model.cancel(invitation, "org1")


async def test_only_the_organizer_can_cancel(invitation):
    with pytest.raises(ForbiddenError):
        await SqlInvitationWriteModel().cancel(invitation, "u1")
