"""Tests for SqlLotteryWriteModel against the test database."""

import asyncio
import random
from datetime import timedelta

import pytest
from sqlalchemy import select

from src.config.database import async_session_maker
from src.errors import ForbiddenError, NotFoundError, RegistrationClosedError
from src.events.features.lottery.write_model import SqlLotteryWriteModel
from src.events.features.waitlist.write_model import SqlWaitlistWriteModel
from src.events.repository.orm_models import Event
from src.invitations.repository.read_models import SqlInvitationReadModel
from src.invitations.repository.write_models import SqlInvitationWriteModel
from src.models.base import utcnow
from src.notifications.dtos import NotificationKind
from src.notifications.repository.read_models import SqlNotificationReadModel
from src.notifications.repository.write_models import SqlNotificationWriteModel


@pytest.fixture
def lottery(inmemory_push_service):
    return SqlLotteryWriteModel(
        notification_write_model=SqlNotificationWriteModel(push_service=inmemory_push_service),
        rng=random.Random(42),
    )


async def _load_event(event_id) -> Event:
    async with async_session_maker() as session:
        return await session.get(Event, event_id)


async def test_replacement_scenario_a_b_c(make_event, lottery):
    """Two spots, three entrants: a decline hands the spot to the one left over."""
    event = await make_event(max_attendees=2, waiting_list=["A", "B", "C"])
    invitations = SqlInvitationReadModel()

    draw = await lottery.run_lottery(event.event_id)

    assert draw.drawn is True
    assert len(draw.winners) == 2
    assert set(draw.winners) <= {"A", "B", "C"}
    assert draw.lottery_complete is False
    pending = await invitations.list_event_invitations(event.event_id)
    assert sorted(i.recipient_id for i in pending) == sorted(draw.winners)
    assert all(i.is_pending for i in pending)
    (left_over,) = {"A", "B", "C"} - set(draw.winners)
    assert draw.not_selected == (left_over,)

    decliner = draw.winners[0]
    decline = next(i for i in pending if i.recipient_id == decliner)
    await SqlInvitationWriteModel().reject(decline.invitation_id, decliner)
    replacement = await lottery.draw_replacements(event.event_id, declined_count=1)

    assert replacement.winners == (left_over,)
    assert len(replacement.invitation_ids) == 1
    new_invitation = await invitations.find_user_event_invitation(event.event_id, left_over)
    assert new_invitation is not None
    assert new_invitation.is_pending
    assert replacement.not_selected == ()


async def test_draw_is_idempotent(make_event, lottery):
    event = await make_event(max_attendees=2, waiting_list=["A", "B", "C", "D"])

    first = await lottery.run_lottery(event.event_id)
    second = await lottery.run_lottery(event.event_id)

    assert len(first.winners) == 2
    assert second.drawn is True
    assert second.winners == ()
    all_invitations = await SqlInvitationReadModel().list_event_invitations(event.event_id)
    assert len(all_invitations) == 2


async def test_concurrent_draws_do_not_overfill(make_event, inmemory_push_service):
    event = await make_event(max_attendees=3, waiting_list=[f"u{i}" for i in range(10)])
    models = [
        SqlLotteryWriteModel(
            notification_write_model=SqlNotificationWriteModel(push_service=inmemory_push_service)
        )
        for _ in range(4)
    ]

    draws = await asyncio.gather(*(model.run_lottery(event.event_id) for model in models))

    assert sum(len(draw.winners) for draw in draws) == 3
    invitations = await SqlInvitationReadModel().list_event_invitations(event.event_id)
    assert len(invitations) == 3
    assert len({i.recipient_id for i in invitations}) == 3


async def test_not_eligible_is_a_silent_no_op(make_event, lottery):
    event = await make_event(
        waiting_list=["A", "B"], registration_end=utcnow() + timedelta(days=1)
    )

    draw = await lottery.run_lottery(event.event_id)

    assert draw.drawn is False
    assert draw.winners == ()
    assert await SqlInvitationReadModel().list_event_invitations(event.event_id) == []


async def test_empty_waiting_list_is_not_eligible(make_event, lottery):
    event = await make_event(waiting_list=[])

    draw = await lottery.run_lottery(event.event_id)

    assert draw.drawn is False


async def test_run_lottery_unknown_event(lottery):
    from uuid import uuid4

    with pytest.raises(NotFoundError):
        await lottery.run_lottery(uuid4())


async def test_lottery_completes_when_everyone_accepted(make_event, lottery):
    event = await make_event(max_attendees=2, waiting_list=["A", "B", "C"])
    draw = await lottery.run_lottery(event.event_id)
    invitations = await SqlInvitationReadModel().list_event_invitations(event.event_id)
    for invitation in invitations:
        await SqlInvitationWriteModel().accept(invitation.invitation_id, invitation.recipient_id)

    poll = await lottery.run_lottery(event.event_id)

    assert len(draw.winners) == 2
    assert poll.winners == ()
    assert poll.lottery_complete is True
    assert (await _load_event(event.event_id)).lottery_complete is True
    # complete events are not drawn again
    assert (await lottery.run_lottery(event.event_id)).drawn is False


async def test_lottery_completes_when_pool_is_exhausted(make_event, lottery):
    event = await make_event(max_attendees=3, waiting_list=["A"])
    draw = await lottery.run_lottery(event.event_id)
    assert draw.winners == ("A",)
    assert draw.lottery_complete is False

    await SqlInvitationWriteModel().reject(draw.invitation_ids[0], "A")
    replacement = await lottery.draw_replacements(event.event_id, declined_count=1)

    assert replacement.winners == ()
    assert replacement.lottery_complete is True


async def test_declined_count_caps_replacements(make_event, lottery):
    event = await make_event(max_attendees=3, waiting_list=["A", "B", "C", "D", "E"])
    draw = await lottery.run_lottery(event.event_id)
    # two invitations cancelled by the organizer free two slots
    for invitation_id in draw.invitation_ids[:2]:
        await SqlInvitationWriteModel().cancel(invitation_id, "org1")

    capped = await lottery.draw_replacements(event.event_id, declined_count=1)
    assert len(capped.winners) == 1

    uncapped = await lottery.run_lottery(event.event_id)
    assert len(uncapped.winners) == 1


async def test_cancelled_invitees_are_not_drawn_again(make_event, lottery):
    event = await make_event(max_attendees=1, waiting_list=["A", "B"])
    draw = await lottery.run_lottery(event.event_id)
    (first,) = draw.winners
    await SqlInvitationWriteModel().cancel(draw.invitation_ids[0], "org1")

    refill = await lottery.run_lottery(event.event_id)

    assert refill.winners == tuple({"A", "B"} - {first})


async def test_winners_and_losers_are_notified(make_event, lottery, inmemory_push_service):
    event = await make_event(max_attendees=1, waiting_list=["A", "B", "C"])

    draw = await lottery.run_lottery(event.event_id)

    (winner,) = draw.winners
    feeds = SqlNotificationReadModel()
    winner_feed = await feeds.get_feed(winner)
    assert [n.kind for n in winner_feed] == [NotificationKind.LOTTERY_WON]
    for loser in {"A", "B", "C"} - {winner}:
        loser_feed = await feeds.get_feed(loser)
        assert [n.kind for n in loser_feed] == [NotificationKind.LOTTERY_NOT_SELECTED]
    assert {push["user_id"] for push in inmemory_push_service.sent} == {"A", "B", "C"}


async def test_notification_failure_does_not_undo_the_draw(make_event):
    class BrokenNotifications(SqlNotificationWriteModel):
        async def notify_event_transition(self, event, recipients, kind, **context):
            from src.errors import StoreUnavailableError

            raise StoreUnavailableError("notifications are down")

    event = await make_event(max_attendees=1, waiting_list=["A"])
    lottery = SqlLotteryWriteModel(notification_write_model=BrokenNotifications())

    draw = await lottery.run_lottery(event.event_id)

    assert draw.winners == ("A",)
    invitations = await SqlInvitationReadModel().list_event_invitations(event.event_id)
    assert len(invitations) == 1


async def test_complete_lottery_is_idempotent(make_event, lottery):
    event = await make_event(waiting_list=["A"])

    first = await lottery.complete_lottery(event.event_id)
    second = await lottery.complete_lottery(event.event_id)

    assert first.lottery_complete is True
    assert second.lottery_complete is True
    assert (await lottery.run_lottery(event.event_id)).drawn is False


async def test_complete_lottery_unknown_event(lottery):
    from uuid import uuid4

    with pytest.raises(NotFoundError):
        await lottery.complete_lottery(uuid4())


async def test_process_due_lotteries_only_draws_closed_events(make_event, lottery):
    due = await make_event(waiting_list=["A"])
    still_open = await make_event(
        waiting_list=["B"], registration_end=utcnow() + timedelta(days=1)
    )
    finished = await make_event(waiting_list=["C"], lottery_complete=True)

    draws = await lottery.process_due_lotteries()

    assert [draw.event_id for draw in draws] == [due.event_id]
    assert draws[0].winners == ("A",)
    for event in (still_open, finished):
        async with async_session_maker() as session:
            result = await session.execute(select(Event).where(Event.uuid == event.event_id))
            assert result.scalar_one().waiting_list
        assert await SqlInvitationReadModel().list_event_invitations(event.event_id) == []


async def test_process_due_lotteries_isolates_failures(make_event, inmemory_push_service):
    broken = await make_event(waiting_list=["A"])
    healthy = await make_event(waiting_list=["B"])

    class FlakyLottery(SqlLotteryWriteModel):
        async def run_lottery(self, event_id, now=None):
            if event_id == broken.event_id:
                raise RuntimeError("boom")
            return await super().run_lottery(event_id, now=now)

    draws = await FlakyLottery().process_due_lotteries()

    assert [draw.event_id for draw in draws] == [healthy.event_id]


async def test_early_draw_closes_registration(make_event, lottery, open_registration):
    event = await make_event(max_attendees=2, waiting_list=["a", "b", "c"], **open_registration)

    # the scheduled path leaves an open event alone
    assert (await lottery.run_lottery(event.event_id)).drawn is False

    now = utcnow()
    draw = await lottery.draw_early(event.event_id, "org1", now=now)

    assert draw.drawn is True
    assert len(draw.winners) == 2
    assert len(draw.not_selected) == 1
    assert draw.event.registration_end == now
    stored = await _load_event(event.event_id)
    assert stored.registration_end == now
    with pytest.raises(RegistrationClosedError):
        await SqlWaitlistWriteModel().join(event.event_id, "late")


async def test_early_draw_is_for_the_organizer(make_event, lottery, open_registration):
    event = await make_event(waiting_list=["a"], **open_registration)

    with pytest.raises(ForbiddenError):
        await lottery.draw_early(event.event_id, "a")

    assert await SqlInvitationReadModel().list_event_invitations(event.event_id) == []


async def test_early_draw_keeps_the_other_rules(make_event, lottery, open_registration):
    empty = await make_event(waiting_list=[], **open_registration)
    done = await make_event(waiting_list=["a"], lottery_complete=True, **open_registration)

    assert (await lottery.draw_early(empty.event_id, "org1")).drawn is False
    assert (await lottery.draw_early(done.event_id, "org1")).drawn is False
    # registration stays open when nothing was drawn
    assert (await _load_event(empty.event_id)).registration_end > utcnow()


async def test_early_draw_after_registration_end_keeps_the_end(make_event, lottery):
    event = await make_event(waiting_list=["a"])

    draw = await lottery.draw_early(event.event_id, "org1")

    assert draw.winners == ("a",)
    assert draw.event.registration_end == event.registration_end
