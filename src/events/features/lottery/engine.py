"""Pure lottery rules. Nothing here touches the store."""

import random
from collections.abc import Iterable, Sequence
from datetime import datetime

from src.events.dtos import EventDTO


def is_eligible(event: EventDTO, now: datetime, early: bool = False) -> bool:
    """A draw may run once registration has closed and there is someone to pick.

    An ``early`` draw is the organizer closing registration by hand, so the
    registration end is not checked.
    """
    if event.lottery_complete:
        return False
    if not early and (event.registration_end is None or now < event.registration_end):
        return False
    if not event.waiting_list:
        return False
    return bool(event.max_attendees and event.max_attendees > 0)


def select_winners(
    waiting_list: Sequence[str] | None,
    remaining_capacity: int | None,
    rng: random.Random | None = None,
) -> list[str]:
    """Uniformly random subset of ``waiting_list`` of size ``min(capacity, len)``.

    Every ordering of the shuffled list is equally likely, so every entrant
    has the same chance of being among the first ``remaining_capacity``.
    """
    if not waiting_list or remaining_capacity is None or remaining_capacity <= 0:
        return []
    rng = rng or random.SystemRandom()
    shuffled = list(waiting_list)
    rng.shuffle(shuffled)
    return shuffled[: min(remaining_capacity, len(shuffled))]


def open_slots(max_attendees: int | None, accepted: int, pending: int) -> int:
    if not max_attendees or max_attendees <= 0:
        return 0
    return max(0, max_attendees - accepted - pending)


def replacement_pool(waiting_list: Iterable[str], invited_ids: Iterable[str]) -> list[str]:
    """Entrants that can still be drawn: never invited to this event, in list order."""
    invited = set(invited_ids)
    return [user_id for user_id in waiting_list if user_id not in invited]
