"""Tests for SqlCreateEventWriteModel."""

from datetime import timedelta

import pytest

from src.errors import ForbiddenError, InvalidArgumentError
from src.events.features.create_event.write_model import (
    NewEventDTO,
    SqlCreateEventWriteModel,
    validate_new_event,
)
from src.events.repository.read_models import SqlEventReadModel
from src.models.base import utcnow
from src.users.roles import Role


def _new_event(**fields) -> NewEventDTO:
    values = {
        "name": "Pottery night",
        "description": "Wheel throwing for beginners",
        "max_attendees": 10,
        "registration_start": utcnow(),
        "registration_end": utcnow() + timedelta(days=3),
    }
    values.update(fields)
    return NewEventDTO(**values)


@pytest.mark.parametrize(
    "fields, message",
    [
        ({"name": "  "}, "Event name cannot be empty."),
        ({"description": ""}, "Event description cannot be empty."),
        (
            {"registration_start": utcnow(), "registration_end": utcnow() - timedelta(days=1)},
            "Registration end must be after start.",
        ),
        ({"max_waiting_list": -1}, "Max waiting list size cannot be negative."),
        ({"max_attendees": -3}, "Max attendees cannot be negative."),
        ({"geolocation_required": True}, "Location is required for this event."),
    ],
)
def test_validate_new_event_rejects(fields, message):
    with pytest.raises(InvalidArgumentError) as exc_info:
        validate_new_event(_new_event(**fields))
    assert exc_info.value.message == message


def test_validate_new_event_accepts_open_ended_window():
    validate_new_event(_new_event(registration_start=None, registration_end=None))
    validate_new_event(_new_event(geolocation_required=True, location_name="Rec centre"))


async def test_organizer_creates_event(make_user):
    await make_user("org1", role=Role.ORGANIZER)

    created = await SqlCreateEventWriteModel().create_event("org1", _new_event(name=" Pottery night "))

    assert created.name == "Pottery night"
    assert created.organizer_id == "org1"
    assert created.waiting_list == []
    assert created.lottery_complete is False
    stored = await SqlEventReadModel().get_event(created.event_id)
    assert stored == created


async def test_admin_creates_event(make_user):
    await make_user("admin1", role=Role.ADMIN)

    created = await SqlCreateEventWriteModel().create_event("admin1", _new_event())

    assert created.organizer_id == "admin1"


@pytest.mark.parametrize("user_id", ["entrant1", "stranger"])
async def test_entrants_and_strangers_cannot_create_events(make_user, user_id):
    await make_user("entrant1", role=Role.ENTRANT)

    with pytest.raises(ForbiddenError):
        await SqlCreateEventWriteModel().create_event(user_id, _new_event())

    assert await SqlEventReadModel().list_events() == []
