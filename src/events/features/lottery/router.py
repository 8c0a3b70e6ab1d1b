from uuid import UUID

from fastapi import APIRouter, Depends

from src.events.features.get_events.router import get_event_read_model
from src.events.features.lottery.dtos import DrawRequest, DrawResponse
from src.events.features.lottery.write_model import LotteryWriteModel, SqlLotteryWriteModel
from src.events.permissions import require_owned_event
from src.events.repository.read_models import EventReadModel
from src.events.schemas import EventResponse
from src.events.urls import COMPLETE_LOTTERY_URL, DRAW_URL
from src.notifications.repository.write_models import SqlNotificationWriteModel
from src.push_service import get_push_service
from src.users.dependencies import get_current_user_id

router = APIRouter()


def get_lottery_write_model() -> LotteryWriteModel:
    return SqlLotteryWriteModel(
        notification_write_model=SqlNotificationWriteModel(push_service=get_push_service()),
    )


@router.post(DRAW_URL, response_model=DrawResponse)
async def draw_now(
    request: DrawRequest,
    user_id: str = Depends(get_current_user_id),
    read_model: EventReadModel = Depends(get_event_read_model),
    write_model: LotteryWriteModel = Depends(get_lottery_write_model),
) -> DrawResponse:
    """
    Run the lottery for one event right away instead of waiting for the scheduler.

    With ``early`` the organizer closes registration and draws at once.
    Otherwise an event whose registration is still open draws nobody.
    Drawing is idempotent: once every slot is taken, further calls draw nobody.
    """
    await require_owned_event(read_model, request.event_id, user_id)
    if request.early:
        draw = await write_model.draw_early(request.event_id, organizer_id=user_id)
    else:
        draw = await write_model.run_lottery(request.event_id)
    return DrawResponse.from_draw(draw)


@router.post(COMPLETE_LOTTERY_URL, response_model=EventResponse)
async def complete_lottery(
    event_id: UUID,
    user_id: str = Depends(get_current_user_id),
    read_model: EventReadModel = Depends(get_event_read_model),
    write_model: LotteryWriteModel = Depends(get_lottery_write_model),
) -> EventResponse:
    await require_owned_event(read_model, event_id, user_id)
    event = await write_model.complete_lottery(event_id)
    return EventResponse.model_validate(event)
