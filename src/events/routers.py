from fastapi import APIRouter

from .features.create_event.router import router as create_event_router
from .features.get_events.router import router as get_events_router
from .features.lottery.router import router as lottery_router
from .features.waitlist.router import router as waitlist_router

router = APIRouter()

router.include_router(create_event_router)
router.include_router(get_events_router)
router.include_router(waitlist_router)
router.include_router(lottery_router)
