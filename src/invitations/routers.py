from fastapi import APIRouter

from .features.cancel.router import router as cancel_router
from .features.create_invites.router import router as create_invites_router
from .features.observe.router import router as observe_router
from .features.respond.router import router as respond_router

router = APIRouter()

router.include_router(create_invites_router)
router.include_router(observe_router)
router.include_router(respond_router)
router.include_router(cancel_router)
