from fastapi import APIRouter

from .credits import router as credits_router
from .messages import router as messages_router
from .proposals import router as proposals_router
from .skills import router as skills_router
from .trades import router as trades_router
from .users import router as users_router

api_router = APIRouter()
api_router.include_router(users_router, prefix="/users", tags=["users"])
api_router.include_router(
    credits_router
)  # prefix는 router 파일 내부에서 정의되어 있음 (/credits)
api_router.include_router(proposals_router, prefix="/proposals", tags=["proposals"])
api_router.include_router(trades_router, prefix="/trades", tags=["trades"])
api_router.include_router(skills_router, prefix="/skills", tags=["skills"])
api_router.include_router(messages_router, prefix="/messages", tags=["messages"])
