from fastapi import APIRouter

from app.api.v1.awaken import router as awaken_router
from app.api.v1.goal import router as goal_router
from app.api.v1.profile import router as profile_router
from app.api.v1.quests import router as quests_router
from app.api.v1.skills import router as skills_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(awaken_router)
api_router.include_router(quests_router)
api_router.include_router(skills_router)
api_router.include_router(goal_router)
api_router.include_router(profile_router)
