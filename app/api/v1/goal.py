from fastapi import APIRouter, Depends

from app.api.deps import get_store
from app.api.v1.schemas import GoalRequest, GoalResponse
from app.core.security import get_current_user_id
from app.domain.progression import service
from app.infra.store import ProgressStore

router = APIRouter(prefix="/goal", tags=["goal"])


@router.get("", response_model=GoalResponse)
async def get_goal(
    user_id: str = Depends(get_current_user_id),
    store: ProgressStore = Depends(get_store),
) -> GoalResponse:
    return GoalResponse(goal=await service.get_goal(store, user_id))


@router.post("", response_model=GoalResponse)
async def set_goal(
    body: GoalRequest,
    user_id: str = Depends(get_current_user_id),
    store: ProgressStore = Depends(get_store),
) -> GoalResponse:
    return GoalResponse(goal=await service.set_goal(store, user_id, body.goal))


@router.delete("", response_model=GoalResponse)
async def delete_goal(
    user_id: str = Depends(get_current_user_id),
    store: ProgressStore = Depends(get_store),
) -> GoalResponse:
    await service.delete_goal(store, user_id)
    return GoalResponse(goal=None)
