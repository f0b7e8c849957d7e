from fastapi import APIRouter, Depends

from app.api.deps import get_store
from app.core.security import get_current_user_id
from app.domain.progression import service
from app.domain.progression.schemas import ProgressView
from app.infra.store import ProgressStore

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=ProgressView)
async def get_profile(
    user_id: str = Depends(get_current_user_id),
    store: ProgressStore = Depends(get_store),
) -> ProgressView:
    return await service.get_progress(store, user_id)
