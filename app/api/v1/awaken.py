from fastapi import APIRouter, Depends, Request

from app.api.deps import get_llm, get_store
from app.api.v1.schemas import AwakenRequest, AwakenResponse
from app.core.config import settings
from app.core.context import get_request_id
from app.core.exceptions import ValidationError
from app.core.limiter import limiter
from app.core.logging import get_logger
from app.core.security import get_current_user_id
from app.domain.progression.awakening import awaken
from app.infra.github.client import get_user_profile
from app.infra.llm import BaseLLMClient
from app.infra.store import ProgressStore

router = APIRouter(tags=["awaken"])
logger = get_logger(__name__)


@router.post("/awaken", response_model=AwakenResponse)
@limiter.limit(settings.rate_limit_submit)
async def awaken_user(
    request: Request,
    body: AwakenRequest,
    user_id: str = Depends(get_current_user_id),
    store: ProgressStore = Depends(get_store),
    llm: BaseLLMClient | None = Depends(get_llm),
) -> AwakenResponse:
    github_username = (body.github_username or "").strip()
    if (body.resume_data is None) == (not github_username):
        raise ValidationError("resume_data와 github_username 중 하나만 입력해주세요")

    username = body.username
    facts = body.resume_data
    if facts is None:
        facts = await get_user_profile(github_username)
        if facts is None:
            raise ValidationError(f"GitHub 사용자를 찾을 수 없습니다: {github_username}")
        username = username or github_username

    outcome = await awaken(
        store,
        user_id,
        facts,
        llm=llm,
        username=username,
        avatar_url=body.avatar_url,
        session_id=get_request_id(),
    )
    return AwakenResponse(awakening=outcome.awakening, profile=outcome.profile)
