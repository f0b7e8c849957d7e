from fastapi import APIRouter, Depends, Request

from app.api.deps import get_llm, get_store
from app.api.v1.schemas import GenerateQuestResponse, QuestHistoryResponse, SubmitQuestRequest
from app.core.config import settings
from app.core.context import get_request_id
from app.core.limiter import limiter
from app.core.security import get_current_user_id
from app.domain.progression import service
from app.domain.progression.schemas import SubmissionResult
from app.infra.llm import BaseLLMClient
from app.infra.store import ProgressStore

router = APIRouter(prefix="/quests", tags=["quests"])


@router.post("/submit", response_model=SubmissionResult)
@limiter.limit(settings.rate_limit_submit)
async def submit_quest(
    request: Request,
    body: SubmitQuestRequest,
    user_id: str = Depends(get_current_user_id),
    store: ProgressStore = Depends(get_store),
    llm: BaseLLMClient | None = Depends(get_llm),
) -> SubmissionResult:
    return await service.submit_quest(
        store,
        user_id,
        body.repo_url,
        llm=llm,
        session_id=get_request_id(),
    )


@router.post("/generate", response_model=GenerateQuestResponse)
@limiter.limit(settings.rate_limit_submit)
async def generate_quest(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    store: ProgressStore = Depends(get_store),
    llm: BaseLLMClient | None = Depends(get_llm),
) -> GenerateQuestResponse:
    quest = await service.regenerate_quest(store, user_id, llm=llm, session_id=get_request_id())
    return GenerateQuestResponse(quest=quest)


@router.get("/history", response_model=QuestHistoryResponse)
async def quest_history(
    user_id: str = Depends(get_current_user_id),
    store: ProgressStore = Depends(get_store),
) -> QuestHistoryResponse:
    history = await service.list_quest_history(store, user_id)
    return QuestHistoryResponse(history=history)
