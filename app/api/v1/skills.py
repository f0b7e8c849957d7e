from fastapi import APIRouter, Depends, Request

from app.api.deps import get_store
from app.api.v1.schemas import (
    ChallengesResponse,
    ResumeSkillsRequest,
    SkillChallengeRequest,
    SkillsResponse,
)
from app.core.config import settings
from app.core.limiter import limiter
from app.core.security import get_current_user_id
from app.domain.progression import service
from app.domain.progression.challenges import list_challenges
from app.domain.progression.schemas import SkillChallengeResult
from app.infra.store import ProgressStore

router = APIRouter(prefix="/skills", tags=["skills"])


@router.get("", response_model=SkillsResponse)
async def get_skills(
    user_id: str = Depends(get_current_user_id),
    store: ProgressStore = Depends(get_store),
) -> SkillsResponse:
    return SkillsResponse(skills=await service.list_skills(store, user_id))


@router.get("/challenges", response_model=ChallengesResponse)
async def get_challenges(
    skill_name: str | None = None,
    user_id: str = Depends(get_current_user_id),
) -> ChallengesResponse:
    return ChallengesResponse(challenges=list_challenges(skill_name))


@router.post("/challenges/complete", response_model=SkillChallengeResult)
@limiter.limit(settings.rate_limit_submit)
async def complete_challenge(
    request: Request,
    body: SkillChallengeRequest,
    user_id: str = Depends(get_current_user_id),
    store: ProgressStore = Depends(get_store),
) -> SkillChallengeResult:
    return await service.complete_skill_challenge(store, user_id, body.challenge_id)


@router.post("/resume", response_model=SkillsResponse)
async def sync_resume_skills(
    body: ResumeSkillsRequest,
    user_id: str = Depends(get_current_user_id),
    store: ProgressStore = Depends(get_store),
) -> SkillsResponse:
    skills = await service.sync_resume_skills(store, user_id, body.skills)
    return SkillsResponse(skills=skills)
