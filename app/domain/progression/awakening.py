"""각성 코디네이터

이력서 또는 GitHub 프로필로 시작 랭크, 스킬 공백, 첫 퀘스트를 정한다.
AI는 선택 사항이며 실패하면 고정 결과로 대체한다.
"""

from app.core.exceptions import LLMError
from app.core.logging import get_logger
from app.domain.progression.constants import BOOTSTRAP_SKILL
from app.domain.progression.parsers import enrich_resume_data, parse_awakening_result
from app.domain.progression.quests import get_fallback_awakening_result, get_fallback_quest
from app.domain.progression.ranks import RANK_THRESHOLDS, Rank, is_terminal, rank_from_xp
from app.domain.progression.schemas import (
    AwakeningOutcome,
    AwakeningResult,
    Quest,
    ResumeData,
    UserProfile,
)
from app.infra.llm import BaseLLMClient, request_awakening
from app.infra.store import ProgressStore

logger = get_logger(__name__)


async def generate_awakening(
    llm: BaseLLMClient | None,
    facts: ResumeData,
    session_id: str | None = None,
) -> tuple[AwakeningResult, bool]:
    """AI 각성 결과 생성

    Returns:
        (각성 결과, 폴백 사용 여부)
    """
    if llm is None:
        return get_fallback_awakening_result(), True

    try:
        text = await request_awakening(llm, facts, session_id=session_id)
    except LLMError as e:
        logger.warning("각성 생성 실패, 폴백 사용 error=%s", e.detail)
        return get_fallback_awakening_result(), True

    result = parse_awakening_result(text)
    if result is None:
        logger.warning("각성 응답 파싱 실패, 폴백 사용")
        return get_fallback_awakening_result(), True
    return result, False


def _quest_for(rank: Rank, result: AwakeningResult) -> Quest | None:
    """최종 랭크의 퀘스트. 기존 XP가 더 높아 판정 랭크와 다르면 최종 랭크의 폴백 퀘스트"""
    if is_terminal(rank):
        return None
    if rank == result.rank:
        return result.quest
    return get_fallback_quest(rank)


async def awaken(
    store: ProgressStore,
    user_id: str,
    facts: ResumeData,
    *,
    llm: BaseLLMClient | None = None,
    username: str | None = None,
    avatar_url: str | None = None,
    session_id: str | None = None,
) -> AwakeningOutcome:
    """사용자 각성 처리

    신규 사용자의 XP는 판정된 랭크의 임계값으로 시작한다 (E랭크는 0).
    이미 각성한 사용자는 XP가 줄어들지 않으며 현재 퀘스트와 이력서 정보만 교체된다.
    """
    facts = enrich_resume_data(facts)
    result, used_fallback = await generate_awakening(llm, facts, session_id=session_id)

    existing = await store.get_profile(user_id)
    seeded_xp = RANK_THRESHOLDS[result.rank]

    # 0 XP 적립: 없으면 생성, 있으면 그대로
    bootstrap = {BOOTSTRAP_SKILL: 0}

    if existing is None:
        xp = seeded_xp
        rank = rank_from_xp(xp)
        profile = UserProfile(
            id=user_id,
            username=username,
            avatar_url=avatar_url,
            xp=xp,
            rank=rank,
            current_quest=_quest_for(rank, result),
            resume_data=facts,
        )
        stored = await store.save_profile(profile, skill_xp=bootstrap)
    else:
        xp = max(existing.xp, seeded_xp)
        rank = rank_from_xp(xp)
        profile = existing.with_changes(
            username=username or existing.username,
            avatar_url=avatar_url or existing.avatar_url,
            xp=xp,
            rank=rank,
            current_quest=_quest_for(rank, result),
            resume_data=facts,
        )
        stored = await store.commit_progress(profile, expected_xp=existing.xp, skill_xp=bootstrap)

    logger.info(
        "각성 완료 rank=%s xp=%d source=%s fallback=%s",
        stored.rank.value,
        stored.xp,
        facts.source,
        used_fallback,
    )
    return AwakeningOutcome(awakening=result, profile=stored, used_fallback=used_fallback)
