"""퀘스트 진행 코디네이터

제출 검증, XP 적용, 다음 퀘스트 선택, 저장을 순서대로 수행한다.
검증 단계의 오류는 어떤 변경보다 먼저 발생하며, 저장은 commit_progress 한 번으로 끝난다.
"""

from datetime import datetime

from app.core.exceptions import (
    DuplicateSubmissionError,
    LLMError,
    ProfileNotFoundError,
    ValidationError,
)
from app.core.logging import get_logger
from app.domain.progression.challenges import get_challenge
from app.domain.progression.constants import (
    DEFAULT_GOAL,
    GOAL_MAX_LENGTH,
    LEVELABLE_SKILLS,
    PROMPT_HISTORY_LIMIT,
)
from app.domain.progression.parsers import parse_quest_result
from app.domain.progression.quests import get_fallback_quest
from app.domain.progression.ranks import Rank, is_terminal, next_rank, xp_to_next_rank
from app.domain.progression.schemas import (
    ParsedSkill,
    ProgressView,
    Quest,
    QuestHistoryRecord,
    Skill,
    SkillChallengeResult,
    SubmissionResult,
    UserProfile,
    XPCalculation,
)
from app.domain.progression.schemas.profile import utcnow
from app.domain.progression.skills import normalize_parsed_skills
from app.domain.progression.xp import (
    apply_xp_gain,
    is_recently_pushed,
    progress_percent,
    quest_completion_xp,
)
from app.infra.github.client import verify_repo
from app.infra.llm import BaseLLMClient, request_next_quest
from app.infra.store import ProgressStore

logger = get_logger(__name__)


async def _require_profile(store: ProgressStore, user_id: str) -> UserProfile:
    profile = await store.get_profile(user_id)
    if profile is None:
        raise ProfileNotFoundError(user_id)
    return profile


async def select_next_quest(
    store: ProgressStore,
    profile: UserProfile,
    rank: Rank,
    xp: int,
    *,
    llm: BaseLLMClient | None = None,
    completed_titles: list[str] | None = None,
    session_id: str | None = None,
) -> Quest | None:
    """다음 퀘스트 선택

    종착 랭크면 None. LLM이 없거나 호출/파싱에 실패하면 랭크별 폴백 퀘스트를 사용한다.
    """
    if is_terminal(rank):
        return None

    if llm is None:
        return get_fallback_quest(rank)

    if completed_titles is None:
        history = await store.list_history(profile.id)
        completed_titles = [r.quest_title for r in history if r.quest_title]
    skills = await store.list_skills(profile.id)

    try:
        text = await request_next_quest(
            llm,
            rank=rank,
            xp=xp,
            completed_quests=completed_titles[-PROMPT_HISTORY_LIMIT:],
            goal=profile.goal or DEFAULT_GOAL,
            skills=skills,
            session_id=session_id,
        )
    except LLMError as e:
        logger.warning("퀘스트 생성 실패, 폴백 사용 rank=%s error=%s", rank.value, e.detail)
        return get_fallback_quest(rank)

    quest = parse_quest_result(text)
    if quest is None:
        logger.warning("퀘스트 응답 파싱 실패, 폴백 사용 rank=%s", rank.value)
        return get_fallback_quest(rank)
    return quest


async def submit_quest(
    store: ProgressStore,
    user_id: str,
    repo_url: str,
    *,
    llm: BaseLLMClient | None = None,
    now: datetime | None = None,
    session_id: str | None = None,
) -> SubmissionResult:
    """레포지토리 제출로 현재 퀘스트 완료 처리

    Raises:
        ValidationError: URL 형식 오류
        VerificationFailedError: 레포가 없거나 비공개
        ProfileNotFoundError: 각성 전 사용자
        DuplicateSubmissionError: 이미 제출한 레포
        ConcurrentUpdateError: 동시에 다른 요청이 XP를 변경함
    """
    fact = await verify_repo(repo_url)
    profile = await _require_profile(store, user_id)

    # 중복 판정 키는 GitHub가 돌려준 정규 URL
    canonical_url = fact.html_url
    if await store.has_submission(user_id, canonical_url):
        raise DuplicateSubmissionError(canonical_url)

    now = now or utcnow()
    reward = quest_completion_xp(is_recently_pushed(fact.pushed_at, now))
    gain = apply_xp_gain(profile.xp, profile.rank, reward.total_xp)
    new_rank = gain.new_rank or profile.rank

    completed = profile.current_quest
    history = QuestHistoryRecord(
        user_id=user_id,
        quest_title=completed.title if completed else None,
        quest_description=completed.description if completed else None,
        repo_url=canonical_url,
        xp_earned=reward.total_xp,
        completed_at=now,
    )

    previous = await store.list_history(user_id)
    completed_titles = [r.quest_title for r in previous if r.quest_title]
    if history.quest_title:
        completed_titles.append(history.quest_title)

    next_quest = await select_next_quest(
        store,
        profile,
        new_rank,
        gain.new_total,
        llm=llm,
        completed_titles=completed_titles,
        session_id=session_id,
    )

    updated = profile.with_changes(xp=gain.new_total, rank=new_rank, current_quest=next_quest)
    stored = await store.commit_progress(updated, expected_xp=profile.xp, history=history)

    logger.info(
        "퀘스트 완료 repo=%s xp=%d->%d rank_up=%s rank=%s",
        fact.full_name,
        profile.xp,
        stored.xp,
        gain.rank_up,
        stored.rank.value,
    )

    return SubmissionResult(
        repo=fact,
        xp_calculation=XPCalculation(
            base_xp=reward.base_xp,
            recency_bonus=reward.recency_bonus,
            total_xp=reward.total_xp,
            new_total=gain.new_total,
            rank_up=gain.rank_up,
            new_rank=gain.new_rank,
        ),
        rank_up=gain.rank_up,
        updated_profile=stored,
    )


async def regenerate_quest(
    store: ProgressStore,
    user_id: str,
    *,
    llm: BaseLLMClient | None = None,
    session_id: str | None = None,
) -> Quest | None:
    """현재 랭크 기준으로 현재 퀘스트를 새로 뽑아 교체"""
    profile = await _require_profile(store, user_id)
    quest = await select_next_quest(
        store, profile, profile.rank, profile.xp, llm=llm, session_id=session_id
    )
    stored = await store.commit_progress(
        profile.with_changes(current_quest=quest), expected_xp=profile.xp
    )
    return stored.current_quest


async def complete_skill_challenge(
    store: ProgressStore,
    user_id: str,
    challenge_id: str,
) -> SkillChallengeResult:
    """스킬 챌린지 완료. 보상은 챌린지 테이블에서 찾아 스킬 earned_xp와 사용자 XP에 함께 적립한다"""
    challenge = get_challenge(challenge_id)
    if challenge is None:
        raise ValidationError(f"알 수 없는 챌린지입니다: {challenge_id}")
    if challenge.skill_name not in LEVELABLE_SKILLS:
        raise ValidationError(f"챌린지로 올릴 수 없는 스킬입니다: {challenge.skill_name}")

    profile = await _require_profile(store, user_id)

    gain = apply_xp_gain(profile.xp, profile.rank, challenge.xp_reward)
    updated = profile.with_changes(xp=gain.new_total, rank=gain.new_rank or profile.rank)
    stored = await store.commit_progress(
        updated, expected_xp=profile.xp, skill_xp={challenge.skill_name: challenge.xp_reward}
    )

    skills = {s.skill_name: s for s in await store.list_skills(user_id)}
    updated_skill = skills[challenge.skill_name]

    logger.info(
        "스킬 챌린지 완료 challenge=%s skill=%s level=%d xp=%d",
        challenge.id,
        challenge.skill_name,
        updated_skill.level,
        stored.xp,
    )
    return SkillChallengeResult(
        challenge=challenge, updated_skill=updated_skill, updated_profile=stored, xp_gain=gain
    )


async def sync_resume_skills(store: ProgressStore, user_id: str, parsed: list[ParsedSkill]) -> list[Skill]:
    """새 이력서 파싱 결과를 저장된 스킬에 병합. base_level만 교체되고 earned_xp는 유지된다"""
    await _require_profile(store, user_id)

    normalized = normalize_parsed_skills(parsed)
    skills = await store.merge_resume_skills(user_id, normalized)

    logger.info("이력서 스킬 동기화 parsed=%d merged=%d", len(parsed), len(normalized))
    return skills


def _normalize_goal(goal: str | None) -> str:
    goal = (goal or "").strip()
    if not goal:
        raise ValidationError("목표를 입력해주세요")
    if len(goal) > GOAL_MAX_LENGTH:
        raise ValidationError(f"목표는 {GOAL_MAX_LENGTH}자 이하여야 합니다")
    return goal


async def set_goal(store: ProgressStore, user_id: str, goal: str | None) -> str:
    goal = _normalize_goal(goal)
    profile = await store.update_goal(user_id, goal)
    if profile is None:
        raise ProfileNotFoundError(user_id)
    return profile.goal


async def get_goal(store: ProgressStore, user_id: str) -> str | None:
    profile = await _require_profile(store, user_id)
    return profile.goal


async def delete_goal(store: ProgressStore, user_id: str) -> None:
    profile = await store.update_goal(user_id, None)
    if profile is None:
        raise ProfileNotFoundError(user_id)


async def get_progress(store: ProgressStore, user_id: str) -> ProgressView:
    """프로필과 다음 랭크까지의 진행 정보"""
    profile = await _require_profile(store, user_id)
    return ProgressView(
        profile=profile,
        progress_percent=progress_percent(profile.xp, profile.rank),
        next_rank=next_rank(profile.rank),
        xp_to_next_rank=xp_to_next_rank(profile.rank),
    )


async def list_quest_history(store: ProgressStore, user_id: str) -> list[QuestHistoryRecord]:
    await _require_profile(store, user_id)
    return await store.list_history(user_id)


async def list_skills(store: ProgressStore, user_id: str) -> list[Skill]:
    await _require_profile(store, user_id)
    return await store.list_skills(user_id)
