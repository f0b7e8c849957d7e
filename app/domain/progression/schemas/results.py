from pydantic import BaseModel

from app.domain.progression.ranks import Rank
from app.domain.progression.schemas.github import RepoFact
from app.domain.progression.schemas.profile import Skill, UserProfile
from app.domain.progression.schemas.quest import AwakeningResult, Challenge


class QuestXP(BaseModel):
    """퀘스트 완료 보상 내역"""

    base_xp: int
    recency_bonus: int
    total_xp: int


class XPGain(BaseModel):
    """XP 적용 결과. new_rank는 랭크업한 경우에만 존재"""

    gained_xp: int
    new_total: int
    rank_up: bool
    new_rank: Rank | None = None


class XPCalculation(BaseModel):
    """퀘스트 제출 응답용 XP 계산 내역"""

    base_xp: int
    recency_bonus: int
    total_xp: int
    new_total: int
    rank_up: bool
    new_rank: Rank | None = None


class SubmissionResult(BaseModel):
    repo: RepoFact
    xp_calculation: XPCalculation
    rank_up: bool
    updated_profile: UserProfile


class AwakeningOutcome(BaseModel):
    awakening: AwakeningResult
    profile: UserProfile
    used_fallback: bool = False


class SkillChallengeResult(BaseModel):
    challenge: Challenge
    updated_skill: Skill
    updated_profile: UserProfile
    xp_gain: XPGain


class ProgressView(BaseModel):
    profile: UserProfile
    progress_percent: int
    next_rank: Rank | None
    xp_to_next_rank: int | None
