import uuid
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from app.domain.progression.constants import MAX_SKILL_LEVEL, MIN_SKILL_LEVEL
from app.domain.progression.ranks import Rank, rank_from_xp
from app.domain.progression.schemas.quest import Quest


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ExperienceItem(BaseModel):
    title: str
    company: str
    duration: str = ""
    description: str = ""


class ProjectItem(BaseModel):
    name: str
    description: str = ""
    technologies: list[str] = Field(default_factory=list)
    url: str | None = None


class EducationItem(BaseModel):
    degree: str
    institution: str
    year: str = ""


class ResumeData(BaseModel):
    """이력서 파싱 또는 GitHub 프로필에서 얻은 사용자 정보"""

    source: Literal["resume", "github"] = "resume"
    raw_text: str | None = None
    skills: list[str] = Field(default_factory=list)
    experience: list[ExperienceItem] = Field(default_factory=list)
    projects: list[ProjectItem] = Field(default_factory=list)
    education: list[EducationItem] = Field(default_factory=list)
    languages: list[str] = Field(default_factory=list)


class UserProfile(BaseModel):
    """사용자 진행도

    rank는 항상 rank_from_xp(xp)와 같아야 한다.
    """

    id: str
    username: str | None = None
    avatar_url: str | None = None
    xp: int = Field(default=0, ge=0)
    rank: Rank = Rank.E
    current_quest: Quest | None = None
    goal: str | None = None
    resume_data: ResumeData | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode="after")
    def check_rank_matches_xp(self):
        expected = rank_from_xp(self.xp)
        if self.rank != expected:
            raise ValueError(f"rank {self.rank.value}는 xp {self.xp}에 맞지 않습니다 (기대값 {expected.value})")
        return self

    def with_changes(self, **changes) -> "UserProfile":
        """변경 사항을 적용한 새 프로필. model_copy와 달리 검증을 다시 수행한다"""
        return type(self).model_validate({**self.model_dump(), **changes})


class Skill(BaseModel):
    """사용자 스킬

    base_level은 최근 이력서 파싱 결과, earned_xp는 앱 내 활동 누적치, level은 둘로 계산한 최종 레벨.
    """

    user_id: str
    skill_name: str
    base_level: int = Field(default=MIN_SKILL_LEVEL, ge=MIN_SKILL_LEVEL, le=MAX_SKILL_LEVEL)
    earned_xp: int = Field(default=0, ge=0)
    level: int = Field(default=MIN_SKILL_LEVEL, ge=MIN_SKILL_LEVEL, le=MAX_SKILL_LEVEL)


class ParsedSkill(BaseModel):
    """이력서 파서가 돌려준 스킬 레벨"""

    name: str
    level: int
    confidence: float | None = None


class QuestHistoryRecord(BaseModel):
    """퀘스트 완료 기록 (추가 전용)

    (user_id, repo_url) 조합은 유일하다.
    """

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    user_id: str
    quest_title: str | None = None
    quest_description: str | None = None
    repo_url: str
    xp_earned: int = Field(ge=0)
    completed_at: datetime = Field(default_factory=utcnow)
