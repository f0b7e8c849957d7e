import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from app.domain.progression.ranks import Rank

Difficulty = Literal["easy", "medium", "hard"]


def _new_quest_id() -> str:
    return f"quest-{uuid.uuid4().hex[:12]}"


def _lower(value):
    return value.strip().lower() if isinstance(value, str) else value


class Quest(BaseModel):
    """퀘스트"""

    id: str = Field(default_factory=_new_quest_id)
    title: str = Field(min_length=1)
    description: str
    requirements: list[str] = Field(default_factory=list)
    xp_reward: int = Field(gt=0)
    skill_focus: str
    difficulty: Difficulty
    repo_url: str | None = None
    completed_at: datetime | None = None

    @field_validator("difficulty", mode="before")
    @classmethod
    def normalize_difficulty(cls, v):
        return _lower(v)


class SkillGap(BaseModel):
    """이력서 분석으로 찾은 스킬 공백"""

    skill: str
    current_level: Literal["none", "beginner", "intermediate", "advanced"]
    recommended_level: Literal["beginner", "intermediate", "advanced", "expert"]
    priority: Literal["low", "medium", "high"]

    @field_validator("current_level", "recommended_level", "priority", mode="before")
    @classmethod
    def normalize_levels(cls, v):
        return _lower(v)


class AwakeningResult(BaseModel):
    """각성 LLM 출력"""

    rank: Rank
    rank_reasoning: str
    gaps: list[SkillGap]
    quest: Quest
    message: str

    @field_validator("rank", mode="before")
    @classmethod
    def normalize_rank(cls, v):
        return v.strip().upper() if isinstance(v, str) else v


class QuestGenerationOutput(BaseModel):
    """다음 퀘스트 생성 LLM 출력"""

    quest: Quest


class Challenge(BaseModel):
    """스킬 챌린지. 보상은 서버 테이블 값만 사용한다"""

    id: str
    skill_name: str
    title: str
    description: str
    hint: str
    difficulty: Difficulty
    xp_reward: int = Field(gt=0)
