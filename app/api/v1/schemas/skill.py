"""스킬 API 스키마."""

from pydantic import BaseModel, Field

from app.domain.progression.schemas import Challenge, ParsedSkill, Skill


class SkillChallengeRequest(BaseModel):
    """완료한 챌린지 id. 보상은 서버가 정한다."""

    challenge_id: str = Field(min_length=1)


class ChallengesResponse(BaseModel):
    challenges: list[Challenge]


class ResumeSkillsRequest(BaseModel):
    """이력서 파싱 결과로 얻은 스킬 레벨 목록."""

    skills: list[ParsedSkill]


class SkillsResponse(BaseModel):
    skills: list[Skill]
