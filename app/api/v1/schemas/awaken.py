"""각성 API 스키마."""

from pydantic import BaseModel, Field

from app.domain.progression.schemas import AwakeningResult, ResumeData, UserProfile


class AwakenRequest(BaseModel):
    """각성 요청. resume_data와 github_username 중 정확히 하나가 필요하다."""

    resume_data: ResumeData | None = None
    github_username: str | None = Field(default=None, max_length=39)
    username: str | None = Field(default=None, max_length=255)
    avatar_url: str | None = Field(default=None, max_length=500)


class AwakenResponse(BaseModel):
    awakening: AwakeningResult
    profile: UserProfile
