"""퀘스트 API 스키마."""

from pydantic import BaseModel, Field, field_validator

from app.domain.progression.schemas import Quest, QuestHistoryRecord


class SubmitQuestRequest(BaseModel):
    """퀘스트 제출 요청."""

    repo_url: str = Field(min_length=1, max_length=500)

    @field_validator("repo_url")
    @classmethod
    def strip_repo_url(cls, v: str) -> str:
        return v.strip()


class GenerateQuestResponse(BaseModel):
    """새 퀘스트. A랭크면 null."""

    quest: Quest | None


class QuestHistoryResponse(BaseModel):
    history: list[QuestHistoryRecord]
