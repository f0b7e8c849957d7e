"""목표 API 스키마."""

from pydantic import BaseModel


class GoalRequest(BaseModel):
    goal: str


class GoalResponse(BaseModel):
    goal: str | None
