from app.api.v1.schemas.awaken import AwakenRequest, AwakenResponse
from app.api.v1.schemas.goal import GoalRequest, GoalResponse
from app.api.v1.schemas.quest import (
    GenerateQuestResponse,
    QuestHistoryResponse,
    SubmitQuestRequest,
)
from app.api.v1.schemas.skill import (
    ChallengesResponse,
    ResumeSkillsRequest,
    SkillChallengeRequest,
    SkillsResponse,
)

__all__ = [
    "AwakenRequest",
    "AwakenResponse",
    "SubmitQuestRequest",
    "GenerateQuestResponse",
    "QuestHistoryResponse",
    "SkillChallengeRequest",
    "ChallengesResponse",
    "ResumeSkillsRequest",
    "SkillsResponse",
    "GoalRequest",
    "GoalResponse",
]
