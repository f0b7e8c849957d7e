from app.domain.progression.prompts.awakening import AWAKENING_HUMAN, AWAKENING_SYSTEM
from app.domain.progression.prompts.quest import NEXT_QUEST_HUMAN

__all__ = [
    "AWAKENING_SYSTEM",
    "AWAKENING_HUMAN",
    "NEXT_QUEST_HUMAN",
]
