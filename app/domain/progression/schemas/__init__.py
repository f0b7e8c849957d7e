from app.domain.progression.schemas.github import RepoFact
from app.domain.progression.schemas.profile import (
    EducationItem,
    ExperienceItem,
    ParsedSkill,
    ProjectItem,
    QuestHistoryRecord,
    ResumeData,
    Skill,
    UserProfile,
)
from app.domain.progression.schemas.quest import (
    AwakeningResult,
    Challenge,
    Quest,
    QuestGenerationOutput,
    SkillGap,
)
from app.domain.progression.schemas.results import (
    AwakeningOutcome,
    ProgressView,
    QuestXP,
    SkillChallengeResult,
    SubmissionResult,
    XPCalculation,
    XPGain,
)

__all__ = [
    "RepoFact",
    "EducationItem",
    "ExperienceItem",
    "ProjectItem",
    "ResumeData",
    "UserProfile",
    "Skill",
    "ParsedSkill",
    "QuestHistoryRecord",
    "Quest",
    "Challenge",
    "SkillGap",
    "AwakeningResult",
    "QuestGenerationOutput",
    "QuestXP",
    "XPGain",
    "XPCalculation",
    "SubmissionResult",
    "AwakeningOutcome",
    "SkillChallengeResult",
    "ProgressView",
]
