"""폴백 퀘스트 테이블

LLM이 없거나 응답 파싱에 실패했을 때 사용하는 고정 퀘스트. 랭크당 하나씩, 종착 랭크(A)는 없음.
각성과 퀘스트 완료 흐름 모두 이 테이블을 사용한다.
"""

from types import MappingProxyType

from app.domain.progression.ranks import Rank, is_terminal
from app.domain.progression.schemas import AwakeningResult, Quest, SkillGap

_FALLBACK_QUESTS = {
    Rank.E: Quest(
        id="fallback-quest-e",
        title="First Gate: Build Your Foundation",
        description=(
            "Create a simple full-stack application that demonstrates your coding abilities. "
            "This could be a todo app, blog, or any project that shows clean code structure "
            "and basic CRUD operations."
        ),
        requirements=[
            "Create a public GitHub repository",
            "Include a README with setup instructions",
            "Implement at least one API endpoint",
            "Add basic error handling",
        ],
        xp_reward=50,
        skill_focus="Full-Stack Development",
        difficulty="easy",
    ),
    Rank.D: Quest(
        id="fallback-quest-d",
        title="Second Gate: Expand Your Arsenal",
        description=(
            "Build a more complex project with multiple features. "
            "Focus on code organization and best practices."
        ),
        requirements=[
            "Implement at least 3 distinct features",
            "Add proper error handling",
            "Include documentation",
        ],
        xp_reward=75,
        skill_focus="Architecture",
        difficulty="medium",
    ),
    Rank.C: Quest(
        id="fallback-quest-c",
        title="Third Gate: Master Your Craft",
        description="Create a project that solves a real problem. Include testing and deployment.",
        requirements=[
            "Write unit tests",
            "Deploy to a hosting platform",
            "Add CI/CD pipeline",
        ],
        xp_reward=100,
        skill_focus="DevOps",
        difficulty="medium",
    ),
    Rank.B: Quest(
        id="fallback-quest-b",
        title="Elite Challenge: Lead and Innovate",
        description="Contribute to open source or create a tool that helps other developers.",
        requirements=[
            "Make meaningful open source contributions",
            "Write technical blog posts",
            "Mentor other developers",
        ],
        xp_reward=150,
        skill_focus="Leadership",
        difficulty="hard",
    ),
}

FALLBACK_QUESTS = MappingProxyType(_FALLBACK_QUESTS)

FALLBACK_RANK_REASONING = "Unable to fully analyze your profile. Starting at base rank."
FALLBACK_MESSAGE = (
    "Hunter, you have awakened! Though the system could not fully analyze your potential, "
    "your journey begins now. Complete your first quest to prove your worth."
)


def get_fallback_quest(rank: Rank) -> Quest | None:
    """랭크별 고정 퀘스트 사본 반환. 종착 랭크면 None"""
    if is_terminal(rank):
        return None
    return FALLBACK_QUESTS[Rank(rank)].model_copy(deep=True)


def get_fallback_awakening_result() -> AwakeningResult:
    """외부 호출 없이 만드는 고정 각성 결과"""
    return AwakeningResult(
        rank=Rank.E,
        rank_reasoning=FALLBACK_RANK_REASONING,
        gaps=[
            SkillGap(
                skill="Portfolio Projects",
                current_level="none",
                recommended_level="intermediate",
                priority="high",
            )
        ],
        quest=get_fallback_quest(Rank.E),
        message=FALLBACK_MESSAGE,
    )
