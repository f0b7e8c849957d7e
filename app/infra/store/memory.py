import asyncio

from app.core.exceptions import (
    ConcurrentUpdateError,
    DuplicateSubmissionError,
    ProfileNotFoundError,
)
from app.domain.progression.constants import MIN_SKILL_LEVEL
from app.domain.progression.schemas import ParsedSkill, QuestHistoryRecord, Skill, UserProfile
from app.domain.progression.schemas.profile import utcnow
from app.domain.progression.skills import add_earned_xp, build_skill, merge_skills
from app.infra.store.base import ProgressStore


class InMemoryStore(ProgressStore):
    """프로세스 메모리 저장소 - 테스트 및 로컬 개발용

    하나의 asyncio.Lock으로 모든 쓰기를 직렬화한다.
    """

    def __init__(self):
        self._lock = asyncio.Lock()
        self._profiles: dict[str, UserProfile] = {}
        self._history: dict[str, list[QuestHistoryRecord]] = {}
        self._skills: dict[tuple[str, str], Skill] = {}

    async def get_profile(self, user_id: str) -> UserProfile | None:
        profile = self._profiles.get(user_id)
        return profile.model_copy(deep=True) if profile else None

    async def save_profile(self, profile: UserProfile, skill_xp: dict[str, int] | None = None) -> UserProfile:
        async with self._lock:
            stored = profile.model_copy(deep=True, update={"updated_at": utcnow()})
            self._profiles[profile.id] = stored
            self._add_skill_xp(profile.id, skill_xp or {})
        return stored.model_copy(deep=True)

    async def commit_progress(
        self,
        profile: UserProfile,
        *,
        expected_xp: int,
        history: QuestHistoryRecord | None = None,
        skill_xp: dict[str, int] | None = None,
    ) -> UserProfile:
        async with self._lock:
            current = self._profiles.get(profile.id)
            if current is None:
                raise ProfileNotFoundError(profile.id)
            if current.xp != expected_xp:
                raise ConcurrentUpdateError(f"expected_xp={expected_xp} actual={current.xp}")

            records = self._history.setdefault(profile.id, [])
            if history is not None and any(r.repo_url == history.repo_url for r in records):
                raise DuplicateSubmissionError(history.repo_url)

            stored = profile.model_copy(deep=True, update={"goal": current.goal, "updated_at": utcnow()})
            self._profiles[profile.id] = stored
            if history is not None:
                records.append(history.model_copy(deep=True))
            self._add_skill_xp(profile.id, skill_xp or {})

        return stored.model_copy(deep=True)

    async def update_goal(self, user_id: str, goal: str | None) -> UserProfile | None:
        async with self._lock:
            current = self._profiles.get(user_id)
            if current is None:
                return None
            stored = current.model_copy(update={"goal": goal, "updated_at": utcnow()})
            self._profiles[user_id] = stored
        return stored.model_copy(deep=True)

    async def has_submission(self, user_id: str, repo_url: str) -> bool:
        return any(r.repo_url == repo_url for r in self._history.get(user_id, []))

    async def list_history(self, user_id: str) -> list[QuestHistoryRecord]:
        return [r.model_copy(deep=True) for r in self._history.get(user_id, [])]

    async def list_skills(self, user_id: str) -> list[Skill]:
        return [s.model_copy() for (uid, _), s in self._skills.items() if uid == user_id]

    async def merge_resume_skills(self, user_id: str, parsed: list[ParsedSkill]) -> list[Skill]:
        async with self._lock:
            existing = [s for (uid, _), s in self._skills.items() if uid == user_id]
            for skill in merge_skills(user_id, parsed, existing):
                self._skills[(user_id, skill.skill_name)] = skill
        return await self.list_skills(user_id)

    def _add_skill_xp(self, user_id: str, skill_xp: dict[str, int]) -> None:
        for skill_name, xp in skill_xp.items():
            current = self._skills.get((user_id, skill_name)) or build_skill(user_id, skill_name, MIN_SKILL_LEVEL)
            self._skills[(user_id, skill_name)] = add_earned_xp(current, xp)
