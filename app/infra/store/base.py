from abc import ABC, abstractmethod

from app.domain.progression.schemas import ParsedSkill, QuestHistoryRecord, Skill, UserProfile


class ProgressStore(ABC):
    """사용자 진행도 저장소 추상 클래스

    구현체는 (user_id, repo_url) 유일성을 저장소 수준에서 보장해야 하며,
    commit_progress의 이력 추가와 프로필 갱신은 하나의 트랜잭션으로 처리해야 한다.

    스킬은 읽은 값을 덮어쓰지 않는다. earned_xp는 증가분으로, base_level은 값 자체로만 쓰고
    level은 쓰는 시점의 저장 값으로 다시 계산한다.
    """

    async def init(self) -> None:
        """스키마 생성 등 초기화"""

    async def close(self) -> None:
        """연결 정리"""

    @abstractmethod
    async def get_profile(self, user_id: str) -> UserProfile | None:
        pass

    @abstractmethod
    async def save_profile(self, profile: UserProfile, skill_xp: dict[str, int] | None = None) -> UserProfile:
        """프로필 생성/덮어쓰기와 스킬 XP 적립

        skill_xp는 스킬 이름별 earned_xp 증가분. 없는 스킬은 base_level 1로 생성한다.
        """
        pass

    @abstractmethod
    async def commit_progress(
        self,
        profile: UserProfile,
        *,
        expected_xp: int,
        history: QuestHistoryRecord | None = None,
        skill_xp: dict[str, int] | None = None,
    ) -> UserProfile:
        """저장된 XP가 expected_xp일 때만 프로필 갱신, 이력 추가, 스킬 XP 적립을 원자적으로 수행

        goal은 쓰지 않는다 (update_goal 전용).

        Raises:
            ProfileNotFoundError: 프로필 없음
            ConcurrentUpdateError: 저장된 XP가 expected_xp와 다름
            DuplicateSubmissionError: (user_id, repo_url) 유일성 위반
            PersistenceError: 그 외 저장 실패
        """
        pass

    @abstractmethod
    async def update_goal(self, user_id: str, goal: str | None) -> UserProfile | None:
        """목표만 갱신. 프로필이 없으면 None"""
        pass

    @abstractmethod
    async def has_submission(self, user_id: str, repo_url: str) -> bool:
        pass

    @abstractmethod
    async def list_history(self, user_id: str) -> list[QuestHistoryRecord]:
        pass

    @abstractmethod
    async def list_skills(self, user_id: str) -> list[Skill]:
        pass

    @abstractmethod
    async def merge_resume_skills(self, user_id: str, parsed: list[ParsedSkill]) -> list[Skill]:
        """이력서 파싱 결과의 base_level만 반영. earned_xp는 저장된 값을 유지

        Returns:
            반영 후 사용자의 전체 스킬 목록
        """
        pass
