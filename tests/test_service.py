"""퀘스트 진행 코디네이터 테스트"""

from unittest.mock import AsyncMock, patch

import pytest

from app.core.exceptions import (
    ConcurrentUpdateError,
    DuplicateSubmissionError,
    LLMError,
    ProfileNotFoundError,
    ValidationError,
    VerificationFailedError,
)
from app.domain.progression import service
from app.domain.progression.awakening import awaken
from app.domain.progression.quests import get_fallback_quest
from app.domain.progression.ranks import Rank, rank_from_xp
from app.domain.progression.schemas import ParsedSkill, UserProfile

GENERATED_QUEST = """```json
{"quest": {"title": "Ship a CLI tool", "description": "Build and publish a CLI",
"requirements": ["Publish to PyPI"], "xp_reward": 75, "skill_focus": "Backend", "difficulty": "medium"}}
```"""


async def _create_profile(store, xp: int = 0, user_id: str = "user-1", **fields) -> UserProfile:
    rank = rank_from_xp(xp)
    profile = UserProfile(
        id=user_id,
        xp=xp,
        rank=rank,
        current_quest=get_fallback_quest(rank),
        **fields,
    )
    return await store.save_profile(profile)


class TestSubmitQuest:
    """submit_quest 함수 테스트"""

    @pytest.mark.asyncio
    async def test_recent_push_awards_bonus(self, store, make_repo_fact, now):
        """최근 푸시 레포는 75 XP"""
        await _create_profile(store)

        with patch("app.domain.progression.service.verify_repo", AsyncMock(return_value=make_repo_fact())):
            result = await service.submit_quest(store, "user-1", "https://github.com/testuser/testrepo", now=now)

        assert result.xp_calculation.base_xp == 50
        assert result.xp_calculation.recency_bonus == 25
        assert result.xp_calculation.total_xp == 75
        assert result.xp_calculation.new_total == 75
        assert result.rank_up is False
        assert result.updated_profile.rank == Rank.E

    @pytest.mark.asyncio
    async def test_history_records_completed_quest(self, store, make_repo_fact, now):
        """이력에는 완료한 퀘스트 제목과 정규 URL이 기록됨"""
        await _create_profile(store)

        with patch("app.domain.progression.service.verify_repo", AsyncMock(return_value=make_repo_fact())):
            await service.submit_quest(store, "user-1", "testuser/testrepo", now=now)

        history = await store.list_history("user-1")
        assert len(history) == 1
        assert history[0].quest_title == "First Gate: Build Your Foundation"
        assert history[0].repo_url == "https://github.com/testuser/testrepo"
        assert history[0].xp_earned == 75

    @pytest.mark.asyncio
    async def test_duplicate_submission(self, store, make_repo_fact, now):
        """같은 레포 재제출은 실패하고 XP와 이력은 그대로"""
        await _create_profile(store)
        fact = make_repo_fact()

        with patch("app.domain.progression.service.verify_repo", AsyncMock(return_value=fact)):
            await service.submit_quest(store, "user-1", fact.html_url, now=now)
            with pytest.raises(DuplicateSubmissionError):
                await service.submit_quest(store, "user-1", fact.html_url + ".git", now=now)

        profile = await store.get_profile("user-1")
        assert profile.xp == 75
        assert len(await store.list_history("user-1")) == 1

    @pytest.mark.asyncio
    async def test_store_constraint_catches_race(self, store, make_repo_fact, now):
        """빠른 확인을 통과해도 저장소 유일성 제약이 막음"""
        await _create_profile(store)
        fact = make_repo_fact()

        with patch("app.domain.progression.service.verify_repo", AsyncMock(return_value=fact)):
            await service.submit_quest(store, "user-1", fact.html_url, now=now)
            with patch.object(store, "has_submission", AsyncMock(return_value=False)):
                with pytest.raises(DuplicateSubmissionError):
                    await service.submit_quest(store, "user-1", fact.html_url, now=now)

        assert (await store.get_profile("user-1")).xp == 75

    @pytest.mark.asyncio
    async def test_concurrent_update_detected(self, store, make_repo_fact, now):
        """계산 중 다른 요청이 XP를 바꾸면 ConcurrentUpdateError"""
        profile = await _create_profile(store)
        stale = AsyncMock(return_value=profile)
        await store.save_profile(profile.with_changes(xp=10))

        with patch("app.domain.progression.service.verify_repo", AsyncMock(return_value=make_repo_fact())):
            with patch.object(store, "get_profile", stale):
                with pytest.raises(ConcurrentUpdateError):
                    await service.submit_quest(store, "user-1", "testuser/testrepo", now=now)

        assert await store.list_history("user-1") == []

    @pytest.mark.asyncio
    async def test_verification_failure_no_mutation(self, store):
        """검증 실패 시 아무것도 바뀌지 않음"""
        await _create_profile(store)

        with patch(
            "app.domain.progression.service.verify_repo",
            AsyncMock(side_effect=VerificationFailedError("testuser/private")),
        ):
            with pytest.raises(VerificationFailedError):
                await service.submit_quest(store, "user-1", "testuser/private")

        assert (await store.get_profile("user-1")).xp == 0
        assert await store.list_history("user-1") == []

    @pytest.mark.asyncio
    async def test_profile_not_found(self, store, make_repo_fact):
        """각성 전 사용자는 ProfileNotFoundError"""
        with patch("app.domain.progression.service.verify_repo", AsyncMock(return_value=make_repo_fact())):
            with pytest.raises(ProfileNotFoundError):
                await service.submit_quest(store, "ghost", "testuser/testrepo")

    @pytest.mark.asyncio
    async def test_next_quest_for_new_rank(self, store, make_repo_fact, now):
        """랭크업하면 새 랭크의 폴백 퀘스트 배정"""
        await _create_profile(store, xp=75)

        with patch("app.domain.progression.service.verify_repo", AsyncMock(return_value=make_repo_fact())):
            result = await service.submit_quest(store, "user-1", "testuser/testrepo", now=now)

        assert result.updated_profile.rank == Rank.D
        assert result.updated_profile.current_quest.id == "fallback-quest-d"

    @pytest.mark.asyncio
    async def test_terminal_rank_has_no_next_quest(self, store, make_repo_fact, now):
        """A랭크 도달 시 다음 퀘스트 없음"""
        await _create_profile(store, xp=950)

        with patch("app.domain.progression.service.verify_repo", AsyncMock(return_value=make_repo_fact())):
            result = await service.submit_quest(store, "user-1", "testuser/testrepo", now=now)

        assert result.xp_calculation.new_rank == Rank.A
        assert result.updated_profile.current_quest is None

    @pytest.mark.asyncio
    async def test_ai_generated_next_quest(self, store, make_repo_fact, mock_llm, now):
        """AI 응답이 유효하면 생성된 퀘스트 사용"""
        await _create_profile(store, goal="Become a backend engineer")
        request_mock = AsyncMock(return_value=GENERATED_QUEST)

        with (
            patch("app.domain.progression.service.verify_repo", AsyncMock(return_value=make_repo_fact())),
            patch("app.domain.progression.service.request_next_quest", request_mock),
        ):
            result = await service.submit_quest(
                store, "user-1", "testuser/testrepo", llm=mock_llm, now=now
            )

        assert result.updated_profile.current_quest.title == "Ship a CLI tool"
        kwargs = request_mock.call_args.kwargs
        assert kwargs["goal"] == "Become a backend engineer"
        assert kwargs["completed_quests"] == ["First Gate: Build Your Foundation"]

    @pytest.mark.asyncio
    async def test_goal_set_during_quest_generation_kept(self, store, make_repo_fact, mock_llm, now):
        """퀘스트 생성 중 설정한 목표가 제출 저장으로 사라지지 않음"""
        await _create_profile(store)

        async def slow_generation(*args, **kwargs):
            await service.set_goal(store, "user-1", "Learn Rust")
            return GENERATED_QUEST

        with (
            patch("app.domain.progression.service.verify_repo", AsyncMock(return_value=make_repo_fact())),
            patch("app.domain.progression.service.request_next_quest", AsyncMock(side_effect=slow_generation)),
        ):
            result = await service.submit_quest(store, "user-1", "testuser/testrepo", llm=mock_llm, now=now)

        assert result.updated_profile.goal == "Learn Rust"
        assert await service.get_goal(store, "user-1") == "Learn Rust"

    @pytest.mark.asyncio
    async def test_ai_failure_falls_back(self, store, make_repo_fact, mock_llm, now):
        """AI 호출 실패는 폴백 퀘스트로 대체"""
        await _create_profile(store)

        with (
            patch("app.domain.progression.service.verify_repo", AsyncMock(return_value=make_repo_fact())),
            patch(
                "app.domain.progression.service.request_next_quest",
                AsyncMock(side_effect=LLMError("timeout")),
            ),
        ):
            result = await service.submit_quest(
                store, "user-1", "testuser/testrepo", llm=mock_llm, now=now
            )

        assert result.updated_profile.current_quest.id == "fallback-quest-e"

    @pytest.mark.asyncio
    async def test_ai_unparseable_falls_back(self, store, make_repo_fact, mock_llm, now):
        """AI 응답에 JSON이 없으면 폴백 퀘스트"""
        await _create_profile(store)

        with (
            patch("app.domain.progression.service.verify_repo", AsyncMock(return_value=make_repo_fact())),
            patch(
                "app.domain.progression.service.request_next_quest",
                AsyncMock(return_value="I could not generate a quest."),
            ),
        ):
            result = await service.submit_quest(
                store, "user-1", "testuser/testrepo", llm=mock_llm, now=now
            )

        assert result.updated_profile.current_quest.id == "fallback-quest-e"


class TestEndToEnd:
    """각성부터 두 번의 제출까지"""

    @pytest.mark.asyncio
    async def test_awaken_then_two_submissions(self, store, sample_resume_data, make_repo_fact, now):
        """E랭크 0 XP -> 75 -> 125 (D랭크)"""
        outcome = await awaken(store, "user-1", sample_resume_data, llm=None)

        assert outcome.profile.rank == Rank.E
        assert outcome.profile.xp == 0
        assert outcome.profile.current_quest.xp_reward == 50

        first = make_repo_fact(name="first-repo", pushed_days_ago=2)
        with patch("app.domain.progression.service.verify_repo", AsyncMock(return_value=first)):
            result = await service.submit_quest(store, "user-1", first.html_url, now=now)

        assert result.xp_calculation.recency_bonus == 25
        assert result.xp_calculation.total_xp == 75
        assert result.xp_calculation.new_total == 75
        assert result.rank_up is False
        assert result.updated_profile.rank == Rank.E

        second = make_repo_fact(name="second-repo", pushed_days_ago=10)
        with patch("app.domain.progression.service.verify_repo", AsyncMock(return_value=second)):
            result = await service.submit_quest(store, "user-1", second.html_url, now=now)

        assert result.xp_calculation.recency_bonus == 0
        assert result.xp_calculation.total_xp == 50
        assert result.xp_calculation.new_total == 125
        assert result.rank_up is True
        assert result.xp_calculation.new_rank == Rank.D
        assert result.updated_profile.rank == Rank.D

        history = await store.list_history("user-1")
        assert [r.xp_earned for r in history] == [75, 50]


class TestRegenerateQuest:
    """regenerate_quest 함수 테스트"""

    @pytest.mark.asyncio
    async def test_replaces_current_quest(self, store, mock_llm):
        """현재 랭크 기준으로 새 퀘스트 배정"""
        await _create_profile(store, xp=120)

        with patch(
            "app.domain.progression.service.request_next_quest",
            AsyncMock(return_value=GENERATED_QUEST),
        ):
            quest = await service.regenerate_quest(store, "user-1", llm=mock_llm)

        assert quest.title == "Ship a CLI tool"
        assert (await store.get_profile("user-1")).current_quest.title == "Ship a CLI tool"

    @pytest.mark.asyncio
    async def test_terminal_rank(self, store):
        """A랭크는 퀘스트 없음"""
        await _create_profile(store, xp=1200)
        assert await service.regenerate_quest(store, "user-1") is None


async def _seed_debugging(store, base_level: int, earned_xp: int) -> None:
    await store.merge_resume_skills("user-1", [ParsedSkill(name="Debugging", level=base_level)])
    profile = await store.get_profile("user-1")
    await store.commit_progress(profile, expected_xp=profile.xp, skill_xp={"Debugging": earned_xp})


def _before_first_profile_read(store, action):
    """첫 get_profile 호출 직전에 action을 끼워 넣음 (동시 요청 재현)"""
    original = store.get_profile
    pending = [action]

    async def get_profile(user_id):
        if pending:
            await pending.pop()()
        return await original(user_id)

    return patch.object(store, "get_profile", side_effect=get_profile)


class TestSkillChallenge:
    """complete_skill_challenge 함수 테스트"""

    @pytest.mark.asyncio
    async def test_updates_skill_and_profile(self, store):
        """카탈로그 보상만큼 스킬 earned_xp와 사용자 XP를 함께 올림"""
        await _create_profile(store, xp=95)
        await _seed_debugging(store, base_level=1, earned_xp=95)

        result = await service.complete_skill_challenge(store, "user-1", "off-by-one")

        assert result.challenge.xp_reward == 10
        assert result.updated_skill.earned_xp == 105
        assert result.updated_skill.level == 2
        assert result.updated_profile.xp == 105
        assert result.updated_profile.rank == Rank.D
        assert result.xp_gain.rank_up is True

    @pytest.mark.asyncio
    async def test_reward_from_catalog(self, store):
        """보상은 챌린지 난이도별 고정값"""
        await _create_profile(store)

        result = await service.complete_skill_challenge(store, "user-1", "promise-all")

        assert result.updated_skill.earned_xp == 20
        assert result.updated_profile.xp == 20

    @pytest.mark.asyncio
    async def test_creates_missing_skill(self, store):
        """스킬이 없으면 레벨 1로 생성"""
        await _create_profile(store)

        result = await service.complete_skill_challenge(store, "user-1", "off-by-one")

        assert result.updated_skill.base_level == 1
        assert result.updated_skill.earned_xp == 10
        assert len(await store.list_skills("user-1")) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("challenge_id", ["", "unknown", "OFF-BY-ONE"])
    async def test_unknown_challenge(self, store, challenge_id):
        """카탈로그에 없는 챌린지는 ValidationError, 아무것도 바뀌지 않음"""
        await _create_profile(store)

        with pytest.raises(ValidationError):
            await service.complete_skill_challenge(store, "user-1", challenge_id)

        assert (await store.get_profile("user-1")).xp == 0
        assert await store.list_skills("user-1") == []

    @pytest.mark.asyncio
    async def test_resync_during_challenge_keeps_base_level(self, store):
        """챌린지 처리 중 들어온 이력서 재파싱의 base_level이 유지됨"""
        await _create_profile(store)
        await _seed_debugging(store, base_level=5, earned_xp=100)

        async def resync():
            await service.sync_resume_skills(store, "user-1", [ParsedSkill(name="Debugging", level=2)])

        with _before_first_profile_read(store, resync):
            result = await service.complete_skill_challenge(store, "user-1", "off-by-one")

        assert (result.updated_skill.base_level, result.updated_skill.earned_xp) == (2, 110)
        assert result.updated_skill.level == 3
        assert result.updated_profile.xp == 10

    @pytest.mark.asyncio
    async def test_challenge_during_resync_keeps_earned_xp(self, store):
        """이력서 재파싱 중 완료된 챌린지의 earned_xp가 유지됨"""
        await _create_profile(store)
        await _seed_debugging(store, base_level=5, earned_xp=100)

        async def challenge():
            await service.complete_skill_challenge(store, "user-1", "off-by-one")

        with _before_first_profile_read(store, challenge):
            skills = await service.sync_resume_skills(store, "user-1", [ParsedSkill(name="Debugging", level=2)])

        debugging = {s.skill_name: s for s in skills}["Debugging"]
        assert (debugging.base_level, debugging.earned_xp, debugging.level) == (2, 110, 3)
        assert (await store.get_profile("user-1")).xp == 10


class TestSyncResumeSkills:
    """sync_resume_skills 함수 테스트"""

    @pytest.mark.asyncio
    async def test_merge_preserves_earned_xp(self, store, sample_parsed_skills):
        """재파싱 시 earned_xp 유지, 다른 스킬은 그대로"""
        await _create_profile(store)
        await _seed_debugging(store, base_level=5, earned_xp=120)
        await store.merge_resume_skills("user-1", [ParsedSkill(name="Frontend", level=4)])

        skills = await service.sync_resume_skills(
            store,
            "user-1",
            sample_parsed_skills + [ParsedSkill(name="Knitting", level=9)],
        )

        by_name = {s.skill_name: s for s in skills}
        assert set(by_name) == {"Debugging", "Frontend", "Backend", "Database"}
        assert by_name["Debugging"].base_level == 3
        assert by_name["Debugging"].earned_xp == 120
        assert by_name["Debugging"].level == 4
        assert by_name["Frontend"].base_level == 4


class TestGoal:
    """목표 설정 테스트"""

    @pytest.mark.asyncio
    async def test_set_get_delete(self, store):
        """목표 저장, 조회, 삭제"""
        await _create_profile(store)

        assert await service.set_goal(store, "user-1", "  Land a backend job  ") == "Land a backend job"
        assert await service.get_goal(store, "user-1") == "Land a backend job"

        await service.delete_goal(store, "user-1")
        assert await service.get_goal(store, "user-1") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("goal", ["", "   ", "x" * 501])
    async def test_invalid_goal(self, store, goal):
        """빈 목표나 500자 초과는 ValidationError"""
        await _create_profile(store)
        with pytest.raises(ValidationError):
            await service.set_goal(store, "user-1", goal)

    @pytest.mark.asyncio
    async def test_max_length_goal(self, store):
        """500자는 허용"""
        await _create_profile(store)
        assert await service.set_goal(store, "user-1", "x" * 500) == "x" * 500

    @pytest.mark.asyncio
    async def test_missing_profile(self, store):
        """프로필이 없으면 ProfileNotFoundError"""
        with pytest.raises(ProfileNotFoundError):
            await service.set_goal(store, "ghost", "goal")


class TestGetProgress:
    """get_progress 함수 테스트"""

    @pytest.mark.asyncio
    async def test_progress_view(self, store):
        """진행률과 다음 랭크 정보"""
        await _create_profile(store, xp=175)

        view = await service.get_progress(store, "user-1")

        assert view.profile.rank == Rank.D
        assert view.progress_percent == 50
        assert view.next_rank == Rank.C
        assert view.xp_to_next_rank == 250

    @pytest.mark.asyncio
    async def test_terminal_rank(self, store):
        """A랭크는 100%, 다음 랭크 없음"""
        await _create_profile(store, xp=1000)

        view = await service.get_progress(store, "user-1")

        assert view.progress_percent == 100
        assert view.next_rank is None
        assert view.xp_to_next_rank is None
