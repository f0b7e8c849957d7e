"""각성 코디네이터 테스트"""

import json
from unittest.mock import AsyncMock, patch

import pytest

from app.core.exceptions import LLMError
from app.domain.progression.awakening import awaken, generate_awakening
from app.domain.progression.ranks import Rank
from app.domain.progression.schemas import ResumeData

AI_AWAKENING = {
    "rank": "C",
    "rank_reasoning": "Several production projects",
    "gaps": [
        {
            "skill": "System Design",
            "current_level": "beginner",
            "recommended_level": "advanced",
            "priority": "high",
        }
    ],
    "quest": {
        "title": "Design a rate limiter",
        "description": "Implement a distributed rate limiter",
        "requirements": ["Redis backend", "Load test"],
        "xp_reward": 100,
        "skill_focus": "System Design",
        "difficulty": "hard",
    },
    "message": "Arise, hunter.",
}


class TestGenerateAwakening:
    """generate_awakening 함수 테스트"""

    @pytest.mark.asyncio
    async def test_no_llm_uses_fallback(self, sample_resume_data):
        """LLM 미설정이면 고정 결과"""
        result, used_fallback = await generate_awakening(None, sample_resume_data)

        assert used_fallback is True
        assert result.rank == Rank.E
        assert result.quest.xp_reward == 50

    @pytest.mark.asyncio
    async def test_llm_error_uses_fallback(self, mock_llm, sample_resume_data):
        """LLM 오류는 폴백으로 대체"""
        with patch(
            "app.domain.progression.awakening.request_awakening",
            AsyncMock(side_effect=LLMError("timeout")),
        ):
            result, used_fallback = await generate_awakening(mock_llm, sample_resume_data)

        assert used_fallback is True
        assert result.gaps[0].skill == "Portfolio Projects"

    @pytest.mark.asyncio
    async def test_missing_field_uses_fallback(self, mock_llm, sample_resume_data):
        """필수 필드 누락 응답은 폴백으로 대체"""
        partial = {k: v for k, v in AI_AWAKENING.items() if k != "quest"}
        with patch(
            "app.domain.progression.awakening.request_awakening",
            AsyncMock(return_value=json.dumps(partial)),
        ):
            result, used_fallback = await generate_awakening(mock_llm, sample_resume_data)

        assert used_fallback is True
        assert result.rank == Rank.E

    @pytest.mark.asyncio
    async def test_valid_response(self, mock_llm, sample_resume_data):
        """정상 응답 사용"""
        with patch(
            "app.domain.progression.awakening.request_awakening",
            AsyncMock(return_value=f"```json\n{json.dumps(AI_AWAKENING)}\n```"),
        ):
            result, used_fallback = await generate_awakening(mock_llm, sample_resume_data)

        assert used_fallback is False
        assert result.rank == Rank.C
        assert result.quest.title == "Design a rate limiter"


class TestAwaken:
    """awaken 함수 테스트"""

    @pytest.mark.asyncio
    async def test_new_user_without_ai(self, store, sample_resume_data):
        """AI 없이 각성하면 E랭크, 0 XP, 50 XP 퀘스트"""
        outcome = await awaken(store, "user-1", sample_resume_data, username="hunter")

        profile = await store.get_profile("user-1")
        assert profile.rank == Rank.E
        assert profile.xp == 0
        assert profile.username == "hunter"
        assert profile.current_quest.xp_reward == 50
        assert profile.resume_data.skills == ["Python", "PostgreSQL"]
        assert outcome.used_fallback is True

    @pytest.mark.asyncio
    async def test_bootstraps_debugging_skill(self, store, sample_resume_data):
        """각성 시 Debugging 스킬 생성"""
        await awaken(store, "user-1", sample_resume_data)

        skills = await store.list_skills("user-1")
        assert [(s.skill_name, s.base_level, s.earned_xp) for s in skills] == [("Debugging", 1, 0)]

    @pytest.mark.asyncio
    async def test_ai_rank_seeds_threshold_xp(self, store, mock_llm, sample_resume_data):
        """AI가 판정한 랭크의 임계값으로 XP 시작"""
        with patch(
            "app.domain.progression.awakening.request_awakening",
            AsyncMock(return_value=json.dumps(AI_AWAKENING)),
        ):
            outcome = await awaken(store, "user-1", sample_resume_data, llm=mock_llm)

        assert outcome.profile.rank == Rank.C
        assert outcome.profile.xp == 250
        assert outcome.profile.current_quest.title == "Design a rate limiter"
        assert outcome.used_fallback is False

    @pytest.mark.asyncio
    async def test_reawaken_keeps_xp(self, store, sample_resume_data):
        """재각성은 XP를 줄이지 않고 스킬을 중복 생성하지 않음"""
        await awaken(store, "user-1", sample_resume_data)
        profile = await store.get_profile("user-1")
        await store.save_profile(profile.with_changes(xp=180, rank=Rank.D))

        outcome = await awaken(store, "user-1", sample_resume_data)

        assert outcome.profile.xp == 180
        assert outcome.profile.rank == Rank.D
        assert outcome.profile.current_quest.id == "fallback-quest-d"
        assert len(await store.list_skills("user-1")) == 1

    @pytest.mark.asyncio
    async def test_raw_text_enriched(self, store):
        """본문만 있는 이력서는 키워드 추출로 스킬 채움"""
        facts = ResumeData(raw_text="I build APIs in Python with Docker and Redis.")

        outcome = await awaken(store, "user-1", facts)

        assert outcome.profile.resume_data.skills == ["Python", "Redis", "Docker"]
        assert outcome.profile.resume_data.languages == ["Python"]

    @pytest.mark.asyncio
    async def test_reawaken_higher_ai_rank_uses_ai_quest(self, store, mock_llm, sample_resume_data):
        """재각성 판정 랭크가 더 높으면 AI 퀘스트 사용"""
        await awaken(store, "user-1", sample_resume_data)
        profile = await store.get_profile("user-1")
        await store.save_profile(profile.with_changes(xp=180, rank=Rank.D))

        with patch(
            "app.domain.progression.awakening.request_awakening",
            AsyncMock(return_value=json.dumps(AI_AWAKENING)),
        ):
            outcome = await awaken(store, "user-1", sample_resume_data, llm=mock_llm)

        assert outcome.profile.rank == Rank.C
        assert outcome.profile.xp == 250
        assert outcome.profile.current_quest.title == "Design a rate limiter"
