import os

from langchain_core.messages import HumanMessage, SystemMessage
from langfuse.langchain import CallbackHandler

from app.core.config import settings
from app.core.exceptions import LLMError
from app.core.logging import get_logger
from app.domain.progression.prompts import (
    AWAKENING_HUMAN,
    AWAKENING_SYSTEM,
    NEXT_QUEST_HUMAN,
)
from app.domain.progression.quests import get_fallback_quest
from app.domain.progression.ranks import Rank
from app.domain.progression.schemas import ResumeData, Skill
from app.infra.llm.base import BaseLLMClient

logger = get_logger(__name__)

if settings.langfuse_public_key:
    os.environ["LANGFUSE_PUBLIC_KEY"] = settings.langfuse_public_key
if settings.langfuse_secret_key:
    os.environ["LANGFUSE_SECRET_KEY"] = settings.langfuse_secret_key
if settings.langfuse_base_url:
    os.environ["LANGFUSE_HOST"] = settings.langfuse_base_url


def get_langfuse_handler() -> CallbackHandler | None:
    """Langfuse 콜백 핸들러 반환"""
    if not settings.langfuse_public_key or not settings.langfuse_secret_key:
        return None

    return CallbackHandler()


def format_resume_for_prompt(data: ResumeData) -> str:
    """이력서/프로필 정보를 프롬프트용 텍스트로 포맷"""
    sections = [f"Source: {'GitHub Profile' if data.source == 'github' else 'Resume'}"]

    if data.skills:
        sections.append(f"Skills: {', '.join(data.skills)}")

    if data.languages:
        sections.append(f"Programming Languages: {', '.join(data.languages)}")

    if data.experience:
        sections.append("Experience:")
        for exp in data.experience:
            sections.append(f"- {exp.title} at {exp.company} ({exp.duration})")
            if exp.description:
                sections.append(f"  {exp.description}")

    if data.projects:
        sections.append("Projects:")
        for proj in data.projects:
            sections.append(f"- {proj.name}: {proj.description}")
            if proj.technologies:
                sections.append(f"  Technologies: {', '.join(proj.technologies)}")

    if data.education:
        sections.append("Education:")
        for edu in data.education:
            sections.append(f"- {edu.degree} from {edu.institution} ({edu.year})")

    return "\n".join(sections)


def format_skills_for_prompt(skills: list[Skill]) -> str:
    """스킬 목록을 프롬프트용 텍스트로 포맷"""
    if not skills:
        return "No skills assessed yet"
    return "\n".join(f"- {s.skill_name}: Level {s.level}/10" for s in skills)


def _message_text(content) -> str:
    """AIMessage.content는 문자열 또는 파트 리스트일 수 있음"""
    if isinstance(content, str):
        return content
    parts = []
    for part in content:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(part.get("text", ""))
    return "".join(parts)


async def complete(
    llm: BaseLLMClient,
    system: str,
    human: str,
    *,
    session_id: str | None = None,
    tags: list[str] | None = None,
) -> str:
    """시스템/사용자 메시지로 LLM 호출 후 텍스트 응답 반환

    Raises:
        LLMError: 호출 실패, 타임아웃, 빈 응답
    """
    langfuse_handler = get_langfuse_handler()
    config = {
        "callbacks": [langfuse_handler] if langfuse_handler else [],
        "metadata": {
            "langfuse_session_id": session_id,
            "langfuse_tags": tags or [],
        },
    }
    messages = [SystemMessage(content=system), HumanMessage(content=human)]

    try:
        response = await llm.get_chat_model().ainvoke(messages, config=config)
    except Exception as e:
        logger.warning(
            "LLM 호출 실패 provider=%s error=%s",
            llm.provider,
            type(e).__name__,
        )
        raise LLMError(str(e)) from e

    text = _message_text(response.content)
    if not text.strip():
        raise LLMError("빈 응답")

    logger.debug("LLM 응답 수신 provider=%s length=%d", llm.provider, len(text))
    return text


async def request_awakening(
    llm: BaseLLMClient,
    resume_data: ResumeData,
    session_id: str | None = None,
) -> str:
    """각성 결과 생성 요청. 원문 텍스트를 반환하며 파싱은 호출자 책임"""
    human = AWAKENING_HUMAN.format(profile_summary=format_resume_for_prompt(resume_data))
    return await complete(
        llm,
        AWAKENING_SYSTEM,
        human,
        session_id=session_id,
        tags=["awaken", resume_data.source],
    )


async def request_next_quest(
    llm: BaseLLMClient,
    rank: Rank,
    xp: int,
    completed_quests: list[str],
    goal: str,
    skills: list[Skill],
    session_id: str | None = None,
) -> str:
    """다음 퀘스트 생성 요청. 원문 텍스트를 반환하며 파싱은 호출자 책임"""
    template = get_fallback_quest(rank)
    human = NEXT_QUEST_HUMAN.format(
        rank=Rank(rank).value,
        xp=xp,
        completed_quests=", ".join(completed_quests) or "None",
        goal=goal,
        skills=format_skills_for_prompt(skills),
        xp_reward=template.xp_reward if template else 50,
    )
    return await complete(
        llm,
        AWAKENING_SYSTEM,
        human,
        session_id=session_id,
        tags=["quest", Rank(rank).value],
    )
