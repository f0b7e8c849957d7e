import json
import re

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.core.logging import get_logger
from app.domain.progression.schemas import (
    AwakeningResult,
    Quest,
    QuestGenerationOutput,
    ResumeData,
)

logger = get_logger(__name__)

# 첫 '{'부터 마지막 '}'까지 greedy 매칭. 앞뒤 설명문이나 코드펜스는 무시된다
JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")

SKILL_KEYWORDS = (
    "JavaScript", "TypeScript", "Python", "Java", "C++", "C#", "Go", "Rust",
    "React", "Vue", "Angular", "Node.js", "Express", "Next.js", "Django", "Flask",
    "PostgreSQL", "MySQL", "MongoDB", "Redis", "GraphQL", "REST",
    "AWS", "Azure", "GCP", "Docker", "Kubernetes", "CI/CD",
    "Git", "Linux", "Agile", "Scrum",
    "Machine Learning", "AI", "Data Science", "TensorFlow", "PyTorch",
)  # fmt: skip

LANGUAGE_KEYWORDS = (
    "JavaScript", "TypeScript", "Python", "Java", "C++", "C#", "Go", "Rust",
    "Ruby", "PHP", "Swift", "Kotlin", "Scala", "R", "MATLAB",
)  # fmt: skip


def parse_ai_response(text: str | None) -> dict | None:
    """LLM 텍스트 응답에서 JSON 객체 하나를 추출

    예외를 던지지 않는다. None이면 호출자가 폴백을 사용해야 한다.
    """
    if not text:
        return None

    match = JSON_OBJECT_PATTERN.search(text)
    if not match:
        logger.warning("AI 응답에 JSON 객체 없음 length=%d", len(text))
        return None

    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logger.warning("AI 응답 JSON 파싱 실패 error=%s", e)
        return None

    if not isinstance(parsed, dict):
        return None
    return parsed


def _validate(model: type[BaseModel], data: dict | None) -> BaseModel | None:
    if data is None:
        return None
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        logger.warning(
            "AI 출력 검증 실패 model=%s errors=%s",
            model.__name__,
            [".".join(str(p) for p in err["loc"]) for err in e.errors()],
        )
        return None


def parse_awakening_result(text: str | None) -> AwakeningResult | None:
    """각성 응답 파싱. 필수 필드가 하나라도 빠지면 None"""
    return _validate(AwakeningResult, parse_ai_response(text))


def parse_quest_result(text: str | None) -> Quest | None:
    """다음 퀘스트 응답 파싱. {"quest": {...}} 또는 퀘스트 객체 자체를 허용"""
    data = parse_ai_response(text)
    if data is not None and "quest" not in data:
        data = {"quest": data}
    output = _validate(QuestGenerationOutput, data)
    return output.quest if output else None


def _find_keywords(text: str, keywords: tuple[str, ...]) -> list[str]:
    found = []
    for keyword in keywords:
        pattern = rf"(?<![\w+#.]){re.escape(keyword)}(?![\w+#])"
        if re.search(pattern, text, re.IGNORECASE):
            found.append(keyword)
    return found


def extract_skills(text: str) -> list[str]:
    """이력서 본문에서 기술 키워드 추출"""
    return _find_keywords(text, SKILL_KEYWORDS)


def extract_languages(text: str) -> list[str]:
    """이력서 본문에서 프로그래밍 언어 추출"""
    return _find_keywords(text, LANGUAGE_KEYWORDS)


def enrich_resume_data(data: ResumeData) -> ResumeData:
    """본문만 있고 스킬/언어가 비어 있으면 키워드 추출로 채움"""
    if not data.raw_text:
        return data

    update = {}
    if not data.skills:
        update["skills"] = extract_skills(data.raw_text)
    if not data.languages:
        update["languages"] = extract_languages(data.raw_text)

    if update:
        logger.info(
            "이력서 키워드 추출 skills=%d languages=%d",
            len(update.get("skills", [])),
            len(update.get("languages", [])),
        )
        return data.model_copy(update=update)
    return data
