"""스킬 레벨 계산

이력서에서 얻은 기본 레벨과 활동으로 얻은 XP를 합쳐 최종 레벨(1-10)을 계산한다.
"""

from app.domain.progression.constants import (
    MAX_SKILL_LEVEL,
    MIN_SKILL_LEVEL,
    SKILL_NAMES,
    XP_PER_SKILL_LEVEL,
)
from app.domain.progression.schemas import ParsedSkill, Skill


def _clamp_level(level: int) -> int:
    return max(MIN_SKILL_LEVEL, min(MAX_SKILL_LEVEL, level))


def final_skill_level(base_level: int, earned_xp: int) -> int:
    """최종 레벨 = clamp(base_level + floor(earned_xp / 100), 1, 10)"""
    bonus = max(0, earned_xp) // XP_PER_SKILL_LEVEL
    return _clamp_level(base_level + bonus)


def build_skill(user_id: str, skill_name: str, base_level: int, earned_xp: int = 0) -> Skill:
    base_level = _clamp_level(base_level)
    return Skill(
        user_id=user_id,
        skill_name=skill_name,
        base_level=base_level,
        earned_xp=earned_xp,
        level=final_skill_level(base_level, earned_xp),
    )


def add_earned_xp(skill: Skill, xp: int) -> Skill:
    """활동 XP를 더하고 레벨 재계산. 레벨은 10에서 멈추지만 XP는 계속 누적된다"""
    if xp < 0:
        raise ValueError(f"XP는 음수일 수 없습니다: {xp}")
    return build_skill(skill.user_id, skill.skill_name, skill.base_level, skill.earned_xp + xp)


def normalize_parsed_skills(parsed: list[ParsedSkill]) -> list[ParsedSkill]:
    """정식 스킬 이름만 남기고 레벨을 1-10으로 보정. 같은 이름은 마지막 값 사용"""
    by_name: dict[str, ParsedSkill] = {}
    for skill in parsed:
        if skill.name not in SKILL_NAMES:
            continue
        by_name[skill.name] = skill.model_copy(update={"level": _clamp_level(skill.level)})
    return list(by_name.values())


def merge_skills(user_id: str, parsed: list[ParsedSkill], existing: list[Skill]) -> list[Skill]:
    """새 이력서 파싱 결과를 기존 스킬과 병합

    파싱된 스킬은 base_level만 교체하고 earned_xp는 그대로 유지한다.
    파싱 결과에 없는 기존 스킬은 건드리지 않는다 (삭제/초기화 없음).

    Returns:
        변경되거나 새로 생긴 스킬 목록
    """
    existing_by_name = {s.skill_name: s for s in existing}

    merged = []
    for new_skill in parsed:
        previous = existing_by_name.get(new_skill.name)
        earned_xp = previous.earned_xp if previous else 0
        merged.append(build_skill(user_id, new_skill.name, new_skill.level, earned_xp))

    return merged
