"""XP 계산 엔진

I/O 없는 순수 함수만 둔다.
"""

from datetime import datetime, timedelta, timezone

from app.domain.progression.constants import (
    QUEST_BASE_XP,
    QUEST_RECENCY_BONUS_XP,
    RECENCY_WINDOW_DAYS,
)
from app.domain.progression.ranks import (
    RANK_THRESHOLDS,
    Rank,
    is_higher,
    next_rank,
    rank_from_xp,
)
from app.domain.progression.schemas import QuestXP, XPGain


def progress_percent(xp: int, rank: Rank) -> int:
    """현재 랭크 구간에서 다음 랭크까지의 진행률 (0-100)"""
    upcoming = next_rank(rank)
    if upcoming is None:
        return 100

    current_threshold = RANK_THRESHOLDS[Rank(rank)]
    span = RANK_THRESHOLDS[upcoming] - current_threshold
    percent = (100 * (xp - current_threshold)) // span
    return max(0, min(100, percent))


def apply_xp_gain(current_xp: int, current_rank: Rank, gain: int) -> XPGain:
    """XP 획득 적용 결과 계산

    new_rank는 랭크업이 발생한 경우에만 채워진다. None이면 호출자는 기존 랭크를 유지한다.
    """
    if gain < 0:
        raise ValueError(f"XP 획득량은 음수일 수 없습니다: {gain}")

    new_total = current_xp + gain
    candidate = rank_from_xp(new_total)
    rank_up = is_higher(candidate, current_rank)

    return XPGain(
        gained_xp=gain,
        new_total=new_total,
        rank_up=rank_up,
        new_rank=candidate if rank_up else None,
    )


def quest_completion_xp(recently_pushed: bool) -> QuestXP:
    """퀘스트 완료 보상 계산 (기본 50 + 최근 푸시 보너스 25)"""
    recency_bonus = QUEST_RECENCY_BONUS_XP if recently_pushed else 0
    return QuestXP(
        base_xp=QUEST_BASE_XP,
        recency_bonus=recency_bonus,
        total_xp=QUEST_BASE_XP + recency_bonus,
    )


def is_recently_pushed(pushed_at: datetime, now: datetime | None = None) -> bool:
    """마지막 푸시가 최근 7일 이내인지 (now - 7일 시점은 포함하지 않음)"""
    if now is None:
        now = datetime.now(timezone.utc)
    if pushed_at.tzinfo is None:
        pushed_at = pushed_at.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return pushed_at > now - timedelta(days=RECENCY_WINDOW_DAYS)
