"""랭크 테이블

E(최하) -> D -> C -> B -> A(최상, 종착) 순서. 비교는 항상 RANK_ORDER 인덱스로 한다.
"""

from enum import Enum


class Rank(str, Enum):
    E = "E"
    D = "D"
    C = "C"
    B = "B"
    A = "A"


RANK_ORDER: tuple[Rank, ...] = (Rank.E, Rank.D, Rank.C, Rank.B, Rank.A)

RANK_THRESHOLDS: dict[Rank, int] = {
    Rank.E: 0,
    Rank.D: 100,
    Rank.C: 250,
    Rank.B: 500,
    Rank.A: 1000,
}

TERMINAL_RANK = RANK_ORDER[-1]


def rank_index(rank: Rank) -> int:
    return RANK_ORDER.index(Rank(rank))


def is_higher(rank: Rank, other: Rank) -> bool:
    """rank가 other보다 높은 랭크인지"""
    return rank_index(rank) > rank_index(other)


def is_terminal(rank: Rank) -> bool:
    return Rank(rank) == TERMINAL_RANK


def next_rank(rank: Rank) -> Rank | None:
    """다음 랭크 반환, 종착 랭크면 None"""
    idx = rank_index(rank)
    if idx == len(RANK_ORDER) - 1:
        return None
    return RANK_ORDER[idx + 1]


def rank_from_xp(xp: int) -> Rank:
    """누적 XP로 도달 가능한 가장 높은 랭크 반환

    임계값과 같으면 해당 랭크로 인정한다. 음수 XP는 0으로 취급.
    """
    xp = max(0, xp)
    result = RANK_ORDER[0]
    for rank in RANK_ORDER:
        if xp >= RANK_THRESHOLDS[rank]:
            result = rank
    return result


def xp_to_next_rank(rank: Rank) -> int | None:
    """다음 랭크의 XP 임계값, 종착 랭크면 None"""
    upcoming = next_rank(rank)
    if upcoming is None:
        return None
    return RANK_THRESHOLDS[upcoming]
