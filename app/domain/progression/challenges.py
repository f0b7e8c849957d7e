"""디버깅 던전 챌린지 테이블

코드 실행과 정답 비교는 클라이언트에서 한다. 서버는 챌린지 id로 보상을 찾기만 하며,
요청 본문의 보상 값은 받지 않는다.
"""

from types import MappingProxyType

from app.domain.progression.schemas import Challenge

_DEBUGGING = "Debugging"

_CHALLENGES = (
    Challenge(
        id="off-by-one",
        skill_name=_DEBUGGING,
        title="The Off-By-One Error",
        description=(
            "This function should return the sum of all numbers from 1 to n (inclusive), "
            "but something is wrong."
        ),
        hint="Check the loop condition carefully. Should it be < or <=?",
        difficulty="easy",
        xp_reward=10,
    ),
    Challenge(
        id="array-mutation",
        skill_name=_DEBUGGING,
        title="The Mutating Array",
        description=(
            "This function should double all numbers in an array without modifying "
            "the original array, but it has a bug."
        ),
        hint="Assigning an array to a new variable doesn't copy it. How do you properly clone an array?",
        difficulty="easy",
        xp_reward=10,
    ),
    Challenge(
        id="async-await",
        skill_name=_DEBUGGING,
        title="The Missing Await",
        description="This async function should wait for data to load, but the timing is off.",
        hint="When calling an async function, you might need to wait for it to complete.",
        difficulty="medium",
        xp_reward=15,
    ),
    Challenge(
        id="scope-closure",
        skill_name=_DEBUGGING,
        title="The Closure Trap",
        description=(
            "This function creates an array of functions that should return their index, "
            "but they all return the same value."
        ),
        hint="The problem is with variable scoping. Consider the difference between var and let.",
        difficulty="medium",
        xp_reward=15,
    ),
    Challenge(
        id="type-coercion",
        skill_name=_DEBUGGING,
        title="The Type Confusion",
        description="This function should sum numbers from form inputs, but returns an unexpected result.",
        hint="Form inputs are strings. What happens when you use + with strings?",
        difficulty="easy",
        xp_reward=10,
    ),
    Challenge(
        id="null-check",
        skill_name=_DEBUGGING,
        title="The Null Reference",
        description="This function should safely get a nested property, but crashes on null values.",
        hint="What happens when you try to access a property of null?",
        difficulty="medium",
        xp_reward=15,
    ),
    Challenge(
        id="array-filter",
        skill_name=_DEBUGGING,
        title="The Truthy Filter",
        description="This function should remove all falsy values from an array, but it doesn't work correctly.",
        hint=(
            "The filter callback should return true or false, not the item itself. "
            "Or use an even simpler approach."
        ),
        difficulty="easy",
        xp_reward=10,
    ),
    Challenge(
        id="object-reference",
        skill_name=_DEBUGGING,
        title="The Shared State",
        description="This function creates multiple users with default settings, but changes to one affect all.",
        hint="Objects are passed by reference. Each user should have their own settings object.",
        difficulty="medium",
        xp_reward=15,
    ),
    Challenge(
        id="reduce-init",
        skill_name=_DEBUGGING,
        title="The Missing Initial Value",
        description="This function should count occurrences of each item, but sometimes crashes.",
        hint="reduce() without an initial value uses the first element. What should the initial value be?",
        difficulty="medium",
        xp_reward=15,
    ),
    Challenge(
        id="promise-all",
        skill_name=_DEBUGGING,
        title="The Race Condition",
        description=(
            "This function should process items in parallel and return results in order, "
            "but the order is wrong."
        ),
        hint="forEach doesn't wait for async operations. Consider using Promise.all with map.",
        difficulty="hard",
        xp_reward=20,
    ),
)

CHALLENGES = MappingProxyType({c.id: c for c in _CHALLENGES})


def get_challenge(challenge_id: str) -> Challenge | None:
    return CHALLENGES.get(challenge_id)


def list_challenges(skill_name: str | None = None) -> list[Challenge]:
    """챌린지 목록. skill_name을 주면 해당 스킬만"""
    return [c for c in _CHALLENGES if skill_name is None or c.skill_name == skill_name]
