"""진행도 관련 상수

XP 보상, 스킬 목록, 입력 제한 값. 모두 프로세스 시작 시 한 번 로드되는 읽기 전용 값이다.
"""

# 퀘스트 완료 보상
QUEST_BASE_XP = 50
QUEST_RECENCY_BONUS_XP = 25
RECENCY_WINDOW_DAYS = 7

# 스킬 레벨
MIN_SKILL_LEVEL = 1
MAX_SKILL_LEVEL = 10
XP_PER_SKILL_LEVEL = 100

# 정식 스킬 이름 목록 (이력서 파싱 결과는 이 목록으로 필터링)
SKILL_NAMES = (
    "Frontend",
    "Backend",
    "Debugging",
    "DevOps",
    "Testing",
    "Database",
    "System Design",
)

# 앱 내 활동(챌린지)으로 XP를 얻을 수 있는 스킬
LEVELABLE_SKILLS = frozenset({"Debugging"})

# 이력서 내용과 무관하게 각성 시 항상 생성되는 스킬
BOOTSTRAP_SKILL = "Debugging"

# 목표
GOAL_MAX_LENGTH = 500
DEFAULT_GOAL = "Become a better developer"

# AI 프롬프트에 포함할 최근 완료 퀘스트 수
PROMPT_HISTORY_LIMIT = 10
