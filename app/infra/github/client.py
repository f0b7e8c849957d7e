import re

import httpx

from app.core.config import settings
from app.core.exceptions import GitHubAPIError, ValidationError, VerificationFailedError
from app.core.logging import get_logger
from app.domain.progression.schemas import ExperienceItem, ProjectItem, RepoFact, ResumeData

logger = get_logger(__name__)

GITHUB_API_BASE = "https://api.github.com"

GITHUB_URL_PATTERN = re.compile(r"github\.com/([a-zA-Z0-9_.-]+)/([a-zA-Z0-9_.-]+)")
SHORTHAND_PATTERN = re.compile(r"^([a-zA-Z0-9_.-]+)/([a-zA-Z0-9_.-]+)$")
USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,38})$")

# 비공개이거나 접근 불가한 레포에 GitHub가 돌려주는 상태 코드
NOT_ACCESSIBLE_STATUSES = frozenset({403, 404, 451})

PROFILE_REPO_LIMIT = 10
PROFILE_PROJECT_LIMIT = 5

_client = httpx.AsyncClient(timeout=settings.github_timeout)


def _get_headers(token: str | None = None) -> dict[str, str]:
    """GitHub API 요청 헤더 생성

    Args:
        token: GitHub 토큰, 없으면 설정값 사용

    Returns:
        HTTP 헤더 딕셔너리
    """
    headers = {"Accept": "application/vnd.github.v3+json"}
    token = token or settings.github_token
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


async def close_client():
    """httpx 클라이언트 종료"""
    await _client.aclose()


def parse_repo_url(repo_url: str) -> tuple[str, str]:
    """GitHub URL 또는 owner/repo 표기에서 owner와 repo 추출

    Args:
        repo_url: GitHub 레포지토리 URL

    Returns:
        owner, repo 튜플

    Raises:
        ValueError: 유효하지 않은 GitHub URL인 경우
    """
    repo_url = (repo_url or "").strip()
    match = GITHUB_URL_PATTERN.search(repo_url) or SHORTHAND_PATTERN.match(repo_url)
    if not match:
        raise ValueError(f"유효하지 않은 GitHub URL: {repo_url}")
    owner = match.group(1)
    repo = match.group(2).removesuffix(".git")
    if not repo:
        raise ValueError(f"유효하지 않은 GitHub URL: {repo_url}")
    return owner, repo


async def _get(url: str, params: dict | None = None) -> httpx.Response:
    """GET 요청. 전송 계층 오류는 GitHubAPIError로 변환"""
    try:
        return await _client.get(url, headers=_get_headers(), params=params)
    except httpx.TimeoutException as e:
        logger.warning("GitHub 요청 타임아웃 url=%s", url)
        raise GitHubAPIError("GitHub 요청 시간 초과") from e
    except httpx.RequestError as e:
        logger.warning("GitHub 요청 실패 url=%s error=%s", url, type(e).__name__)
        raise GitHubAPIError(str(e)) from e


async def get_repo(owner: str, repo: str) -> RepoFact | None:
    """레포지토리 정보 조회

    Returns:
        레포지토리 정보, 없거나 비공개면 None
    """
    response = await _get(f"{GITHUB_API_BASE}/repos/{owner}/{repo}")

    if response.status_code in NOT_ACCESSIBLE_STATUSES:
        logger.info("레포 접근 불가 repo=%s/%s status=%d", owner, repo, response.status_code)
        return None

    try:
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        logger.error("레포 조회 실패 repo=%s/%s status=%d", owner, repo, response.status_code)
        raise GitHubAPIError(f"HTTP {response.status_code}") from e

    data = response.json()
    return RepoFact(
        name=data["name"],
        full_name=data["full_name"],
        description=data.get("description") or "",
        html_url=data["html_url"],
        pushed_at=data.get("pushed_at") or data["created_at"],
        created_at=data.get("created_at"),
        language=data.get("language") or "Unknown",
        stargazers_count=data.get("stargazers_count", 0),
    )


async def verify_repo(repo_url: str) -> RepoFact:
    """제출된 레포지토리 URL 검증

    Raises:
        ValidationError: URL 형식 오류
        VerificationFailedError: 레포가 없거나 비공개
        GitHubAPIError: GitHub 호출 실패 (재시도 가능)
    """
    try:
        owner, repo = parse_repo_url(repo_url)
    except ValueError as e:
        raise ValidationError(
            "GitHub URL 형식이 올바르지 않습니다. https://github.com/owner/repo 형식을 사용하세요"
        ) from e

    fact = await get_repo(owner, repo)
    if fact is None:
        raise VerificationFailedError(f"{owner}/{repo}")

    logger.info("레포 검증 완료 repo=%s pushed_at=%s", fact.full_name, fact.pushed_at.isoformat())
    return fact


async def get_user_profile(username: str) -> ResumeData | None:
    """GitHub 사용자 프로필과 레포 목록으로 ResumeData 구성 (이력서 대체용)

    Returns:
        프로필 정보, 사용자가 없으면 None
    """
    if not USERNAME_PATTERN.match(username or ""):
        raise ValidationError(f"유효하지 않은 GitHub 사용자명: {username}")

    user_response = await _get(f"{GITHUB_API_BASE}/users/{username}")
    if user_response.status_code in NOT_ACCESSIBLE_STATUSES:
        logger.info("GitHub 사용자 없음 username=%s", username)
        return None
    if user_response.is_error:
        raise GitHubAPIError(f"HTTP {user_response.status_code}")
    user_data = user_response.json()

    repos_response = await _get(
        f"{GITHUB_API_BASE}/users/{username}/repos",
        params={"sort": "updated", "per_page": PROFILE_REPO_LIMIT},
    )
    repos = repos_response.json() if repos_response.is_success else []

    languages = list(dict.fromkeys(r["language"] for r in repos if r.get("language")))

    experience = []
    if user_data.get("company"):
        experience.append(
            ExperienceItem(
                title="Developer",
                company=user_data["company"],
                duration="Current",
                description=user_data.get("bio") or "",
            )
        )

    projects = [
        ProjectItem(
            name=r["name"],
            description=r.get("description") or "",
            technologies=[r["language"]] if r.get("language") else [],
            url=r.get("html_url"),
        )
        for r in repos[:PROFILE_PROJECT_LIMIT]
    ]

    logger.info(
        "GitHub 프로필 조회 완료 username=%s repos=%d languages=%d",
        username,
        len(repos),
        len(languages),
    )
    return ResumeData(
        source="github",
        skills=languages,
        experience=experience,
        projects=projects,
        languages=languages,
    )
