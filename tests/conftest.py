"""테스트 공통 fixture"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt

from app.core.limiter import limiter
from app.domain.progression.schemas import ParsedSkill, RepoFact, ResumeData
from app.infra.store import InMemoryStore
from app.main import app

TEST_JWT_SECRET = "test-secret"
TEST_USER_ID = "user-1"
NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    """테스트 기준 시각"""
    return NOW


@pytest.fixture
def store() -> InMemoryStore:
    """인메모리 저장소"""
    return InMemoryStore()


@pytest.fixture
def make_repo_fact():
    """RepoFact 생성 helper"""

    def _create(name: str = "testrepo", pushed_days_ago: float = 2, owner: str = "testuser") -> RepoFact:
        return RepoFact(
            name=name,
            full_name=f"{owner}/{name}",
            description="테스트 레포지토리",
            html_url=f"https://github.com/{owner}/{name}",
            pushed_at=NOW - timedelta(days=pushed_days_ago),
            created_at=NOW - timedelta(days=30),
            language="Python",
        )

    return _create


@pytest.fixture
def sample_resume_data() -> ResumeData:
    """테스트용 이력서 데이터"""
    return ResumeData(
        source="resume",
        raw_text="Backend developer with 3 years of Python, FastAPI and PostgreSQL experience.",
        skills=["Python", "PostgreSQL"],
        languages=["Python"],
    )


@pytest.fixture
def sample_parsed_skills() -> list[ParsedSkill]:
    """테스트용 이력서 스킬 파싱 결과"""
    return [
        ParsedSkill(name="Backend", level=6),
        ParsedSkill(name="Debugging", level=3),
        ParsedSkill(name="Database", level=4),
    ]


@pytest.fixture
def mock_llm():
    """LLM 클라이언트 mock"""
    llm = MagicMock()
    llm.provider = "openai"
    return llm


@pytest.fixture
def make_token():
    """테스트용 JWT 생성 helper"""

    def _create(sub: str | None = TEST_USER_ID, secret: str = TEST_JWT_SECRET, **claims) -> str:
        payload = {"aud": "authenticated", **claims}
        if sub is not None:
            payload["sub"] = sub
        return jwt.encode(payload, secret, algorithm="HS256")

    return _create


@pytest.fixture
def auth_settings():
    """JWT 검증 설정 patch"""
    with patch("app.core.security.settings") as mock:
        mock.auth_jwt_secret = TEST_JWT_SECRET
        mock.auth_jwt_algorithm = "HS256"
        mock.auth_jwt_audience = "authenticated"
        yield mock


@pytest.fixture
def auth_headers(make_token, auth_settings) -> dict[str, str]:
    """인증 헤더"""
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def api_store(store):
    """앱 상태에 저장소 주입, 요청 제한 비활성화"""
    app.state.store = store
    limiter.enabled = False
    yield store
    limiter.enabled = True


@pytest.fixture
def no_llm():
    """LLM 미설정 상태"""
    with patch("app.api.deps.get_llm_client", return_value=None) as mock:
        yield mock


@pytest.fixture
def async_client():
    """비동기 HTTP 클라이언트"""
    transport = ASGITransport(app=app)
    return AsyncClient(transport=transport, base_url="http://test")


@pytest.fixture
def make_github_response():
    """httpx.Response 생성 helper (raise_for_status 사용 가능)"""

    def _create(status_code: int, json_data=None, url: str = "https://api.github.com/test") -> httpx.Response:
        return httpx.Response(
            status_code,
            json=json_data if json_data is not None else {},
            request=httpx.Request("GET", url),
        )

    return _create
