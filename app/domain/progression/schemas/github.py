from datetime import datetime

from pydantic import BaseModel


class RepoFact(BaseModel):
    """GitHub 레포지토리 검증 결과

    html_url은 GitHub가 돌려주는 정규 URL로, 중복 제출 판정 키로 사용한다.
    """

    name: str
    full_name: str
    description: str = ""
    html_url: str
    pushed_at: datetime
    created_at: datetime | None = None
    language: str = "Unknown"
    stargazers_count: int = 0
