from app.core.config import settings
from app.core.logging import get_logger
from app.infra.store.base import ProgressStore
from app.infra.store.memory import InMemoryStore
from app.infra.store.sql import SQLStore

logger = get_logger(__name__)


def create_store() -> ProgressStore:
    """DATABASE_URL이 있으면 SQL 저장소, 없으면 메모리 저장소 생성"""
    if settings.database_url:
        return SQLStore(settings.database_url, echo=settings.database_echo)

    logger.warning("DATABASE_URL 미설정, 메모리 저장소 사용 (재시작 시 데이터 유실)")
    return InMemoryStore()
