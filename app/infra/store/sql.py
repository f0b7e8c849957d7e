from datetime import datetime

from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    case,
    literal,
    select,
    update,
)
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func

from app.core.exceptions import (
    ConcurrentUpdateError,
    CustomException,
    DuplicateSubmissionError,
    PersistenceError,
    ProfileNotFoundError,
)
from app.core.logging import get_logger
from app.domain.progression.constants import MAX_SKILL_LEVEL, MIN_SKILL_LEVEL, XP_PER_SKILL_LEVEL
from app.domain.progression.schemas import ParsedSkill, QuestHistoryRecord, Skill, UserProfile
from app.domain.progression.skills import build_skill
from app.infra.store.base import ProgressStore

logger = get_logger(__name__)


class Base(DeclarativeBase):
    pass


class ProfileRow(Base):
    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    username: Mapped[str | None] = mapped_column(String(255))
    avatar_url: Mapped[str | None] = mapped_column(String(500))
    xp: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    rank: Mapped[str] = mapped_column(String(1), default="E", nullable=False)
    current_quest: Mapped[dict | None] = mapped_column(JSON)
    goal: Mapped[str | None] = mapped_column(String(500))
    resume_data: Mapped[dict | None] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class QuestHistoryRow(Base):
    __tablename__ = "quest_history"
    __table_args__ = (UniqueConstraint("user_id", "repo_url", name="uq_quest_history_user_repo"),)

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("profiles.id", ondelete="CASCADE"), index=True, nullable=False
    )
    quest_title: Mapped[str | None] = mapped_column(String(255))
    quest_description: Mapped[str | None] = mapped_column(Text)
    repo_url: Mapped[str] = mapped_column(String(500), nullable=False)
    xp_earned: Mapped[int] = mapped_column(Integer, nullable=False)
    completed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class SkillRow(Base):
    __tablename__ = "skills"
    __table_args__ = (UniqueConstraint("user_id", "skill_name", name="uq_skills_user_name"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("profiles.id", ondelete="CASCADE"), index=True, nullable=False
    )
    skill_name: Mapped[str] = mapped_column(String(64), nullable=False)
    base_level: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    earned_xp: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    level: Mapped[int] = mapped_column(Integer, default=1, nullable=False)


def normalize_database_url(url: str) -> str:
    """postgres:// 같은 레거시 URL을 async 드라이버 URL로 변환"""
    url = url.strip()
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+asyncpg://", 1)
    elif url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    elif url.startswith("sqlite:///"):
        url = url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    return url


def _profile_values(profile: UserProfile) -> dict:
    return {
        "username": profile.username,
        "avatar_url": profile.avatar_url,
        "xp": profile.xp,
        "rank": profile.rank.value,
        "current_quest": profile.current_quest.model_dump(mode="json") if profile.current_quest else None,
        "goal": profile.goal,
        "resume_data": profile.resume_data.model_dump(mode="json") if profile.resume_data else None,
    }


def _progress_values(profile: UserProfile) -> dict:
    """commit_progress가 쓰는 컬럼. goal은 update_goal만 변경한다"""
    values = _profile_values(profile)
    del values["goal"]
    return values


def _skill_level(base_level, earned_xp):
    """final_skill_level의 SQL 표현. 저장된 값으로 계산하도록 컬럼 식을 받는다"""
    level = base_level + earned_xp // XP_PER_SKILL_LEVEL
    return case((level > MAX_SKILL_LEVEL, MAX_SKILL_LEVEL), else_=level)


def _to_profile(row: ProfileRow) -> UserProfile:
    return UserProfile(
        id=row.id,
        username=row.username,
        avatar_url=row.avatar_url,
        xp=row.xp,
        rank=row.rank,
        current_quest=row.current_quest,
        goal=row.goal,
        resume_data=row.resume_data,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _to_history(row: QuestHistoryRow) -> QuestHistoryRecord:
    return QuestHistoryRecord(
        id=row.id,
        user_id=row.user_id,
        quest_title=row.quest_title,
        quest_description=row.quest_description,
        repo_url=row.repo_url,
        xp_earned=row.xp_earned,
        completed_at=row.completed_at,
    )


def _to_skill(row: SkillRow) -> Skill:
    return Skill(
        user_id=row.user_id,
        skill_name=row.skill_name,
        base_level=row.base_level,
        earned_xp=row.earned_xp,
        level=row.level,
    )


class SQLStore(ProgressStore):
    """SQLAlchemy async 저장소 (SQLite/aiosqlite, PostgreSQL/asyncpg)"""

    def __init__(self, database_url: str, echo: bool = False):
        url = normalize_database_url(database_url)
        connect_args = {}
        if url.startswith("postgresql+asyncpg"):
            # PgBouncer(transaction mode) 환경에서는 prepared statement 캐시를 끈다
            connect_args = {"statement_cache_size": 0}

        self._engine = create_async_engine(url, echo=echo, pool_pre_ping=True, connect_args=connect_args)
        self._session_maker = async_sessionmaker(self._engine, class_=AsyncSession, expire_on_commit=False)
        logger.info("SQL 저장소 초기화 backend=%s", self._engine.url.get_backend_name())

    async def init(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        await self._engine.dispose()

    async def get_profile(self, user_id: str) -> UserProfile | None:
        try:
            async with self._session_maker() as session:
                row = await session.get(ProfileRow, user_id)
                return _to_profile(row) if row else None
        except SQLAlchemyError as e:
            raise PersistenceError(str(e)) from e

    async def save_profile(self, profile: UserProfile, skill_xp: dict[str, int] | None = None) -> UserProfile:
        try:
            async with self._session_maker() as session:
                async with session.begin():
                    row = await session.get(ProfileRow, profile.id)
                    if row is None:
                        row = ProfileRow(id=profile.id, **_profile_values(profile))
                        session.add(row)
                    else:
                        for key, value in _profile_values(profile).items():
                            setattr(row, key, value)
                    await session.flush()
                    for skill_name, xp in (skill_xp or {}).items():
                        await self._add_skill_xp(session, profile.id, skill_name, xp)
                await session.refresh(row)
                return _to_profile(row)
        except SQLAlchemyError as e:
            logger.error("프로필 저장 실패 user_id=%s error=%s", profile.id, e)
            raise PersistenceError(str(e)) from e

    async def commit_progress(
        self,
        profile: UserProfile,
        *,
        expected_xp: int,
        history: QuestHistoryRecord | None = None,
        skill_xp: dict[str, int] | None = None,
    ) -> UserProfile:
        try:
            async with self._session_maker() as session:
                async with session.begin():
                    result = await session.execute(
                        update(ProfileRow)
                        .where(ProfileRow.id == profile.id, ProfileRow.xp == expected_xp)
                        .values(**_progress_values(profile), updated_at=func.now())
                        .execution_options(synchronize_session=False)
                    )
                    if result.rowcount == 0:
                        exists = await session.scalar(select(ProfileRow.id).where(ProfileRow.id == profile.id))
                        if exists is None:
                            raise ProfileNotFoundError(profile.id)
                        raise ConcurrentUpdateError(f"expected_xp={expected_xp}")

                    if history is not None:
                        session.add(
                            QuestHistoryRow(
                                id=history.id,
                                user_id=history.user_id,
                                quest_title=history.quest_title,
                                quest_description=history.quest_description,
                                repo_url=history.repo_url,
                                xp_earned=history.xp_earned,
                                completed_at=history.completed_at,
                            )
                        )
                        try:
                            await session.flush()
                        except IntegrityError as e:
                            raise DuplicateSubmissionError(history.repo_url) from e

                    for skill_name, xp in (skill_xp or {}).items():
                        await self._add_skill_xp(session, profile.id, skill_name, xp)

                row = await session.get(ProfileRow, profile.id, populate_existing=True)
                return _to_profile(row)
        except CustomException:
            raise
        except SQLAlchemyError as e:
            logger.error("진행도 커밋 실패 user_id=%s error=%s", profile.id, e)
            raise PersistenceError(str(e)) from e

    async def update_goal(self, user_id: str, goal: str | None) -> UserProfile | None:
        try:
            async with self._session_maker() as session:
                async with session.begin():
                    row = await session.get(ProfileRow, user_id)
                    if row is None:
                        return None
                    row.goal = goal
                await session.refresh(row)
                return _to_profile(row)
        except SQLAlchemyError as e:
            raise PersistenceError(str(e)) from e

    async def has_submission(self, user_id: str, repo_url: str) -> bool:
        try:
            async with self._session_maker() as session:
                found = await session.scalar(
                    select(QuestHistoryRow.id).where(
                        QuestHistoryRow.user_id == user_id,
                        QuestHistoryRow.repo_url == repo_url,
                    )
                )
                return found is not None
        except SQLAlchemyError as e:
            raise PersistenceError(str(e)) from e

    async def list_history(self, user_id: str) -> list[QuestHistoryRecord]:
        try:
            async with self._session_maker() as session:
                rows = await session.scalars(
                    select(QuestHistoryRow)
                    .where(QuestHistoryRow.user_id == user_id)
                    .order_by(QuestHistoryRow.completed_at)
                )
                return [_to_history(row) for row in rows]
        except SQLAlchemyError as e:
            raise PersistenceError(str(e)) from e

    async def list_skills(self, user_id: str) -> list[Skill]:
        try:
            async with self._session_maker() as session:
                rows = await session.scalars(
                    select(SkillRow).where(SkillRow.user_id == user_id).order_by(SkillRow.id)
                )
                return [_to_skill(row) for row in rows]
        except SQLAlchemyError as e:
            raise PersistenceError(str(e)) from e

    async def merge_resume_skills(self, user_id: str, parsed: list[ParsedSkill]) -> list[Skill]:
        try:
            async with self._session_maker() as session:
                async with session.begin():
                    for item in parsed:
                        await self._set_base_level(session, user_id, item.name, item.level)
        except CustomException:
            raise
        except SQLAlchemyError as e:
            logger.error("이력서 스킬 반영 실패 user_id=%s error=%s", user_id, e)
            raise PersistenceError(str(e)) from e
        return await self.list_skills(user_id)

    async def _add_skill_xp(self, session: AsyncSession, user_id: str, skill_name: str, xp: int) -> None:
        result = await session.execute(
            update(SkillRow)
            .where(SkillRow.user_id == user_id, SkillRow.skill_name == skill_name)
            .values(
                earned_xp=SkillRow.earned_xp + xp,
                level=_skill_level(SkillRow.base_level, SkillRow.earned_xp + xp),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await self._insert_skill(session, build_skill(user_id, skill_name, MIN_SKILL_LEVEL, xp))

    async def _set_base_level(self, session: AsyncSession, user_id: str, skill_name: str, base_level: int) -> None:
        skill = build_skill(user_id, skill_name, base_level)
        result = await session.execute(
            update(SkillRow)
            .where(SkillRow.user_id == user_id, SkillRow.skill_name == skill_name)
            .values(
                base_level=skill.base_level,
                level=_skill_level(literal(skill.base_level), SkillRow.earned_xp),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await self._insert_skill(session, skill)

    async def _insert_skill(self, session: AsyncSession, skill: Skill) -> None:
        session.add(
            SkillRow(
                user_id=skill.user_id,
                skill_name=skill.skill_name,
                base_level=skill.base_level,
                earned_xp=skill.earned_xp,
                level=skill.level,
            )
        )
        try:
            await session.flush()
        except IntegrityError as e:
            # 같은 스킬 행을 다른 요청이 먼저 만든 경우
            raise ConcurrentUpdateError(f"skill={skill.skill_name}") from e
