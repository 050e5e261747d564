"""테스트 인프라 — 인메모리 SQLite DB, 세션, httpx 클라이언트 픽스처.

Test infrastructure — In-memory SQLite DB, session, and httpx client fixtures.
Each test gets a fresh database: the engine is created per test with a
StaticPool so every connection sees the same in-memory schema.
Fixture data is committed so that a service-level rollback only discards
the work of the operation under test.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

from collections.abc import AsyncGenerator  # noqa: E402
from datetime import datetime, timezone  # noqa: E402

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models import *  # noqa: F401,F403,E402 — register all models with metadata
from app.models.issue import Issue, IssueStatusHistory, STATUS_REPORTED  # noqa: E402
from app.models.user import ROLE_CARETAKER, ROLE_MANAGEMENT, ROLE_STUDENT, User  # noqa: E402
from app.utils.jwt import create_access_token  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite://"


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진. 테스트마다 새 스키마를 생성합니다."""
    eng = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트에 격리된 DB 세션을 제공합니다."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — DB 세션을 오버라이드합니다."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
async def _make_user(db: AsyncSession, name: str, role: str) -> User:
    user = User(name=name, email=f"{name.lower()}@hostel.test", role=role)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def alice(db: AsyncSession) -> User:
    """학생 사용자 alice."""
    return await _make_user(db, "Alice", ROLE_STUDENT)


@pytest_asyncio.fixture
async def bob(db: AsyncSession) -> User:
    """학생 사용자 bob."""
    return await _make_user(db, "Bob", ROLE_STUDENT)


@pytest_asyncio.fixture
async def caretaker(db: AsyncSession) -> User:
    """관리인 사용자."""
    return await _make_user(db, "Carol", ROLE_CARETAKER)


@pytest_asyncio.fixture
async def manager(db: AsyncSession) -> User:
    """운영진 사용자."""
    return await _make_user(db, "Morgan", ROLE_MANAGEMENT)


async def make_issue(
    db: AsyncSession,
    reporter: User,
    title: str = "Leaking tap",
    status: str = STATUS_REPORTED,
    **fields,
) -> Issue:
    """이슈를 생성하고 현재 상태까지의 이력을 기록합니다.

    Create a committed issue whose history ends in ``status``.
    """
    issue = Issue(
        title=title,
        description=fields.pop("description", "Water everywhere"),
        category=fields.pop("category", "Plumbing"),
        reported_by=reporter.id,
        status=status,
        **fields,
    )
    db.add(issue)
    await db.flush()
    db.add(IssueStatusHistory(
        issue_id=issue.id,
        status=STATUS_REPORTED,
        timestamp=datetime.now(timezone.utc),
        changed_by=reporter.id,
    ))
    if status != STATUS_REPORTED:
        db.add(IssueStatusHistory(
            issue_id=issue.id,
            status=status,
            timestamp=datetime.now(timezone.utc),
        ))
    await db.commit()
    await db.refresh(issue)
    return issue


def make_token(user: User) -> str:
    """테스트용 JWT 액세스 토큰을 생성합니다."""
    return create_access_token({"sub": str(user.id), "role": user.role})


def auth_header(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user)}"}
