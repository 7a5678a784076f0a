"""Shared fixtures: an in-memory SQLite database seeded with a small catalog."""

from typing import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from degreeplan.core.db import get_db
from degreeplan.core.security import create_access_token
from degreeplan.models import Base, Course, User
from degreeplan.models.plan_enums import UserRole

STUDENT_ID = 1
ADVISOR_ID = 2
OTHER_STUDENT_ID = 3

# Eight 4-credit courses make exactly the 32-credit minimum.
CORE_COURSES = [f"CS20{i}" for i in range(1, 9)]
THREE_CREDIT_COURSE = "CS209"

CATALOG = [
    # (code, title, credits, restriction)
    ("CS101", "Intro to Computer Science I", 4, 0),
    ("CS102", "Intro to Computer Science II", 3, 0),
    *[(code, f"Core course {code}", 4, 0) for code in CORE_COURSES],
    (THREE_CREDIT_COURSE, "Three credit elective", 3, 0),
    ("REQ100", "Required orientation", 4, 1),
    ("GRD500", "Graduate seminar", 4, 2),
    ("PRO400", "Professional/technical course", 4, 3),
]


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(bind=engine, expire_on_commit=False)
    async with session_factory() as session:
        session.add_all([
            User(user_id=STUDENT_ID, first_name="Ada", last_name="Student", email="ada@example.edu", role=UserRole.STUDENT),
            User(user_id=ADVISOR_ID, first_name="Grace", last_name="Advisor", email="grace@example.edu", role=UserRole.ADVISOR),
            User(user_id=OTHER_STUDENT_ID, first_name="Alan", last_name="Student", email="alan@example.edu", role=UserRole.STUDENT),
        ])
        session.add_all([
            Course(course_code=code, title=title, credits=credits, restriction=restriction)
            for code, title, credits, restriction in CATALOG
        ])
        await session.commit()
        yield session


@pytest_asyncio.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    from degreeplan.main import app

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    token = create_access_token({"sub": str(ADVISOR_ID)})
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        headers={"Authorization": f"Bearer {token}"},
    ) as ac:
        yield ac
    app.dependency_overrides.clear()
