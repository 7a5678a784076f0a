"""Seed database with a demo catalog and demo users."""

import asyncio

from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from degreeplan.core.config import settings
from degreeplan.core.db import _ensure_async_url
from degreeplan.core.security import create_access_token
from degreeplan.models.models import Course, User
from degreeplan.models.plan_enums import UserRole


COURSES = [
    # (code, title, credits, restriction)
    ("CS161", "Introduction to Computer Science I", 4, 1),
    ("CS162", "Introduction to Computer Science II", 4, 1),
    ("CS290", "Web Development", 4, 0),
    ("CS325", "Analysis of Algorithms", 4, 0),
    ("CS340", "Introduction to Databases", 4, 0),
    ("CS344", "Operating Systems I", 4, 0),
    ("CS361", "Software Engineering I", 4, 0),
    ("CS362", "Software Engineering II", 4, 0),
    ("CS372", "Introduction to Computer Networks", 4, 0),
    ("CS381", "Programming Language Fundamentals", 4, 0),
    ("CS475", "Introduction to Parallel Programming", 4, 0),
    ("CS492", "Mobile Software Development", 4, 0),
    ("MTH231", "Elements of Discrete Mathematics", 4, 0),
    ("WR327", "Technical Writing", 3, 0),
    ("CS519", "Special Topics (Graduate)", 4, 2),
    ("ENGR391", "Engineering Economy", 3, 3),
]

USERS = [
    ("Ada", "Student", "student@example.edu", UserRole.STUDENT),
    ("Grace", "Advisor", "advisor@example.edu", UserRole.ADVISOR),
    ("Alan", "Head", "head.advisor@example.edu", UserRole.HEAD_ADVISOR),
]


async def seed_courses(session: AsyncSession) -> None:
    """Create or update catalog courses."""
    for code, title, credits, restriction in COURSES:
        result = await session.execute(select(Course).where(Course.course_code == code))
        existing = result.scalar_one_or_none()

        if existing:
            existing.title = title
            existing.credits = credits
            existing.restriction = restriction
            print(f"✓ Updated course: {code}")
        else:
            session.add(Course(course_code=code, title=title, credits=credits, restriction=restriction))
            print(f"✓ Created course: {code}")

    await session.commit()


async def seed_users(session: AsyncSession) -> None:
    """Create demo users and print a bearer token for each."""
    for first_name, last_name, email, role in USERS:
        result = await session.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()

        if user is None:
            user = User(first_name=first_name, last_name=last_name, email=email, role=role)
            session.add(user)
            await session.flush()
            print(f"✓ Created user: {email} ({role.value})")
        else:
            print(f"✓ User already exists: {email}")

        token = create_access_token({"sub": str(user.user_id)})
        print(f"  token for user {user.user_id}: {token}")

    await session.commit()


async def main() -> None:
    """Run all seed operations."""
    print("🌱 Seeding database...")

    engine = create_async_engine(_ensure_async_url(settings.DATABASE_URL), echo=False)
    async_session = async_sessionmaker(engine, expire_on_commit=False)

    async with async_session() as session:
        await seed_courses(session)
        await seed_users(session)

    await engine.dispose()

    print("✅ Database seeding completed!")


if __name__ == "__main__":
    asyncio.run(main())
