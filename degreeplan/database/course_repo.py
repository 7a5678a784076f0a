"""Repository layer for course-catalog queries.

This module contains ONLY database access logic - no business rules.
The catalog is read-only to this service.

Every lookup over a list of course codes is a single query with an
expanding IN parameter, so a check costs one round trip no matter how
many courses a plan holds.
"""

from typing import Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from degreeplan.models.models import Course


class CourseRepository:
    """Repository for course catalog database operations."""

    @staticmethod
    async def exists_all(db: AsyncSession, codes: Sequence[str]) -> int:
        """
        Count how many of the given course codes exist in the catalog.

        Args:
            db: Database session
            codes: Course codes to look up

        Returns:
            Number of catalog rows matching the codes
        """
        if not codes:
            return 0
        result = await db.execute(
            select(func.count()).select_from(Course).where(Course.course_code.in_(codes))
        )
        return int(result.scalar() or 0)

    @staticmethod
    async def restrictions_of(db: AsyncSession, codes: Sequence[str]) -> list[tuple[str, int]]:
        """
        Get the restricted courses among the given codes.

        Args:
            db: Database session
            codes: Course codes to look up

        Returns:
            (course_code, restriction) pairs with restriction > 0,
            ordered by restriction ascending
        """
        if not codes:
            return []
        result = await db.execute(
            select(Course.course_code, Course.restriction)
            .where(Course.course_code.in_(codes), Course.restriction > 0)
            .order_by(Course.restriction.asc(), Course.course_code.asc())
        )
        return [(code, int(restriction)) for code, restriction in result.all()]

    @staticmethod
    async def credit_sum_of(db: AsyncSession, codes: Sequence[str]) -> int:
        """
        Sum the credits of the given course codes.

        Args:
            db: Database session
            codes: Course codes to look up

        Returns:
            Total credits, 0 when nothing matches
        """
        if not codes:
            return 0
        result = await db.execute(
            select(func.coalesce(func.sum(Course.credits), 0)).where(Course.course_code.in_(codes))
        )
        return int(result.scalar() or 0)

    @staticmethod
    async def search(db: AsyncSession, term: str, limit: int = 20) -> list[Course]:
        """
        Search the catalog by code or title for the course picker.

        Args:
            db: Database session
            term: Case-insensitive fragment of a course code or title
            limit: Maximum number of rows

        Returns:
            Matching courses ordered by code
        """
        pattern = f"%{term.strip()}%"
        result = await db.execute(
            select(Course)
            .where(or_(Course.course_code.ilike(pattern), Course.title.ilike(pattern)))
            .order_by(Course.course_code.asc())
            .limit(limit)
        )
        return list(result.scalars().all())
