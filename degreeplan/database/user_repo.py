"""Repository layer for identity lookups."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from degreeplan.models.models import User


class UserRepository:
    """Repository for user database operations."""

    @staticmethod
    async def find_user(db: AsyncSession, user_id: int) -> Optional[User]:
        """
        Fetch an identity record.

        Args:
            db: Database session
            user_id: ID of the user

        Returns:
            User if found, None otherwise
        """
        return await db.get(User, user_id)
