"""Repository layer for plan persistence - abstracts data access.

Writes are grouped so each public method commits at most once. Storage
errors surface as DatabaseException; the creation path undoes its plan
header before raising PartialWriteException.
"""

import logging
from typing import Optional, Sequence

from sqlalchemy import Row
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from degreeplan.models.models import Course, Plan
from degreeplan.models.plan_enums import PlanSortField, PlanStatus
from degreeplan.queries.plan_queries import PlanQueries, PlanState
from degreeplan.utils.exceptions import DatabaseException, NotFoundException, PartialWriteException

logger = logging.getLogger("degreeplan.plans")


class PlanRepository:
    """Repository layer for plan data access operations."""

    def __init__(self, db: AsyncSession):
        """Initialize repository with database session."""
        self.db = db

    async def create(self, student_id: int, plan_name: str, courses: Sequence[str]) -> int:
        """Save a plan header and its selected courses.

        If the course rows fail, the transaction is rolled back and the header
        is deleted again, so no plan is left behind without its courses.
        """
        try:
            plan_id = await PlanQueries.insert_plan_header(self.db, student_id, plan_name)
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.exception("Error inserting plan header for student %s", student_id)
            raise DatabaseException("Error saving plan") from exc

        try:
            await PlanQueries.insert_selected_courses(self.db, plan_id, courses)
            await self.db.commit()
        except SQLAlchemyError as exc:
            logger.exception("Error adding courses to plan %s", plan_id)
            await self.db.rollback()
            await self._compensate_failed_create(plan_id)
            raise PartialWriteException(plan_id) from exc

        logger.info("Plan %s saved for student %s with %d courses", plan_id, student_id, len(courses))
        return plan_id

    async def _compensate_failed_create(self, plan_id: int) -> None:
        # The rollback normally discards the header already; this covers
        # drivers that made it visible before the course insert failed.
        try:
            await PlanQueries.delete_selected_courses(self.db, plan_id)
            removed = await PlanQueries.delete_plan(self.db, plan_id)
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            logger.exception("Compensating delete failed; plan %s may be orphaned", plan_id)
            return
        if removed:
            logger.warning("Removed orphaned header of plan %s", plan_id)

    async def update(
        self,
        plan_id: int,
        plan_name: Optional[str] = None,
        courses: Optional[Sequence[str]] = None,
    ) -> int:
        """Update a plan's name and/or replace its course set.

        Replacing the courses always moves the plan back to AWAITING_REVIEW;
        when it was in any other status, a review row recording the reset is
        appended on behalf of the owner.

        Returns:
            Total rows touched across all statements (informational only)
        """
        updated_rows = 0
        try:
            if plan_name is not None:
                updated_rows += await PlanQueries.update_plan_name(self.db, plan_id, plan_name)

            if courses is not None:
                state = await PlanQueries.get_plan_state(self.db, plan_id)
                if state is None:
                    await self.db.rollback()
                    raise NotFoundException("Plan not found", details={"planId": plan_id})

                if state.status != PlanStatus.AWAITING_REVIEW:
                    await PlanQueries.insert_review(
                        self.db, plan_id, state.student_id, PlanStatus.AWAITING_REVIEW
                    )
                    await PlanQueries.set_status(self.db, plan_id, PlanStatus.AWAITING_REVIEW)
                    updated_rows += 2
                else:
                    updated_rows += await PlanQueries.set_status(
                        self.db, plan_id, PlanStatus.AWAITING_REVIEW
                    )

                updated_rows += await PlanQueries.delete_selected_courses(self.db, plan_id)
                updated_rows += await PlanQueries.insert_selected_courses(self.db, plan_id, courses)

            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.exception("Error updating plan %s", plan_id)
            raise DatabaseException("Error updating plan") from exc

        logger.info("Plan %s updated (%d rows)", plan_id, updated_rows)
        return updated_rows

    async def delete(self, plan_id: int) -> int:
        """Delete a plan and its selected courses. Returns 0 if the plan did not exist."""
        try:
            await PlanQueries.delete_selected_courses(self.db, plan_id)
            deleted = await PlanQueries.delete_plan(self.db, plan_id)
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.exception("Error deleting plan %s", plan_id)
            raise DatabaseException("Error deleting plan") from exc

        if deleted:
            logger.info("Plan %s deleted", plan_id)
        return deleted

    async def get_state(self, plan_id: int) -> Optional[PlanState]:
        try:
            return await PlanQueries.get_plan_state(self.db, plan_id)
        except SQLAlchemyError as exc:
            logger.exception("Error reading state of plan %s", plan_id)
            raise DatabaseException("Error searching for plan") from exc

    async def get(self, plan_id: int) -> Optional[tuple[Plan, list[Course]]]:
        try:
            return await PlanQueries.get_plan_with_courses(self.db, plan_id)
        except SQLAlchemyError as exc:
            logger.exception("Error reading plan %s", plan_id)
            raise DatabaseException("Error searching for plan") from exc

    async def list_by_status(
        self,
        status: Optional[PlanStatus] = None,
        sort_field: PlanSortField = PlanSortField.LAST_UPDATED,
        ascending: bool = False,
    ) -> Sequence[Row]:
        try:
            return await PlanQueries.list_plans_by_status(self.db, status, sort_field, ascending)
        except SQLAlchemyError as exc:
            logger.exception("Error searching for plans")
            raise DatabaseException("Error searching for plans") from exc

    async def list_by_owner(self, student_id: int) -> list[Plan]:
        try:
            return await PlanQueries.list_plans_by_owner(self.db, student_id)
        except SQLAlchemyError as exc:
            logger.exception("Error searching for plans of student %s", student_id)
            raise DatabaseException("Error searching for plans") from exc

    async def get_activity(self, plan_id: int) -> Sequence[Row]:
        try:
            return await PlanQueries.get_plan_activity(self.db, plan_id)
        except SQLAlchemyError as exc:
            logger.exception("Error searching for activity of plan %s", plan_id)
            raise DatabaseException("Error searching for plan activity") from exc
