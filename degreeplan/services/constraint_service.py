"""Service layer for plan submission rules.

Checks run in a fixed order and stop at the first violation. Violations
are returned, not raised, so routes can turn them into client messages;
only storage errors propagate.

Architecture:
- Route: Handles HTTP requests/responses, calls service
- Service: Contains business logic, orchestrates repository calls
- Repository: Contains database queries only
"""

import enum
import logging
from typing import NamedTuple, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from degreeplan.core.config import settings
from degreeplan.database.course_repo import CourseRepository
from degreeplan.database.user_repo import UserRepository
from degreeplan.models.base import MAX_ROW_ID
from degreeplan.models.plan_enums import UserRole
from degreeplan.queries.plan_queries import PlanQueries, PlanState
from degreeplan.utils.exceptions import DatabaseException

logger = logging.getLogger("degreeplan.constraints")

NAME_MIN = settings.PLAN_NAME_MIN_LENGTH
NAME_MAX = settings.PLAN_NAME_MAX_LENGTH
CREDITS_MIN = settings.PLAN_MIN_CREDITS


class ConstraintViolation(str, enum.Enum):
    """A violated plan rule; the value is the client-facing message."""

    UNKNOWN_USER = "Invalid user ID. Unable to submit plan."
    NOT_A_STUDENT = "Only students can submit plans."
    INVALID_NAME = f"The plan name must be between {NAME_MIN} and {NAME_MAX} characters long."
    EMPTY_PLAN = "No courses selected."
    DUPLICATE_COURSE = "A course was selected more than once."
    INVALID_COURSE = "At least one selected course is invalid."
    REQUIRED_COURSE_SELECTED = "A required course was selected."
    RESTRICTED_COURSE_SELECTED = "A graduate or professional/technical course was selected."
    INSUFFICIENT_CREDITS = f"Less than {CREDITS_MIN} credits selected."

    @property
    def message(self) -> str:
        return self.value


class UpdateCheck(NamedTuple):
    """Outcome of the update-path checks.

    ``plan`` is the plan's current owner and status, or None when the plan
    does not exist (in which case no rule was evaluated).
    """

    violation: Optional[ConstraintViolation]
    plan: Optional[PlanState]


class ConstraintService:
    """Service for plan submission rules."""

    @staticmethod
    async def enforce_constraints(
        db: AsyncSession,
        user_id: object,
        plan_name: Optional[str],
        courses: Sequence[str],
    ) -> Optional[ConstraintViolation]:
        """Run every create-path rule in order.

        Returns:
            The first violated rule, or None when the plan may be saved

        Raises:
            DatabaseException: If a lookup fails
        """
        try:
            violation = await ConstraintService._check_user(db, user_id)
            if violation is None:
                violation = ConstraintService._check_plan_name(plan_name)
            if violation is None:
                violation = await ConstraintService._check_courses(db, courses)
        except SQLAlchemyError as exc:
            logger.exception("Error while trying to check constraints")
            raise DatabaseException("Error checking plan constraints") from exc

        if violation is None:
            logger.info("Plan does not violate any constraints")
        else:
            logger.info("Constraint violated: %s", violation.name)
        return violation

    @staticmethod
    async def enforce_update_constraints(
        db: AsyncSession,
        plan_id: int,
        plan_name: Optional[str] = None,
        courses: Optional[Sequence[str]] = None,
    ) -> UpdateCheck:
        """Check the fields present in a plan patch.

        Identity rules are skipped; the plan already has an owner. The name is
        checked only when given and the courses only when a non-empty list is
        given (an empty list means the course set is unchanged).

        Raises:
            DatabaseException: If a lookup fails
        """
        try:
            state = None
            if 0 < plan_id <= MAX_ROW_ID:
                state = await PlanQueries.get_plan_state(db, plan_id)
            if state is None:
                return UpdateCheck(violation=None, plan=None)

            violation = None
            if plan_name is not None:
                violation = ConstraintService._check_plan_name(plan_name)
            if violation is None and courses:
                violation = await ConstraintService._check_courses(db, courses)
        except SQLAlchemyError as exc:
            logger.exception("Error while trying to check update constraints")
            raise DatabaseException("Error checking plan constraints") from exc

        if violation is not None:
            logger.info("Constraint violated on plan %s: %s", plan_id, violation.name)
        return UpdateCheck(violation=violation, plan=state)

    @staticmethod
    async def _check_user(db: AsyncSession, user_id: object) -> Optional[ConstraintViolation]:
        # don't bother querying an empty identifier
        if user_id is None or isinstance(user_id, bool) or str(user_id).strip() == "":
            return ConstraintViolation.UNKNOWN_USER
        try:
            numeric_id = int(str(user_id).strip())
        except ValueError:
            return ConstraintViolation.UNKNOWN_USER
        if not 0 < numeric_id <= MAX_ROW_ID:
            return ConstraintViolation.UNKNOWN_USER

        user = await UserRepository.find_user(db, numeric_id)
        if user is None:
            return ConstraintViolation.UNKNOWN_USER
        if user.role != UserRole.STUDENT:
            return ConstraintViolation.NOT_A_STUDENT
        return None

    @staticmethod
    def _check_plan_name(plan_name: Optional[str]) -> Optional[ConstraintViolation]:
        if plan_name is None or not NAME_MIN <= len(plan_name) <= NAME_MAX:
            return ConstraintViolation.INVALID_NAME
        return None

    @staticmethod
    async def _check_courses(db: AsyncSession, courses: Sequence[str]) -> Optional[ConstraintViolation]:
        if len(courses) == 0:
            return ConstraintViolation.EMPTY_PLAN

        seen: set[str] = set()
        for code in courses:
            if code in seen:
                return ConstraintViolation.DUPLICATE_COURSE
            seen.add(code)

        if await CourseRepository.exists_all(db, courses) != len(courses):
            return ConstraintViolation.INVALID_COURSE

        restricted = await CourseRepository.restrictions_of(db, courses)
        if restricted:
            _, lowest = restricted[0]
            if lowest == 1:
                return ConstraintViolation.REQUIRED_COURSE_SELECTED
            return ConstraintViolation.RESTRICTED_COURSE_SELECTED

        if await CourseRepository.credit_sum_of(db, courses) < CREDITS_MIN:
            return ConstraintViolation.INSUFFICIENT_CREDITS

        return None
