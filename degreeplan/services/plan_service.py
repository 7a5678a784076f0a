"""Service layer for plan operations - the submission pipeline and read paths.

A write goes through three gates before touching storage: the declarative
schema, then the ordered plan rules, then the repository. Schema and rule
failures come back in a PlanWriteResult; storage failures raise.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from degreeplan.database.course_repo import CourseRepository
from degreeplan.models.plan_enums import PlanSortField, PlanStatus
from degreeplan.repositories.plan_repository import PlanRepository
from degreeplan.schemas.plans import (
    ActivityItem,
    CourseResponse,
    PlanDetailResponse,
    PlanSummaryResponse,
)
from degreeplan.services.constraint_service import ConstraintService, ConstraintViolation
from degreeplan.utils.exceptions import NotFoundException
from degreeplan.utils.format import compact_course_slots
from degreeplan.utils.schema_validation import (
    PLAN_PATCH_SCHEMA,
    PLAN_SCHEMA,
    get_schema_violations,
    sanitize_using_schema,
)

logger = logging.getLogger("degreeplan.plans")


@dataclass(frozen=True)
class PlanWriteResult:
    """Outcome of a create or update request."""

    plan_id: Optional[int] = None
    updated_rows: int = 0
    schema_error: str = ""
    violation: Optional[ConstraintViolation] = None

    @property
    def ok(self) -> bool:
        return not self.schema_error and self.violation is None


class PlanService:
    """Service layer for plan business logic."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db
        self.repository = PlanRepository(db)

    async def submit_plan(self, payload: Mapping[str, Any]) -> PlanWriteResult:
        """Validate and save a new plan."""
        schema_error = get_schema_violations(payload, PLAN_SCHEMA)
        if schema_error:
            logger.info("Plan submission rejected by schema: %s", schema_error.splitlines()[0])
            return PlanWriteResult(schema_error=schema_error)

        body = sanitize_using_schema(payload, PLAN_SCHEMA)
        student_id = body["studentId"]
        plan_name = body["planName"]
        courses = compact_course_slots(body.get("courses"))

        violation = await ConstraintService.enforce_constraints(self.db, student_id, plan_name, courses)
        if violation is not None:
            return PlanWriteResult(violation=violation)

        plan_id = await self.repository.create(int(student_id), plan_name, courses)
        return PlanWriteResult(plan_id=plan_id)

    async def update_plan(self, plan_id: int, payload: Mapping[str, Any]) -> PlanWriteResult:
        """Validate and apply a plan patch.

        Raises:
            NotFoundException: If the plan does not exist
        """
        record = {**payload, "planId": plan_id}
        schema_error = get_schema_violations(record, PLAN_PATCH_SCHEMA, partial=True)
        if schema_error:
            logger.info("Plan %s patch rejected by schema: %s", plan_id, schema_error.splitlines()[0])
            return PlanWriteResult(plan_id=plan_id, schema_error=schema_error)

        body = sanitize_using_schema(record, PLAN_PATCH_SCHEMA)
        plan_name: Optional[str] = body.get("planName")
        # an empty course list means "leave the courses alone"
        courses = compact_course_slots(body.get("courses")) or None

        check = await ConstraintService.enforce_update_constraints(self.db, plan_id, plan_name, courses)
        if check.plan is None:
            raise NotFoundException("Plan not found", details={"planId": plan_id})
        if check.violation is not None:
            return PlanWriteResult(plan_id=plan_id, violation=check.violation)

        if plan_name is None and courses is None:
            return PlanWriteResult(plan_id=plan_id, updated_rows=0)

        updated_rows = await self.repository.update(plan_id, plan_name, courses)
        return PlanWriteResult(plan_id=plan_id, updated_rows=updated_rows)

    async def delete_plan(self, plan_id: int) -> int:
        deleted = await self.repository.delete(plan_id)
        if deleted == 0:
            raise NotFoundException("Plan not found", details={"planId": plan_id})
        return deleted

    async def get_plan(self, plan_id: int) -> PlanDetailResponse:
        found = await self.repository.get(plan_id)
        if found is None:
            raise NotFoundException("Plan not found", details={"planId": plan_id})
        plan, courses = found
        return PlanDetailResponse(
            plan_id=plan.plan_id,
            student_id=plan.student_id,
            plan_name=plan.plan_name,
            status=plan.status,
            created=plan.created,
            last_updated=plan.last_updated,
            courses=[CourseResponse.model_validate(course) for course in courses],
        )

    async def list_plans(
        self,
        status: Optional[PlanStatus] = None,
        sort_field: PlanSortField = PlanSortField.LAST_UPDATED,
        ascending: bool = False,
    ) -> list[PlanSummaryResponse]:
        """List plans in a status (any status when None), ordered by a timestamp."""
        rows = await self.repository.list_by_status(status, sort_field, ascending)
        return [
            PlanSummaryResponse(
                plan_id=plan.plan_id,
                student_id=plan.student_id,
                plan_name=plan.plan_name,
                status=plan.status,
                created=plan.created,
                last_updated=plan.last_updated,
                first_name=first_name,
                last_name=last_name,
            )
            for plan, first_name, last_name in rows
        ]

    async def list_student_plans(self, student_id: int) -> list[PlanSummaryResponse]:
        plans = await self.repository.list_by_owner(student_id)
        return [PlanSummaryResponse.model_validate(plan) for plan in plans]

    async def get_activity(self, plan_id: int) -> list[ActivityItem]:
        """Get comments and reviews of a plan, newest first.

        Raises:
            NotFoundException: If the plan does not exist
        """
        if await self.repository.get_state(plan_id) is None:
            raise NotFoundException("Plan not found", details={"planId": plan_id})
        rows = await self.repository.get_activity(plan_id)
        return [ActivityItem.model_validate(dict(row._mapping)) for row in rows]

    async def search_courses(self, term: str, limit: int = 20) -> list[CourseResponse]:
        courses = await CourseRepository.search(self.db, term, limit)
        return [CourseResponse.model_validate(course) for course in courses]
