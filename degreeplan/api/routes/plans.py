from typing import Annotated, Any, Optional

from fastapi import APIRouter, Body, Path, Query, status

from degreeplan.api.deps import CurrentUser, DB
from degreeplan.models.base import MAX_ROW_ID
from degreeplan.models.plan_enums import PlanSortField, PlanStatus
from degreeplan.schemas.plans import PlanCreatedResponse, PlanUpdatedResponse
from degreeplan.services.plan_service import PlanService, PlanWriteResult
from degreeplan.utils.envelopes import api_success
from degreeplan.utils.exceptions import ConstraintViolationException, DatabaseException, ValidationException

router = APIRouter(tags=["plans"])

RowId = Annotated[int, Path(ge=1, le=MAX_ROW_ID)]


def _raise_if_rejected(result: PlanWriteResult) -> None:
	if result.schema_error:
		raise ValidationException(message=result.schema_error)
	if result.violation is not None:
		raise ConstraintViolationException(
			message=result.violation.message,
			details={"violation": result.violation.name},
		)


@router.post("/plans", response_model=dict, status_code=status.HTTP_201_CREATED)
async def create_plan(
	payload: Annotated[dict[str, Any], Body()],
	current_user: CurrentUser,
	db: DB,
):
	"""Submit a new plan."""
	result = await PlanService(db).submit_plan(payload)
	_raise_if_rejected(result)
	if result.plan_id is None:
		raise DatabaseException("Plan was not saved")
	return api_success(PlanCreatedResponse(plan_id=result.plan_id).model_dump(by_alias=True))


@router.patch("/plans/{plan_id}", response_model=dict)
async def update_plan(
	plan_id: RowId,
	payload: Annotated[dict[str, Any], Body()],
	current_user: CurrentUser,
	db: DB,
):
	"""Rename a plan and/or replace its courses."""
	result = await PlanService(db).update_plan(plan_id, payload)
	_raise_if_rejected(result)
	response = PlanUpdatedResponse(plan_id=plan_id, updated_rows=result.updated_rows)
	return api_success(response.model_dump(by_alias=True))


@router.get("/plans", response_model=dict)
async def list_plans(
	current_user: CurrentUser,
	db: DB,
	status_filter: Annotated[Optional[int], Query(alias="status", ge=0, le=4)] = None,
	sort: PlanSortField = PlanSortField.LAST_UPDATED,
	ascending: bool = False,
):
	"""List plans in a status (all statuses when omitted)."""
	plan_status = PlanStatus(status_filter) if status_filter is not None else None
	plans = await PlanService(db).list_plans(plan_status, sort, ascending)
	return api_success([plan.model_dump(by_alias=True, mode="json") for plan in plans])


@router.get("/plans/{plan_id}", response_model=dict)
async def get_plan(plan_id: RowId, current_user: CurrentUser, db: DB):
	plan = await PlanService(db).get_plan(plan_id)
	return api_success(plan.model_dump(by_alias=True, mode="json"))


@router.delete("/plans/{plan_id}", response_model=dict)
async def delete_plan(plan_id: RowId, current_user: CurrentUser, db: DB):
	deleted = await PlanService(db).delete_plan(plan_id)
	return api_success({"deleted": deleted})


@router.get("/plans/{plan_id}/activity", response_model=dict)
async def get_plan_activity(plan_id: RowId, current_user: CurrentUser, db: DB):
	"""Comments and reviews of a plan, newest first."""
	activities = await PlanService(db).get_activity(plan_id)
	return api_success({"activities": [a.model_dump(by_alias=True, mode="json") for a in activities]})


@router.get("/users/{student_id}/plans", response_model=dict)
async def list_student_plans(student_id: RowId, current_user: CurrentUser, db: DB):
	plans = await PlanService(db).list_student_plans(student_id)
	return api_success([plan.model_dump(by_alias=True, mode="json") for plan in plans])


@router.get("/courses", response_model=dict)
async def search_courses(
	current_user: CurrentUser,
	db: DB,
	q: Annotated[str, Query(min_length=1, max_length=50)],
	limit: Annotated[int, Query(ge=1, le=100)] = 20,
):
	"""Search the course catalog by code or title."""
	courses = await PlanService(db).search_courses(q, limit)
	return api_success([course.model_dump(by_alias=True) for course in courses])
