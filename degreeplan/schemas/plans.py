"""Plan response schemas.

Request bodies are validated with the declarative schemas in
``degreeplan.utils.schema_validation``; these models shape responses.
Fields serialize in camelCase to match the client.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class CourseResponse(_CamelModel):
    """Catalog course as embedded in a plan."""

    course_id: int
    course_code: str
    title: Optional[str] = None
    credits: int
    restriction: int = 0


class PlanBase(_CamelModel):
    plan_id: int
    student_id: int
    plan_name: str
    status: int
    created: datetime
    last_updated: datetime


class PlanSummaryResponse(PlanBase):
    """Plan row used by listings, with the owner's name."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None


class PlanDetailResponse(PlanBase):
    """Plan with its selected courses."""

    courses: list[CourseResponse] = Field(default_factory=list)


class ActivityItem(_CamelModel):
    """A comment or a review on a plan.

    Comments carry ``status == -1``; reviews carry an empty ``text``.
    """

    review_id: int
    comment_id: int
    plan_id: int
    user_id: int
    text: str
    status: int
    time: datetime
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class PlanCreatedResponse(_CamelModel):
    plan_id: int


class PlanUpdatedResponse(_CamelModel):
    plan_id: int
    updated_rows: int
