"""Query layer for plan operations - contains raw database statements."""

from typing import NamedTuple, Optional, Sequence

from sqlalchemy import Row, delete, insert, literal, select, union_all, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from degreeplan.models.models import Comment, Course, Plan, PlanReview, SelectedCourse, User
from degreeplan.models.plan_enums import PlanSortField, PlanStatus

# Sentinels that let comments and reviews share one activity row shape
COMMENT_STATUS = -1
REVIEW_TEXT = ""


class PlanState(NamedTuple):
    student_id: int
    status: int


class PlanQueries:
    """Query layer for plan table operations."""

    @staticmethod
    async def insert_plan_header(db: AsyncSession, student_id: int, plan_name: str) -> int:
        """Insert a plan row in AWAITING_REVIEW and return its ID (flushed, not committed)."""
        plan = Plan(
            student_id=student_id,
            plan_name=plan_name,
            status=int(PlanStatus.AWAITING_REVIEW),
        )
        db.add(plan)
        await db.flush()
        return plan.plan_id

    @staticmethod
    async def insert_selected_courses(db: AsyncSession, plan_id: int, courses: Sequence[str]) -> int:
        """Insert one association row per course code.

        Each code is resolved to its catalog ID by a scalar subquery at write
        time; an unknown code resolves to NULL and fails the NOT NULL key.
        """
        if not courses:
            return 0
        rows = [
            {
                "plan_id": plan_id,
                "course_id": select(Course.course_id)
                .where(Course.course_code == code)
                .scalar_subquery(),
            }
            for code in courses
        ]
        await db.execute(insert(SelectedCourse).values(rows))
        return len(rows)

    @staticmethod
    async def update_plan_name(db: AsyncSession, plan_id: int, plan_name: str) -> int:
        result = await db.execute(
            update(Plan)
            .where(Plan.plan_id == plan_id)
            .values(plan_name=plan_name, last_updated=func.now())
        )
        return result.rowcount

    @staticmethod
    async def get_plan_state(db: AsyncSession, plan_id: int) -> Optional[PlanState]:
        """Get the owner and current status of a plan."""
        result = await db.execute(
            select(Plan.student_id, Plan.status).where(Plan.plan_id == plan_id)
        )
        row = result.first()
        if row is None:
            return None
        return PlanState(student_id=row.student_id, status=row.status)

    @staticmethod
    async def insert_review(db: AsyncSession, plan_id: int, user_id: int, status: PlanStatus) -> None:
        db.add(PlanReview(plan_id=plan_id, user_id=user_id, status=int(status)))
        await db.flush()

    @staticmethod
    async def set_status(db: AsyncSession, plan_id: int, status: PlanStatus) -> int:
        result = await db.execute(
            update(Plan)
            .where(Plan.plan_id == plan_id)
            .values(status=int(status), last_updated=func.now())
        )
        return result.rowcount

    @staticmethod
    async def delete_selected_courses(db: AsyncSession, plan_id: int) -> int:
        result = await db.execute(delete(SelectedCourse).where(SelectedCourse.plan_id == plan_id))
        return result.rowcount

    @staticmethod
    async def delete_plan(db: AsyncSession, plan_id: int) -> int:
        result = await db.execute(delete(Plan).where(Plan.plan_id == plan_id))
        return result.rowcount

    @staticmethod
    async def get_plan_with_courses(db: AsyncSession, plan_id: int) -> Optional[tuple[Plan, list[Course]]]:
        """Get a plan and its selected courses with one joined query."""
        stmt = (
            select(Plan, Course)
            .outerjoin(SelectedCourse, SelectedCourse.plan_id == Plan.plan_id)
            .outerjoin(Course, Course.course_id == SelectedCourse.course_id)
            .where(Plan.plan_id == plan_id)
            .order_by(Course.course_code.asc())
            .execution_options(populate_existing=True)
        )
        result = await db.execute(stmt)
        rows = result.all()
        if not rows:
            return None
        plan = rows[0][0]
        courses = [course for _, course in rows if course is not None]
        return plan, courses

    @staticmethod
    async def list_plans_by_status(
        db: AsyncSession,
        status: Optional[PlanStatus],
        sort_field: PlanSortField,
        ascending: bool,
    ) -> Sequence[Row]:
        """List plans joined with their owner, optionally filtered by status."""
        sort_column = Plan.created if sort_field is PlanSortField.CREATED else Plan.last_updated
        order = sort_column.asc() if ascending else sort_column.desc()

        stmt = (
            select(Plan, User.first_name, User.last_name)
            .join(User, User.user_id == Plan.student_id)
            .order_by(order, Plan.plan_id.asc())
            .execution_options(populate_existing=True)
        )
        if status is not None:
            stmt = stmt.where(Plan.status == int(status))

        result = await db.execute(stmt)
        return result.all()

    @staticmethod
    async def list_plans_by_owner(db: AsyncSession, student_id: int) -> list[Plan]:
        result = await db.execute(
            select(Plan)
            .where(Plan.student_id == student_id)
            .order_by(Plan.last_updated.desc(), Plan.plan_id.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    @staticmethod
    async def get_plan_activity(db: AsyncSession, plan_id: int) -> Sequence[Row]:
        """Get comments and reviews of a plan as one stream, newest first."""
        comments = (
            select(
                literal(0).label("review_id"),
                Comment.comment_id.label("comment_id"),
                Comment.plan_id.label("plan_id"),
                Comment.user_id.label("user_id"),
                Comment.text.label("text"),
                literal(COMMENT_STATUS).label("status"),
                Comment.time.label("time"),
                User.first_name.label("first_name"),
                User.last_name.label("last_name"),
            )
            .join(User, User.user_id == Comment.user_id)
            .where(Comment.plan_id == plan_id)
        )
        reviews = (
            select(
                PlanReview.review_id.label("review_id"),
                literal(0).label("comment_id"),
                PlanReview.plan_id.label("plan_id"),
                PlanReview.user_id.label("user_id"),
                literal(REVIEW_TEXT).label("text"),
                PlanReview.status.label("status"),
                PlanReview.time.label("time"),
                User.first_name.label("first_name"),
                User.last_name.label("last_name"),
            )
            .join(User, User.user_id == PlanReview.user_id)
            .where(PlanReview.plan_id == plan_id)
        )
        activity = union_all(comments, reviews).subquery("activity")
        result = await db.execute(
            select(activity).order_by(
                activity.c.time.desc(),
                activity.c.review_id.desc(),
                activity.c.comment_id.desc(),
            )
        )
        return result.all()
