from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    Enum,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP

from degreeplan.models.base import Base
from degreeplan.models.plan_enums import PlanStatus, UserRole


class User(Base):
    """Identity record. Rows are provisioned by the campus directory sync."""
    __tablename__ = "tbl_users"

    user_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[Optional[str]] = mapped_column(Text)
    last_name: Mapped[Optional[str]] = mapped_column(Text)
    email: Mapped[Optional[str]] = mapped_column(String(255), unique=True)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="user_role", native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        server_default=text("'student'"),
    )

    plans: Mapped[list["Plan"]] = relationship("Plan", back_populates="student")


class Course(Base):
    """Read-only catalog entry."""
    __tablename__ = "tbl_courses"
    __table_args__ = (
        CheckConstraint("credits > 0", name="ck_courses_credits_positive"),
        CheckConstraint("restriction >= 0", name="ck_courses_restriction_non_negative"),
    )

    course_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    course_code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    title: Mapped[Optional[str]] = mapped_column(Text)
    credits: Mapped[int] = mapped_column(Integer, nullable=False)
    # 0 = none, 1 = required (blocked), >1 = graduate / professional-technical (blocked)
    restriction: Mapped[int] = mapped_column(SmallInteger, nullable=False, server_default=text("0"))


class Plan(Base):
    __tablename__ = "tbl_plans"
    __table_args__ = (
        Index("ix_plans_student", "student_id"),
        Index("ix_plans_status", "status"),
        CheckConstraint("status BETWEEN 0 AND 4", name="ck_plans_status_range"),
    )

    plan_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tbl_users.user_id", ondelete="CASCADE"), nullable=False
    )
    plan_name: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[int] = mapped_column(
        SmallInteger, nullable=False, server_default=text(str(int(PlanStatus.AWAITING_REVIEW)))
    )
    created: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
    last_updated: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )

    student: Mapped[User] = relationship("User", back_populates="plans")


class SelectedCourse(Base):
    __tablename__ = "tbl_selected_courses"

    plan_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tbl_plans.plan_id", ondelete="CASCADE"), primary_key=True
    )
    course_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tbl_courses.course_id", ondelete="CASCADE"), primary_key=True
    )


class PlanReview(Base):
    """Append-only review history for a plan."""
    __tablename__ = "tbl_plan_reviews"
    __table_args__ = (Index("ix_plan_reviews_plan_time", "plan_id", "time"),)

    review_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    plan_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tbl_plans.plan_id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tbl_users.user_id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    time: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )


class Comment(Base):
    __tablename__ = "tbl_comments"
    __table_args__ = (Index("ix_comments_plan_time", "plan_id", "time"),)

    comment_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    plan_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tbl_plans.plan_id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tbl_users.user_id", ondelete="CASCADE"), nullable=False
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    time: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
