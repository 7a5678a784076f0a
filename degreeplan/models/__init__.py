from degreeplan.models.base import Base
from degreeplan.models.models import Comment, Course, Plan, PlanReview, SelectedCourse, User

__all__ = ["Base", "Comment", "Course", "Plan", "PlanReview", "SelectedCourse", "User"]
