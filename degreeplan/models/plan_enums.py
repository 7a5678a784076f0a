"""Plan-related enums.

This module contains enums used by plan models:
- PlanStatus: Review status of a plan (stored as an integer)
- UserRole: Role of an identity record
- PlanSortField: Timestamp column used to order plan listings
"""

import enum


class PlanStatus(enum.IntEnum):
    """Review status of a plan."""

    REJECTED = 0
    AWAITING_STUDENT_CHANGES = 1
    AWAITING_REVIEW = 2
    AWAITING_FINAL_REVIEW = 3
    ACCEPTED = 4


class UserRole(str, enum.Enum):
    """Role of a user."""

    STUDENT = "student"
    ADVISOR = "advisor"
    HEAD_ADVISOR = "head_advisor"


class PlanSortField(str, enum.Enum):
    """Sort key for plan listings."""

    CREATED = "created"
    LAST_UPDATED = "lastUpdated"
