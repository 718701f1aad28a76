"""
Dashboard Schemas

Landing pages of each role namespace.
"""

from .academics import GradeRecord, GroupSchema, LessonSchema
from .base import CamelModel
from .users import UserSchema


class AdminDashboard(CamelModel):
    """Accounts waiting for activation next to everyone else."""

    pending: list[UserSchema]
    users: list[UserSchema]


class CuratorDashboard(CamelModel):
    """Collection sizes shown on the curator's landing page."""

    users: int
    pending: int
    groups: int
    lessons: int
    surveys: int


class TeacherGroup(CamelModel):
    """A group taught by the signed-in teacher with its roster."""

    group: GroupSchema
    students: list[UserSchema]


class JournalRow(CamelModel):
    """One student's line in a group journal, scores keyed by lesson ID."""

    student: UserSchema
    scores: dict[str, int | None]
    present: dict[str, bool]


class GroupJournal(CamelModel):
    """Group journal: every lesson of a group against every student."""

    group: GroupSchema
    lessons: list[LessonSchema]
    rows: list[JournalRow]


class StudentDashboard(CamelModel):
    """Student landing page: own groups and the latest attendance."""

    user: UserSchema
    groups: list[GroupSchema]
    recent: list[GradeRecord]
