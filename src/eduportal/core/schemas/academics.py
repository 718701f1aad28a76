"""
Group, Lesson and Attendance Schemas
"""

from pydantic import Field

from .base import CamelModel, DocumentModel
from .users import UserSchema


# Group Schemas
class GroupSchema(DocumentModel):
    """Study group: one teacher, many students."""

    title: str
    teacher_id: str
    student_ids: list[str] = Field(default_factory=list)
    created_by: str = ""


class GroupCreate(CamelModel):
    """Schema for creating a group. ``createdBy`` comes from the session."""

    title: str
    teacher_id: str
    student_ids: list[str] = Field(default_factory=list)


class GroupUpdate(CamelModel):
    """Schema for updating a group."""

    title: str | None = None
    teacher_id: str | None = None
    student_ids: list[str] | None = None


# Lesson Schemas
class LessonSchema(DocumentModel):
    """Lesson held for a group."""

    title: str
    description: str = ""
    date: str
    group_id: str
    teacher_id: str


class LessonCreate(CamelModel):
    """Schema for creating a lesson."""

    title: str
    description: str = ""
    date: str
    group_id: str | None = None
    teacher_id: str | None = None


class LessonUpdate(CamelModel):
    """Schema for updating a lesson."""

    title: str | None = None
    description: str | None = None
    date: str | None = None
    group_id: str | None = None
    teacher_id: str | None = None


# Attendance Schemas
class AttendanceSchema(DocumentModel):
    """One student's presence and score for one lesson."""

    lesson_id: str
    student_id: str
    present: bool = False
    score: int = 0


class AttendanceEntry(CamelModel):
    """One row of the attendance sheet as submitted by a teacher."""

    student_id: str
    present: bool = False
    score: int = 0


class AttendanceCreate(AttendanceEntry):
    """Attendance record keyed by lesson and student."""

    lesson_id: str


class AttendanceSave(CamelModel):
    """Whole roster submitted at once."""

    records: list[AttendanceEntry]


class BulkFailure(CamelModel):
    """A record of a bulk operation that did not commit."""

    key: str
    error: str


class BulkResult(CamelModel):
    """Per-record outcome of a concurrent fan-out."""

    succeeded: list[str] = Field(default_factory=list)
    failed: list[BulkFailure] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class AttendanceSheet(CamelModel):
    """Lesson, its group's students, and their records keyed by student ID."""

    lesson: LessonSchema
    group: GroupSchema
    students: list[UserSchema]
    records: dict[str, AttendanceSchema]


class GradeRecord(AttendanceSchema):
    """Attendance record joined with its lesson."""

    lesson: LessonSchema | None = None


class GradeSummary(CamelModel):
    """Student grades page."""

    records: list[GradeRecord]
    average_score: float
    attendance_rate: float
