"""Pydantic schemas for API validation."""

from .academics import (
    AttendanceCreate,
    AttendanceEntry,
    AttendanceSave,
    AttendanceSchema,
    AttendanceSheet,
    BulkFailure,
    BulkResult,
    GradeRecord,
    GradeSummary,
    GroupCreate,
    GroupSchema,
    GroupUpdate,
    LessonCreate,
    LessonSchema,
    LessonUpdate,
)
from .base import ActionResult, CamelModel, DocumentModel
from .dashboards import (
    AdminDashboard,
    CuratorDashboard,
    GroupJournal,
    JournalRow,
    StudentDashboard,
    TeacherGroup,
)
from .surveys import (
    StudentSurvey,
    SurveyAnswerSchema,
    SurveyCreate,
    SurveyDetail,
    SurveyQuestionCreate,
    SurveyQuestionSchema,
    SurveyResponseSchema,
    SurveySchema,
    SurveySubmission,
    SurveyUpdate,
)
from .users import (
    FirstUserStatus,
    LoginRequest,
    RegisterRequest,
    UserCreate,
    UserSchema,
    UserUpdate,
)

__all__ = [
    # Base
    "ActionResult",
    "CamelModel",
    "DocumentModel",
    # Users
    "FirstUserStatus",
    "LoginRequest",
    "RegisterRequest",
    "UserCreate",
    "UserSchema",
    "UserUpdate",
    # Groups, lessons, attendance
    "AttendanceCreate",
    "AttendanceEntry",
    "AttendanceSave",
    "AttendanceSchema",
    "AttendanceSheet",
    "BulkFailure",
    "BulkResult",
    "GradeRecord",
    "GradeSummary",
    "GroupCreate",
    "GroupSchema",
    "GroupUpdate",
    "LessonCreate",
    "LessonSchema",
    "LessonUpdate",
    # Dashboards
    "AdminDashboard",
    "CuratorDashboard",
    "GroupJournal",
    "JournalRow",
    "StudentDashboard",
    "TeacherGroup",
    # Surveys
    "StudentSurvey",
    "SurveyAnswerSchema",
    "SurveyCreate",
    "SurveyDetail",
    "SurveyQuestionCreate",
    "SurveyQuestionSchema",
    "SurveyResponseSchema",
    "SurveySchema",
    "SurveySubmission",
    "SurveyUpdate",
]
