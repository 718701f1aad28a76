"""
Services

Repositories over the backend collections and the account flows.
"""

from .attendance import AttendanceService
from .auth import (
    AccountNotActivatedError,
    AuthError,
    AuthService,
    LoginResult,
    NotActivated,
)
from .cascade import CascadeReport, DeletionPlan
from .groups import GroupService
from .lessons import LessonService
from .survey_responses import SurveyAnswerService, SurveyResponseService
from .surveys import SurveyQuestionService, SurveyService
from .users import UserService

__all__ = [
    "AccountNotActivatedError",
    "AttendanceService",
    "AuthError",
    "AuthService",
    "CascadeReport",
    "DeletionPlan",
    "GroupService",
    "LessonService",
    "LoginResult",
    "NotActivated",
    "SurveyAnswerService",
    "SurveyQuestionService",
    "SurveyResponseService",
    "SurveyService",
    "UserService",
]
