"""
Survey Schemas

Surveys, their questions, and students' responses about their teachers.
"""

from pydantic import Field

from .academics import GroupSchema
from .base import CamelModel, DocumentModel


class SurveySchema(DocumentModel):
    """Survey created by a curator."""

    title: str
    description: str = ""
    created_by: str = ""
    is_active: bool = False


class SurveyCreate(CamelModel):
    """Schema for creating a survey."""

    title: str
    description: str = ""
    is_active: bool = True


class SurveyUpdate(CamelModel):
    """Schema for updating a survey."""

    title: str | None = None
    description: str | None = None
    is_active: bool | None = None


class SurveyQuestionSchema(DocumentModel):
    """Question belonging to one survey."""

    survey_id: str
    text: str


class SurveyQuestionCreate(CamelModel):
    """Schema for adding a question."""

    text: str


class SurveyResponseSchema(DocumentModel):
    """One student's submission about one teacher."""

    survey_id: str
    student_id: str
    teacher_id: str
    submitted_at: str | None = None


class SurveyAnswerSchema(DocumentModel):
    """Numeric answer to one question."""

    response_id: str
    question_id: str
    value: int


class SurveySubmission(CamelModel):
    """Completed survey form: the group picks the teacher being rated."""

    group_id: str
    answers: dict[str, int] = Field(default_factory=dict)


class StudentSurvey(SurveySchema):
    """Active survey annotated with the student's completion status."""

    completed: bool = False


class SurveyDetail(CamelModel):
    """Survey page for a student."""

    survey: SurveySchema
    questions: list[SurveyQuestionSchema]
    groups: list[GroupSchema]
