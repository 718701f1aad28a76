"""
Student API Endpoints

Grades, attendance and teacher-rating surveys for the signed-in student.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

import asyncio

from fastapi import APIRouter, Depends, HTTPException, status

from eduportal.api.deps import ensure_found, get_groups, get_surveys, require_roles
from eduportal.core.roles import UserRole
from eduportal.core.schemas import (
    ActionResult,
    BulkResult,
    GradeSummary,
    StudentDashboard,
    StudentSurvey,
    SurveyDetail,
    SurveySubmission,
    UserSchema,
)
from eduportal.services import GroupService, SurveyService

RECENT_RECORDS = 5

require_student = require_roles(UserRole.STUDENT)

router = APIRouter(dependencies=[Depends(require_student)])


@router.get("", response_model=StudentDashboard)
async def dashboard(
    student: UserSchema = Depends(require_student),
    groups: GroupService = Depends(get_groups),
) -> StudentDashboard:
    """Own groups and the most recent attendance records."""
    student_groups, summary = await asyncio.gather(
        groups.by_student(student.id),
        groups.lessons.attendance.grade_summary(student.id, groups.lessons),
    )
    recent = sorted(
        summary.records,
        key=lambda record: record.lesson.date if record.lesson else "",
        reverse=True,
    )[:RECENT_RECORDS]
    return StudentDashboard(user=student, groups=student_groups, recent=recent)


@router.get("/grades", response_model=GradeSummary)
async def grades(
    student: UserSchema = Depends(require_student),
    groups: GroupService = Depends(get_groups),
) -> GradeSummary:
    """Scores and presence per lesson, with the average and attendance rate."""
    return await groups.lessons.attendance.grade_summary(student.id, groups.lessons)


@router.get("/surveys", response_model=list[StudentSurvey])
async def list_surveys(
    student: UserSchema = Depends(require_student),
    surveys: SurveyService = Depends(get_surveys),
    groups: GroupService = Depends(get_groups),
) -> list[StudentSurvey]:
    """Active surveys, each marked completed once every teacher was rated."""
    return await surveys.responses.student_surveys(student.id, surveys, groups)


@router.get("/surveys/{survey_id}", response_model=SurveyDetail)
async def survey_detail(
    survey_id: str,
    student: UserSchema = Depends(require_student),
    surveys: SurveyService = Depends(get_surveys),
    groups: GroupService = Depends(get_groups),
) -> SurveyDetail:
    """Questions of an active survey and the groups whose teacher can be rated."""
    survey = ensure_found(await surveys.get(survey_id), "Survey", survey_id)
    if not survey.is_active:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Survey not found with ID: {survey_id}",
        )

    questions, student_groups = await asyncio.gather(
        surveys.questions.by_survey(survey_id), groups.by_student(student.id)
    )
    return SurveyDetail(
        survey=survey,
        questions=questions,
        groups=[group for group in student_groups if group.teacher_id],
    )


@router.post(
    "/surveys/{survey_id}",
    response_model=ActionResult[BulkResult],
    status_code=status.HTTP_201_CREATED,
)
async def submit_survey(
    survey_id: str,
    submission: SurveySubmission,
    student: UserSchema = Depends(require_student),
    surveys: SurveyService = Depends(get_surveys),
    groups: GroupService = Depends(get_groups),
) -> ActionResult[BulkResult]:
    """Rate the teacher of one of the student's groups."""
    _, outcome = await surveys.responses.submit(
        survey_id, student.id, submission, surveys, groups
    )
    if outcome.ok:
        message = "Thank you! Your answers were submitted."
    else:
        message = f"Answers submitted with {len(outcome.failed)} errors"
    return ActionResult(message=message, data=outcome)
