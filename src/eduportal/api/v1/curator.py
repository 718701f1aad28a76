"""
Curator API Endpoints

Curators run the school: they create teachers and students, activate
accounts, build groups, schedule lessons and author surveys.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from eduportal.api.deps import (
    ensure_completed,
    ensure_found,
    get_groups,
    get_lessons,
    get_surveys,
    get_users,
    require_roles,
)
from eduportal.core.roles import UserRole
from eduportal.core.schemas import (
    ActionResult,
    CuratorDashboard,
    GroupCreate,
    GroupSchema,
    GroupUpdate,
    LessonCreate,
    LessonSchema,
    LessonUpdate,
    SurveyCreate,
    SurveyQuestionCreate,
    SurveyQuestionSchema,
    SurveySchema,
    SurveyUpdate,
    UserCreate,
    UserSchema,
    UserUpdate,
)
from eduportal.services import GroupService, LessonService, SurveyService, UserService

logger = logging.getLogger(__name__)

require_curator = require_roles(UserRole.CURATOR)

router = APIRouter(dependencies=[Depends(require_curator)])

CREATABLE_ROLES = (UserRole.TEACHER, UserRole.STUDENT)


@router.get("", response_model=CuratorDashboard)
async def dashboard(
    users: UserService = Depends(get_users),
    groups: GroupService = Depends(get_groups),
    lessons: LessonService = Depends(get_lessons),
    surveys: SurveyService = Depends(get_surveys),
) -> CuratorDashboard:
    """Collection sizes for the landing page."""
    user_count, pending, group_count, lesson_count, survey_count = await asyncio.gather(
        users.count(),
        users.count_inactive(),
        groups.count(),
        lessons.count(),
        surveys.count(),
    )
    return CuratorDashboard(
        users=user_count,
        pending=pending,
        groups=group_count,
        lessons=lesson_count,
        surveys=survey_count,
    )


# Users


@router.get("/users", response_model=list[UserSchema])
async def list_users(
    role: UserRole | None = Query(None, description="Only users with this role"),
    users: UserService = Depends(get_users),
) -> list[UserSchema]:
    if role is not None:
        return await users.by_role(role)
    return await users.list_all()


@router.get("/users/pending", response_model=list[UserSchema])
async def pending_users(users: UserService = Depends(get_users)) -> list[UserSchema]:
    """Accounts waiting for activation."""
    return await users.inactive()


@router.get("/users/teachers", response_model=list[UserSchema])
async def active_teachers(users: UserService = Depends(get_users)) -> list[UserSchema]:
    """Teachers that can be assigned to groups and lessons."""
    return await users.active_teachers()


@router.post(
    "/users",
    response_model=ActionResult[UserSchema],
    status_code=status.HTTP_201_CREATED,
)
async def create_user(
    user_data: UserCreate, users: UserService = Depends(get_users)
) -> ActionResult[UserSchema]:
    """Create a teacher or student account (inactive until activated)."""
    if user_data.role not in CREATABLE_ROLES:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Curators can only create teachers and students",
        )

    user = await users.create_user(user_data)
    return ActionResult(message="User created", data=user)


@router.put("/users/{user_id}", response_model=ActionResult[UserSchema])
async def update_user(
    user_id: str, user_update: UserUpdate, users: UserService = Depends(get_users)
) -> ActionResult[UserSchema]:
    user = await users.update(user_id, user_update)
    return ActionResult(message="User updated", data=user)


@router.post("/users/{user_id}/activate", response_model=ActionResult[UserSchema])
async def activate_user(
    user_id: str, users: UserService = Depends(get_users)
) -> ActionResult[UserSchema]:
    user = await users.activate(user_id)
    return ActionResult(message="User activated", data=user)


@router.post("/users/{user_id}/deactivate", response_model=ActionResult[UserSchema])
async def deactivate_user(
    user_id: str, users: UserService = Depends(get_users)
) -> ActionResult[UserSchema]:
    user = await users.deactivate(user_id)
    return ActionResult(message="User deactivated", data=user)


# Groups


@router.get("/groups", response_model=list[GroupSchema])
async def list_groups(groups: GroupService = Depends(get_groups)) -> list[GroupSchema]:
    return await groups.list_all()


@router.get("/groups/{group_id}", response_model=GroupSchema)
async def get_group(group_id: str, groups: GroupService = Depends(get_groups)) -> GroupSchema:
    return ensure_found(await groups.get(group_id), "Group", group_id)


@router.post(
    "/groups",
    response_model=ActionResult[GroupSchema],
    status_code=status.HTTP_201_CREATED,
)
async def create_group(
    group_data: GroupCreate,
    curator: UserSchema = Depends(require_curator),
    groups: GroupService = Depends(get_groups),
) -> ActionResult[GroupSchema]:
    group = await groups.create(group_data, created_by=curator.id)
    return ActionResult(message="Group created", data=group)


@router.put("/groups/{group_id}", response_model=ActionResult[GroupSchema])
async def update_group(
    group_id: str, group_update: GroupUpdate, groups: GroupService = Depends(get_groups)
) -> ActionResult[GroupSchema]:
    group = await groups.update(group_id, group_update)
    return ActionResult(message="Group updated", data=group)


@router.delete("/groups/{group_id}", response_model=ActionResult[None])
async def delete_group(
    group_id: str, groups: GroupService = Depends(get_groups)
) -> ActionResult[None]:
    """Delete a group together with its lessons and their attendance."""
    report = await groups.delete_cascade(group_id)
    ensure_completed(report, "Group")
    return ActionResult(message="Group deleted")


# Lessons


@router.get("/lessons", response_model=list[LessonSchema])
async def list_lessons(
    group_id: str | None = Query(None, alias="groupId"),
    lessons: LessonService = Depends(get_lessons),
) -> list[LessonSchema]:
    if group_id:
        return await lessons.by_group(group_id)
    return await lessons.list_all()


@router.post(
    "/lessons",
    response_model=ActionResult[LessonSchema],
    status_code=status.HTTP_201_CREATED,
)
async def create_lesson(
    lesson_data: LessonCreate,
    groups: GroupService = Depends(get_groups),
    lessons: LessonService = Depends(get_lessons),
) -> ActionResult[LessonSchema]:
    """Schedule a lesson; the group's teacher teaches it unless one is given."""
    if not lesson_data.group_id:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Lesson must belong to a group",
        )

    teacher_id = lesson_data.teacher_id
    if not teacher_id:
        group = ensure_found(await groups.get(lesson_data.group_id), "Group", lesson_data.group_id)
        teacher_id = group.teacher_id

    lesson = await lessons.create(lesson_data, teacher_id=teacher_id)
    return ActionResult(message="Lesson created", data=lesson)


@router.put("/lessons/{lesson_id}", response_model=ActionResult[LessonSchema])
async def update_lesson(
    lesson_id: str, lesson_update: LessonUpdate, lessons: LessonService = Depends(get_lessons)
) -> ActionResult[LessonSchema]:
    lesson = await lessons.update(lesson_id, lesson_update)
    return ActionResult(message="Lesson updated", data=lesson)


@router.delete("/lessons/{lesson_id}", response_model=ActionResult[None])
async def delete_lesson(
    lesson_id: str, lessons: LessonService = Depends(get_lessons)
) -> ActionResult[None]:
    report = await lessons.delete_cascade(lesson_id)
    ensure_completed(report, "Lesson")
    return ActionResult(message="Lesson deleted")


# Surveys


@router.get("/surveys", response_model=list[SurveySchema])
async def list_surveys(surveys: SurveyService = Depends(get_surveys)) -> list[SurveySchema]:
    return await surveys.list_all()


@router.post(
    "/surveys",
    response_model=ActionResult[SurveySchema],
    status_code=status.HTTP_201_CREATED,
)
async def create_survey(
    survey_data: SurveyCreate,
    curator: UserSchema = Depends(require_curator),
    surveys: SurveyService = Depends(get_surveys),
) -> ActionResult[SurveySchema]:
    survey = await surveys.create(survey_data, created_by=curator.id)
    return ActionResult(message="Survey created", data=survey)


@router.put("/surveys/{survey_id}", response_model=ActionResult[SurveySchema])
async def update_survey(
    survey_id: str, survey_update: SurveyUpdate, surveys: SurveyService = Depends(get_surveys)
) -> ActionResult[SurveySchema]:
    survey = await surveys.update(survey_id, survey_update)
    return ActionResult(message="Survey updated", data=survey)


@router.delete("/surveys/{survey_id}", response_model=ActionResult[None])
async def delete_survey(
    survey_id: str, surveys: SurveyService = Depends(get_surveys)
) -> ActionResult[None]:
    """Delete a survey with its questions, responses and answers."""
    report = await surveys.delete_cascade(survey_id)
    ensure_completed(report, "Survey")
    return ActionResult(message="Survey deleted")


@router.get("/surveys/{survey_id}/questions", response_model=list[SurveyQuestionSchema])
async def list_questions(
    survey_id: str, surveys: SurveyService = Depends(get_surveys)
) -> list[SurveyQuestionSchema]:
    return await surveys.questions.by_survey(survey_id)


@router.post(
    "/surveys/{survey_id}/questions",
    response_model=ActionResult[SurveyQuestionSchema],
    status_code=status.HTTP_201_CREATED,
)
async def create_question(
    survey_id: str,
    question_data: SurveyQuestionCreate,
    surveys: SurveyService = Depends(get_surveys),
) -> ActionResult[SurveyQuestionSchema]:
    ensure_found(await surveys.get(survey_id), "Survey", survey_id)
    question = await surveys.questions.create(survey_id, question_data.text)
    return ActionResult(message="Question added", data=question)


@router.put("/questions/{question_id}", response_model=ActionResult[SurveyQuestionSchema])
async def update_question(
    question_id: str,
    question_data: SurveyQuestionCreate,
    surveys: SurveyService = Depends(get_surveys),
) -> ActionResult[SurveyQuestionSchema]:
    question = await surveys.questions.update_text(question_id, question_data.text)
    return ActionResult(message="Question updated", data=question)


@router.delete("/questions/{question_id}", response_model=ActionResult[None])
async def delete_question(
    question_id: str, surveys: SurveyService = Depends(get_surveys)
) -> ActionResult[None]:
    await surveys.questions.delete(question_id)
    logger.info(f"Question {question_id} deleted")
    return ActionResult(message="Question deleted")
