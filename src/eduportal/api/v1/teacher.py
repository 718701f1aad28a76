"""
Teacher API Endpoints

A teacher sees only the groups they teach, schedules lessons for them,
and fills in attendance and scores.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

import asyncio

from fastapi import APIRouter, Depends, HTTPException, status

from eduportal.api.deps import (
    ensure_completed,
    ensure_found,
    get_groups,
    get_lessons,
    get_users,
    require_roles,
)
from eduportal.core.roles import UserRole
from eduportal.core.schemas import (
    ActionResult,
    AttendanceSave,
    AttendanceSheet,
    BulkResult,
    GroupJournal,
    GroupSchema,
    JournalRow,
    LessonCreate,
    LessonSchema,
    LessonUpdate,
    TeacherGroup,
    UserSchema,
)
from eduportal.services import GroupService, LessonService, UserService

require_teacher = require_roles(UserRole.TEACHER)

router = APIRouter(dependencies=[Depends(require_teacher)])


async def own_group(group_id: str, teacher: UserSchema, groups: GroupService) -> GroupSchema:
    group = ensure_found(await groups.get(group_id), "Group", group_id)
    if group.teacher_id != teacher.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not teach this group",
        )
    return group


async def own_lesson(lesson_id: str, teacher: UserSchema, lessons: LessonService) -> LessonSchema:
    lesson = ensure_found(await lessons.get(lesson_id), "Lesson", lesson_id)
    if lesson.teacher_id != teacher.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have access to this lesson",
        )
    return lesson


@router.get("", response_model=list[TeacherGroup])
async def my_groups(
    teacher: UserSchema = Depends(require_teacher),
    groups: GroupService = Depends(get_groups),
    users: UserService = Depends(get_users),
) -> list[TeacherGroup]:
    """Groups taught by the signed-in teacher, with their students."""
    teacher_groups = await groups.by_teacher(teacher.id)
    rosters = await asyncio.gather(*(users.by_ids(group.student_ids) for group in teacher_groups))
    return [
        TeacherGroup(group=group, students=students)
        for group, students in zip(teacher_groups, rosters, strict=True)
    ]


@router.get("/groups/{group_id}/lessons", response_model=list[LessonSchema])
async def group_lessons(
    group_id: str,
    teacher: UserSchema = Depends(require_teacher),
    groups: GroupService = Depends(get_groups),
) -> list[LessonSchema]:
    await own_group(group_id, teacher, groups)
    return await groups.lessons.by_group(group_id)


@router.post(
    "/groups/{group_id}/lessons",
    response_model=ActionResult[LessonSchema],
    status_code=status.HTTP_201_CREATED,
)
async def create_lesson(
    group_id: str,
    lesson_data: LessonCreate,
    teacher: UserSchema = Depends(require_teacher),
    groups: GroupService = Depends(get_groups),
) -> ActionResult[LessonSchema]:
    """Schedule a lesson for one of the teacher's groups."""
    await own_group(group_id, teacher, groups)
    lesson_data = lesson_data.model_copy(update={"group_id": group_id})
    lesson = await groups.lessons.create(lesson_data, teacher_id=teacher.id)
    return ActionResult(message="Lesson created", data=lesson)


@router.put("/lessons/{lesson_id}", response_model=ActionResult[LessonSchema])
async def update_lesson(
    lesson_id: str,
    lesson_update: LessonUpdate,
    teacher: UserSchema = Depends(require_teacher),
    lessons: LessonService = Depends(get_lessons),
) -> ActionResult[LessonSchema]:
    await own_lesson(lesson_id, teacher, lessons)
    # A teacher cannot hand a lesson over or move it to another group
    lesson_update = LessonUpdate(
        **lesson_update.model_dump(exclude_unset=True, exclude={"teacher_id", "group_id"})
    )
    lesson = await lessons.update(lesson_id, lesson_update)
    return ActionResult(message="Lesson updated", data=lesson)


@router.delete("/lessons/{lesson_id}", response_model=ActionResult[None])
async def delete_lesson(
    lesson_id: str,
    teacher: UserSchema = Depends(require_teacher),
    lessons: LessonService = Depends(get_lessons),
) -> ActionResult[None]:
    await own_lesson(lesson_id, teacher, lessons)
    report = await lessons.delete_cascade(lesson_id)
    ensure_completed(report, "Lesson")
    return ActionResult(message="Lesson deleted")


@router.get("/groups/{group_id}/journal", response_model=GroupJournal)
async def group_journal(
    group_id: str,
    teacher: UserSchema = Depends(require_teacher),
    groups: GroupService = Depends(get_groups),
    users: UserService = Depends(get_users),
) -> GroupJournal:
    """Every lesson of the group against every student."""
    group = await own_group(group_id, teacher, groups)
    lessons, students = await asyncio.gather(
        groups.lessons.by_group(group_id), users.by_ids(group.student_ids)
    )
    lessons.sort(key=lambda lesson: lesson.date)
    sheets = await asyncio.gather(
        *(groups.lessons.attendance.by_lesson(lesson.id) for lesson in lessons)
    )

    records = {
        (record.lesson_id, record.student_id): record for sheet in sheets for record in sheet
    }
    rows = []
    for student in students:
        scores: dict[str, int | None] = {}
        present: dict[str, bool] = {}
        for lesson in lessons:
            record = records.get((lesson.id, student.id))
            scores[lesson.id] = record.score if record else None
            present[lesson.id] = record.present if record else False
        rows.append(JournalRow(student=student, scores=scores, present=present))

    return GroupJournal(group=group, lessons=lessons, rows=rows)


@router.get("/lessons/{lesson_id}/attendance", response_model=AttendanceSheet)
async def attendance_sheet(
    lesson_id: str,
    teacher: UserSchema = Depends(require_teacher),
    groups: GroupService = Depends(get_groups),
    users: UserService = Depends(get_users),
) -> AttendanceSheet:
    """Students of the lesson's group with their current records."""
    lesson = await own_lesson(lesson_id, teacher, groups.lessons)
    group = ensure_found(await groups.get(lesson.group_id), "Group", lesson.group_id)

    students, records = await asyncio.gather(
        users.by_ids(group.student_ids), groups.lessons.attendance.by_lesson(lesson_id)
    )
    return AttendanceSheet(
        lesson=lesson,
        group=group,
        students=students,
        records={record.student_id: record for record in records},
    )


@router.put("/lessons/{lesson_id}/attendance", response_model=ActionResult[BulkResult])
async def save_attendance(
    lesson_id: str,
    sheet: AttendanceSave,
    teacher: UserSchema = Depends(require_teacher),
    groups: GroupService = Depends(get_groups),
) -> ActionResult[BulkResult]:
    """Save the whole roster; rows that fail are listed in the result."""
    lesson = await own_lesson(lesson_id, teacher, groups.lessons)
    group = ensure_found(await groups.get(lesson.group_id), "Group", lesson.group_id)

    outsiders = [
        entry.student_id for entry in sheet.records if entry.student_id not in group.student_ids
    ]
    if outsiders:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Students not in this group: {', '.join(outsiders)}",
        )

    outcome = await groups.lessons.attendance.bulk_upsert(lesson_id, sheet.records)
    if outcome.ok:
        message = "Attendance saved"
    else:
        message = f"Attendance saved with {len(outcome.failed)} errors; save again to retry"
    return ActionResult(message=message, data=outcome)
