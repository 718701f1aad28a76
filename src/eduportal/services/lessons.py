"""
Lesson Service
"""

from __future__ import annotations

import logging

from eduportal.backend import BackendClient, Query
from eduportal.core.schemas import LessonCreate, LessonSchema, LessonUpdate
from eduportal.core.validation import validate_title

from .attendance import AttendanceService
from .base import Repository, to_data
from .cascade import CascadeReport, DeletionPlan

logger = logging.getLogger(__name__)


class LessonService(Repository[LessonSchema]):
    """Lessons collection; deleting a lesson removes its attendance first."""

    collection_key = "lessons"
    schema = LessonSchema

    def __init__(self, backend: BackendClient, collection_id: str | None = None):
        super().__init__(backend, collection_id)
        self.attendance = AttendanceService(backend)

    async def by_group(self, group_id: str) -> list[LessonSchema]:
        return await self._list(Query.equal("groupId", group_id))

    async def by_teacher(self, teacher_id: str) -> list[LessonSchema]:
        return await self._list(Query.equal("teacherId", teacher_id))

    async def ids_for_groups(self, group_ids: list[str]) -> list[str]:
        """Lesson IDs of the listed groups. Raises on backend errors."""
        if not group_ids:
            return []
        lessons = await self._fetch_in("groupId", group_ids)
        return [lesson.id for lesson in lessons]

    async def create(self, lesson_data: LessonCreate, teacher_id: str) -> LessonSchema:
        """Create a lesson taught by ``teacher_id``."""
        title = validate_title(lesson_data.title, "Lesson title")
        return await self._create(
            {
                "title": title,
                "description": lesson_data.description,
                "date": lesson_data.date,
                "groupId": lesson_data.group_id,
                "teacherId": teacher_id,
            }
        )

    async def update(self, lesson_id: str, lesson_update: LessonUpdate) -> LessonSchema:
        data = to_data(lesson_update)
        if "title" in data:
            data["title"] = validate_title(data["title"], "Lesson title")
        return await self._update(lesson_id, data)

    async def delete_cascade(self, lesson_id: str) -> CascadeReport:
        """Delete the lesson and its attendance records."""
        attendance_ids = await self.attendance.ids_for_lessons([lesson_id])
        logger.info(f"Deleting lesson {lesson_id} with {len(attendance_ids)} attendance records")
        plan = (
            DeletionPlan(self.backend, f"lesson {lesson_id}")
            .stage((self.attendance.collection_id, attendance_ids))
            .stage((self.collection_id, [lesson_id]))
        )
        return await plan.execute()
