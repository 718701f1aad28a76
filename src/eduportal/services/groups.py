"""
Group Service
"""

from __future__ import annotations

import logging

from eduportal.backend import BackendClient, Query
from eduportal.core.schemas import GroupCreate, GroupSchema, GroupUpdate
from eduportal.core.validation import validate_title

from .base import Repository, to_data
from .cascade import CascadeReport, DeletionPlan
from .lessons import LessonService

logger = logging.getLogger(__name__)


class GroupService(Repository[GroupSchema]):
    """Groups collection; a group owns its lessons and their attendance."""

    collection_key = "groups"
    schema = GroupSchema

    def __init__(self, backend: BackendClient, collection_id: str | None = None):
        super().__init__(backend, collection_id)
        self.lessons = LessonService(backend)

    async def by_student(self, student_id: str) -> list[GroupSchema]:
        """Groups whose ``studentIds`` contain the student."""
        groups = await self._list(Query.search("studentIds", student_id))
        # Full-text search can over-match; keep exact members only
        return [group for group in groups if student_id in group.student_ids]

    async def by_teacher(self, teacher_id: str) -> list[GroupSchema]:
        return await self._list(Query.equal("teacherId", teacher_id))

    async def create(self, group_data: GroupCreate, created_by: str) -> GroupSchema:
        title = validate_title(group_data.title, "Group title")
        return await self._create(
            {
                "title": title,
                "studentIds": list(dict.fromkeys(group_data.student_ids)),
                "teacherId": group_data.teacher_id,
                "createdBy": created_by,
            }
        )

    async def update(self, group_id: str, group_update: GroupUpdate) -> GroupSchema:
        data = to_data(group_update)
        if "title" in data:
            data["title"] = validate_title(data["title"], "Group title")
        if data.get("studentIds") is not None:
            data["studentIds"] = list(dict.fromkeys(data["studentIds"]))
        return await self._update(group_id, data)

    async def delete_cascade(self, group_id: str) -> CascadeReport:
        """Delete the group, its lessons, and their attendance."""
        lesson_ids = await self.lessons.ids_for_groups([group_id])
        attendance_ids = await self.lessons.attendance.ids_for_lessons(lesson_ids)
        logger.info(
            f"Deleting group {group_id} with {len(lesson_ids)} lessons "
            f"and {len(attendance_ids)} attendance records"
        )

        plan = (
            DeletionPlan(self.backend, f"group {group_id}")
            .stage((self.lessons.attendance.collection_id, attendance_ids))
            .stage((self.lessons.collection_id, lesson_ids))
            .stage((self.collection_id, [group_id]))
        )
        return await plan.execute()
