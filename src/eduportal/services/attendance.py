"""
Attendance Service

Per-lesson presence and scores, the teacher's bulk roster save, and the
student grade summary.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from eduportal.backend import BackendError, Query
from eduportal.core.schemas import (
    AttendanceCreate,
    AttendanceEntry,
    AttendanceSchema,
    BulkFailure,
    BulkResult,
    GradeRecord,
    GradeSummary,
)
from eduportal.core.validation import ValidationError, validate_score

from .base import Repository

if TYPE_CHECKING:
    from .lessons import LessonService

logger = logging.getLogger(__name__)


class AttendanceService(Repository[AttendanceSchema]):
    """Attendance collection.

    By convention there is at most one record per (lesson, student); the
    backend does not enforce it, so writes go through lookup-then-upsert.
    """

    collection_key = "attendance"
    schema = AttendanceSchema

    async def by_lesson(self, lesson_id: str) -> list[AttendanceSchema]:
        return await self._list(Query.equal("lessonId", lesson_id))

    async def by_student(self, student_id: str) -> list[AttendanceSchema]:
        return await self._list(Query.equal("studentId", student_id))

    async def ids_for_lessons(self, lesson_ids: list[str]) -> list[str]:
        """Record IDs of every listed lesson. Raises on backend errors."""
        if not lesson_ids:
            return []
        records = await self._fetch_in("lessonId", lesson_ids)
        return [record.id for record in records]

    async def find(self, lesson_id: str, student_id: str) -> AttendanceSchema | None:
        records = await self._fetch(
            Query.equal("lessonId", lesson_id), Query.equal("studentId", student_id)
        )
        return records[0] if records else None

    async def create(self, data: AttendanceCreate) -> AttendanceSchema:
        validate_score(data.score)
        return await self._create(
            {
                "lessonId": data.lesson_id,
                "studentId": data.student_id,
                "present": data.present,
                "score": data.score,
            }
        )

    async def update(
        self, record_id: str, *, present: bool | None = None, score: int | None = None
    ) -> AttendanceSchema:
        data: dict[str, object] = {}
        if present is not None:
            data["present"] = present
        if score is not None:
            data["score"] = validate_score(score)
        return await self._update(record_id, data)

    async def get_or_create(self, lesson_id: str, student_id: str) -> AttendanceSchema:
        """Existing record, or a new absent record with score 0."""
        existing = await self.find(lesson_id, student_id)
        if existing is not None:
            return existing
        return await self.create(
            AttendanceCreate(lesson_id=lesson_id, student_id=student_id, present=False, score=0)
        )

    async def _upsert(self, lesson_id: str, entry: AttendanceEntry) -> AttendanceSchema:
        existing = await self.find(lesson_id, entry.student_id)
        if existing is not None:
            return await self.update(existing.id, present=entry.present, score=entry.score)
        return await self.create(
            AttendanceCreate(
                lesson_id=lesson_id,
                student_id=entry.student_id,
                present=entry.present,
                score=entry.score,
            )
        )

    async def bulk_upsert(self, lesson_id: str, entries: list[AttendanceEntry]) -> BulkResult:
        """Save a whole roster with one concurrent request chain per student.

        Scores are validated up front. Records that commit stay committed
        when others fail; failures are returned per student, and rerunning
        the save is safe because each write is an upsert.
        """
        for entry in entries:
            try:
                validate_score(entry.score)
            except ValidationError as e:
                raise ValidationError(f"Student {entry.student_id}: {e}") from e

        results = await asyncio.gather(
            *(self._upsert(lesson_id, entry) for entry in entries), return_exceptions=True
        )

        outcome = BulkResult()
        for entry, result in zip(entries, results, strict=True):
            if isinstance(result, BackendError):
                logger.error(f"Attendance save failed for student {entry.student_id}: {result}")
                outcome.failed.append(BulkFailure(key=entry.student_id, error=str(result)))
            elif isinstance(result, BaseException):
                raise result
            else:
                outcome.succeeded.append(entry.student_id)

        logger.info(
            f"Attendance for lesson {lesson_id} saved: "
            f"{len(outcome.succeeded)} ok, {len(outcome.failed)} failed"
        )
        return outcome

    async def grade_summary(self, student_id: str, lessons: LessonService) -> GradeSummary:
        """Student's records joined with their lessons, plus averages."""
        records = await self.by_student(student_id)
        lesson_list = await asyncio.gather(*(lessons.get(record.lesson_id) for record in records))

        joined = [
            GradeRecord(**record.model_dump(), lesson=lesson)
            for record, lesson in zip(records, lesson_list, strict=True)
        ]

        if not joined:
            return GradeSummary(records=[], average_score=0.0, attendance_rate=0.0)

        average = sum(record.score for record in joined) / len(joined)
        attended = sum(1 for record in joined if record.present)
        return GradeSummary(
            records=joined,
            average_score=average,
            attendance_rate=attended / len(joined) * 100,
        )
