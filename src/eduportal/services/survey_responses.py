"""
Survey Response Service

Students rate the teacher of each of their groups; one response per
(survey, student, teacher), holding one numeric answer per question.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from eduportal.backend import BackendClient, BackendError, Query
from eduportal.core.schemas import (
    BulkFailure,
    BulkResult,
    StudentSurvey,
    SurveyAnswerSchema,
    SurveyResponseSchema,
    SurveySubmission,
)
from eduportal.core.validation import ValidationError, validate_answer_value

from .base import Repository, now_iso

if TYPE_CHECKING:
    from .groups import GroupService
    from .surveys import SurveyService

logger = logging.getLogger(__name__)


class SurveyAnswerService(Repository[SurveyAnswerSchema]):
    """Survey answers collection."""

    collection_key = "survey_answers"
    schema = SurveyAnswerSchema

    async def by_response(self, response_id: str) -> list[SurveyAnswerSchema]:
        return await self._list(Query.equal("responseId", response_id))

    async def ids_for_responses(self, response_ids: list[str]) -> list[str]:
        """Answer IDs of the listed responses. Raises on backend errors."""
        if not response_ids:
            return []
        answers = await self._fetch_in("responseId", response_ids)
        return [answer.id for answer in answers]

    async def create(self, response_id: str, question_id: str, value: int) -> SurveyAnswerSchema:
        return await self._create(
            {
                "responseId": response_id,
                "questionId": question_id,
                "value": validate_answer_value(value),
            }
        )

    async def bulk_create(self, response_id: str, answers: dict[str, int]) -> BulkResult:
        """Create all answers concurrently; failures are reported per question."""
        question_ids = [question_id for question_id in answers if question_id]
        results = await asyncio.gather(
            *(self.create(response_id, qid, answers[qid]) for qid in question_ids),
            return_exceptions=True,
        )

        outcome = BulkResult()
        for question_id, result in zip(question_ids, results, strict=True):
            if isinstance(result, BackendError):
                logger.error(f"Answer to question {question_id} failed: {result}")
                outcome.failed.append(BulkFailure(key=question_id, error=str(result)))
            elif isinstance(result, BaseException):
                raise result
            else:
                outcome.succeeded.append(question_id)
        return outcome


class SurveyResponseService(Repository[SurveyResponseSchema]):
    """Survey responses collection."""

    collection_key = "survey_responses"
    schema = SurveyResponseSchema

    def __init__(self, backend: BackendClient, collection_id: str | None = None):
        super().__init__(backend, collection_id)
        self.answers = SurveyAnswerService(backend)

    async def has_completed(self, survey_id: str, student_id: str, teacher_id: str) -> bool:
        """Whether the student already rated this teacher in this survey."""
        try:
            total = await self._count(
                Query.equal("surveyId", survey_id),
                Query.equal("studentId", student_id),
                Query.equal("teacherId", teacher_id),
            )
        except BackendError as e:
            logger.error(f"Error checking survey completion: {e}")
            return False
        return total > 0

    async def by_student(self, student_id: str) -> list[SurveyResponseSchema]:
        return await self._list(Query.equal("studentId", student_id))

    async def ids_for_survey(self, survey_id: str) -> list[str]:
        """Response IDs of a survey. Raises on backend errors."""
        responses = await self._fetch(Query.equal("surveyId", survey_id))
        return [response.id for response in responses]

    async def create(
        self, survey_id: str, student_id: str, teacher_id: str
    ) -> SurveyResponseSchema:
        return await self._create(
            {
                "surveyId": survey_id,
                "studentId": student_id,
                "teacherId": teacher_id,
                "submittedAt": now_iso(),
            }
        )

    async def student_surveys(
        self, student_id: str, surveys: SurveyService, groups: GroupService
    ) -> list[StudentSurvey]:
        """Active surveys with a ``completed`` flag for this student.

        A survey counts as completed once the student has rated the teacher
        of every group they belong to.
        """
        active_surveys, student_groups = await asyncio.gather(
            surveys.active(), groups.by_student(student_id)
        )
        teacher_ids = [group.teacher_id for group in student_groups if group.teacher_id]

        async def with_status(survey_id: str) -> bool:
            statuses = await asyncio.gather(
                *(self.has_completed(survey_id, student_id, tid) for tid in teacher_ids)
            )
            return all(statuses)

        completed = await asyncio.gather(*(with_status(survey.id) for survey in active_surveys))
        return [
            StudentSurvey(**survey.model_dump(), completed=done)
            for survey, done in zip(active_surveys, completed, strict=True)
        ]

    async def submit(
        self,
        survey_id: str,
        student_id: str,
        submission: SurveySubmission,
        surveys: SurveyService,
        groups: GroupService,
    ) -> tuple[SurveyResponseSchema, BulkResult]:
        """Record a student's answers about the teacher of one of their groups.

        Raises:
            ValidationError: Unknown/inactive survey, foreign group, group
                without a teacher, repeated submission, or answer out of range
        """
        for question_id, value in submission.answers.items():
            try:
                validate_answer_value(value)
            except ValidationError as e:
                raise ValidationError(f"Question {question_id}: {e}") from e

        survey = await surveys.get(survey_id)
        if survey is None or not survey.is_active:
            raise ValidationError("Survey is not available")

        group = await groups.get(submission.group_id)
        if group is None or student_id not in group.student_ids:
            raise ValidationError("Selected group was not found")
        if not group.teacher_id:
            raise ValidationError("Selected group has no teacher")

        questions = await surveys.questions.by_survey(survey_id)
        known = {question.id for question in questions}
        unknown = [qid for qid in submission.answers if qid and qid not in known]
        if unknown:
            raise ValidationError(f"Unknown questions: {', '.join(sorted(unknown))}")

        if await self.has_completed(survey_id, student_id, group.teacher_id):
            raise ValidationError("Survey already completed for this teacher")

        response = await self.create(survey_id, student_id, group.teacher_id)
        outcome = await self.answers.bulk_create(response.id, submission.answers)
        logger.info(
            f"Survey {survey_id} submitted by {student_id}",
            extra={"teacher_id": group.teacher_id, "answers": len(outcome.succeeded)},
        )
        return response, outcome
