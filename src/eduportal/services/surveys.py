"""
Survey Service

Surveys and their questions. Deleting a survey removes its questions,
responses and answers.
"""

from __future__ import annotations

from eduportal.backend import BackendClient, Query
from eduportal.core.schemas import (
    SurveyCreate,
    SurveyQuestionSchema,
    SurveySchema,
    SurveyUpdate,
)
from eduportal.core.validation import validate_title

from .base import Repository, to_data
from .cascade import CascadeReport, DeletionPlan
from .survey_responses import SurveyResponseService


class SurveyQuestionService(Repository[SurveyQuestionSchema]):
    """Survey questions collection."""

    collection_key = "survey_questions"
    schema = SurveyQuestionSchema

    async def by_survey(self, survey_id: str) -> list[SurveyQuestionSchema]:
        return await self._list(Query.equal("surveyId", survey_id))

    async def ids_for_survey(self, survey_id: str) -> list[str]:
        """Question IDs of a survey. Raises on backend errors."""
        questions = await self._fetch(Query.equal("surveyId", survey_id))
        return [question.id for question in questions]

    async def create(self, survey_id: str, text: str) -> SurveyQuestionSchema:
        return await self._create(
            {"surveyId": survey_id, "text": validate_title(text, "Question text")}
        )

    async def update_text(self, question_id: str, text: str) -> SurveyQuestionSchema:
        return await self._update(question_id, {"text": validate_title(text, "Question text")})


class SurveyService(Repository[SurveySchema]):
    """Surveys collection."""

    collection_key = "surveys"
    schema = SurveySchema

    def __init__(self, backend: BackendClient, collection_id: str | None = None):
        super().__init__(backend, collection_id)
        self.questions = SurveyQuestionService(backend)
        self.responses = SurveyResponseService(backend)

    async def by_creator(self, creator_id: str) -> list[SurveySchema]:
        return await self._list(Query.equal("createdBy", creator_id))

    async def active(self) -> list[SurveySchema]:
        return await self._list(Query.equal("isActive", True))

    async def create(self, survey_data: SurveyCreate, created_by: str) -> SurveySchema:
        return await self._create(
            {
                "title": validate_title(survey_data.title, "Survey title"),
                "description": survey_data.description,
                "createdBy": created_by,
                "isActive": survey_data.is_active,
            }
        )

    async def update(self, survey_id: str, survey_update: SurveyUpdate) -> SurveySchema:
        data = to_data(survey_update)
        if "title" in data:
            data["title"] = validate_title(data["title"], "Survey title")
        return await self._update(survey_id, data)

    async def delete_cascade(self, survey_id: str) -> CascadeReport:
        """Delete answers, then questions and responses, then the survey."""
        question_ids = await self.questions.ids_for_survey(survey_id)
        response_ids = await self.responses.ids_for_survey(survey_id)
        answer_ids = await self.responses.answers.ids_for_responses(response_ids)

        plan = (
            DeletionPlan(self.backend, f"survey {survey_id}")
            .stage((self.responses.answers.collection_id, answer_ids))
            .stage(
                (self.questions.collection_id, question_ids),
                (self.responses.collection_id, response_ids),
            )
            .stage((self.collection_id, [survey_id]))
        )
        return await plan.execute()
