"""
Tests for cascading deletes.
"""

from eduportal.backend import MAX_QUERY_VALUES
from eduportal.config import settings
from eduportal.services import DeletionPlan, GroupService, LessonService, SurveyService


def seed_group_tree(backend):
    """One group with two lessons, each with two attendance records."""
    group = backend.seed("groups", id="g1", title="7A", teacherId="t1", studentIds=["s1", "s2"])
    for lesson_id in ("l1", "l2"):
        backend.seed(
            "lessons",
            id=lesson_id,
            title="Algebra",
            date="2026-09-01",
            groupId="g1",
            teacherId="t1",
        )
        for student_id in ("s1", "s2"):
            backend.seed(
                "attendance",
                id=f"a-{lesson_id}-{student_id}",
                lessonId=lesson_id,
                studentId=student_id,
                present=True,
                score=80,
            )
    return group


class TestDeletionPlan:
    """Stages run in order and stop at the first failure."""

    async def test_children_deleted_before_parent(self, backend):
        seed_group_tree(backend)

        report = await GroupService(backend).delete_cascade("g1")

        assert report.completed
        assert report.orphans == 0
        assert backend.collection("groups") == {}
        assert backend.collection("lessons") == {}
        assert backend.collection("attendance") == {}

        order = [collection for collection, _ in backend.deleted]
        attendance_id = settings.collections["attendance"]
        last_attendance = max(i for i, c in enumerate(order) if c == attendance_id)
        first_lesson = order.index(settings.collections["lessons"])
        assert last_attendance < first_lesson
        assert order[-1] == settings.collections["groups"]

    async def test_failure_keeps_parent(self, backend):
        seed_group_tree(backend)
        backend.fail_deletes.add("a-l1-s2")

        report = await GroupService(backend).delete_cascade("g1")

        assert report.completed is False
        assert report.failed[0][0].endswith("/a-l1-s2")
        # Siblings in the failing stage still went; parents were never touched
        assert list(backend.collection("attendance")) == ["a-l1-s2"]
        assert set(backend.collection("lessons")) == {"l1", "l2"}
        assert "g1" in backend.collection("groups")

    async def test_rerun_finishes_the_job(self, backend):
        seed_group_tree(backend)
        backend.fail_deletes.add("a-l1-s2")
        groups = GroupService(backend)
        await groups.delete_cascade("g1")

        backend.fail_deletes.clear()
        report = await groups.delete_cascade("g1")

        assert report.completed
        assert backend.collection("groups") == {}

    async def test_already_deleted_counts_as_done(self, backend):
        """A 404 while deleting means a previous run already removed it."""
        plan = DeletionPlan(backend, "missing lesson").stage(
            (settings.collections["lessons"], ["nope"])
        )

        report = await plan.execute()

        assert report.completed
        assert report.deleted == [f"{settings.collections['lessons']}/nope"]

    async def test_empty_stages_are_skipped(self, backend):
        plan = DeletionPlan(backend, "nothing").stage(("attendance", [])).stage(("lessons", []))

        assert plan.stages == []
        assert (await plan.execute()).completed


class TestEntityCascades:
    async def test_lesson_cascade_leaves_other_lessons(self, backend):
        seed_group_tree(backend)

        report = await LessonService(backend).delete_cascade("l1")

        assert report.completed
        assert set(backend.collection("lessons")) == {"l2"}
        assert set(backend.collection("attendance")) == {"a-l2-s1", "a-l2-s2"}

    async def test_survey_cascade(self, backend):
        backend.seed("surveys", id="sv1", title="Teachers", createdBy="c1", isActive=True)
        backend.seed("survey_questions", id="q1", surveyId="sv1", text="Clear?")
        backend.seed("survey_responses", id="r1", surveyId="sv1", studentId="s1", teacherId="t1")
        backend.seed("survey_answers", id="ans1", responseId="r1", questionId="q1", value=90)
        backend.seed("survey_questions", id="q-other", surveyId="sv2", text="Other")

        report = await SurveyService(backend).delete_cascade("sv1")

        assert report.completed
        assert backend.collection("surveys") == {}
        assert backend.collection("survey_answers") == {}
        assert backend.collection("survey_responses") == {}
        assert set(backend.collection("survey_questions")) == {"q-other"}


class TestLargeCascades:
    """Child lookups follow every page and split long ID lists."""

    async def test_lesson_with_more_records_than_a_page(self, backend):
        backend.max_page_size = 25
        backend.seed(
            "lessons", id="l1", title="Algebra", date="2026-09-01", groupId="g1", teacherId="t1"
        )
        for n in range(30):
            backend.seed("attendance", lessonId="l1", studentId=f"s{n}", present=True, score=50)

        report = await LessonService(backend).delete_cascade("l1")

        assert report.completed
        assert backend.collection("attendance") == {}
        assert backend.collection("lessons") == {}

    async def test_page_size_setting_drives_paging(self, backend, monkeypatch):
        monkeypatch.setattr(settings, "BACKEND_PAGE_SIZE", 10)
        backend.seed("groups", id="g1", title="7A", teacherId="t1", studentIds=[])
        for n in range(23):
            backend.seed(
                "lessons", title=f"L{n}", date="2026-09-01", groupId="g1", teacherId="t1"
            )

        lesson_ids = await LessonService(backend).ids_for_groups(["g1"])

        assert len(lesson_ids) == 23
        assert backend.list_calls == 3

    async def test_group_with_many_lessons(self, backend):
        """More lesson IDs than one equal() query may carry."""
        backend.seed("groups", id="g1", title="7A", teacherId="t1", studentIds=["s1"])
        for n in range(MAX_QUERY_VALUES + 20):
            lesson = backend.seed(
                "lessons", title=f"L{n}", date="2026-09-01", groupId="g1", teacherId="t1"
            )
            backend.seed("attendance", lessonId=lesson["$id"], studentId="s1", score=70)

        report = await GroupService(backend).delete_cascade("g1")

        assert report.completed
        assert backend.collection("attendance") == {}
        assert backend.collection("lessons") == {}
        assert backend.collection("groups") == {}
