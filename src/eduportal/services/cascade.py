"""
Cascading Deletes

The backend has no cascade support, so removing a parent document means
deleting its children first. A ``DeletionPlan`` lists stages from the
deepest children up to the parent; each stage is deleted concurrently and
the plan stops at the first stage that leaves something behind, so the
remaining tree stays reachable and a rerun can finish the job.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from eduportal.backend import BackendClient, BackendError, NotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeletionTarget:
    """One document to delete."""

    collection_id: str
    document_id: str

    def __str__(self) -> str:
        return f"{self.collection_id}/{self.document_id}"


@dataclass
class CascadeReport:
    """What a plan managed to delete."""

    deleted: list[str] = field(default_factory=list)
    failed: list[tuple[str, str]] = field(default_factory=list)
    completed: bool = False

    @property
    def orphans(self) -> int:
        return len(self.failed)


class DeletionPlan:
    """Ordered stages of deletions, children before parents."""

    def __init__(self, backend: BackendClient, description: str):
        self.backend = backend
        self.description = description
        self.stages: list[list[DeletionTarget]] = []

    def stage(self, *groups: tuple[str, Iterable[str]]) -> DeletionPlan:
        """Append a stage of ``(collection_id, document_ids)`` groups deleted together.

        Stages with nothing to delete are skipped.
        """
        targets = [
            DeletionTarget(collection_id, doc_id)
            for collection_id, document_ids in groups
            for doc_id in document_ids
        ]
        if targets:
            self.stages.append(targets)
        return self

    async def _delete(self, target: DeletionTarget) -> tuple[DeletionTarget, str | None]:
        try:
            await self.backend.delete_document(target.collection_id, target.document_id)
        except NotFoundError:
            # Already gone: a previous run got this far
            pass
        except BackendError as e:
            logger.error(f"Cascade delete of {target} failed: {e}")
            return target, str(e)
        return target, None

    async def execute(self) -> CascadeReport:
        """Run the stages in order."""
        report = CascadeReport()

        for index, stage in enumerate(self.stages):
            results = await asyncio.gather(*(self._delete(target) for target in stage))
            for target, error in results:
                if error is None:
                    report.deleted.append(str(target))
                else:
                    report.failed.append((str(target), error))

            if report.failed:
                logger.warning(
                    f"Stopping cascade for {self.description} at stage {index + 1}/"
                    f"{len(self.stages)}: {report.orphans} deletions failed"
                )
                return report

        report.completed = True
        logger.info(f"Cascade for {self.description} removed {len(report.deleted)} documents")
        return report
