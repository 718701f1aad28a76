"""
Repository Base

Shared list/get/create/update/delete plumbing over one backend collection.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from eduportal.backend import MAX_QUERY_VALUES, BackendClient, BackendError, Query
from eduportal.config import settings
from eduportal.core.schemas import DocumentModel

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=DocumentModel)


def now_iso() -> str:
    """Current UTC time in the backend's ISO-8601 millisecond format."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def to_data(model: BaseModel, **extra: Any) -> dict[str, Any]:
    """Request model to document data (camelCase, unset fields dropped)."""
    data = model.model_dump(mode="json", by_alias=True, exclude_unset=True)
    data.update(extra)
    return data


class Repository(Generic[M]):
    """Typed access to one collection.

    ``_fetch`` raises on backend errors; ``_list`` and ``get`` log and fall
    back to ``[]`` / ``None`` so that pages still render.
    """

    collection_key: str
    schema: type[M]

    def __init__(self, backend: BackendClient, collection_id: str | None = None):
        self.backend = backend
        self.collection_id = collection_id or settings.collections[self.collection_key]

    async def _fetch(self, *queries: str) -> list[M]:
        """Every matching document, following the cursor page by page."""
        page_size = settings.BACKEND_PAGE_SIZE
        documents: list[dict[str, Any]] = []
        cursor: str | None = None

        while True:
            page_queries = [*queries, Query.limit(page_size)]
            if cursor is not None:
                page_queries.append(Query.cursor_after(cursor))
            result = await self.backend.list_documents(self.collection_id, page_queries)
            page = result["documents"]
            documents.extend(page)
            if not page or (len(page) < page_size and len(documents) >= result["total"]):
                break
            cursor = page[-1]["$id"]

        return [self.schema.model_validate(doc) for doc in documents]

    async def _fetch_in(self, attribute: str, values: list[str]) -> list[M]:
        """Documents whose ``attribute`` is any of ``values``. Raises on backend errors."""
        chunks = [
            values[start : start + MAX_QUERY_VALUES]
            for start in range(0, len(values), MAX_QUERY_VALUES)
        ]
        pages = await asyncio.gather(
            *(self._fetch(Query.equal(attribute, chunk)) for chunk in chunks)
        )
        return [doc for page in pages for doc in page]

    async def _list(self, *queries: str) -> list[M]:
        try:
            return await self._fetch(*queries)
        except BackendError as e:
            logger.error(f"Error fetching {self.collection_key}: {e}")
            return []

    async def _count(self, *queries: str) -> int:
        result = await self.backend.list_documents(
            self.collection_id, [*queries, Query.limit(1)]
        )
        return int(result["total"])

    async def list_all(self) -> list[M]:
        return await self._list()

    async def count(self) -> int:
        """Number of documents in the collection. Raises on backend errors."""
        return await self._count()

    async def get(self, document_id: str) -> M | None:
        try:
            doc = await self.backend.get_document(self.collection_id, document_id)
        except BackendError as e:
            logger.error(f"Error fetching {self.collection_key} {document_id}: {e}")
            return None
        return self.schema.model_validate(doc)

    async def _create(self, data: dict[str, Any], document_id: str | None = None) -> M:
        payload = {**data, "createdAt": now_iso()}
        doc = await self.backend.create_document(self.collection_id, payload, document_id)
        logger.info(f"Created {self.collection_key} {doc.get('$id')}")
        return self.schema.model_validate(doc)

    async def _update(self, document_id: str, data: dict[str, Any]) -> M:
        doc = await self.backend.update_document(self.collection_id, document_id, data)
        return self.schema.model_validate(doc)

    async def delete(self, document_id: str) -> None:
        await self.backend.delete_document(self.collection_id, document_id)
        logger.info(f"Deleted {self.collection_key} {document_id}")
