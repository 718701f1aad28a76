"""
Schema Base Classes

Documents from the backend use camelCase attributes and ``$``-prefixed
system fields; Python code uses snake_case.
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for request bodies exchanged in camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DocumentModel(CamelModel):
    """A record in the external database, identified by an opaque ``$id``."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: str = Field(..., alias="$id")
    created_at: str | None = None

    def to_document(self) -> dict[str, Any]:
        """Wire representation (camelCase, ``$id``)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ActionResult(BaseModel, Generic[T]):
    """Outcome of a form submission: banner text plus the touched record."""

    message: str
    data: T | None = None
