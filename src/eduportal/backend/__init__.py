"""
Backend Service

Client for the hosted backend's account and document database APIs.
"""

from .client import (
    ID,
    MAX_QUERY_VALUES,
    BackendClient,
    BackendError,
    NotFoundError,
    Query,
    RateLimitError,
    UnauthorizedError,
)

__all__ = [
    "ID",
    "MAX_QUERY_VALUES",
    "BackendClient",
    "BackendError",
    "NotFoundError",
    "Query",
    "RateLimitError",
    "UnauthorizedError",
]
