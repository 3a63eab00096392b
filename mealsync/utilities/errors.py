"""Error taxonomy shared by repositories, the archive engine and the API layer.

Read paths that are allowed to come back empty (missing draft plan, empty
learning window, offline history) never raise; everything else surfaces as
one of these.
"""
from __future__ import annotations
from typing import Optional


class MealSyncError(Exception):
    """Base class for every persistence/sync failure."""

    def __init__(self, message: str = "", *, detail: Optional[str] = None):
        super().__init__(message)
        self.detail = detail


class StorageUnavailable(MealSyncError):
    """Remote store unreachable, timed out or failing server-side."""


class NotFound(MealSyncError):
    """A single expected record does not exist."""


class PermissionDenied(MealSyncError):
    """The caller tried to touch rows outside its own identity scope."""


class MalformedRecord(MealSyncError):
    """A stored row or blob could not be translated to or from the domain."""


class InvalidDateRange(MealSyncError):
    """An archive start date (or range bound) is not an ISO date."""


class NoMatchingEntity(MealSyncError):
    """Operation referenced a profile or grocery list id that does not exist."""


__all__ = [
    'MealSyncError', 'StorageUnavailable', 'NotFound', 'PermissionDenied',
    'MalformedRecord', 'InvalidDateRange', 'NoMatchingEntity',
]
