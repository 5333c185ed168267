"""Error taxonomy shared by the stores and the HTTP boundary."""

from __future__ import annotations


class ResearchHelperError(Exception):
    """Base class for errors the HTTP layer turns into ``{"error": ...}`` bodies."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ResearchHelperError):
    """A required field is missing or malformed."""

    status_code = 400


class NotFoundError(ResearchHelperError):
    """A referenced project, note, citation or task does not exist."""

    status_code = 404

    def __init__(self, resource: str, resource_id: object = None, message: str | None = None):
        if message is None:
            message = f"{resource} not found" if resource_id is None else f"{resource} {resource_id} not found"
        super().__init__(message)
        self.resource = resource
        self.resource_id = resource_id


class StorageError(ResearchHelperError):
    """Directory, file or database operation failed."""


class DownloadError(ResearchHelperError):
    """A remote fetch failed or returned a non-success status."""
