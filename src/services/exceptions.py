"""Shared exceptions for service layer operations."""
from uuid import UUID


class NotFoundError(Exception):
    """Base class for lookups that found nothing."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class PromptNotFoundError(NotFoundError):
    """Raised when no prompt exists for the given id."""

    def __init__(self, prompt_id: UUID) -> None:
        self.prompt_id = prompt_id
        super().__init__("Prompt not found")


class VersionNotFoundError(NotFoundError):
    """
    Raised when a version does not exist or belongs to a different prompt.

    Both cases are reported the same way so that a version id from another
    prompt reveals nothing about that prompt.
    """

    def __init__(self, version_id: UUID) -> None:
        self.version_id = version_id
        super().__init__("Version not found")


class InvalidStateError(Exception):
    """
    Raised when an operation is invalid for a resource's current state.

    Used by the publish workflows when preconditions are violated (e.g.,
    unpublishing a prompt that is not published). Never sent to GitHub.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)


class PublishError(Exception):
    """Raised when GitHub rejected or could not complete a publish operation."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class RemoteFileNotFoundError(PublishError):
    """Raised when the published file is missing from the GitHub repository."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Published file not found: {path}")
