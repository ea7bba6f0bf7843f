"""Error types shared by the core modules."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ValidationError:
    """Represents a precondition failure detected by a pure check."""

    kind: str
    message: str | None = None
    status_code: int | None = None


class ContestTrackerError(ValueError):
    """Base class for rejected operations."""


class ReactionError(ContestTrackerError):
    """Raised when a reaction or flag toggle is not allowed."""

    def __init__(self, error: ValidationError):
        super().__init__(error.message or error.kind)
        self.error = error

    @property
    def kind(self) -> str:
        return self.error.kind


class CommentError(ContestTrackerError):
    """Raised when a comment cannot be created."""


class PostingClosedError(ContestTrackerError):
    """Raised when a post is attempted outside the active phase."""

    def __init__(self, phase: str):
        super().__init__(f"Posting is closed while the contest is {phase}")
        self.phase = phase


class ConfigError(ContestTrackerError):
    """Raised for missing or invalid configuration values."""


class PostPermissionError(ContestTrackerError):
    """Raised when someone other than the owner or an admin changes a post."""
