"""Exception hierarchy for tree, selection and clipboard operations.

None of these are fatal: the host view-model resolves each of them at its
boundary (no-op, keep the dialog open, or refuse the paste).
"""

from __future__ import annotations


class PhotoTreeError(Exception):
    """Base exception for all engine errors."""


class NotFound(PhotoTreeError, LookupError):
    """Raised when an addressed group, person or photo does not exist."""

    def __init__(self, kind: str, item_id: str | None) -> None:
        super().__init__(f"{kind} not found: {item_id}")
        self.kind = kind
        self.item_id = item_id


class InvalidName(PhotoTreeError, ValueError):
    """Raised when a name is empty after trimming or unchanged on rename."""


class ScopeMismatch(PhotoTreeError, ValueError):
    """Raised when a clipboard snapshot is pasted into a scope of another level."""
