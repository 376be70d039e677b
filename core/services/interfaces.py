"""Core service interfaces and shared data structures.

This module defines the dataclasses exchanged between the engine and the
host (delete planning and results, rename requests, focus notifications)
and the persistence contract the host relies on.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.models import Level, Scope, Tree


@dataclass(frozen=True)
class FocusInvalidated:
    """Notification that the open group or person no longer exists.

    Attributes:
        level: Level of the list the caller must navigate up to
            (`Level.GROUP` for the group list, `Level.PERSON` for a group's
            person list).
    """

    level: Level


@dataclass(frozen=True)
class DeleteResult:
    """Outcome of a delete operation.

    Attributes:
        tree: Tree snapshot after the removal.
        removed_ids: Ids that were actually removed, in collection order.
        focus_invalidated: Set when the removal deleted the open group/person.
    """

    tree: Tree
    removed_ids: tuple[str, ...]
    focus_invalidated: FocusInvalidated | None = None

    @property
    def changed(self) -> bool:
        return bool(self.removed_ids)


@dataclass(frozen=True)
class DeletePlan:
    """Planned delete operation with the text for the confirmation prompt.

    Attributes:
        scope: Collection the ids are removed from.
        ids: Ids chosen for deletion.
        names: Names of the ids that currently exist, in collection order.
        title: Confirmation dialog title.
        message: Confirmation dialog message.
    """

    scope: Scope
    ids: tuple[str, ...]
    names: tuple[str, ...]
    title: str
    message: str

    @property
    def level(self) -> Level:
        return self.scope.level


@dataclass(frozen=True)
class RenameRequest:
    """Data needed to open the rename dialog for one selected item."""

    item_id: str
    current_name: str
    title: str


class ITreeRepository:
    """Interface for the persistence collaborator."""

    def load(self) -> Tree:
        """Return the stored tree, or an empty tree if absent or unreadable."""
        raise NotImplementedError

    def save(self, tree: Tree) -> None:
        """Persist `tree`, replacing whatever was stored before."""
        raise NotImplementedError
