"""Core domain models for the group/person/photo tree.

Every model is an immutable value; mutations build new instances so a tree
snapshot handed to a caller never changes underneath it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Level(str, Enum):
    """Depth of an entity in the tree."""

    GROUP = "group"
    PERSON = "person"
    PHOTO = "photo"


class ClipboardMode(str, Enum):
    CUT = "cut"
    COPY = "copy"


@dataclass(frozen=True)
class Photo:
    """A single captured or imported photo."""

    id: str
    name: str
    content: str | bytes
    created_at: datetime


@dataclass(frozen=True)
class Person:
    """A person folder holding photos in insertion order."""

    id: str
    name: str
    photos: tuple[Photo, ...] = ()


@dataclass(frozen=True)
class Group:
    """A root-level container of persons in insertion order."""

    id: str
    name: str
    persons: tuple[Person, ...] = ()


@dataclass(frozen=True)
class Tree:
    """Whole-tree snapshot. `groups` is kept sorted by name."""

    groups: tuple[Group, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.groups


@dataclass(frozen=True)
class Scope:
    """Address of one collection in the tree.

    The root scope (no ids) holds groups, a group scope holds persons and a
    person scope holds photos. The host uses the same value as its
    navigation focus: the collection currently on screen.
    """

    group_id: str | None = None
    person_id: str | None = None

    def __post_init__(self) -> None:
        if self.person_id is not None and self.group_id is None:
            raise ValueError("person scope requires a group id")

    @classmethod
    def root(cls) -> Scope:
        return cls()

    @classmethod
    def group(cls, group_id: str) -> Scope:
        return cls(group_id=group_id)

    @classmethod
    def person(cls, group_id: str, person_id: str) -> Scope:
        return cls(group_id=group_id, person_id=person_id)

    @property
    def level(self) -> Level:
        """Level of the items living in this collection."""
        if self.group_id is None:
            return Level.GROUP
        if self.person_id is None:
            return Level.PERSON
        return Level.PHOTO

    def parent(self) -> Scope:
        """Scope one level up; the root is its own parent."""
        if self.person_id is not None:
            return Scope.group(self.group_id)  # type: ignore[arg-type]
        return Scope.root()


@dataclass(frozen=True)
class _SnapshotBase:
    mode: ClipboardMode
    source: Scope
    items: tuple = field(default=())

    @property
    def original_ids(self) -> frozenset[str]:
        """Ids the captured items had when the snapshot was taken."""
        return frozenset(item.id for item in self.items)

    @property
    def is_cut(self) -> bool:
        return self.mode is ClipboardMode.CUT


@dataclass(frozen=True)
class GroupSnapshot(_SnapshotBase):
    items: tuple[Group, ...] = ()
    level: Level = field(default=Level.GROUP, init=False)


@dataclass(frozen=True)
class PersonSnapshot(_SnapshotBase):
    items: tuple[Person, ...] = ()
    level: Level = field(default=Level.PERSON, init=False)


@dataclass(frozen=True)
class PhotoSnapshot(_SnapshotBase):
    items: tuple[Photo, ...] = ()
    level: Level = field(default=Level.PHOTO, init=False)


ClipboardSnapshot = GroupSnapshot | PersonSnapshot | PhotoSnapshot

SNAPSHOT_TYPES: dict[Level, type[_SnapshotBase]] = {
    Level.GROUP: GroupSnapshot,
    Level.PERSON: PersonSnapshot,
    Level.PHOTO: PhotoSnapshot,
}
