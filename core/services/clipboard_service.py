"""Cut/copy/paste of groups, persons and photos.

`cut` and `copy` capture a deep-copied `ClipboardSnapshot` of the selected
items in collection order. `paste` inserts fresh-id copies into a target
scope; for a cut snapshot it also removes the originals from the scope they
were cut from. That removal happens at paste time, not at cut time, and is
idempotent: pasting the same cut snapshot again removes nothing more but
still appends a new set of items.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
import copy
from dataclasses import replace
from datetime import datetime

from loguru import logger

from core.errors import NotFound, ScopeMismatch
from core.identity import IdGenerator
from core.models import (
    SNAPSHOT_TYPES,
    ClipboardMode,
    ClipboardSnapshot,
    Group,
    Level,
    Person,
    Photo,
    Scope,
    Tree,
)
from core.services import tree_store

COPY_SUFFIX = " (Copy)"


class ClipboardService:
    """Builds clipboard snapshots and pastes them into a tree."""

    def __init__(
        self,
        id_factory: Callable[[], str] | None = None,
        clock: Callable[[], datetime] = datetime.now,
        copy_suffix: str = COPY_SUFFIX,
    ) -> None:
        """Create a ClipboardService.

        Args:
            id_factory: Returns a fresh unique id per call (defaults to a new
                `IdGenerator`).
            clock: Returns the timestamp stamped on pasted photos.
            copy_suffix: Appended to the names of items pasted from a copy.
        """
        self._new_id = id_factory or IdGenerator()
        self._clock = clock
        self._copy_suffix = copy_suffix
        self._pasters: dict[Level, Callable[[object, bool, datetime], object]] = {
            Level.GROUP: self._fresh_group,
            Level.PERSON: self._fresh_person,
            Level.PHOTO: self._fresh_photo,
        }

    def cut(
        self, tree: Tree, scope: Scope, level: Level, selected_ids: Iterable[str]
    ) -> ClipboardSnapshot:
        return self._capture(tree, scope, level, selected_ids, ClipboardMode.CUT)

    def copy(
        self, tree: Tree, scope: Scope, level: Level, selected_ids: Iterable[str]
    ) -> ClipboardSnapshot:
        return self._capture(tree, scope, level, selected_ids, ClipboardMode.COPY)

    def _capture(
        self,
        tree: Tree,
        scope: Scope,
        level: Level,
        selected_ids: Iterable[str],
        mode: ClipboardMode,
    ) -> ClipboardSnapshot:
        """Deep-copy the selected items of `scope` in collection order.

        Ids that no longer exist are skipped. A missing scope yields an empty
        snapshot.
        """
        if scope.level is not level:
            raise ScopeMismatch(f"cannot take {level.value} items from a {scope.level.value} scope")
        wanted = set(selected_ids)
        try:
            items = tree_store.collection(tree, scope)
        except NotFound as ex:
            logger.warning("Clipboard {} on missing scope: {}", mode.value, ex)
            items = ()
        captured = tuple(copy.deepcopy(it) for it in items if it.id in wanted)
        logger.info("Clipboard {}: {} {} item(s)", mode.value, len(captured), level.value)
        return SNAPSHOT_TYPES[level](mode=mode, source=scope, items=captured)

    def paste(self, tree: Tree, target: Scope, snapshot: ClipboardSnapshot) -> Tree:
        """Insert the snapshot items into `target` and return the new tree.

        Raises:
            ScopeMismatch: `target` holds items of another level.
            NotFound: `target` does not exist.
        """
        if snapshot.level is not target.level:
            raise ScopeMismatch(
                f"cannot paste {snapshot.level.value} items into a {target.level.value} list"
            )
        # Validate the target before anything is removed.
        tree_store.collection(tree, target)

        as_copy = snapshot.mode is ClipboardMode.COPY
        now = self._clock()
        fresh = self._pasters[snapshot.level]
        new_items = [fresh(item, as_copy, now) for item in snapshot.items]

        if snapshot.is_cut:
            tree = self._remove_originals(tree, snapshot)

        tree = tree_store.with_collection(tree, target, lambda items: (*items, *new_items))
        logger.info(
            "Pasted {} {} item(s) ({}) into {}",
            len(new_items),
            snapshot.level.value,
            snapshot.mode.value,
            target,
        )
        return tree

    @staticmethod
    def _remove_originals(tree: Tree, snapshot: ClipboardSnapshot) -> Tree:
        original_ids = snapshot.original_ids
        try:
            items = tree_store.collection(tree, snapshot.source)
        except NotFound:
            return tree
        if not any(it.id in original_ids for it in items):
            return tree
        return tree_store.with_collection(
            tree, snapshot.source, lambda seq: [it for it in seq if it.id not in original_ids]
        )

    def _label(self, name: str, as_copy: bool) -> str:
        return f"{name}{self._copy_suffix}" if as_copy else name

    def _fresh_group(  # pylint: disable=unused-argument
        self, group: Group, as_copy: bool, now: datetime
    ) -> Group:
        return replace(
            group,
            id=self._new_id(),
            name=self._label(group.name, as_copy),
            persons=tuple(self._reidentify_person(p) for p in group.persons),
        )

    def _fresh_person(  # pylint: disable=unused-argument
        self, person: Person, as_copy: bool, now: datetime
    ) -> Person:
        return replace(self._reidentify_person(person), name=self._label(person.name, as_copy))

    def _fresh_photo(self, photo: Photo, as_copy: bool, now: datetime) -> Photo:
        return replace(
            photo,
            id=self._new_id(),
            name=self._label(photo.name, as_copy),
            created_at=now,
        )

    def _reidentify_person(self, person: Person) -> Person:
        """Copy of `person` with new ids for it and its photos; names kept."""
        return replace(
            person,
            id=self._new_id(),
            photos=tuple(replace(ph, id=self._new_id()) for ph in person.photos),
        )
