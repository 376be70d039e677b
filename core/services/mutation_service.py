"""Add, rename and delete operations over `Tree` snapshots.

Each operation returns a new snapshot and leaves its input untouched, so a
failure part-way through cannot produce a half-updated tree.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import datetime

from loguru import logger

from core.errors import InvalidName, NotFound
from core.identity import IdGenerator
from core.models import Group, Level, Person, Photo, Scope, Tree
from core.services import tree_store
from core.services.interfaces import DeletePlan, DeleteResult, FocusInvalidated


def clean_name(name: str) -> str:
    """Return `name` trimmed, raising `InvalidName` when nothing is left."""
    cleaned = (name or "").strip()
    if not cleaned:
        raise InvalidName("name must not be empty")
    return cleaned


class MutationService:
    """Create, rename and delete groups, persons and photos."""

    def __init__(
        self,
        id_factory: Callable[[], str] | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Create a MutationService.

        Args:
            id_factory: Returns a fresh unique id per call (defaults to a new
                `IdGenerator`).
            clock: Returns the timestamp stamped on new photos.
        """
        self._new_id = id_factory or IdGenerator()
        self._clock = clock

    def add_group(self, tree: Tree, name: str) -> Tree:
        group = Group(id=self._new_id(), name=clean_name(name))
        return tree_store.with_groups(tree, (*tree.groups, group))

    def add_person(self, tree: Tree, group_id: str, name: str) -> Tree:
        """Append a person to `group_id`; raises `NotFound` if the group is missing."""
        person = Person(id=self._new_id(), name=clean_name(name))
        return tree_store.with_group(
            tree, group_id, lambda g: replace(g, persons=(*g.persons, person))
        )

    def add_photo(
        self, tree: Tree, group_id: str, person_id: str, name: str, content: str | bytes
    ) -> Tree:
        """Append a photo with `created_at = now`; `content` is stored as given."""
        photo = Photo(
            id=self._new_id(),
            name=clean_name(name),
            content=content,
            created_at=self._clock(),
        )
        return tree_store.with_person(
            tree, group_id, person_id, lambda p: replace(p, photos=(*p.photos, photo))
        )

    def rename(self, tree: Tree, scope: Scope, item_id: str, new_name: str) -> Tree:
        """Rename one item of `scope`, keeping its id and position.

        Raises:
            InvalidName: The trimmed name is empty or equals the current name.
            NotFound: The scope or the item does not exist.
        """
        current = tree_store.find_in_scope(tree, scope, item_id)
        cleaned = clean_name(new_name)
        if cleaned == current.name:
            raise InvalidName(f"name unchanged: {cleaned!r}")
        renamed = replace(current, name=cleaned)
        return tree_store.with_collection(
            tree,
            scope,
            lambda items: [renamed if it.id == item_id else it for it in items],
        )

    def delete_many(
        self,
        tree: Tree,
        scope: Scope,
        ids: Iterable[str],
        focus: Scope | None = None,
    ) -> DeleteResult:
        """Remove every item of `scope` whose id is in `ids`.

        Missing ids are ignored and repeated ids are removed once. When
        `focus` (the host's open scope) points at a removed group or person,
        the result carries a `FocusInvalidated` naming the list to return to.
        """
        wanted = set(ids)
        items = tree_store.collection(tree, scope)
        removed = tuple(it.id for it in items if it.id in wanted)
        if not removed:
            return DeleteResult(tree=tree, removed_ids=())

        new_tree = tree_store.with_collection(
            tree, scope, lambda seq: [it for it in seq if it.id not in wanted]
        )
        logger.debug("Removed {} {} item(s) from {}", len(removed), scope.level.value, scope)
        return DeleteResult(
            tree=new_tree,
            removed_ids=removed,
            focus_invalidated=self._focus_check(scope, removed, focus),
        )

    @staticmethod
    def _focus_check(
        scope: Scope, removed: tuple[str, ...], focus: Scope | None
    ) -> FocusInvalidated | None:
        if focus is None:
            return None
        if scope.level is Level.GROUP and focus.group_id in removed:
            return FocusInvalidated(Level.GROUP)
        if (
            scope.level is Level.PERSON
            and focus.group_id == scope.group_id
            and focus.person_id in removed
        ):
            return FocusInvalidated(Level.PERSON)
        return None

    def plan_delete(self, tree: Tree, scope: Scope, ids: Iterable[str]) -> DeletePlan:
        """Build the confirmation text for deleting `ids` from `scope`."""
        id_list = tuple(dict.fromkeys(ids))
        wanted = set(id_list)
        try:
            items = tree_store.collection(tree, scope)
        except NotFound:
            items = ()
        names = tuple(it.name for it in items if it.id in wanted)
        kind = scope.level.value
        count = len(id_list)
        if count == 1:
            shown = names[0] if names else ""
            message = f'Are you sure you want to delete "{shown}"?'
        else:
            message = f"Are you sure you want to delete {count} {kind}s?"
        title = f"Delete {kind}{'s' if count > 1 else ''}"
        return DeletePlan(scope=scope, ids=id_list, names=names, title=title, message=message)
