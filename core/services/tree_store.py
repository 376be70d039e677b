"""Pure lookup and update helpers over immutable `Tree` snapshots.

Every updater returns a new `Tree`; the input snapshot is never modified.
Lookups and updaters raise `NotFound` when any segment of the address is
missing, leaving the caller's snapshot untouched.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import replace

from core.errors import NotFound
from core.models import Group, Person, Photo, Scope, Tree
from core.services.sort_service import SortService

_sorter = SortService()


def _index_of(items: Sequence, item_id: str, kind: str) -> int:
    for idx, item in enumerate(items):
        if item.id == item_id:
            return idx
    raise NotFound(kind, item_id)


def find_group(tree: Tree, group_id: str) -> Group:
    return tree.groups[_index_of(tree.groups, group_id, "group")]


def find_person(tree: Tree, group_id: str, person_id: str) -> Person:
    group = find_group(tree, group_id)
    return group.persons[_index_of(group.persons, person_id, "person")]


def find_photo(tree: Tree, group_id: str, person_id: str, photo_id: str) -> Photo:
    person = find_person(tree, group_id, person_id)
    return person.photos[_index_of(person.photos, photo_id, "photo")]


def with_groups(tree: Tree, groups: Sequence[Group]) -> Tree:
    """Return a tree holding `groups`, re-sorted by name."""
    return replace(tree, groups=_sorter.sort_groups(groups))


def with_group(tree: Tree, group_id: str, fn: Callable[[Group], Group]) -> Tree:
    """Apply `fn` to one group. The group list is re-sorted afterwards."""
    idx = _index_of(tree.groups, group_id, "group")
    groups = list(tree.groups)
    groups[idx] = fn(groups[idx])
    return with_groups(tree, groups)


def with_person(
    tree: Tree, group_id: str, person_id: str, fn: Callable[[Person], Person]
) -> Tree:
    """Apply `fn` to one person, keeping its position in the group."""

    def _update(group: Group) -> Group:
        idx = _index_of(group.persons, person_id, "person")
        persons = list(group.persons)
        persons[idx] = fn(persons[idx])
        return replace(group, persons=tuple(persons))

    return with_group(tree, group_id, _update)


def with_photo(
    tree: Tree,
    group_id: str,
    person_id: str,
    photo_id: str,
    fn: Callable[[Photo], Photo],
) -> Tree:
    """Apply `fn` to one photo, keeping its position in the person."""

    def _update(person: Person) -> Person:
        idx = _index_of(person.photos, photo_id, "photo")
        photos = list(person.photos)
        photos[idx] = fn(photos[idx])
        return replace(person, photos=tuple(photos))

    return with_person(tree, group_id, person_id, _update)


def collection(tree: Tree, scope: Scope) -> tuple:
    """Return the items held by `scope` (groups, persons or photos)."""
    if scope.group_id is None:
        return tree.groups
    group = find_group(tree, scope.group_id)
    if scope.person_id is None:
        return group.persons
    return find_person(tree, scope.group_id, scope.person_id).photos


def with_collection(tree: Tree, scope: Scope, fn: Callable[[tuple], Sequence]) -> Tree:
    """Replace the item sequence of `scope` with `fn(items)`.

    The root collection is re-sorted by name; person and photo collections
    keep the order `fn` returns.
    """
    if scope.group_id is None:
        return with_groups(tree, fn(tree.groups))
    if scope.person_id is None:
        return with_group(
            tree, scope.group_id, lambda g: replace(g, persons=tuple(fn(g.persons)))
        )
    return with_person(
        tree,
        scope.group_id,
        scope.person_id,
        lambda p: replace(p, photos=tuple(fn(p.photos))),
    )


def find_in_scope(tree: Tree, scope: Scope, item_id: str):
    """Return the item with `item_id` inside `scope`."""
    items = collection(tree, scope)
    return items[_index_of(items, item_id, scope.level.value)]


def iter_ids(tree: Tree):
    """Yield the id of every group, person and photo in the tree."""
    for group in tree.groups:
        yield group.id
        for person in group.persons:
            yield person.id
            for photo in person.photos:
                yield photo.id


def count_items(tree: Tree) -> int:
    return sum(1 for _ in iter_ids(tree))
