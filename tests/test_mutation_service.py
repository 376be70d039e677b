from __future__ import annotations

from types import SimpleNamespace

import pytest

from core.errors import InvalidName, NotFound
from core.identity import IdGenerator
from core.models import Level, Scope, Tree
from core.services import tree_store
from core.services.mutation_service import MutationService
from core.services.sort_service import SortService


def test_add_group_sorts_by_name(mutations) -> None:
    tree = mutations.add_group(Tree(), "Smiths")
    tree = mutations.add_group(tree, "adams")
    tree = mutations.add_group(tree, "Baker")
    assert [g.name for g in tree.groups] == ["adams", "Baker", "Smiths"]


def test_add_trims_and_rejects_blank_names(mutations) -> None:
    tree = mutations.add_group(Tree(), "  Smiths ")
    assert tree.groups[0].name == "Smiths"
    with pytest.raises(InvalidName):
        mutations.add_group(tree, "   ")


def test_add_person_appends_without_sorting(mutations) -> None:
    tree = mutations.add_group(Tree(), "G")
    tree = mutations.add_person(tree, "id-1", "Zoe")
    tree = mutations.add_person(tree, "id-1", "Amy")
    assert [p.name for p in tree.groups[0].persons] == ["Zoe", "Amy"]


def test_add_person_to_missing_group_raises(mutations) -> None:
    with pytest.raises(NotFound):
        mutations.add_person(Tree(), "missing", "Bob")


def test_add_photo_stamps_created_at(mutations, clock) -> None:
    tree = mutations.add_group(Tree(), "G")
    tree = mutations.add_person(tree, "id-1", "Bob")
    tree = mutations.add_photo(tree, "id-1", "id-2", "beach.jpg", "payload")
    photo = tree_store.find_photo(tree, "id-1", "id-2", "id-3")
    assert photo.content == "payload"
    assert photo.created_at == clock.now


def test_ids_are_unique_across_adds(mutations) -> None:
    tree = Tree()
    for g in range(5):
        tree = mutations.add_group(tree, f"group {g}")
    for group in list(tree.groups):
        for p in range(3):
            tree = mutations.add_person(tree, group.id, f"person {p}")
    for group in tree.groups:
        for person in group.persons:
            tree = mutations.add_photo(tree, group.id, person.id, "x.jpg", "c")
    all_ids = list(tree_store.iter_ids(tree))
    assert len(all_ids) == len(set(all_ids)) == 5 + 15 + 15


def test_rename_keeps_id_and_position(sample_tree, mutations) -> None:
    tree = mutations.rename(sample_tree, Scope.group("id-2"), "id-3", "  Robert ")
    persons = tree_store.find_group(tree, "id-2").persons
    assert [(p.id, p.name) for p in persons] == [("id-3", "Robert"), ("id-4", "Carol")]


def test_rename_group_resorts(sample_tree, mutations) -> None:
    tree = mutations.rename(sample_tree, Scope.root(), "id-2", "Zimmer")
    assert [g.name for g in tree.groups] == ["Smiths", "Zimmer"]
    assert SortService().is_sorted(tree.groups)


@pytest.mark.parametrize("new_name", ["", "   ", "Bob", " Bob "])
def test_rename_rejects_blank_or_unchanged(sample_tree, mutations, new_name) -> None:
    with pytest.raises(InvalidName):
        mutations.rename(sample_tree, Scope.group("id-2"), "id-3", new_name)


def test_rename_missing_item_raises(sample_tree, mutations) -> None:
    with pytest.raises(NotFound):
        mutations.rename(sample_tree, Scope.person("id-2", "id-3"), "id-7", "x")


def test_delete_many_ignores_missing_and_duplicate_ids(sample_tree, mutations) -> None:
    scope = Scope.person("id-2", "id-3")
    result = mutations.delete_many(sample_tree, scope, ["id-5", "id-5", "ghost"])
    assert result.removed_ids == ("id-5",)
    assert [p.id for p in tree_store.collection(result.tree, scope)] == ["id-6"]
    assert result.focus_invalidated is None


def test_delete_of_absent_ids_is_noop(sample_tree, mutations) -> None:
    result = mutations.delete_many(sample_tree, Scope.root(), ["ghost"])
    assert result.tree is sample_tree
    assert not result.changed


def test_delete_twice_is_idempotent(sample_tree, mutations) -> None:
    first = mutations.delete_many(sample_tree, Scope.group("id-2"), ["id-4"])
    second = mutations.delete_many(first.tree, Scope.group("id-2"), ["id-4"])
    assert second.tree == first.tree
    assert second.removed_ids == ()


def test_delete_open_group_invalidates_focus(sample_tree, mutations) -> None:
    result = mutations.delete_many(
        sample_tree, Scope.root(), ["id-2"], focus=Scope.person("id-2", "id-3")
    )
    assert result.focus_invalidated is not None
    assert result.focus_invalidated.level is Level.GROUP
    assert [g.id for g in result.tree.groups] == ["id-1"]


def test_delete_open_person_invalidates_focus(sample_tree, mutations) -> None:
    result = mutations.delete_many(
        sample_tree, Scope.group("id-2"), ["id-3"], focus=Scope.person("id-2", "id-3")
    )
    assert result.focus_invalidated is not None
    assert result.focus_invalidated.level is Level.PERSON


def test_delete_elsewhere_keeps_focus(sample_tree, mutations) -> None:
    result = mutations.delete_many(
        sample_tree, Scope.group("id-2"), ["id-4"], focus=Scope.person("id-2", "id-3")
    )
    assert result.focus_invalidated is None


def test_plan_delete_messages(sample_tree, mutations) -> None:
    single = mutations.plan_delete(sample_tree, Scope.group("id-2"), ["id-3"])
    assert single.title == "Delete person"
    assert single.message == 'Are you sure you want to delete "Bob"?'

    many = mutations.plan_delete(sample_tree, Scope.person("id-2", "id-3"), ["id-5", "id-6"])
    assert many.title == "Delete photos"
    assert many.message == "Are you sure you want to delete 2 photos?"
    assert many.names == ("beach.jpg", "park.jpg")
    assert many.level is Level.PHOTO


def test_id_generator_skips_reserved_ids(monkeypatch) -> None:
    draws = iter(["taken", "taken", "fresh"])
    monkeypatch.setattr("core.identity.uuid.uuid4", lambda: SimpleNamespace(hex=next(draws)))
    ids = IdGenerator()
    ids.reserve(["taken"])
    assert ids() == "fresh"


def test_default_service_ids_are_unique() -> None:
    service = MutationService()
    tree = service.add_group(Tree(), "A")
    tree = service.add_person(tree, tree.groups[0].id, "Bob")
    tree = service.add_group(tree, "B")
    assert len({*tree_store.iter_ids(tree)}) == tree_store.count_items(tree) == 3
