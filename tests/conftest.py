"""Shared fixtures: deterministic ids and clock, and an in-memory repository."""

from __future__ import annotations

from datetime import datetime, timedelta
import itertools
import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from core.models import Tree
from core.services.clipboard_service import ClipboardService
from core.services.interfaces import ITreeRepository
from core.services.mutation_service import MutationService


class CountingIds:
    """Id factory yielding id-1, id-2, ... so tests can predict ids."""

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self.issued: list[str] = []

    def __call__(self) -> str:
        new = f"id-{next(self._counter)}"
        self.issued.append(new)
        return new


class SteppingClock:
    """Clock advancing one second per call."""

    def __init__(self) -> None:
        self.now = datetime(2024, 1, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


class MemoryRepository(ITreeRepository):
    def __init__(self, tree: Tree | None = None) -> None:
        self.stored = tree or Tree()
        self.saves: list[Tree] = []

    def load(self) -> Tree:
        return self.stored

    def save(self, tree: Tree) -> None:
        self.stored = tree
        self.saves.append(tree)


@pytest.fixture
def ids() -> CountingIds:
    return CountingIds()


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture
def mutations(ids, clock) -> MutationService:
    return MutationService(id_factory=ids, clock=clock)


@pytest.fixture
def clipboard(ids, clock) -> ClipboardService:
    return ClipboardService(id_factory=ids, clock=clock)


@pytest.fixture
def sample_tree(mutations) -> Tree:
    """Two groups; Adams holds Bob (2 photos) and Carol (1 photo)."""
    tree = mutations.add_group(Tree(), "Smiths")  # id-1
    tree = mutations.add_group(tree, "Adams")  # id-2
    tree = mutations.add_person(tree, "id-2", "Bob")  # id-3
    tree = mutations.add_person(tree, "id-2", "Carol")  # id-4
    tree = mutations.add_photo(tree, "id-2", "id-3", "beach.jpg", "data:beach")  # id-5
    tree = mutations.add_photo(tree, "id-2", "id-3", "park.jpg", "data:park")  # id-6
    tree = mutations.add_photo(tree, "id-2", "id-4", "home.jpg", "data:home")  # id-7
    return tree


@pytest.fixture
def repo() -> MemoryRepository:
    return MemoryRepository()
