"""Sorting service for the group list.

Only groups are ordered by name; persons and photos keep insertion order.
"""

from __future__ import annotations

from collections.abc import Iterable

from core.models import Group


class SortService:
    """Provides the case-insensitive name ordering used for groups."""

    @staticmethod
    def name_key(name: str) -> tuple[str, str]:
        """Sort key: casefolded name first, raw name as tie-breaker."""
        return (name.casefold(), name)

    def sort_groups(self, groups: Iterable[Group]) -> tuple[Group, ...]:
        """Return `groups` ordered by name, ascending and case-insensitive.

        The sort is stable, so groups with identical names keep their
        relative order.
        """
        return tuple(sorted(groups, key=lambda g: self.name_key(g.name)))

    def is_sorted(self, groups: Iterable[Group]) -> bool:
        keys = [self.name_key(g.name) for g in groups]
        return all(a <= b for a, b in zip(keys, keys[1:]))
