"""Multi-select state machine decoupled from any UI toolkit.

A selection is always scoped to exactly one level: the level of the list
currently on screen. States are immutable values; every transition returns
a new `SelectionState`.

States:
    Idle: ``level is None`` and no selected ids.
    Selecting(level, ids): at least one selected id.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from loguru import logger

from core.models import Level


@dataclass(frozen=True)
class SelectionState:
    """Current multi-select state.

    Attributes:
        level: Level under selection, or None when idle.
        selected_ids: Ids selected at `level`.
    """

    level: Level | None = None
    selected_ids: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        if (self.level is None) != (not self.selected_ids):
            raise ValueError(
                f"inconsistent selection: level={self.level} ids={set(self.selected_ids)}"
            )

    @classmethod
    def idle(cls) -> SelectionState:
        return cls()

    @property
    def active(self) -> bool:
        """True while selecting (at least one id selected)."""
        return bool(self.selected_ids)

    @property
    def count(self) -> int:
        return len(self.selected_ids)

    def is_selected(self, item_id: str) -> bool:
        return item_id in self.selected_ids

    def long_press(self, item_id: str, level: Level) -> SelectionState:
        """Start a selection of `item_id` at `level`.

        Any previous selection is discarded, including one at another level.
        """
        if self.active and self.level is not level:
            logger.debug("Long-press at {} discards {} selection", level.value, self.level)
        return SelectionState(level=level, selected_ids=frozenset({item_id}))

    def toggle(self, item_id: str) -> SelectionState:
        """Add or remove `item_id`; removing the last id returns to idle.

        Toggling while idle is ignored.
        """
        if not self.active:
            return self
        if item_id in self.selected_ids:
            remaining = self.selected_ids - {item_id}
            if not remaining:
                return SelectionState.idle()
            return SelectionState(level=self.level, selected_ids=remaining)
        return SelectionState(level=self.level, selected_ids=self.selected_ids | {item_id})

    def cancel(self) -> SelectionState:
        return SelectionState.idle()

    def commit(self) -> SelectionState:
        """State after a delete/rename/cut/copy: always idle."""
        return SelectionState.idle()

    def ordered_ids(self, items: Iterable) -> list[str]:
        """Selected ids in the order of `items` (collection order)."""
        return [item.id for item in items if item.id in self.selected_ids]
