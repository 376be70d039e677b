"""LongPressDetector: turns press/release pairs into taps and long-presses."""

from __future__ import annotations

from PySide6.QtCore import QObject, QTimer, Signal
from loguru import logger

DEFAULT_LONG_PRESS_MS = 500


class LongPressDetector(QObject):
    """Single-timer long-press detection for one gesture source.

    `press()` (re)starts one single-shot timer, so at most one long-press is
    pending at a time. If the timer fires, `long_pressed` is emitted;
    `release()` before that emits `tapped` instead. `leave()` cancels
    without emitting anything.
    """

    long_pressed = Signal(str)
    tapped = Signal(str)

    def __init__(
        self, delay_ms: int = DEFAULT_LONG_PRESS_MS, parent: QObject | None = None
    ) -> None:
        super().__init__(parent)
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(max(1, int(delay_ms)))
        self._timer.timeout.connect(self._on_timeout)
        self._item_id: str | None = None

    @property
    def delay_ms(self) -> int:
        return self._timer.interval()

    @property
    def is_pending(self) -> bool:
        return self._timer.isActive()

    def press(self, item_id: str) -> None:
        """Pointer down on `item_id`; replaces any pending press."""
        if self._timer.isActive():
            logger.debug("Long-press for {} superseded by {}", self._item_id, item_id)
        self._item_id = item_id
        self._timer.start()

    def release(self) -> None:
        """Pointer up: a press that did not reach the delay becomes a tap."""
        item_id = self._item_id
        pending = self._timer.isActive()
        self._reset()
        if pending and item_id is not None:
            self.tapped.emit(item_id)

    def leave(self) -> None:
        """Pointer left the item: drop the pending press silently."""
        self._reset()

    def _reset(self) -> None:
        self._timer.stop()
        self._item_id = None

    def _on_timeout(self) -> None:
        if self._item_id is None:
            return
        self.long_pressed.emit(self._item_id)


def bind_to_view_model(detector: LongPressDetector, vm) -> None:
    """Route taps and long-presses from `detector` to a `MainVM`."""
    detector.long_pressed.connect(vm.long_press)
    detector.tapped.connect(vm.tap)
