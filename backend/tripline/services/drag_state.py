"""Lifecycle of a single pointer-drag gesture on the timeline.

``IDLE -> DRAGGING -> HOVERING -> DROPPING -> IDLE``. The machine owns the
only copy of the drag state; callers read immutable snapshots through
``state``. Timers (frame throttling and the watchdog) run on the asyncio
event loop, which plays the role of the UI thread.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from enum import StrEnum
from time import monotonic
from typing import Callable, Sequence

from tripline.core.logging import get_logger
from tripline.core.settings import settings
from tripline.models.schemas import Destination


class DragPhase(StrEnum):
    IDLE = "idle"
    DRAGGING = "dragging"
    HOVERING = "hovering"
    DROPPING = "dropping"


@dataclass(frozen=True)
class DragState:
    phase: DragPhase = DragPhase.IDLE
    dragged_item: Destination | None = None
    drag_over_day: str | None = None
    # highlight position as rendered
    drag_over_index: int | None = None
    # position handed to the reorder resolver
    drop_target_index: int | None = None

    @property
    def is_dragging(self) -> bool:
        return self.phase is not DragPhase.IDLE

    @property
    def is_processing_drop(self) -> bool:
        return self.phase is DragPhase.DROPPING

    @property
    def resolved_target(self) -> tuple[str, int] | None:
        if self.drag_over_day is None:
            return None
        index = (
            self.drop_target_index
            if self.drop_target_index is not None
            else self.drag_over_index
        )
        if index is None:
            return None
        return self.drag_over_day, index


IDLE_STATE = DragState()

StateListener = Callable[[DragState], None]
ResetHook = Callable[[], None]


def compute_visual_index(
    dragged: Destination | None,
    day: str,
    index: int,
    day_destination_ids: Sequence[str],
) -> int:
    """Shift the highlight left when hovering past the item's own slot."""

    if dragged is None or dragged.start_date != day:
        return index
    if dragged.id not in day_destination_ids:
        return index
    own_position = list(day_destination_ids).index(dragged.id)
    if index > own_position:
        return index - 1
    return index


def compute_target_index(
    dragged: Destination | None,
    day: str,
    visual_index: int,
    day_destination_ids: Sequence[str],
) -> int:
    """Inverse of :func:`compute_visual_index`, used for keyboard moves."""

    if dragged is None or dragged.start_date != day:
        return visual_index
    if dragged.id not in day_destination_ids:
        return visual_index
    own_position = list(day_destination_ids).index(dragged.id)
    if visual_index > own_position:
        return visual_index + 1
    return visual_index


class DragStateMachine:
    """Tracks one drag session at a time."""

    def __init__(
        self,
        *,
        frame_interval_ms: int | None = None,
        watchdog_seconds: float | None = None,
        on_change: StateListener | None = None,
        on_reset: ResetHook | None = None,
        clock: Callable[[], float] = monotonic,
    ) -> None:
        interval = (
            settings.drag_frame_interval_ms
            if frame_interval_ms is None
            else frame_interval_ms
        )
        self._frame_interval = max(interval, 0) / 1000
        self._watchdog_seconds = (
            settings.drag_watchdog_seconds
            if watchdog_seconds is None
            else watchdog_seconds
        )
        self._on_change = on_change
        self._on_reset = on_reset
        self._clock = clock
        self._state = IDLE_STATE
        self._last_hover_at = float("-inf")
        self._pending_frame: asyncio.TimerHandle | None = None
        self._watchdog: asyncio.TimerHandle | None = None
        self.logger = get_logger(self.__class__.__name__)

    @property
    def state(self) -> DragState:
        return self._state

    @property
    def has_pending_frame(self) -> bool:
        return self._pending_frame is not None

    def begin_drag(self, destination: Destination) -> bool:
        if self._state.is_processing_drop:
            self.logger.info(
                "drag.start.rejected",
                extra={"destination_id": destination.id, "reason": "drop_in_flight"},
            )
            return False
        if self._state.is_dragging:
            self.logger.info(
                "drag.start.rejected",
                extra={"destination_id": destination.id, "reason": "already_dragging"},
            )
            return False
        self._set_state(DragState(phase=DragPhase.DRAGGING, dragged_item=destination))
        self._arm_watchdog()
        self.logger.info("drag.started", extra={"destination_id": destination.id})
        return True

    def hover(
        self,
        day: str,
        index: int,
        *,
        day_destination_ids: Sequence[str] = (),
    ) -> None:
        """Record the hovered slot, at most once per frame."""

        state = self._state
        if not state.is_dragging or state.is_processing_drop:
            return
        index = max(index, 0)
        visual_index = compute_visual_index(
            state.dragged_item, day, index, day_destination_ids
        )
        self._cancel_pending_frame()
        if state.drag_over_day == day and state.drag_over_index == visual_index:
            return

        now = self._clock()
        if now - self._last_hover_at > self._frame_interval:
            self._apply_hover(day, visual_index, index)
            return

        loop = _running_loop()
        if loop is None:
            self._apply_hover(day, visual_index, index)
            return
        self._pending_frame = loop.call_later(
            self._frame_interval, self._apply_hover, day, visual_index, index
        )

    def nudge(self, delta: int, *, day_destination_ids: Sequence[str] = ()) -> None:
        """Keyboard arrow navigation between drop slots.

        Moves the highlight by ``delta`` and derives the resolution index from
        it, so the hovered day's ids are needed once the dragged item is on it.
        """

        state = self._state
        if state.phase is not DragPhase.HOVERING or state.drag_over_index is None:
            return
        visual_index = state.drag_over_index + delta
        if visual_index < 0:
            return
        if day_destination_ids:
            last_slot = len(day_destination_ids)
            dragged = state.dragged_item
            if dragged is not None and dragged.id in day_destination_ids:
                last_slot -= 1
            if visual_index > last_slot:
                return
        target_index = compute_target_index(
            state.dragged_item, state.drag_over_day, visual_index, day_destination_ids
        )
        self._cancel_pending_frame()
        self._apply_hover(state.drag_over_day, visual_index, target_index)

    def begin_drop(self) -> bool:
        state = self._state
        if state.is_processing_drop:
            self.logger.warning("drag.drop.rejected", extra={"reason": "drop_in_flight"})
            return False
        if not state.is_dragging or state.dragged_item is None:
            self.logger.warning("drag.drop.rejected", extra={"reason": "not_dragging"})
            return False
        self._cancel_pending_frame()
        self._set_state(replace(state, phase=DragPhase.DROPPING))
        self._arm_watchdog()
        return True

    def finish_drop(self) -> None:
        self.reset("drop_finished")

    def cancel(self, reason: str = "cancelled") -> None:
        if not self._state.is_dragging:
            return
        self.reset(reason)

    def pointer_down(self, *, inside_timeline: bool) -> None:
        if inside_timeline or self._state.is_processing_drop:
            return
        self.cancel("pointer_outside")

    def reset(self, reason: str) -> None:
        """Force IDLE, drop timers and restore drag affordances."""

        self._cancel_pending_frame()
        self._cancel_watchdog()
        previous = self._state
        self._set_state(IDLE_STATE)
        if self._on_reset is not None:
            self._on_reset()
        if previous.is_dragging:
            self.logger.info(
                "drag.reset",
                extra={
                    "reason": reason,
                    "destination_id": previous.dragged_item.id
                    if previous.dragged_item
                    else None,
                },
            )

    def _apply_hover(self, day: str | None, visual_index: int, target_index: int) -> None:
        self._pending_frame = None
        state = self._state
        if not state.is_dragging or state.is_processing_drop:
            return
        self._last_hover_at = self._clock()
        if state.drag_over_day == day and state.drag_over_index == visual_index:
            return
        self._set_state(
            replace(
                state,
                phase=DragPhase.HOVERING,
                drag_over_day=day,
                drag_over_index=visual_index,
                drop_target_index=target_index,
            )
        )

    def _set_state(self, state: DragState) -> None:
        self._state = state
        if self._on_change is not None:
            self._on_change(state)

    def _arm_watchdog(self) -> None:
        self._cancel_watchdog()
        loop = _running_loop()
        if loop is None:
            return
        self._watchdog = loop.call_later(self._watchdog_seconds, self._on_watchdog)

    def _on_watchdog(self) -> None:
        self._watchdog = None
        self.logger.warning(
            "drag.watchdog.expired", extra={"timeout_s": self._watchdog_seconds}
        )
        self.reset("watchdog")

    def _cancel_pending_frame(self) -> None:
        if self._pending_frame is not None:
            self._pending_frame.cancel()
            self._pending_frame = None

    def _cancel_watchdog(self) -> None:
        if self._watchdog is not None:
            self._watchdog.cancel()
            self._watchdog = None


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


__all__ = [
    "DragPhase",
    "DragState",
    "IDLE_STATE",
    "compute_visual_index",
    "compute_target_index",
    "DragStateMachine",
]
