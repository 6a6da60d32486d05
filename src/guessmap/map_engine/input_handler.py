"""Translate pointer, wheel and double-click input into map navigation.

The controller is a two-state machine (idle / dragging).  It never touches a
display directly: it reads and replaces the host's :class:`MapState`, asks the
host to capture pointers and to schedule renders, and reports click
selections back through the host.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum, IntEnum
from typing import Protocol, Union

from ..config import (
    DRAG_THRESHOLD_PX,
    MAX_WHEEL_STEPS_PER_EVENT,
    SELECTION_PRECISION,
    WHEEL_DELTA_PER_STEP,
    WHEEL_LINE_MULTIPLIER,
    WHEEL_PAGE_MULTIPLIER,
)
from .projection import GeoPoint, clamp_lat_lng, clamp_zoom, lat_lng_to_point, point_to_lat_lng
from .state import DragState, MapMode, MapState
from .viewport import Viewport, build_viewport, screen_to_lat_lng

_LOGGER = logging.getLogger(__name__)

PRIMARY_BUTTON = 0


class PointerPhase(Enum):
    DOWN = "down"
    MOVE = "move"
    UP = "up"
    CANCEL = "cancel"


class DeltaMode(IntEnum):
    """Unit of a wheel delta, matching the DOM ``deltaMode`` values."""

    PIXEL = 0
    LINE = 1
    PAGE = 2


@dataclass(frozen=True)
class PointerEvent:
    """Pointer input in surface-relative pixels."""

    phase: PointerPhase
    pointer_id: int
    x: float
    y: float
    button: int = PRIMARY_BUTTON
    over_control: bool = False


@dataclass(frozen=True)
class WheelEvent:
    x: float
    y: float
    delta_y: float
    delta_mode: DeltaMode = DeltaMode.PIXEL


@dataclass(frozen=True)
class DoubleClickEvent:
    x: float
    y: float
    modifier: bool = False


InputEvent = Union[PointerEvent, WheelEvent, DoubleClickEvent]


class InteractionState(Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


class InteractionHost(Protocol):
    """Services the controller needs from the engine that owns it."""

    state: MapState

    def surface_size(self) -> tuple[float, float]:  # pragma: no cover - interface definition only
        ...

    def last_viewport(self) -> Viewport | None:  # pragma: no cover - interface definition only
        ...

    def request_render(self) -> None:  # pragma: no cover - interface definition only
        ...

    def capture_pointer(self, pointer_id: int) -> None:  # pragma: no cover - interface definition only
        ...

    def release_pointer(self, pointer_id: int) -> None:  # pragma: no cover - interface definition only
        ...

    def has_selection_listeners(self) -> bool:  # pragma: no cover - interface definition only
        ...

    def emit_selection(self, point: GeoPoint) -> None:  # pragma: no cover - interface definition only
        ...


def normalize_wheel_delta(delta_y: float, delta_mode: DeltaMode = DeltaMode.PIXEL) -> float:
    """Convert a raw wheel delta into fractional zoom steps."""

    if delta_mode == DeltaMode.LINE:
        delta_y *= WHEEL_LINE_MULTIPLIER
    elif delta_mode == DeltaMode.PAGE:
        delta_y *= WHEEL_PAGE_MULTIPLIER
    return delta_y / WHEEL_DELTA_PER_STEP


class InteractionController:
    """Handle pan, zoom and selection gestures for a :class:`MapEngine`."""

    def __init__(self, host: InteractionHost) -> None:
        self._host = host
        self._drag: DragState | None = None
        self._wheel_accumulator = 0.0

    # ------------------------------------------------------------------
    @property
    def interaction_state(self) -> InteractionState:
        return InteractionState.DRAGGING if self._drag is not None else InteractionState.IDLE

    @property
    def drag_state(self) -> DragState | None:
        return self._drag

    @property
    def wheel_accumulator(self) -> float:
        return self._wheel_accumulator

    # ------------------------------------------------------------------
    def dispatch(self, event: InputEvent) -> bool:
        """Route ``event`` to its handler; ``True`` means it was consumed."""

        if isinstance(event, PointerEvent):
            if event.phase is PointerPhase.DOWN:
                return self.handle_pointer_down(event)
            if event.phase is PointerPhase.MOVE:
                return self.handle_pointer_move(event)
            if event.phase is PointerPhase.UP:
                return self.handle_pointer_up(event)
            return self.handle_pointer_cancel(event)
        if isinstance(event, WheelEvent):
            return self.handle_wheel(event)
        if isinstance(event, DoubleClickEvent):
            return self.handle_double_click(event)
        return False

    # ------------------------------------------------------------------
    def handle_pointer_down(self, event: PointerEvent) -> bool:
        """Start a drag when the primary button goes down on the map itself."""

        if event.button != PRIMARY_BUTTON or event.over_control:
            return False
        if self._drag is not None:
            # Multi-touch is not modelled; the first pointer keeps the gesture.
            return False

        self._host.capture_pointer(event.pointer_id)
        self._drag = DragState(
            pointer_id=event.pointer_id,
            origin_x=event.x,
            origin_y=event.y,
            center_at_drag_start=self._host.state.center,
        )
        return True

    # ------------------------------------------------------------------
    def handle_pointer_move(self, event: PointerEvent) -> bool:
        """Pan the map once the pointer has travelled past the drag threshold."""

        drag = self._drag
        if drag is None or event.pointer_id != drag.pointer_id:
            return False

        dx = event.x - drag.origin_x
        dy = event.y - drag.origin_y
        if not drag.moved and (abs(dx) > DRAG_THRESHOLD_PX or abs(dy) > DRAG_THRESHOLD_PX):
            drag.moved = True
        if not drag.moved:
            return True

        state = self._host.state
        start = lat_lng_to_point(drag.center_at_drag_start.lat, drag.center_at_drag_start.lng, state.zoom)
        center = clamp_lat_lng(point_to_lat_lng(start.x - dx, start.y - dy, state.zoom))
        self._host.state = replace(state, center=center, user_has_interacted=True)
        self._host.request_render()
        return True

    # ------------------------------------------------------------------
    def handle_pointer_up(self, event: PointerEvent) -> bool:
        """Finish the gesture; a release without movement selects a location."""

        drag = self._drag
        if drag is None or event.pointer_id != drag.pointer_id:
            return False

        self._host.release_pointer(event.pointer_id)
        self._drag = None

        if drag.moved or self._host.state.mode is MapMode.REVEAL:
            return True
        if not self._host.has_selection_listeners():
            return True

        viewport = self._host.last_viewport()
        if viewport is None:
            return True
        coords = screen_to_lat_lng(viewport, event.x, event.y, self._host.state.zoom)
        if coords is None:
            return True

        self._mark_interacted()
        self._host.emit_selection(
            GeoPoint(
                lat=round(coords.lat, SELECTION_PRECISION),
                lng=round(coords.lng, SELECTION_PRECISION),
            )
        )
        return True

    # ------------------------------------------------------------------
    def handle_pointer_cancel(self, event: PointerEvent) -> bool:
        return self.handle_pointer_up(event)

    # ------------------------------------------------------------------
    def handle_wheel(self, event: WheelEvent) -> bool:
        """Accumulate wheel deltas and apply whole zoom steps around the cursor."""

        self._mark_interacted()
        delta = normalize_wheel_delta(event.delta_y, event.delta_mode)
        if delta == 0:
            return True

        self._wheel_accumulator += delta
        steps = 0
        while abs(self._wheel_accumulator) >= 1 and steps < MAX_WHEEL_STEPS_PER_EVENT:
            # Scrolling down (positive delta) zooms out.
            step = -1 if self._wheel_accumulator > 0 else 1
            if not self.adjust_zoom(step, (event.x, event.y)):
                self._wheel_accumulator = 0.0
                break
            self._wheel_accumulator += step
            steps += 1
        return True

    # ------------------------------------------------------------------
    def handle_double_click(self, event: DoubleClickEvent) -> bool:
        """Zoom one level in (or out with a modifier) around the click point."""

        self._mark_interacted()
        self._wheel_accumulator = 0.0
        self.adjust_zoom(-1 if event.modifier else 1, (event.x, event.y))
        return True

    # ------------------------------------------------------------------
    def zoom_in(self) -> bool:
        """Zoom-in control button: one step around the surface centre."""

        self._mark_interacted()
        self._wheel_accumulator = 0.0
        return self.adjust_zoom(1)

    # ------------------------------------------------------------------
    def zoom_out(self) -> bool:
        """Zoom-out control button: one step around the surface centre."""

        self._mark_interacted()
        self._wheel_accumulator = 0.0
        return self.adjust_zoom(-1)

    # ------------------------------------------------------------------
    def adjust_zoom(self, delta: int, focus: tuple[float, float] | None = None) -> bool:
        """Change the zoom by ``delta`` while keeping ``focus`` anchored.

        The geographic point under ``focus`` (the surface centre by default)
        stays under the same screen pixel after the zoom.  Returns ``False``
        when the zoom is already at the requested bound.
        """

        state = self._host.state
        target_zoom = clamp_zoom(state.zoom + delta)
        if target_zoom == state.zoom:
            return False

        width, height = self._host.surface_size()
        viewport = build_viewport(state, width, height)
        if focus is None:
            focus = (viewport.width / 2.0, viewport.height / 2.0)
        focus_x, focus_y = focus

        anchor = point_to_lat_lng(viewport.top_left_x + focus_x, viewport.top_left_y + focus_y, state.zoom)
        anchor_point = lat_lng_to_point(anchor.lat, anchor.lng, target_zoom)
        center_x = anchor_point.x - focus_x + viewport.width / 2.0
        center_y = anchor_point.y - focus_y + viewport.height / 2.0
        center = clamp_lat_lng(point_to_lat_lng(center_x, center_y, target_zoom))

        self._host.state = replace(state, zoom=target_zoom, center=center)
        _LOGGER.debug("Zoom %d -> %d anchored at (%.1f, %.1f)", state.zoom, target_zoom, focus_x, focus_y)
        self._host.request_render()
        return True

    # ------------------------------------------------------------------
    def reset(self) -> None:
        """Forget any active drag and pending wheel delta."""

        self._drag = None
        self._wheel_accumulator = 0.0

    # ------------------------------------------------------------------
    def _mark_interacted(self) -> None:
        state = self._host.state
        if not state.user_has_interacted:
            self._host.state = replace(state, user_has_interacted=True)


__all__ = [
    "DeltaMode",
    "DoubleClickEvent",
    "InputEvent",
    "InteractionController",
    "InteractionHost",
    "InteractionState",
    "PointerEvent",
    "PointerPhase",
    "WheelEvent",
    "normalize_wheel_delta",
]
