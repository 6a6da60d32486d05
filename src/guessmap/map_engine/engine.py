"""Lifecycle owner that wires state, input, scheduling and rendering together."""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import Any, Callable, Mapping

from ..errors import EngineStateError
from .input_handler import InputEvent, InteractionController
from .projection import GeoPoint, clamp_zoom, coerce_geo_point
from .render_plan import RenderPlan, compute_render_plan
from .scheduler import FrameClock, ManualFrameClock, RenderScheduler
from .state import MapState, coerce_guesses, coerce_mode
from .surface import ListenerHandle, ListenerRegistry, MapSurface
from .tile_arena import TileArena
from .viewport import Viewport

_LOGGER = logging.getLogger(__name__)


class MapEngine:
    """Drive one interactive map on a host :class:`MapSurface`.

    The engine owns the current :class:`MapState` snapshot, the interaction
    state machine, the render scheduler and the tile arena.  Hosts call
    :meth:`initialize` once, push configuration with :meth:`apply_update`,
    listen for clicks through :meth:`on_select` and finally call
    :meth:`teardown`.
    """

    def __init__(self, *, frame_clock: FrameClock | None = None) -> None:
        # Without a display clock the host drives frames explicitly, either by
        # advancing the manual clock or by calling :meth:`render_now`.
        self._frame_clock: FrameClock = frame_clock or ManualFrameClock()
        self._scheduler = RenderScheduler(self._frame_clock, self._render_scheduled)
        self._controller = InteractionController(self)
        self._arena = TileArena()
        self._select_listeners = ListenerRegistry()
        self._surface_handles: list[ListenerHandle] = []

        self._surface: MapSurface | None = None
        self._state: MapState | None = None
        self._viewport: Viewport | None = None
        self._last_plan: RenderPlan | None = None
        self._torn_down = False

    # ------------------------------------------------------------------
    @property
    def state(self) -> MapState:
        """Return the current snapshot; only valid between initialize and teardown."""

        if self._state is None:
            raise EngineStateError("The map engine has not been initialised")
        return self._state

    @state.setter
    def state(self, value: MapState) -> None:
        self._state = value

    @property
    def is_active(self) -> bool:
        return self._surface is not None and not self._torn_down

    @property
    def frame_clock(self) -> FrameClock:
        return self._frame_clock

    @property
    def controller(self) -> InteractionController:
        return self._controller

    @property
    def tiles(self) -> TileArena:
        return self._arena

    @property
    def viewport(self) -> Viewport | None:
        """Viewport computed by the most recent render pass."""

        return self._viewport

    @property
    def last_plan(self) -> RenderPlan | None:
        return self._last_plan

    # ------------------------------------------------------------------
    def initialize(self, surface: MapSurface, config: Mapping[str, Any] | None = None) -> None:
        """Attach to ``surface``, build the initial state and schedule a render."""

        if self._torn_down:
            raise EngineStateError("A torn down map engine cannot be initialised again")
        if self._surface is not None:
            raise EngineStateError("The map engine is already initialised")

        self._surface = surface
        self._state = MapState.from_config(config)
        self._surface_handles = [
            surface.add_input_listener(self.handle_input),
            surface.add_resize_listener(self.request_render),
        ]
        surface.set_controls_visible(self._state.show_controls)
        _LOGGER.debug(
            "Map engine initialised in %s mode at zoom %d",
            self._state.mode.value,
            self._state.zoom,
        )
        self.request_render()

    # ------------------------------------------------------------------
    def apply_update(self, partial: Mapping[str, Any]) -> None:
        """Merge host-pushed configuration into the current state.

        Keys missing from ``partial`` are left untouched.  ``center`` and
        ``zoom`` only apply while the user has not navigated the map, unless
        the update also switches the mode; a mode switch resets the
        interaction flag.
        """

        self._require_active()
        state = self.state
        updates: dict[str, Any] = {}

        mode_changed = False
        if partial.get("mode"):
            mode = coerce_mode(partial["mode"], state.mode)
            mode_changed = mode is not state.mode
            updates["mode"] = mode
            if mode_changed:
                updates["user_has_interacted"] = False
        may_move_camera = not state.user_has_interacted or mode_changed

        if "player_id" in partial:
            updates["player_id"] = partial["player_id"] or None

        zoom = partial.get("zoom")
        if isinstance(zoom, (int, float)) and not isinstance(zoom, bool) and math.isfinite(zoom):
            next_zoom = clamp_zoom(zoom)
            if next_zoom != state.zoom and may_move_camera:
                updates["zoom"] = next_zoom

        if "marker" in partial:
            updates["marker"] = coerce_geo_point(partial["marker"])
        if "actual" in partial:
            updates["actual"] = coerce_geo_point(partial["actual"])
        if "guesses" in partial:
            updates["guesses"] = coerce_guesses(partial["guesses"])

        if "show_controls" in partial:
            updates["show_controls"] = partial["show_controls"] is not False
            self._surface.set_controls_visible(updates["show_controls"])

        center = coerce_geo_point(partial.get("center"))
        if center is not None and may_move_camera:
            updates["center"] = center

        self._state = replace(state, **updates)
        self.request_render()

    # ------------------------------------------------------------------
    def teardown(self) -> None:
        """Cancel pending work and detach every listener.  Idempotent."""

        if self._torn_down:
            return
        self._torn_down = True

        self._scheduler.cancel()
        for handle in self._surface_handles:
            handle.cancel()
        self._surface_handles.clear()
        self._select_listeners = ListenerRegistry()
        self._controller.reset()
        self._arena.clear()

        self._surface = None
        self._state = None
        self._viewport = None
        self._last_plan = None
        _LOGGER.debug("Map engine torn down")

    # ------------------------------------------------------------------
    def on_select(self, callback: Callable[[GeoPoint], None]) -> ListenerHandle:
        """Register ``callback`` for click/tap selections."""

        return self._select_listeners.add(callback)

    # ------------------------------------------------------------------
    def handle_input(self, event: InputEvent) -> bool:
        """Feed one input event to the interaction controller."""

        if not self.is_active:
            return False
        return self._controller.dispatch(event)

    # ------------------------------------------------------------------
    def zoom_in(self) -> bool:
        return self.is_active and self._controller.zoom_in()

    def zoom_out(self) -> bool:
        return self.is_active and self._controller.zoom_out()

    # ------------------------------------------------------------------
    def request_render(self) -> None:
        """Schedule a render pass on the next frame, replacing any pending one."""

        if self.is_active:
            self._scheduler.request()

    # ------------------------------------------------------------------
    def render_now(self) -> RenderPlan | None:
        """Compute and present a frame immediately."""

        if not self.is_active:
            return None
        self._scheduler.cancel()

        width, height = self.surface_size()
        plan = compute_render_plan(self.state, width, height)
        self._viewport = plan.viewport
        diff = self._arena.sync(plan.tiles)
        self._last_plan = plan
        self._surface.present(plan, diff)
        return plan

    # ------------------------------------------------------------------
    # InteractionHost implementation
    # ------------------------------------------------------------------
    def surface_size(self) -> tuple[float, float]:
        if self._surface is None:
            return 1.0, 1.0
        return float(self._surface.width()), float(self._surface.height())

    def last_viewport(self) -> Viewport | None:
        return self._viewport

    def capture_pointer(self, pointer_id: int) -> None:
        if self._surface is not None:
            self._surface.capture_pointer(pointer_id)

    def release_pointer(self, pointer_id: int) -> None:
        if self._surface is not None:
            self._surface.release_pointer(pointer_id)

    def has_selection_listeners(self) -> bool:
        return len(self._select_listeners) > 0

    def emit_selection(self, point: GeoPoint) -> None:
        _LOGGER.debug("Location selected: %.6f, %.6f", point.lat, point.lng)
        for callback in self._select_listeners.snapshot():
            try:
                callback(point)
            except Exception:
                _LOGGER.exception("Selection listener %r failed", callback)

    # ------------------------------------------------------------------
    def _render_scheduled(self) -> None:
        self.render_now()

    def _require_active(self) -> None:
        if self._torn_down:
            raise EngineStateError("The map engine has been torn down")
        if self._surface is None:
            raise EngineStateError("The map engine has not been initialised")


__all__ = ["MapEngine"]
