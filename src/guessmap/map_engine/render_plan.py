"""Pure render function turning a :class:`MapState` into drawable output."""

from __future__ import annotations

from dataclasses import dataclass

from .markers import ScreenMarker, build_markers, project_markers
from .state import MapState
from .tile_collector import TilePlacement, collect_tiles
from .viewport import Viewport, build_viewport


@dataclass(frozen=True)
class RenderPlan:
    """Everything a surface needs to draw one frame."""

    zoom: int
    viewport: Viewport
    tiles: tuple[TilePlacement, ...]
    markers: tuple[ScreenMarker, ...]
    show_controls: bool = True

    @property
    def visible_markers(self) -> tuple[ScreenMarker, ...]:
        return tuple(marker for marker in self.markers if marker.visible)


def compute_render_plan(state: MapState, width: float, height: float) -> RenderPlan:
    """Compute the viewport, then the tile set, then the projected markers."""

    viewport = build_viewport(state, width, height)
    tiles = collect_tiles(viewport, state.zoom)
    markers = project_markers(build_markers(state), viewport, state.zoom)
    return RenderPlan(
        zoom=state.zoom,
        viewport=viewport,
        tiles=tuple(tiles),
        markers=tuple(markers),
        show_controls=state.show_controls,
    )


__all__ = ["RenderPlan", "compute_render_plan"]
