"""Viewport computation helpers for the map renderer."""

from __future__ import annotations

from dataclasses import dataclass

from .projection import GeoPoint, WorldPoint, clamp_lat_lng, lat_lng_to_point, point_to_lat_lng
from .state import MapState


@dataclass(frozen=True)
class Viewport:
    """Describe the visible world-pixel rectangle for the current paint pass."""

    width: float
    height: float
    top_left_x: float
    top_left_y: float
    center_point: WorldPoint


def build_viewport(state: MapState, surface_width: float, surface_height: float) -> Viewport:
    """Translate the map centre and surface geometry into a :class:`Viewport`.

    A zero-sized surface would produce an empty tile range, so degenerate
    dimensions are replaced by one pixel.
    """

    width = surface_width if surface_width and surface_width > 0 else 1
    height = surface_height if surface_height and surface_height > 0 else 1
    center_point = lat_lng_to_point(state.center.lat, state.center.lng, state.zoom)
    return Viewport(
        width=width,
        height=height,
        top_left_x=center_point.x - width / 2.0,
        top_left_y=center_point.y - height / 2.0,
        center_point=center_point,
    )


def screen_to_lat_lng(viewport: Viewport, x: float, y: float, zoom: int) -> GeoPoint | None:
    """Return the coordinate under the surface-relative point ``(x, y)``.

    ``None`` is returned when the point lies outside the surface.
    """

    if x < 0 or y < 0 or x > viewport.width or y > viewport.height:
        return None
    return clamp_lat_lng(point_to_lat_lng(viewport.top_left_x + x, viewport.top_left_y + y, zoom))


def lat_lng_to_screen(viewport: Viewport, lat: float, lng: float, zoom: int) -> tuple[float, float]:
    """Project ``lat``/``lng`` into surface-relative pixels."""

    point = lat_lng_to_point(lat, lng, zoom)
    return point.x - viewport.top_left_x, point.y - viewport.top_left_y


__all__ = ["Viewport", "build_viewport", "lat_lng_to_screen", "screen_to_lat_lng"]
