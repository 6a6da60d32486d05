"""Spherical Mercator helpers shared by the viewport, tile and marker code.

All functions are pure.  World-pixel coordinates live on a plane that is
``TILE_SIZE * 2**zoom`` pixels across; they are only meaningful for the zoom
level they were computed at.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping

from ..config import MAX_ZOOM, MERCATOR_LAT_BOUND, MIN_ZOOM, TILE_SIZE, TILE_URL_TEMPLATE


@dataclass(frozen=True)
class GeoPoint:
    """Geographic coordinate in degrees."""

    lat: float
    lng: float

    def as_dict(self) -> dict[str, float]:
        """Return the ``{"lat": ..., "lng": ...}`` payload sent to hosts."""

        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class WorldPoint:
    """Pixel position on the projected plane at a specific zoom."""

    x: float
    y: float


def _clamp(value: float, lower: float, upper: float) -> float:
    return min(max(value, lower), upper)


def world_size(zoom: int) -> float:
    """Return the edge length of the projected plane in pixels."""

    return float(TILE_SIZE * (2 ** zoom))


def clamp_zoom(zoom: float) -> int:
    """Round ``zoom`` and clamp it to the supported integer range."""

    return int(_clamp(round(zoom), MIN_ZOOM, MAX_ZOOM))


def normalize_lng(lng: float) -> float:
    """Fold ``lng`` into ``[-180, 180)``; non-finite input maps to ``0``."""

    if not math.isfinite(lng):
        return 0.0
    return ((lng + 180.0) % 360.0 + 360.0) % 360.0 - 180.0


def clamp_lat_lng(point: GeoPoint | None) -> GeoPoint | None:
    """Clamp latitude to the Mercator limit and normalize longitude."""

    if point is None:
        return None
    return GeoPoint(
        lat=_clamp(point.lat, -MERCATOR_LAT_BOUND, MERCATOR_LAT_BOUND),
        lng=normalize_lng(point.lng),
    )


def lat_lng_to_point(lat: float, lng: float, zoom: int) -> WorldPoint:
    """Project a geographic coordinate onto the world-pixel plane."""

    clamped_lat = _clamp(lat, -MERCATOR_LAT_BOUND, MERCATOR_LAT_BOUND)
    sin_lat = math.sin(math.radians(clamped_lat))
    scale = world_size(zoom)

    x = (normalize_lng(lng) + 180.0) / 360.0 * scale
    y = (0.5 - math.log((1 + sin_lat) / (1 - sin_lat)) / (4 * math.pi)) * scale
    return WorldPoint(x, y)


def point_to_lat_lng(x: float, y: float, zoom: int) -> GeoPoint:
    """Invert :func:`lat_lng_to_point` using the Gudermannian function.

    Points beyond the top or bottom of the plane saturate at the latitude
    bound instead of diverging.
    """

    scale = world_size(zoom)
    lng = x / scale * 360.0 - 180.0
    n = math.pi - 2 * math.pi * y / scale
    # ``sinh`` overflows long before the clamp would matter.
    n = _clamp(n, -700.0, 700.0)
    lat = math.degrees(math.atan(math.sinh(n)))
    return GeoPoint(
        lat=_clamp(lat, -MERCATOR_LAT_BOUND, MERCATOR_LAT_BOUND),
        lng=normalize_lng(lng),
    )


def wrap_tile_index(value: int, zoom: int) -> int:
    """Fold a horizontal tile index into ``[0, 2**zoom)``."""

    tiles_across = 1 << zoom
    return ((value % tiles_across) + tiles_across) % tiles_across


def tile_url(zoom: int, x: int, y: int) -> str:
    """Return the retrieval key for the tile at ``zoom/x/y``."""

    return TILE_URL_TEMPLATE.format(zoom=zoom, x=x, y=y)


def _finite(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def is_finite_lat_lng(point: Any) -> bool:
    """Return ``True`` when ``point`` carries finite ``lat``/``lng`` values."""

    if point is None:
        return False
    if isinstance(point, Mapping):
        lat, lng = point.get("lat"), point.get("lng")
    else:
        lat, lng = getattr(point, "lat", None), getattr(point, "lng", None)
    return _finite(lat) and _finite(lng)


def coerce_geo_point(value: Any) -> GeoPoint | None:
    """Convert ``value`` into a clamped :class:`GeoPoint` or ``None``.

    Accepts ``GeoPoint`` instances, ``{"lat", "lng"}`` mappings and
    ``(lat, lng)`` pairs.  Anything non-finite resolves to ``None``.
    """

    if isinstance(value, (tuple, list)) and len(value) == 2:
        value = {"lat": value[0], "lng": value[1]}
    if not is_finite_lat_lng(value):
        return None
    if isinstance(value, Mapping):
        point = GeoPoint(float(value["lat"]), float(value["lng"]))
    else:
        point = GeoPoint(float(value.lat), float(value.lng))
    return clamp_lat_lng(point)


__all__ = [
    "GeoPoint",
    "WorldPoint",
    "clamp_lat_lng",
    "clamp_zoom",
    "coerce_geo_point",
    "is_finite_lat_lng",
    "lat_lng_to_point",
    "normalize_lng",
    "point_to_lat_lng",
    "tile_url",
    "world_size",
    "wrap_tile_index",
]
