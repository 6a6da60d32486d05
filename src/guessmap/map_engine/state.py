"""Map state records shared by the engine components."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from ..config import DEFAULT_CENTER, DEFAULT_ZOOM
from .projection import GeoPoint, clamp_zoom, coerce_geo_point


class MapMode(str, Enum):
    """Game phase the map is rendered for."""

    SUBMISSION = "submission"
    GUESS = "guess"
    REVEAL = "reveal"


def _coordinate(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return math.nan
    return float(value)


@dataclass(frozen=True)
class GuessMarker:
    """A player's guess as shown during the reveal phase."""

    lat: float
    lng: float
    player_id: str | None = None
    player_name: str | None = None
    points: float | None = None

    @property
    def has_points(self) -> bool:
        return (
            isinstance(self.points, (int, float))
            and not isinstance(self.points, bool)
            and math.isfinite(self.points)
        )

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "GuessMarker":
        """Build a guess from a host payload, accepting camelCase keys."""

        def pick(*names: str) -> Any:
            for name in names:
                if name in payload:
                    return payload[name]
            return None

        lat = pick("lat")
        lng = pick("lng")
        return cls(
            lat=_coordinate(lat),
            lng=_coordinate(lng),
            player_id=pick("player_id", "playerId"),
            player_name=pick("player_name", "playerName"),
            points=pick("points"),
        )


def coerce_guesses(value: Any) -> tuple[GuessMarker, ...]:
    """Return a tuple of guesses; anything that is not a list becomes empty."""

    if not isinstance(value, (list, tuple)):
        return ()
    guesses: list[GuessMarker] = []
    for item in value:
        if isinstance(item, GuessMarker):
            guesses.append(item)
        elif isinstance(item, Mapping):
            guesses.append(GuessMarker.from_mapping(item))
    return tuple(guesses)


def coerce_mode(value: Any, fallback: MapMode = MapMode.SUBMISSION) -> MapMode:
    """Translate ``value`` into a :class:`MapMode`, keeping ``fallback`` otherwise."""

    if isinstance(value, MapMode):
        return value
    try:
        return MapMode(value)
    except ValueError:
        return fallback


@dataclass(frozen=True)
class MapState:
    """Snapshot of everything a render pass depends on.

    Instances are never mutated.  Interaction handlers and host updates
    derive a new snapshot with :func:`dataclasses.replace`.
    """

    center: GeoPoint = field(default_factory=lambda: GeoPoint(*DEFAULT_CENTER))
    zoom: int = DEFAULT_ZOOM
    mode: MapMode = MapMode.SUBMISSION
    marker: GeoPoint | None = None
    actual: GeoPoint | None = None
    guesses: tuple[GuessMarker, ...] = ()
    player_id: str | None = None
    show_controls: bool = True
    user_has_interacted: bool = False

    @classmethod
    def from_config(cls, config: Mapping[str, Any] | None = None) -> "MapState":
        """Create the initial state from optional host configuration."""

        config = dict(config or {})
        marker = coerce_geo_point(config.get("marker"))
        actual = coerce_geo_point(config.get("actual"))
        center = (
            coerce_geo_point(config.get("center"))
            or marker
            or actual
            or GeoPoint(*DEFAULT_CENTER)
        )
        zoom = config.get("zoom")
        if not isinstance(zoom, (int, float)) or not math.isfinite(zoom):
            zoom = DEFAULT_ZOOM

        return cls(
            center=center,
            zoom=clamp_zoom(zoom),
            mode=coerce_mode(config.get("mode")),
            marker=marker,
            actual=actual,
            guesses=coerce_guesses(config.get("guesses")),
            player_id=config.get("player_id") or None,
            show_controls=config.get("show_controls") is not False,
        )


@dataclass
class DragState:
    """Transient record describing the active drag gesture."""

    pointer_id: int
    origin_x: float
    origin_y: float
    center_at_drag_start: GeoPoint
    moved: bool = False


__all__ = [
    "DragState",
    "GuessMarker",
    "MapMode",
    "MapState",
    "coerce_guesses",
    "coerce_mode",
]
