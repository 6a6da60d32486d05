"""Project game markers (guesses, actual location, pending pin) to the screen."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ..config import MARKER_CULL_MARGIN_PX
from .projection import is_finite_lat_lng
from .state import GuessMarker, MapMode, MapState
from .viewport import Viewport, lat_lng_to_screen

KIND_ACTUAL = "actual"
KIND_SELF = "self"
KIND_OTHER = "other"
KIND_PRIMARY = "primary"


@dataclass(frozen=True)
class MarkerSpec:
    """Logical marker: where it is and how it should be labelled."""

    lat: float
    lng: float
    kind: str
    title: str | None = None
    label: str | None = None


@dataclass(frozen=True)
class ScreenMarker:
    """A marker resolved against the viewport of the current pass."""

    spec: MarkerSpec
    left: float
    top: float
    visible: bool

    @property
    def kind(self) -> str:
        return self.spec.kind

    @property
    def title(self) -> str | None:
        return self.spec.title

    @property
    def label(self) -> str | None:
        return self.spec.label


def format_points(points: float) -> str:
    """Render a score the way the scoreboard does: integral values without ``.0``."""

    if float(points).is_integer():
        return f"{int(points)} pts"
    return f"{points} pts"


def _guess_marker(guess: GuessMarker, player_id: str | None) -> MarkerSpec:
    is_current_player = bool(player_id) and guess.player_id == player_id
    label = format_points(guess.points) if guess.has_points else None

    title = None
    if guess.player_name:
        title = f"{guess.player_name} • {label}" if label else guess.player_name

    return MarkerSpec(
        lat=guess.lat,
        lng=guess.lng,
        kind=KIND_SELF if is_current_player else KIND_OTHER,
        title=title,
        label=label,
    )


def build_markers(state: MapState) -> list[MarkerSpec]:
    """Return the ordered logical marker list for ``state``."""

    markers: list[MarkerSpec] = []

    if state.mode is MapMode.REVEAL:
        if is_finite_lat_lng(state.actual):
            markers.append(
                MarkerSpec(
                    lat=state.actual.lat,
                    lng=state.actual.lng,
                    kind=KIND_ACTUAL,
                    title="Actual location",
                    label="Actual",
                )
            )
        for guess in state.guesses:
            if is_finite_lat_lng(guess):
                markers.append(_guess_marker(guess, state.player_id))
    elif is_finite_lat_lng(state.marker):
        is_guess = state.mode is MapMode.GUESS
        markers.append(
            MarkerSpec(
                lat=state.marker.lat,
                lng=state.marker.lng,
                kind=KIND_SELF if is_guess else KIND_PRIMARY,
                title="Your guess" if is_guess else "Selected location",
            )
        )

    return markers


def project_markers(
    markers: Sequence[MarkerSpec],
    viewport: Viewport,
    zoom: int,
    *,
    margin: float = MARKER_CULL_MARGIN_PX,
) -> list[ScreenMarker]:
    """Resolve each marker to surface pixels and flag the ones to cull."""

    projected: list[ScreenMarker] = []
    for marker in markers:
        left, top = lat_lng_to_screen(viewport, marker.lat, marker.lng, zoom)
        visible = not (
            left < -margin
            or left > viewport.width + margin
            or top < -margin
            or top > viewport.height + margin
        )
        projected.append(ScreenMarker(spec=marker, left=left, top=top, visible=visible))
    return projected


__all__ = [
    "KIND_ACTUAL",
    "KIND_OTHER",
    "KIND_PRIMARY",
    "KIND_SELF",
    "MarkerSpec",
    "ScreenMarker",
    "build_markers",
    "format_points",
    "project_markers",
]
