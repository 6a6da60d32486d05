from __future__ import annotations

import math

from guessmap.map_engine.markers import (
    KIND_ACTUAL,
    KIND_OTHER,
    KIND_PRIMARY,
    KIND_SELF,
    build_markers,
    format_points,
)
from guessmap.map_engine.projection import GeoPoint
from guessmap.map_engine.state import GuessMarker, MapMode, MapState


def test_format_points() -> None:
    assert format_points(500) == "500 pts"
    assert format_points(500.0) == "500 pts"
    assert format_points(12.5) == "12.5 pts"


def test_submission_mode_shows_selected_location() -> None:
    state = MapState(mode=MapMode.SUBMISSION, marker=GeoPoint(1.0, 2.0))
    (marker,) = build_markers(state)
    assert marker.kind == KIND_PRIMARY
    assert marker.title == "Selected location"
    assert (marker.lat, marker.lng) == (1.0, 2.0)


def test_guess_mode_shows_own_guess() -> None:
    state = MapState(mode=MapMode.GUESS, marker=GeoPoint(1.0, 2.0))
    (marker,) = build_markers(state)
    assert marker.kind == KIND_SELF
    assert marker.title == "Your guess"


def test_no_marker_without_selection() -> None:
    assert build_markers(MapState(mode=MapMode.GUESS)) == []


def test_reveal_mode_lists_actual_then_guesses() -> None:
    state = MapState(
        mode=MapMode.REVEAL,
        player_id="p1",
        marker=GeoPoint(5.0, 5.0),
        actual=GeoPoint(0.0, 0.0),
        guesses=(
            GuessMarker(10.0, 10.0, player_id="p1", player_name="Ana", points=500),
            GuessMarker(20.0, 20.0, player_id="p2", player_name="Ben", points=300),
        ),
    )

    actual, own, other = build_markers(state)

    assert actual.kind == KIND_ACTUAL
    assert actual.title == "Actual location"
    assert actual.label == "Actual"
    assert own.kind == KIND_SELF
    assert own.label == "500 pts"
    assert own.title == "Ana • 500 pts"
    assert other.kind == KIND_OTHER
    assert other.label == "300 pts"


def test_reveal_mode_skips_non_finite_guesses_and_missing_actual() -> None:
    state = MapState(
        mode=MapMode.REVEAL,
        guesses=(
            GuessMarker(math.nan, 3.0, player_id="p2"),
            GuessMarker(1.0, 3.0, player_id="p3", player_name="Cy"),
        ),
    )
    (marker,) = build_markers(state)
    assert marker.kind == KIND_OTHER
    assert marker.label is None
    assert marker.title == "Cy"


def test_guesses_are_not_self_without_player_id() -> None:
    state = MapState(mode=MapMode.REVEAL, guesses=(GuessMarker(1.0, 1.0, player_id=None),))
    (marker,) = build_markers(state)
    assert marker.kind == KIND_OTHER


def test_boolean_coordinates_are_not_treated_as_numbers() -> None:
    guess = GuessMarker.from_mapping({"lat": True, "lng": 5, "player_id": "p2"})
    assert math.isnan(guess.lat)
    assert guess.lng == 5.0

    state = MapState(mode=MapMode.REVEAL, guesses=(guess,))
    assert build_markers(state) == []


def test_non_numeric_points_keep_the_guess_without_label() -> None:
    guess = GuessMarker.from_mapping({"lat": 1.0, "lng": 2.0, "playerName": "Dee", "points": "500"})
    (marker,) = build_markers(MapState(mode=MapMode.REVEAL, guesses=(guess,)))
    assert marker.label is None
    assert marker.title == "Dee"
