"""Coerce string-valued host attributes into engine configuration.

Web and template hosts hand the map its options as flat string attributes
(``mode="guess"``, ``marker-lat="48.85"``, ``guesses="[...]"``).  The helpers
here turn those into the mapping accepted by
:meth:`guessmap.map_engine.MapEngine.initialize` and
:meth:`~guessmap.map_engine.MapEngine.apply_update`.  Nothing in this module
raises on bad input: unusable values fall back to defaults and malformed
lists are logged and treated as empty.
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any, Mapping

from jsonschema import Draft202012Validator

from .config import DEFAULT_ZOOM
from .errors import OptionsParseError
from .map_engine.projection import GeoPoint, clamp_zoom

_LOGGER = logging.getLogger(__name__)

GUESSES_SCHEMA: dict[str, Any] = {
    "$id": "guessmap/guesses.schema.json",
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "lat": {"type": ["number", "string", "null"]},
            "lng": {"type": ["number", "string", "null"]},
            "player_id": {"type": ["string", "integer", "null"]},
            "player_name": {},
            "points": {},
        },
        "additionalProperties": True,
    },
}

_guesses_validator = Draft202012Validator(GUESSES_SCHEMA)

SELECTION_EVENTS: dict[str, str] = {
    "submission": "set_submission_location",
    "guess": "set_guess_location",
}


def parse_number(value: Any) -> float | None:
    """Return a finite float parsed from ``value`` or ``None``."""

    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return None
        return parsed if math.isfinite(parsed) else None
    return None


def parse_lat_lng(lat_value: Any, lng_value: Any) -> GeoPoint | None:
    """Combine two raw values into a :class:`GeoPoint` when both parse."""

    lat = parse_number(lat_value)
    lng = parse_number(lng_value)
    if lat is None or lng is None:
        return None
    return GeoPoint(lat, lng)


def parse_zoom(value: Any, fallback: int = DEFAULT_ZOOM) -> int:
    parsed = parse_number(value)
    return fallback if parsed is None else clamp_zoom(parsed)


def parse_boolean(value: Any, fallback: bool) -> bool:
    """Interpret ``"true"``/``"1"`` and ``"false"``/``"0"``; otherwise ``fallback``."""

    if value is None:
        return fallback
    if isinstance(value, bool):
        return value
    if value in ("false", "0"):
        return False
    if value in ("true", "1"):
        return True
    return fallback


def decode_guesses(payload: str) -> list[dict[str, Any]]:
    """Decode and validate a serialized guess list.

    Raises :class:`OptionsParseError` when the payload is not JSON or does
    not match :data:`GUESSES_SCHEMA`.
    """

    try:
        data = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise OptionsParseError(f"Guess list is not valid JSON: {exc}") from exc

    errors = sorted(_guesses_validator.iter_errors(data), key=lambda error: list(error.path))
    if errors:
        raise OptionsParseError(f"Guess list does not match the schema: {errors[0].message}")
    return data


def parse_guesses(value: Any) -> list[dict[str, Any]]:
    """Return the guess list with numeric coordinates; malformed input is empty."""

    if not value:
        return []
    if isinstance(value, str):
        try:
            entries = decode_guesses(value)
        except OptionsParseError as exc:
            _LOGGER.warning("Ignoring guess list: %s", exc)
            return []
    elif isinstance(value, list):
        entries = [entry for entry in value if isinstance(entry, Mapping)]
    else:
        _LOGGER.warning("Ignoring guess list of unexpected type %s", type(value).__name__)
        return []

    return [
        {**entry, "lat": parse_number(entry.get("lat")), "lng": parse_number(entry.get("lng"))}
        for entry in entries
    ]


def extract_options(attributes: Mapping[str, Any]) -> dict[str, Any]:
    """Build an engine configuration mapping from raw host attributes.

    Recognised attributes: ``mode``, ``player_id``, ``marker_lat``/
    ``marker_lng``, ``actual_lat``/``actual_lng``, ``center_lat``/
    ``center_lng``, ``zoom``, ``controls`` and ``guesses`` (JSON text).
    ``zoom`` and ``show_controls`` are only present in the result when the
    corresponding attribute was supplied, so partial updates leave them
    alone.
    """

    options: dict[str, Any] = {
        "mode": attributes.get("mode") or "submission",
        "player_id": attributes.get("player_id") or None,
        "marker": parse_lat_lng(attributes.get("marker_lat"), attributes.get("marker_lng")),
        "actual": parse_lat_lng(attributes.get("actual_lat"), attributes.get("actual_lng")),
        "guesses": parse_guesses(attributes.get("guesses")),
        "center": parse_lat_lng(attributes.get("center_lat"), attributes.get("center_lng")),
    }
    if attributes.get("zoom") is not None:
        options["zoom"] = parse_zoom(attributes["zoom"], DEFAULT_ZOOM)
    if attributes.get("controls") is not None:
        options["show_controls"] = parse_boolean(attributes["controls"], True)
    return options


def selection_event_name(mode: Any) -> str | None:
    """Name of the backend event that records a selection in ``mode``."""

    return SELECTION_EVENTS.get(getattr(mode, "value", mode))


__all__ = [
    "GUESSES_SCHEMA",
    "decode_guesses",
    "extract_options",
    "parse_boolean",
    "parse_guesses",
    "parse_lat_lng",
    "parse_number",
    "parse_zoom",
    "selection_event_name",
]
