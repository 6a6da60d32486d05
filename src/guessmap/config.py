"""Default configuration values for the guessmap engine and its Qt host."""

from __future__ import annotations

from typing import Final

# ---------------------------------------------------------------------------
# Projection and tile grid
# ---------------------------------------------------------------------------

TILE_SIZE: Final[int] = 256
MIN_ZOOM: Final[int] = 2
MAX_ZOOM: Final[int] = 18

# Spherical Mercator is undefined at the poles.  Latitudes are clamped to the
# square-world limit so the projected plane stays finite.
MERCATOR_LAT_BOUND: Final[float] = 85.05112878

DEFAULT_CENTER: Final[tuple[float, float]] = (20.0, 0.0)
DEFAULT_ZOOM: Final[int] = 2

# Fixed retrieval key format.  Changing it requires a matching service-side
# change.
TILE_URL_TEMPLATE: Final[str] = "https://tile.openstreetmap.org/{zoom}/{x}/{y}.png"

# ---------------------------------------------------------------------------
# Interaction
# ---------------------------------------------------------------------------

DRAG_THRESHOLD_PX: Final[float] = 2.0
WHEEL_LINE_MULTIPLIER: Final[float] = 20.0
WHEEL_PAGE_MULTIPLIER: Final[float] = 60.0
WHEEL_DELTA_PER_STEP: Final[float] = 240.0
MAX_WHEEL_STEPS_PER_EVENT: Final[int] = 4
SELECTION_PRECISION: Final[int] = 6

# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

MARKER_CULL_MARGIN_PX: Final[float] = 60.0
FRAME_INTERVAL_MS: Final[int] = 16
TILE_IMAGE_CACHE_LIMIT: Final[int] = 256

# tile.openstreetmap.org rejects requests without an identifying user agent.
USER_AGENT: Final[str] = "guessmap/0.1 (+https://www.openstreetmap.org/copyright)"
ATTRIBUTION_HTML: Final[str] = (
    '© <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> contributors'
)
BACKGROUND_COLOR: Final[str] = "#040d21"
