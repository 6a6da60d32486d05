"""Display-independent slippy map engine.

The package re-exports the pieces hosts need: the :class:`MapEngine`
lifecycle object, the input event records, the pure render function and the
projection helpers.
"""

from .engine import MapEngine
from .input_handler import (
    DeltaMode,
    DoubleClickEvent,
    InteractionController,
    PointerEvent,
    PointerPhase,
    WheelEvent,
)
from .markers import MarkerSpec, ScreenMarker, build_markers, project_markers
from .projection import (
    GeoPoint,
    WorldPoint,
    clamp_lat_lng,
    clamp_zoom,
    lat_lng_to_point,
    normalize_lng,
    point_to_lat_lng,
    tile_url,
    wrap_tile_index,
)
from .render_plan import RenderPlan, compute_render_plan
from .scheduler import FrameClock, ManualFrameClock, RenderScheduler
from .state import GuessMarker, MapMode, MapState
from .surface import ListenerHandle, MapSurface
from .tile_arena import TileArena, TileDiff, TileHandle
from .tile_collector import TileKey, TilePlacement, collect_tiles
from .viewport import Viewport, build_viewport

__all__ = [
    "DeltaMode",
    "DoubleClickEvent",
    "FrameClock",
    "GeoPoint",
    "GuessMarker",
    "InteractionController",
    "ListenerHandle",
    "ManualFrameClock",
    "MapEngine",
    "MapMode",
    "MapState",
    "MapSurface",
    "MarkerSpec",
    "PointerEvent",
    "PointerPhase",
    "RenderPlan",
    "RenderScheduler",
    "ScreenMarker",
    "TileArena",
    "TileDiff",
    "TileHandle",
    "TileKey",
    "TilePlacement",
    "Viewport",
    "WheelEvent",
    "WorldPoint",
    "build_markers",
    "build_viewport",
    "clamp_lat_lng",
    "clamp_zoom",
    "collect_tiles",
    "compute_render_plan",
    "lat_lng_to_point",
    "normalize_lng",
    "point_to_lat_lng",
    "project_markers",
    "tile_url",
    "wrap_tile_index",
]
