"""Tile enumeration for the visible viewport."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import NamedTuple

from ..config import TILE_SIZE
from .projection import tile_url, wrap_tile_index
from .viewport import Viewport


class TileKey(NamedTuple):
    """Identity of a raster tile: zoom level, wrapped column and row."""

    zoom: int
    x: int
    y: int

    @property
    def url(self) -> str:
        return tile_url(self.zoom, self.x, self.y)


@dataclass(frozen=True)
class TilePlacement:
    """A tile needed by the current pass and where its top-left corner goes."""

    key: TileKey
    left: float
    top: float

    @property
    def url(self) -> str:
        return self.key.url


def collect_tiles(viewport: Viewport, zoom: int) -> list[TilePlacement]:
    """Gather the tiles that intersect ``viewport``.

    Columns wrap around the antimeridian; rows above or below the projected
    plane are skipped since latitude does not repeat.  When the surface is
    wider than the world, the same wrapped key is placed once per repeat so
    the whole surface is covered.
    """

    start_x = math.floor(viewport.top_left_x / TILE_SIZE)
    end_x = math.floor((viewport.top_left_x + viewport.width) / TILE_SIZE)
    start_y = math.floor(viewport.top_left_y / TILE_SIZE)
    end_y = math.floor((viewport.top_left_y + viewport.height) / TILE_SIZE)
    tiles_across = 1 << zoom

    placements: list[TilePlacement] = []
    for tile_x in range(start_x, end_x + 1):
        wrapped_x = wrap_tile_index(tile_x, zoom)
        for tile_y in range(start_y, end_y + 1):
            if tile_y < 0 or tile_y >= tiles_across:
                continue
            placements.append(
                TilePlacement(
                    key=TileKey(zoom, wrapped_x, tile_y),
                    left=tile_x * TILE_SIZE - viewport.top_left_x,
                    top=tile_y * TILE_SIZE - viewport.top_left_y,
                )
            )
    return placements


__all__ = ["TileKey", "TilePlacement", "collect_tiles"]
