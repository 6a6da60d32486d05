"""Keyed tile handles that survive across render passes."""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Iterable, Iterator

from .tile_collector import TileKey, TilePlacement

_LOGGER = logging.getLogger(__name__)


@dataclass
class TileHandle:
    """Long-lived record for one rendered tile.

    The handle identity is stable for as long as the tile stays visible, so a
    host can attach its loaded image to it and only move it on later passes.
    """

    key: TileKey
    url: str
    left: float
    top: float


@dataclass(frozen=True)
class TileDiff:
    """Outcome of synchronising the arena with a new set of placements."""

    added: tuple[TileHandle, ...] = ()
    updated: tuple[TileHandle, ...] = ()
    removed: tuple[TileHandle, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.updated or self.removed)


class TileArena:
    """Map :class:`TileKey` values to :class:`TileHandle` instances."""

    def __init__(self) -> None:
        self._handles: OrderedDict[TileKey, TileHandle] = OrderedDict()

    # ------------------------------------------------------------------
    def sync(self, placements: Iterable[TilePlacement]) -> TileDiff:
        """Reposition kept tiles, instantiate new ones and drop stale ones.

        A key placed more than once in the same pass (a column repeated on a
        surface wider than the world) keeps one handle at its first position.
        """

        added: list[TileHandle] = []
        updated: list[TileHandle] = []
        needed: set[TileKey] = set()

        for placement in placements:
            if placement.key in needed:
                continue
            needed.add(placement.key)
            handle = self._handles.get(placement.key)
            if handle is None:
                handle = TileHandle(
                    key=placement.key,
                    url=placement.url,
                    left=placement.left,
                    top=placement.top,
                )
                self._handles[placement.key] = handle
                added.append(handle)
            else:
                handle.left = placement.left
                handle.top = placement.top
                updated.append(handle)

        removed = [handle for key, handle in self._handles.items() if key not in needed]
        for handle in removed:
            del self._handles[handle.key]

        if added or removed:
            _LOGGER.debug(
                "Tile arena: %d added, %d kept, %d removed",
                len(added),
                len(updated),
                len(removed),
            )
        return TileDiff(tuple(added), tuple(updated), tuple(removed))

    # ------------------------------------------------------------------
    def clear(self) -> TileDiff:
        """Forget every handle and report them as removed."""

        removed = tuple(self._handles.values())
        self._handles.clear()
        return TileDiff(removed=removed)

    # ------------------------------------------------------------------
    def get(self, key: TileKey) -> TileHandle | None:
        return self._handles.get(key)

    def keys(self) -> set[TileKey]:
        return set(self._handles)

    def __contains__(self, key: object) -> bool:
        return key in self._handles

    def __iter__(self) -> Iterator[TileHandle]:
        return iter(list(self._handles.values()))

    def __len__(self) -> int:
        return len(self._handles)


__all__ = ["TileArena", "TileDiff", "TileHandle"]
