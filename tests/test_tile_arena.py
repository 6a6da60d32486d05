from __future__ import annotations

from guessmap.map_engine.tile_arena import TileArena
from guessmap.map_engine.tile_collector import TileKey, TilePlacement


def _placement(x: int, y: int, left: float = 0.0, top: float = 0.0) -> TilePlacement:
    return TilePlacement(key=TileKey(3, x, y), left=left, top=top)


def test_first_sync_adds_every_tile() -> None:
    arena = TileArena()
    diff = arena.sync([_placement(0, 0), _placement(1, 0, left=256.0)])
    assert [handle.key for handle in diff.added] == [TileKey(3, 0, 0), TileKey(3, 1, 0)]
    assert diff.updated == ()
    assert diff.removed == ()
    assert len(arena) == 2


def test_kept_tiles_are_repositioned_not_recreated() -> None:
    arena = TileArena()
    arena.sync([_placement(0, 0)])
    original = arena.get(TileKey(3, 0, 0))

    diff = arena.sync([_placement(0, 0, left=-40.0, top=12.0)])

    assert diff.added == ()
    assert diff.updated == (original,)
    assert arena.get(TileKey(3, 0, 0)) is original
    assert (original.left, original.top) == (-40.0, 12.0)


def test_stale_tiles_are_removed() -> None:
    arena = TileArena()
    arena.sync([_placement(0, 0), _placement(1, 0)])
    diff = arena.sync([_placement(1, 0), _placement(2, 0)])

    assert [handle.key for handle in diff.added] == [TileKey(3, 2, 0)]
    assert [handle.key for handle in diff.removed] == [TileKey(3, 0, 0)]
    assert arena.keys() == {TileKey(3, 1, 0), TileKey(3, 2, 0)}
    assert TileKey(3, 0, 0) not in arena


def test_identical_pass_reports_only_updates() -> None:
    arena = TileArena()
    placements = [_placement(0, 0), _placement(0, 1)]
    arena.sync(placements)
    diff = arena.sync(placements)
    assert not diff.is_empty
    assert diff.added == () and diff.removed == ()
    assert len(diff.updated) == 2


def test_clear_reports_everything_removed() -> None:
    arena = TileArena()
    arena.sync([_placement(0, 0), _placement(1, 1)])
    diff = arena.clear()
    assert len(diff.removed) == 2
    assert len(arena) == 0
    assert arena.clear().is_empty


def test_repeated_key_in_one_pass_shares_a_single_handle() -> None:
    arena = TileArena()
    diff = arena.sync([_placement(0, 0, left=-100.0), _placement(0, 0, left=924.0)])
    assert len(diff.added) == 1
    assert len(arena) == 1
    assert arena.get(TileKey(3, 0, 0)).left == -100.0

    diff = arena.sync([_placement(0, 0, left=-50.0), _placement(0, 0, left=974.0)])
    assert diff.added == ()
    assert len(diff.updated) == 1
    assert arena.get(TileKey(3, 0, 0)).left == -50.0
