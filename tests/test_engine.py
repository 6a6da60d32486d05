from __future__ import annotations

import logging
from unittest.mock import Mock

import pytest

from guessmap.errors import EngineStateError
from guessmap.map_engine.engine import MapEngine
from guessmap.map_engine.input_handler import PointerEvent, PointerPhase
from guessmap.map_engine.projection import GeoPoint
from guessmap.map_engine.state import MapMode
from guessmap.map_engine.tile_collector import TileKey


def _drag(surface, dx: float) -> None:
    surface.send(PointerEvent(PointerPhase.DOWN, 1, 100, 100))
    surface.send(PointerEvent(PointerPhase.MOVE, 1, 100 + dx, 100))
    surface.send(PointerEvent(PointerPhase.UP, 1, 100 + dx, 100))


class TestLifecycle:
    def test_initial_state_from_config(self, make_engine, surface) -> None:
        engine = make_engine(
            {"mode": "guess", "marker": {"lat": 5.0, "lng": 6.0}, "zoom": 30, "show_controls": False}
        )
        state = engine.state
        assert state.mode is MapMode.GUESS
        assert state.center == GeoPoint(5.0, 6.0)
        assert state.zoom == 18
        assert not state.show_controls
        assert surface.controls_visible == [False]

    def test_defaults_without_config(self, make_engine) -> None:
        state = make_engine().state
        assert state.center == GeoPoint(20.0, 0.0)
        assert state.zoom == 2
        assert state.mode is MapMode.SUBMISSION
        assert state.show_controls

    def test_first_frame_presents_world_tiles(self, make_engine, surface) -> None:
        make_engine({"center": (0.0, 0.0), "zoom": 2})
        plan, diff = surface.presented[-1]
        assert {handle.key for handle in diff.added} == {
            TileKey(2, 1, 1),
            TileKey(2, 1, 2),
            TileKey(2, 2, 1),
            TileKey(2, 2, 2),
        }
        assert len(plan.tiles) == 4

    def test_initialize_twice_raises(self, make_engine, surface) -> None:
        engine = make_engine()
        with pytest.raises(EngineStateError):
            engine.initialize(surface, {})

    def test_update_before_initialize_raises(self, clock) -> None:
        engine = MapEngine(frame_clock=clock)
        with pytest.raises(EngineStateError):
            engine.apply_update({"zoom": 4})
        with pytest.raises(EngineStateError):
            _ = engine.state

    def test_teardown_releases_everything(self, make_engine, surface, clock) -> None:
        engine = make_engine()
        listener = Mock()
        handle = engine.on_select(listener)
        engine.request_render()
        assert clock.pending_count == 1

        engine.teardown()
        engine.teardown()

        assert clock.pending_count == 0
        assert len(surface.input_listeners) == 0
        assert len(surface.resize_listeners) == 0
        assert len(engine.tiles) == 0
        assert not engine.is_active
        handle.cancel()
        with pytest.raises(EngineStateError):
            engine.apply_update({"zoom": 3})
        with pytest.raises(EngineStateError):
            engine.initialize(surface, {})

    def test_input_after_teardown_is_ignored(self, make_engine, surface) -> None:
        engine = make_engine()
        engine.teardown()
        assert not engine.handle_input(PointerEvent(PointerPhase.DOWN, 1, 10, 10))
        assert engine.render_now() is None


class TestRendering:
    def test_updates_coalesce_into_one_frame(self, make_engine, surface, clock) -> None:
        engine = make_engine()
        presented = len(surface.presented)

        engine.apply_update({"zoom": 4})
        engine.apply_update({"zoom": 5})
        engine.apply_update({"marker": (1.0, 1.0)})

        assert clock.advance() == 1
        assert len(surface.presented) == presented + 1
        assert surface.presented[-1][0].zoom == 5

    def test_resize_schedules_a_render(self, make_engine, surface, clock) -> None:
        make_engine({"center": (0.0, 0.0), "zoom": 2})
        surface.resize(512, 256)
        assert clock.pending_count == 1
        clock.advance()
        plan, _diff = surface.presented[-1]
        assert plan.viewport.width == 512

    def test_panning_keeps_tile_handles(self, make_engine, surface, clock) -> None:
        engine = make_engine({"center": (0.0, 0.0), "zoom": 2})
        handle = engine.tiles.get(TileKey(2, 1, 1))
        _drag(surface, 10)
        clock.advance()
        _plan, diff = surface.presented[-1]
        assert handle in diff.updated
        assert engine.tiles.get(TileKey(2, 1, 1)) is handle


class TestHostUpdates:
    def test_center_and_zoom_apply_before_interaction(self, make_engine) -> None:
        engine = make_engine({"zoom": 3})
        engine.apply_update({"center": {"lat": 40.0, "lng": -70.0}, "zoom": 9})
        assert engine.state.center == GeoPoint(40.0, -70.0)
        assert engine.state.zoom == 9

    def test_center_and_zoom_ignored_after_interaction(self, make_engine, surface) -> None:
        engine = make_engine({"center": (0.0, 0.0), "zoom": 3})
        _drag(surface, 40)
        center = engine.state.center

        engine.apply_update({"center": (40.0, -70.0), "zoom": 9, "marker": (1.0, 2.0)})

        assert engine.state.center == center
        assert engine.state.zoom == 3
        assert engine.state.marker == GeoPoint(1.0, 2.0)

    def test_mode_change_applies_camera_and_resets_interaction(self, make_engine, surface) -> None:
        engine = make_engine({"mode": "guess", "center": (0.0, 0.0), "zoom": 3})
        _drag(surface, 40)

        engine.apply_update({"mode": "reveal", "center": (40.0, -70.0), "zoom": 5})

        assert engine.state.mode is MapMode.REVEAL
        assert engine.state.center == GeoPoint(40.0, -70.0)
        assert engine.state.zoom == 5
        assert not engine.state.user_has_interacted

    def test_same_mode_does_not_reset_interaction(self, make_engine, surface) -> None:
        engine = make_engine({"mode": "guess"})
        _drag(surface, 40)
        engine.apply_update({"mode": "guess", "zoom": 7})
        assert engine.state.user_has_interacted
        assert engine.state.zoom != 7

    def test_missing_keys_leave_state_untouched(self, make_engine) -> None:
        engine = make_engine({"marker": (1.0, 1.0), "player_id": "p1"})
        engine.apply_update({"guesses": [{"lat": 2.0, "lng": 2.0, "playerId": "p1", "points": 5}]})
        state = engine.state
        assert state.marker == GeoPoint(1.0, 1.0)
        assert state.player_id == "p1"
        assert state.guesses[0].player_id == "p1"

    def test_marker_can_be_cleared(self, make_engine) -> None:
        engine = make_engine({"marker": (1.0, 1.0)})
        engine.apply_update({"marker": None})
        assert engine.state.marker is None

    def test_controls_visibility_is_forwarded(self, make_engine, surface) -> None:
        engine = make_engine()
        engine.apply_update({"show_controls": False})
        assert surface.controls_visible[-1] is False
        assert not engine.state.show_controls

    def test_non_finite_zoom_is_ignored(self, make_engine) -> None:
        engine = make_engine({"zoom": 4})
        engine.apply_update({"zoom": float("nan")})
        assert engine.state.zoom == 4


class TestSelectionListeners:
    def test_cancelled_listener_is_not_called(self, make_engine, surface) -> None:
        engine = make_engine()
        listener = Mock()
        handle = engine.on_select(listener)
        handle.cancel()
        handle.cancel()

        surface.send(PointerEvent(PointerPhase.DOWN, 1, 50, 50))
        surface.send(PointerEvent(PointerPhase.UP, 1, 50, 50))

        listener.assert_not_called()
        assert not handle.active

    def test_failing_listener_is_logged_and_others_run(self, make_engine, surface, caplog) -> None:
        engine = make_engine()
        engine.on_select(Mock(side_effect=RuntimeError("boom")))
        healthy = Mock()
        engine.on_select(healthy)

        with caplog.at_level(logging.ERROR, logger="guessmap.map_engine.engine"):
            surface.send(PointerEvent(PointerPhase.DOWN, 1, 50, 50))
            surface.send(PointerEvent(PointerPhase.UP, 1, 50, 50))

        healthy.assert_called_once()
        assert any("Selection listener" in record.getMessage() for record in caplog.records)


class TestWideSurface:
    def test_repeated_columns_share_one_tile_handle(self, clock, surface) -> None:
        surface.resize(1600, 256)
        engine = MapEngine(frame_clock=clock)
        engine.initialize(surface, {"center": (0.0, 0.0), "zoom": 2})
        clock.advance()

        plan, diff = surface.presented[-1]
        assert len(plan.tiles) > len(engine.tiles)
        assert len(diff.added) == len(engine.tiles) == len({tile.key for tile in plan.tiles})
        engine.teardown()
