from __future__ import annotations

from unittest.mock import Mock

from guessmap.map_engine.scheduler import ManualFrameClock, RenderScheduler


def test_requests_coalesce_into_one_render() -> None:
    clock = ManualFrameClock()
    render = Mock()
    scheduler = RenderScheduler(clock, render)

    for _ in range(5):
        scheduler.request()

    assert clock.pending_count == 1
    assert scheduler.pending
    assert clock.advance() == 1
    render.assert_called_once_with()
    assert not scheduler.pending


def test_cancel_drops_pending_render() -> None:
    clock = ManualFrameClock()
    render = Mock()
    scheduler = RenderScheduler(clock, render)

    scheduler.request()
    scheduler.cancel()
    scheduler.cancel()

    assert clock.advance() == 0
    render.assert_not_called()


def test_request_from_render_runs_on_following_frame() -> None:
    clock = ManualFrameClock()
    calls: list[int] = []

    def render() -> None:
        calls.append(len(calls))
        if len(calls) == 1:
            scheduler.request()

    scheduler = RenderScheduler(clock, render)
    scheduler.request()

    assert clock.advance() == 1
    assert calls == [0]
    assert clock.advance() == 1
    assert calls == [0, 1]
    assert clock.advance() == 0
