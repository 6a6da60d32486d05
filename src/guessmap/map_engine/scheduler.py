"""Coalesce render requests into at most one pass per display refresh."""

from __future__ import annotations

import logging
from itertools import count
from typing import Callable, Hashable, Protocol

_LOGGER = logging.getLogger(__name__)


class FrameClock(Protocol):
    """Source of display-refresh callbacks."""

    def request_frame(self, callback: Callable[[], None]) -> Hashable:  # pragma: no cover - interface definition only
        ...

    def cancel_frame(self, token: Hashable) -> None:  # pragma: no cover - interface definition only
        ...


class ManualFrameClock:
    """Frame clock driven explicitly by the caller.

    Headless hosts and tests call :meth:`advance` to emulate a display
    refresh; every callback pending at that moment runs once.
    """

    def __init__(self) -> None:
        self._tokens = count(1)
        self._pending: dict[int, Callable[[], None]] = {}

    def request_frame(self, callback: Callable[[], None]) -> int:
        token = next(self._tokens)
        self._pending[token] = callback
        return token

    def cancel_frame(self, token: Hashable) -> None:
        self._pending.pop(token, None)  # type: ignore[arg-type]

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def advance(self) -> int:
        """Run the callbacks that were pending before this call."""

        callbacks = list(self._pending.values())
        self._pending.clear()
        for callback in callbacks:
            callback()
        return len(callbacks)


class RenderScheduler:
    """Cancel-and-reschedule wrapper around a :class:`FrameClock`."""

    def __init__(self, clock: FrameClock, render: Callable[[], None]) -> None:
        self._clock = clock
        self._render = render
        self._token: Hashable | None = None

    @property
    def pending(self) -> bool:
        return self._token is not None

    # ------------------------------------------------------------------
    def request(self) -> None:
        """Replace any scheduled pass with one on the next refresh."""

        if self._token is not None:
            self._clock.cancel_frame(self._token)
        self._token = self._clock.request_frame(self._fire)

    # ------------------------------------------------------------------
    def cancel(self) -> None:
        """Drop the pending pass, if any.  Safe to call repeatedly."""

        if self._token is None:
            return
        self._clock.cancel_frame(self._token)
        self._token = None

    # ------------------------------------------------------------------
    def _fire(self) -> None:
        self._token = None
        _LOGGER.debug("Running scheduled render pass")
        self._render()


__all__ = ["FrameClock", "ManualFrameClock", "RenderScheduler"]
