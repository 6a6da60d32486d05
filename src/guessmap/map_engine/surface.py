"""Display surface interface the engine draws into and listens to."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Protocol

if TYPE_CHECKING:  # pragma: no cover - imports for annotations only
    from .input_handler import InputEvent
    from .render_plan import RenderPlan
    from .tile_arena import TileDiff


class ListenerHandle:
    """Handle returned when a callback is registered; cancelling detaches it.

    Cancellation runs the detach callback exactly once, no matter how often
    :meth:`cancel` is called.
    """

    def __init__(self, detach: Callable[[], None] | None = None) -> None:
        self._detach = detach
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        detach, self._detach = self._detach, None
        if detach is not None:
            detach()


class ListenerRegistry:
    """Ordered collection of callbacks that hands out :class:`ListenerHandle`\\ s."""

    def __init__(self) -> None:
        self._callbacks: list[Callable] = []

    def add(self, callback: Callable) -> ListenerHandle:
        self._callbacks.append(callback)

        def detach() -> None:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                pass

        return ListenerHandle(detach)

    def snapshot(self) -> list[Callable]:
        return list(self._callbacks)

    def __len__(self) -> int:
        return len(self._callbacks)


class MapSurface(Protocol):
    """Minimal interface the engine expects from a host display surface."""

    def width(self) -> int:  # pragma: no cover - interface definition only
        ...

    def height(self) -> int:  # pragma: no cover - interface definition only
        ...

    def add_input_listener(self, listener: Callable[["InputEvent"], bool]) -> ListenerHandle:  # pragma: no cover
        ...

    def add_resize_listener(self, callback: Callable[[], None]) -> ListenerHandle:  # pragma: no cover
        ...

    def capture_pointer(self, pointer_id: int) -> None:  # pragma: no cover - interface definition only
        ...

    def release_pointer(self, pointer_id: int) -> None:  # pragma: no cover - interface definition only
        ...

    def set_controls_visible(self, visible: bool) -> None:  # pragma: no cover - interface definition only
        ...

    def present(self, plan: "RenderPlan", diff: "TileDiff") -> None:  # pragma: no cover
        ...


__all__ = ["ListenerHandle", "ListenerRegistry", "MapSurface"]
