import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

# Ensure the project sources are importable without an editable install.
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


import pytest  # noqa: E402

from guessmap.map_engine.engine import MapEngine  # noqa: E402
from guessmap.map_engine.scheduler import ManualFrameClock  # noqa: E402
from guessmap.map_engine.surface import ListenerRegistry  # noqa: E402


class FakeSurface:
    """In-memory :class:`MapSurface` recording what the engine asks of it."""

    def __init__(self, width: int = 256, height: int = 256) -> None:
        self._width = width
        self._height = height
        self.input_listeners = ListenerRegistry()
        self.resize_listeners = ListenerRegistry()
        self.captured: list[int] = []
        self.released: list[int] = []
        self.controls_visible: list[bool] = []
        self.presented: list[tuple] = []

    def width(self) -> int:
        return self._width

    def height(self) -> int:
        return self._height

    def resize(self, width: int, height: int) -> None:
        self._width = width
        self._height = height
        for callback in self.resize_listeners.snapshot():
            callback()

    def send(self, event) -> bool:
        consumed = False
        for listener in self.input_listeners.snapshot():
            consumed = bool(listener(event)) or consumed
        return consumed

    def add_input_listener(self, listener):
        return self.input_listeners.add(listener)

    def add_resize_listener(self, callback):
        return self.resize_listeners.add(callback)

    def capture_pointer(self, pointer_id: int) -> None:
        self.captured.append(pointer_id)

    def release_pointer(self, pointer_id: int) -> None:
        self.released.append(pointer_id)

    def set_controls_visible(self, visible: bool) -> None:
        self.controls_visible.append(visible)

    def present(self, plan, diff) -> None:
        self.presented.append((plan, diff))


@pytest.fixture
def clock() -> ManualFrameClock:
    return ManualFrameClock()


@pytest.fixture
def surface() -> FakeSurface:
    return FakeSurface()


@pytest.fixture
def make_engine(clock: ManualFrameClock, surface: FakeSurface):
    """Return a factory that initialises an engine on the shared fake surface."""

    engines: list[MapEngine] = []

    def factory(config=None) -> MapEngine:
        engine = MapEngine(frame_clock=clock)
        engine.initialize(surface, config)
        clock.advance()
        engines.append(engine)
        return engine

    yield factory
    for engine in engines:
        engine.teardown()
