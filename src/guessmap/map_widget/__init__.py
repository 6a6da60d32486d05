"""PySide6 host for the guessmap engine."""

from .frame_clock import QtFrameClock
from .map_widget import MapWidget
from .tile_images import TileImageLoader

__all__ = ["MapWidget", "QtFrameClock", "TileImageLoader"]
