"""QWidget host surface for the guessmap engine."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from PySide6.QtCore import QEvent, QPointF, QRectF, Qt, Signal
from PySide6.QtGui import QCloseEvent, QColor, QFont, QPainter, QPen, QResizeEvent
from PySide6.QtWidgets import QApplication, QHBoxLayout, QLabel, QToolButton, QToolTip, QWidget

from ..config import ATTRIBUTION_HTML, BACKGROUND_COLOR, TILE_SIZE
from ..map_engine.engine import MapEngine
from ..map_engine.input_handler import (
    DeltaMode,
    DoubleClickEvent,
    InputEvent,
    PointerEvent,
    PointerPhase,
    WheelEvent,
)
from ..map_engine.markers import KIND_ACTUAL, KIND_OTHER, KIND_SELF, ScreenMarker
from ..map_engine.projection import GeoPoint
from ..map_engine.render_plan import RenderPlan
from ..map_engine.scheduler import FrameClock
from ..map_engine.surface import ListenerHandle, ListenerRegistry
from ..map_engine.tile_arena import TileDiff
from ..map_engine.tile_collector import TileKey
from .frame_clock import QtFrameClock
from .tile_images import TileImageLoader

_LOGGER = logging.getLogger(__name__)

MOUSE_POINTER_ID = 1
MARKER_RADIUS = 8.0
CONTROL_MARGIN = 12
PLACEHOLDER_COLOR = QColor("#0b1a36")

_MARKER_COLORS: dict[str, QColor] = {
    KIND_ACTUAL: QColor("#22c55e"),
    KIND_SELF: QColor("#f97316"),
    KIND_OTHER: QColor("#38bdf8"),
}
_DEFAULT_MARKER_COLOR = QColor("#ef4444")

_BUTTON_MAP = {
    Qt.MouseButton.LeftButton: 0,
    Qt.MouseButton.MiddleButton: 1,
    Qt.MouseButton.RightButton: 2,
}


class MapWidget(QWidget):
    """Interactive map view that renders the plans produced by :class:`MapEngine`."""

    locationSelected = Signal(float, float)
    """Signal emitted with ``(lat, lng)`` whenever the user picks a location."""

    def __init__(
        self,
        parent: QWidget | None = None,
        *,
        options: Mapping[str, Any] | None = None,
        tile_loader: TileImageLoader | None = None,
        frame_clock: FrameClock | None = None,
    ) -> None:
        super().__init__(parent)

        self._input_listeners = ListenerRegistry()
        self._resize_listeners = ListenerRegistry()
        self._plan: RenderPlan | None = None
        self._shut_down = False

        self._tile_loader = tile_loader or TileImageLoader(parent=self)
        self._tile_loader.tile_loaded.connect(self._on_tile_changed)
        self._tile_loader.tile_missing.connect(self._on_tile_changed)

        self._controls = self._create_controls()
        self._attribution = self._create_attribution()

        self.setMinimumSize(320, 240)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)

        self._engine = MapEngine(frame_clock=frame_clock or QtFrameClock(self))
        self._select_handle = self._engine.on_select(self._emit_location_selected)
        self._engine.initialize(self, options)

    # ------------------------------------------------------------------
    @property
    def engine(self) -> MapEngine:
        return self._engine

    @property
    def tile_loader(self) -> TileImageLoader:
        return self._tile_loader

    @property
    def plan(self) -> RenderPlan | None:
        """Plan handed over by the most recent render pass."""

        return self._plan

    # ------------------------------------------------------------------
    def apply_update(self, partial: Mapping[str, Any]) -> None:
        """Forward host configuration changes to the engine."""

        self._engine.apply_update(partial)

    # ------------------------------------------------------------------
    def on_select(self, callback: Callable[[GeoPoint], None]) -> ListenerHandle:
        return self._engine.on_select(callback)

    # ------------------------------------------------------------------
    def shutdown(self) -> None:
        """Stop the engine and abort outstanding tile downloads."""

        if self._shut_down:
            return
        self._shut_down = True
        self._select_handle.cancel()
        self._engine.teardown()
        self._tile_loader.shutdown()
        self._plan = None
        _LOGGER.debug("Map widget shut down")

    # ------------------------------------------------------------------
    def marker_at(self, position: QPointF) -> ScreenMarker | None:
        """Return the topmost visible marker drawn under ``position``."""

        if self._plan is None:
            return None
        for marker in reversed(self._plan.visible_markers):
            dx = position.x() - marker.left
            dy = position.y() - marker.top
            if dx * dx + dy * dy <= MARKER_RADIUS * MARKER_RADIUS:
                return marker
        return None

    # ------------------------------------------------------------------
    # MapSurface implementation
    # ------------------------------------------------------------------
    def add_input_listener(self, listener: Callable[[InputEvent], bool]) -> ListenerHandle:
        return self._input_listeners.add(listener)

    def add_resize_listener(self, callback: Callable[[], None]) -> ListenerHandle:
        return self._resize_listeners.add(callback)

    def capture_pointer(self, pointer_id: int) -> None:
        # Qt grabs the mouse implicitly while a button is held.
        self.setCursor(Qt.CursorShape.ClosedHandCursor)

    def release_pointer(self, pointer_id: int) -> None:
        self.unsetCursor()

    def set_controls_visible(self, visible: bool) -> None:
        self._controls.setVisible(visible)

    def present(self, plan: RenderPlan, diff: TileDiff) -> None:
        for handle in diff.removed:
            self._tile_loader.forget(handle.key)
        for handle in diff.added:
            self._tile_loader.ensure_tile(handle.key, handle.url)
        self._plan = plan
        self.update()

    # ------------------------------------------------------------------
    # Qt event handlers
    # ------------------------------------------------------------------
    def event(self, event) -> bool:  # type: ignore[override]
        if event.type() == QEvent.Type.ToolTip:
            marker = self.marker_at(QPointF(event.pos()))
            if marker is not None and marker.title:
                QToolTip.showText(event.globalPos(), marker.title, self)
            else:
                QToolTip.hideText()
                event.ignore()
            return True
        return super().event(event)

    # ------------------------------------------------------------------
    def paintEvent(self, event) -> None:  # type: ignore[override]
        painter = QPainter(self)
        try:
            painter.setRenderHint(QPainter.RenderHint.Antialiasing)
            painter.fillRect(self.rect(), QColor(BACKGROUND_COLOR))
            if self._plan is not None:
                self._paint_tiles(painter, self._plan)
                self._paint_markers(painter, self._plan)
        finally:
            painter.end()

    # ------------------------------------------------------------------
    def mousePressEvent(self, event) -> None:  # type: ignore[override]
        if not self._dispatch_pointer(PointerPhase.DOWN, event):
            super().mousePressEvent(event)

    # ------------------------------------------------------------------
    def mouseMoveEvent(self, event) -> None:  # type: ignore[override]
        if not self._dispatch_pointer(PointerPhase.MOVE, event):
            super().mouseMoveEvent(event)

    # ------------------------------------------------------------------
    def mouseReleaseEvent(self, event) -> None:  # type: ignore[override]
        if event.button() != Qt.MouseButton.LeftButton or not self._dispatch_pointer(PointerPhase.UP, event):
            super().mouseReleaseEvent(event)

    # ------------------------------------------------------------------
    def mouseDoubleClickEvent(self, event) -> None:  # type: ignore[override]
        position = event.position()
        modifier = bool(event.modifiers() & Qt.KeyboardModifier.ShiftModifier)
        if not self._dispatch(DoubleClickEvent(position.x(), position.y(), modifier)):
            super().mouseDoubleClickEvent(event)

    # ------------------------------------------------------------------
    def wheelEvent(self, event) -> None:  # type: ignore[override]
        position = event.position()
        pixel_delta = event.pixelDelta()
        if not pixel_delta.isNull():
            wheel = WheelEvent(position.x(), position.y(), float(-pixel_delta.y()), DeltaMode.PIXEL)
        else:
            # One notch is 120 units of angle delta and scrolls a few lines.
            lines = -event.angleDelta().y() / 120.0 * QApplication.wheelScrollLines()
            wheel = WheelEvent(position.x(), position.y(), lines, DeltaMode.LINE)
        if self._dispatch(wheel):
            event.accept()
        else:
            super().wheelEvent(event)

    # ------------------------------------------------------------------
    def resizeEvent(self, event: QResizeEvent) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self._layout_overlays()
        for callback in self._resize_listeners.snapshot():
            callback()

    # ------------------------------------------------------------------
    def closeEvent(self, event: QCloseEvent) -> None:  # type: ignore[override]
        """Tear down the engine before the widget is destroyed."""

        self.shutdown()
        super().closeEvent(event)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _dispatch(self, event: InputEvent) -> bool:
        consumed = False
        for listener in self._input_listeners.snapshot():
            consumed = bool(listener(event)) or consumed
        return consumed

    def _dispatch_pointer(self, phase: PointerPhase, event) -> bool:
        position = event.position()
        over_control = self.childAt(position.toPoint()) is not None
        button = _BUTTON_MAP.get(event.button(), 0)
        return self._dispatch(
            PointerEvent(
                phase=phase,
                pointer_id=MOUSE_POINTER_ID,
                x=position.x(),
                y=position.y(),
                button=button,
                over_control=over_control,
            )
        )

    # ------------------------------------------------------------------
    def _paint_tiles(self, painter: QPainter, plan: RenderPlan) -> None:
        for placement in plan.tiles:
            pixmap = self._tile_loader.get_pixmap(placement.key)
            if pixmap is None:
                painter.fillRect(
                    QRectF(placement.left, placement.top, TILE_SIZE, TILE_SIZE).adjusted(0.5, 0.5, -0.5, -0.5),
                    PLACEHOLDER_COLOR,
                )
                continue
            painter.drawPixmap(QPointF(placement.left, placement.top), pixmap)

    # ------------------------------------------------------------------
    def _paint_markers(self, painter: QPainter, plan: RenderPlan) -> None:
        label_font = QFont(self.font())
        label_font.setPointSizeF(max(label_font.pointSizeF() - 1.0, 7.0))
        painter.setFont(label_font)
        for marker in plan.visible_markers:
            self._paint_marker(painter, marker)

    def _paint_marker(self, painter: QPainter, marker: ScreenMarker) -> None:
        center = QPointF(marker.left, marker.top)
        painter.setPen(QPen(QColor("white"), 2.0))
        painter.setBrush(_MARKER_COLORS.get(marker.kind, _DEFAULT_MARKER_COLOR))
        painter.drawEllipse(center, MARKER_RADIUS, MARKER_RADIUS)
        if marker.label:
            painter.setPen(QColor("white"))
            painter.drawText(center + QPointF(MARKER_RADIUS + 4.0, 4.0), marker.label)

    # ------------------------------------------------------------------
    def _create_controls(self) -> QWidget:
        container = QWidget(self)
        layout = QHBoxLayout(container)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(4)

        zoom_in = QToolButton(container)
        zoom_in.setText("+")
        zoom_in.setToolTip("Zoom in")
        zoom_in.clicked.connect(self._engine_zoom_in)
        zoom_out = QToolButton(container)
        zoom_out.setText("−")
        zoom_out.setToolTip("Zoom out")
        zoom_out.clicked.connect(self._engine_zoom_out)

        layout.addWidget(zoom_in)
        layout.addWidget(zoom_out)
        container.adjustSize()
        return container

    def _create_attribution(self) -> QLabel:
        label = QLabel(ATTRIBUTION_HTML, self)
        label.setTextFormat(Qt.TextFormat.RichText)
        label.setOpenExternalLinks(True)
        label.setStyleSheet("QLabel { background: rgba(255, 255, 255, 200); color: #111; padding: 2px 4px; }")
        label.adjustSize()
        return label

    def _layout_overlays(self) -> None:
        self._controls.move(CONTROL_MARGIN, CONTROL_MARGIN)
        self._attribution.move(
            max(self.width() - self._attribution.width(), 0),
            max(self.height() - self._attribution.height(), 0),
        )

    # ------------------------------------------------------------------
    def _engine_zoom_in(self) -> None:
        self._engine.zoom_in()

    def _engine_zoom_out(self) -> None:
        self._engine.zoom_out()

    def _on_tile_changed(self, key: tuple) -> None:
        if self._plan is not None and any(p.key == TileKey(*key) for p in self._plan.tiles):
            self.update()

    def _emit_location_selected(self, point: GeoPoint) -> None:
        self.locationSelected.emit(point.lat, point.lng)


__all__ = ["MOUSE_POINTER_ID", "MapWidget"]
