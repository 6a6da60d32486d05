"""Asynchronous raster tile downloads and caching for the Qt host."""

from __future__ import annotations

import logging
from collections import OrderedDict

from PySide6.QtCore import QObject, QUrl, Signal
from PySide6.QtGui import QPixmap
from PySide6.QtNetwork import QNetworkAccessManager, QNetworkReply, QNetworkRequest

from ..config import TILE_IMAGE_CACHE_LIMIT, USER_AGENT
from ..errors import TileLoadingError
from ..map_engine.tile_collector import TileKey

_LOGGER = logging.getLogger(__name__)


def decode_tile_image(data: bytes, key: TileKey) -> QPixmap:
    """Decode PNG bytes into a pixmap, raising :class:`TileLoadingError`."""

    pixmap = QPixmap()
    if not data or not pixmap.loadFromData(data):
        raise TileLoadingError(f"Tile {key.zoom}/{key.x}/{key.y} could not be decoded")
    return pixmap


class TileImageLoader(QObject):
    """Download tile images on demand and keep the most recent ones.

    Requests are fire-and-forget: the engine never waits for them.  A tile
    that fails to load is remembered as missing and not requested again.
    """

    tile_loaded = Signal(tuple)
    tile_missing = Signal(tuple)
    tile_removed = Signal(tuple)

    def __init__(
        self,
        *,
        cache_limit: int = TILE_IMAGE_CACHE_LIMIT,
        network_manager: QNetworkAccessManager | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._cache_limit = cache_limit
        self._network = network_manager or QNetworkAccessManager(self)

        self._cache: OrderedDict[TileKey, QPixmap] = OrderedDict()
        self._pending: dict[TileKey, QNetworkReply] = {}
        self._missing: set[TileKey] = set()

    # ------------------------------------------------------------------
    def get_pixmap(self, key: TileKey) -> QPixmap | None:
        """Return a cached image, updating the LRU ordering when found."""

        pixmap = self._cache.get(key)
        if pixmap is not None:
            self._cache.move_to_end(key)
        return pixmap

    # ------------------------------------------------------------------
    def ensure_tile(self, key: TileKey, url: str) -> None:
        """Start downloading ``key`` unless it is cached, in flight or missing."""

        if key in self._cache or key in self._pending or key in self._missing:
            return

        request = QNetworkRequest(QUrl(url))
        request.setRawHeader(b"User-Agent", USER_AGENT.encode("utf-8"))
        reply = self._network.get(request)
        self._pending[key] = reply
        reply.finished.connect(lambda key=key, reply=reply: self._handle_finished(key, reply))

    # ------------------------------------------------------------------
    def forget(self, key: TileKey) -> None:
        """Abort the download of a tile that left the viewport."""

        reply = self._pending.pop(key, None)
        if reply is not None:
            reply.abort()

    # ------------------------------------------------------------------
    def shutdown(self) -> None:
        """Abort every in-flight request and drop cached images."""

        pending = list(self._pending.values())
        self._pending.clear()
        for reply in pending:
            reply.abort()
        self._cache.clear()

    # ------------------------------------------------------------------
    def _handle_finished(self, key: TileKey, reply: QNetworkReply) -> None:
        try:
            if self._pending.get(key) is not reply:
                # Aborted through ``forget`` or ``shutdown``.
                return
            del self._pending[key]

            if reply.error() != QNetworkReply.NetworkError.NoError:
                _LOGGER.warning(
                    "Tile %s/%s/%s could not be downloaded: %s",
                    key.zoom,
                    key.x,
                    key.y,
                    reply.errorString(),
                )
                self._mark_missing(key)
                return

            try:
                pixmap = decode_tile_image(bytes(reply.readAll().data()), key)
            except TileLoadingError as exc:
                _LOGGER.warning("%s", exc)
                self._mark_missing(key)
                return

            self._store(key, pixmap)
        finally:
            reply.deleteLater()

    # ------------------------------------------------------------------
    def _store(self, key: TileKey, pixmap: QPixmap) -> None:
        self._cache[key] = pixmap
        self._cache.move_to_end(key)
        self.tile_loaded.emit(tuple(key))

        while len(self._cache) > self._cache_limit:
            evicted_key, _ = self._cache.popitem(last=False)
            self.tile_removed.emit(tuple(evicted_key))

    # ------------------------------------------------------------------
    def _mark_missing(self, key: TileKey) -> None:
        self._missing.add(key)
        self.tile_missing.emit(tuple(key))


__all__ = ["TileImageLoader", "decode_tile_image"]
