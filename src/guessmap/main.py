"""Typer-based entry point that opens the map in a standalone window."""

from __future__ import annotations

import functools
import logging
import sys
from typing import Optional

import typer
from rich import print

from .errors import GuessMapError
from .options import extract_options, selection_event_name

app = typer.Typer(help="Interactive guessing-game map preview")

_LOGGER = logging.getLogger(__name__)


def _handle_errors(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except GuessMapError as exc:
            print(f"[red]Error: {exc}")
            raise typer.Exit(1) from exc

    return wrapper


def build_window(options: dict):
    """Create the main window hosting a :class:`MapWidget` for ``options``."""

    from PySide6.QtWidgets import QMainWindow

    from .map_widget import MapWidget

    window = QMainWindow()
    window.setWindowTitle("Guess Map")
    window.resize(1024, 768)

    widget = MapWidget(window, options=options)
    window.setCentralWidget(widget)

    event_name = selection_event_name(options.get("mode"))

    def report_selection(lat: float, lng: float) -> None:
        if event_name is None:
            return
        print(f"[green]{event_name}[/green] lat={lat:.6f} lng={lng:.6f}")

    widget.locationSelected.connect(report_selection)
    return window, widget


@app.command()
@_handle_errors
def run(
    mode: str = typer.Option("submission", help="submission, guess or reveal"),
    player_id: Optional[str] = typer.Option(None, "--player-id", help="Id of the local player"),
    center_lat: Optional[float] = typer.Option(None, "--center-lat"),
    center_lng: Optional[float] = typer.Option(None, "--center-lng"),
    marker_lat: Optional[float] = typer.Option(None, "--marker-lat"),
    marker_lng: Optional[float] = typer.Option(None, "--marker-lng"),
    actual_lat: Optional[float] = typer.Option(None, "--actual-lat"),
    actual_lng: Optional[float] = typer.Option(None, "--actual-lng"),
    zoom: Optional[int] = typer.Option(None, help="Initial zoom level (2-18)"),
    guesses: Optional[str] = typer.Option(None, help="Guess list as JSON text"),
    controls: bool = typer.Option(True, "--controls/--no-controls", help="Show the zoom buttons"),
    log_level: str = typer.Option("WARNING", "--log-level", help="Python logging level"),
) -> None:
    """Open a window showing the map configured from the command line."""

    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    options = extract_options(
        {
            "mode": mode,
            "player_id": player_id,
            "center_lat": center_lat,
            "center_lng": center_lng,
            "marker_lat": marker_lat,
            "marker_lng": marker_lng,
            "actual_lat": actual_lat,
            "actual_lng": actual_lng,
            "zoom": zoom,
            "guesses": guesses,
            "controls": controls,
        }
    )

    from PySide6.QtWidgets import QApplication

    qt_app = QApplication.instance() or QApplication(sys.argv)
    window, _widget = build_window(options)
    window.show()
    _LOGGER.info("Map window opened in %s mode", options["mode"])
    raise typer.Exit(qt_app.exec())


def main() -> None:
    app()


__all__ = ["app", "build_window", "main", "run"]


if __name__ == "__main__":  # pragma: no cover - manual launch
    main()
