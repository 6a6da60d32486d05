"""Interactive world map for location guessing games."""

__version__ = "0.1.0"
