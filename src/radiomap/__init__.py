"""radio-map: internet radio stations on a world map."""

__version__ = "0.1.0"
