"""Legal Secretary: template library with local persistence and cloud sync."""

__version__ = "0.1.0"
