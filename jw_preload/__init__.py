"""Media metadata preloading: relation tracking, metadata cache, preload queue."""

__version__ = "0.1.0"
