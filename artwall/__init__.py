"""artwall — a small image board with swappable JSON and SQLite storage."""

__version__ = "0.1.0"
