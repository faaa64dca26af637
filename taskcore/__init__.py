"""In-memory task tracking with observers and undo/redo."""

__version__ = "0.1.0"
