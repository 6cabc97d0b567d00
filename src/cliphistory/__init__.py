"""cliphistory: bounded, persistent clipboard history."""

__version__ = "0.1.0"
