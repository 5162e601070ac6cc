"""Jokebox: stale-tolerant joke service and offline-capable viewer."""

__version__ = "0.1.0"
