"""Offline-first console viewer for the jokebox server."""
