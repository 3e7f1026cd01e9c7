"""Синхронизация статусов задач Asana → YouTrack."""

__version__ = "0.1.0"
