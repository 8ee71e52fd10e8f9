"""Taskboard: department task-backlog dashboard service."""

__version__ = "1.0.0"
