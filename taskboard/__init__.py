"""Taskboard: per-user task lists over a FastAPI backend."""

__version__ = "0.1.0"
