"""Durable storage of finished workflow records."""

from sentinel.storage.history_store import HistoryStore

__all__ = ["HistoryStore"]
