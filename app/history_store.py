# app/history_store.py
"""
In-memory history store for analysis runs.

Stores footy HistoryItem records (input text, rendered output and the
config snapshot used) so runs can be listed, exported and compared.

Note: This is an in-memory store. Data is lost on server restart.
"""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import uuid4

from footy.models import AnalysisResult, HistoryItem, StrategyConfig


class HistoryStore:
    """
    In-memory store for analysis history.

    Thread-safe: all operations hold one lock.
    Items stored in reverse chronological order (newest first).
    """

    def __init__(self, max_items: int = 100):
        """
        Initialize history store.

        Args:
            max_items: Maximum items to keep (oldest evicted when exceeded)
        """
        self._items: Dict[str, HistoryItem] = {}
        self._order: List[str] = []  # IDs in reverse chronological order
        self._max_items = max_items
        self._lock = threading.Lock()

    @property
    def max_items(self) -> int:
        return self._max_items

    def add(self, item: HistoryItem) -> HistoryItem:
        """
        Add a history item.

        Args:
            item: HistoryItem to add

        Returns:
            The added item
        """
        with self._lock:
            if item.id in self._items:
                self._order.remove(item.id)
            self._items[item.id] = item
            self._order.insert(0, item.id)  # Newest first

            # Evict oldest if over limit
            while len(self._order) > self._max_items:
                oldest_id = self._order.pop()
                del self._items[oldest_id]

        return item

    def list(self, limit: int = 50) -> List[HistoryItem]:
        """
        Get history items in reverse chronological order.

        Args:
            limit: Maximum items to return

        Returns:
            List of HistoryItem objects
        """
        with self._lock:
            return [self._items[item_id] for item_id in self._order[:limit]]

    def get(self, item_id: str) -> Optional[HistoryItem]:
        """
        Get a specific history item by ID.

        Returns:
            HistoryItem or None if not found
        """
        with self._lock:
            return self._items.get(item_id)

    def clear(self) -> int:
        """
        Clear all history items.

        Returns:
            Number of items cleared
        """
        with self._lock:
            count = len(self._items)
            self._items.clear()
            self._order.clear()
        return count

    def count(self) -> int:
        """Get number of items in store."""
        with self._lock:
            return len(self._items)


def create_history_item(
    input_text: str,
    result: AnalysisResult,
    config: StrategyConfig,
) -> HistoryItem:
    """
    Create a HistoryItem from an analysis run.

    Args:
        input_text: Normalized input text that was analyzed
        result: Engine output for that input
        config: Strategy config the run used (stored as the snapshot)

    Returns:
        HistoryItem ready to be stored
    """
    return HistoryItem(
        id=str(uuid4()),
        created_at=datetime.now(timezone.utc).isoformat(),
        input_text=input_text,
        output_text=result.output_text,
        parsed_count=result.parsed_count,
        config_snapshot=config,
    )


# Module-level singleton store
_store: Optional[HistoryStore] = None


def get_history_store() -> HistoryStore:
    """Get the global history store singleton (capacity from app config)."""
    global _store
    if _store is None:
        from app.config import load_config

        _store = HistoryStore(max_items=load_config().history_max_items)
    return _store


def reset_history_store() -> None:
    """Drop the singleton so the next access rebuilds it (tests)."""
    global _store
    _store = None
