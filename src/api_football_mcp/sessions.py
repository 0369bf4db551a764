"""Bounded, expiring record of MCP sessions created by ``initialize``."""

import threading
import time
import uuid
from collections import OrderedDict
from typing import Any, Callable, Dict, Optional


def new_session_id() -> str:
    return uuid.uuid4().hex


class SessionStore:
    """
    Session id -> {capabilities, client_info, created}.

    Entries expire after ``ttl_seconds`` and the oldest entry is evicted once
    ``max_entries`` is reached. Nothing in request dispatch depends on it.
    """

    def __init__(self, ttl_seconds: int = 3600, max_entries: int = 1000,
                 clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
        self._lock = threading.Lock()

    def _is_valid(self, entry: Dict[str, Any], now: float) -> bool:
        return (now - entry["created"]) < self.ttl_seconds

    def _purge(self, now: float) -> None:
        expired = [sid for sid, entry in self._entries.items() if not self._is_valid(entry, now)]
        for sid in expired:
            del self._entries[sid]

    def remember(self, session_id: str, capabilities: Optional[Dict[str, Any]] = None,
                 client_info: Optional[Dict[str, Any]] = None) -> None:
        with self._lock:
            now = self._clock()
            self._purge(now)
            self._entries.pop(session_id, None)
            while len(self._entries) >= self.max_entries:
                self._entries.popitem(last=False)
            self._entries[session_id] = {
                "capabilities": capabilities or {},
                "client_info": client_info or {},
                "created": now,
            }

    def get(self, session_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            entry = self._entries.get(session_id)
            if entry is None or not self._is_valid(entry, self._clock()):
                return None
            return dict(entry)

    def forget(self, session_id: str) -> bool:
        with self._lock:
            return self._entries.pop(session_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            self._purge(self._clock())
            return len(self._entries)

    def __contains__(self, session_id: str) -> bool:
        return self.get(session_id) is not None
