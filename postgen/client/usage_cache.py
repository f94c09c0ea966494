from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from postgen.client.storage import KeyValueStore
from postgen.core.constants import USAGE_KEY

logger = logging.getLogger("postgen.client.usage_cache")


@dataclass(slots=True)
class UsageSnapshot:
    generation_count: int
    remaining: Optional[int]
    is_authenticated: bool

    def to_json(self) -> Dict[str, Any]:
        return {
            "generationCount": self.generation_count,
            "remaining": self.remaining,
            "isAuthenticated": self.is_authenticated,
        }


class LocalUsageCache:
    """Client-side mirror of the server's usage counter.

    Only ever a hint for the UI: every server response overwrites it.
    ``remaining`` is ``None`` when the caller is signed in.
    """

    def __init__(self, store: KeyValueStore, *, max_free: int = 3, is_authenticated: bool = False) -> None:
        self.store = store
        self.max_free = max_free
        self.is_authenticated = is_authenticated
        self.usage = self._load()

    def _derive(self, generation_count: int) -> UsageSnapshot:
        if self.is_authenticated:
            return UsageSnapshot(generation_count, None, True)
        return UsageSnapshot(generation_count, max(0, self.max_free - generation_count), False)

    def _load(self) -> UsageSnapshot:
        raw = self.store.get(USAGE_KEY)
        if not raw:
            return self._derive(0)
        try:
            count = int(json.loads(raw)["generationCount"])
        except (ValueError, KeyError, TypeError):
            logger.warning("Stored usage is unreadable, resetting")
            self.store.clear(USAGE_KEY)
            return self._derive(0)
        return self._derive(count)

    def set_authenticated(self, is_authenticated: bool) -> None:
        self.is_authenticated = is_authenticated
        self.usage = self._derive(self.usage.generation_count)

    def update(self, server_usage: Dict[str, Any]) -> UsageSnapshot:
        count = int(server_usage.get("generationCount", self.usage.generation_count))
        self.is_authenticated = bool(server_usage.get("isAuthenticated", self.is_authenticated))
        if self.is_authenticated:
            snapshot = UsageSnapshot(count, None, True)
        else:
            remaining = server_usage.get("remaining")
            if remaining is None:
                remaining = max(0, self.max_free - count)
            snapshot = UsageSnapshot(count, int(remaining), False)
        self.usage = snapshot
        self.store.set(USAGE_KEY, json.dumps(snapshot.to_json()))
        return snapshot

    @property
    def can_generate(self) -> bool:
        return self.is_authenticated or (self.usage.remaining or 0) > 0
