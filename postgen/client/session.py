from __future__ import annotations

import secrets
import string
import time
from typing import Optional

from postgen.client.storage import KeyValueStore
from postgen.core.constants import SESSION_ID_KEY

_ALPHABET = string.ascii_lowercase + string.digits
_SUFFIX_LENGTH = 13


def generate_session_id() -> str:
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(_SUFFIX_LENGTH))
    return f"session_{time.time_ns() // 1_000_000}_{suffix}"


class SessionIdentityProvider:
    def __init__(self, store: KeyValueStore) -> None:
        self.store = store
        self._cached: Optional[str] = None

    def get_session_id(self) -> str:
        if self._cached:
            return self._cached
        session_id = self.store.get(SESSION_ID_KEY)
        if not session_id:
            session_id = generate_session_id()
            self.store.set(SESSION_ID_KEY, session_id)
        self._cached = session_id
        return session_id
