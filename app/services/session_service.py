"""
app/services/session_service.py

Purpose: Per-browser session storage

- get / set / clear of the 'user' and 'token' entries
- In-memory store for development and tests
- MongoDB store for deployments
- Every write replaces the stored value wholesale (last write wins)
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Optional

from app.core.config import settings
from app.core.logging import get_logger
from app.db.mongo import get_sessions_collection

logger = get_logger(__name__)

SESSION_KEYS = ("user", "token")


class SessionStore(ABC):
    """Key/value storage scoped to a session id."""

    @abstractmethod
    async def get(self, session_id: str, key: str) -> Optional[Any]:
        ...

    @abstractmethod
    async def set(self, session_id: str, key: str, value: Any) -> None:
        ...

    @abstractmethod
    async def clear(self, session_id: str) -> None:
        ...

    @staticmethod
    def _check_key(key: str):
        if key not in SESSION_KEYS:
            raise KeyError(f"Unsupported session key: {key}")


class MemorySessionStore(SessionStore):
    """Process-local store. Lost on restart."""

    def __init__(self):
        self._data: Dict[str, Dict[str, Any]] = {}

    async def get(self, session_id: str, key: str) -> Optional[Any]:
        self._check_key(key)
        return self._data.get(session_id, {}).get(key)

    async def set(self, session_id: str, key: str, value: Any) -> None:
        self._check_key(key)
        self._data.setdefault(session_id, {})[key] = value

    async def clear(self, session_id: str) -> None:
        self._data.pop(session_id, None)


class MongoSessionStore(SessionStore):
    """One document per session in the 'sessions' collection."""

    async def get(self, session_id: str, key: str) -> Optional[Any]:
        self._check_key(key)
        doc = await get_sessions_collection().find_one({"session_id": session_id})
        if not doc:
            return None
        return doc.get(key)

    async def set(self, session_id: str, key: str, value: Any) -> None:
        self._check_key(key)
        await get_sessions_collection().update_one(
            {"session_id": session_id},
            {
                "$set": {key: value, "updated_at": datetime.utcnow()},
                "$setOnInsert": {"session_id": session_id, "created_at": datetime.utcnow()},
            },
            upsert=True
        )
        logger.debug(f"Session '{key}' saved", extra={"session_id": session_id})

    async def clear(self, session_id: str) -> None:
        await get_sessions_collection().delete_one({"session_id": session_id})
        logger.debug("Session cleared", extra={"session_id": session_id})


# Global store instance
_session_store: Optional[SessionStore] = None


def get_session_store() -> SessionStore:
    """Get or create the configured session store."""
    global _session_store
    if _session_store is None:
        if settings.SESSION_BACKEND == "mongo":
            _session_store = MongoSessionStore()
        else:
            _session_store = MemorySessionStore()
        logger.info(f"Using {type(_session_store).__name__} for sessions")
    return _session_store
