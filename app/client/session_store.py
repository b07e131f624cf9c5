"""Client-held session marker.

The store is process-wide: one instance per running portal client, created by
`get_session_store()`. Construction performs the single synchronous read that
restores a marker left by a previous run; `clear()` (called on logout) is the
only way a marker goes away, apart from a corrupt record being discarded.
Last write wins; there is no expiry.
"""

import json
import time
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import structlog

from app.config import settings

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SessionIdentity:
    """What the client keeps about the logged-in account. Never a password hash."""

    user_id: str
    email: str
    name: str = ""
    is_admin: bool = False
    saved_at: int = field(default_factory=lambda: int(time.time() * 1000))

    @classmethod
    def from_profile(cls, profile: dict[str, Any]) -> "SessionIdentity":
        """Build a session identity from an account profile."""
        return cls(
            user_id=str(profile["id"]),
            email=profile.get("email", ""),
            name=profile.get("name") or "",
            is_admin=bool(profile.get("is_admin", False)),
        )

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "SessionIdentity | None":
        """Parse a stored record; None when it does not carry a user ID."""
        user_id = record.get("userId")
        if not user_id or not isinstance(user_id, str):
            return None
        return cls(
            user_id=user_id,
            email=str(record.get("email", "")),
            name=str(record.get("name", "")),
            is_admin=bool(record.get("isAdmin", False)),
            saved_at=int(record.get("timestamp") or 0),
        )

    def to_record(self) -> dict[str, Any]:
        """Serialize in the shape the web client stores."""
        data = asdict(self)
        return {
            "userId": data["user_id"],
            "email": data["email"],
            "name": data["name"],
            "isAdmin": data["is_admin"],
            "timestamp": data["saved_at"],
        }


class SessionStorage(ABC):
    """Synchronous string key/value storage."""

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        """Return the stored value, or None."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove a value; missing keys are ignored."""


class MemoryStorage(SessionStorage):
    """Storage that lives as long as the process."""

    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileStorage(SessionStorage):
    """Storage persisted to a JSON file, so a marker survives a restart."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("session_storage_unreadable", path=str(self.path), error=str(e))
            return {}
        return data if isinstance(data, dict) else {}

    def _dump(self, items: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(items), encoding="utf-8")
        tmp_path.replace(self.path)

    def get_item(self, key: str) -> str | None:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        items = self._load()
        items[key] = value
        self._dump(items)

    def remove_item(self, key: str) -> None:
        items = self._load()
        if key in items:
            del items[key]
            self._dump(items)


class SessionStore:
    """Reads and writes the session marker. Every operation is synchronous."""

    def __init__(self, storage: SessionStorage, key: str | None = None):
        self.storage = storage
        self.key = key or settings.session_storage_key
        self.restored = self.read()
        if self.restored:
            logger.info("session_marker_found", user_id=self.restored.user_id)

    def read(self) -> SessionIdentity | None:
        """Return the stored identity; a corrupt record is removed and reads as absent."""
        raw = self.storage.get_item(self.key)
        if not raw:
            return None
        try:
            record = json.loads(raw)
        except json.JSONDecodeError:
            record = None
        identity = SessionIdentity.from_record(record) if isinstance(record, dict) else None
        if identity is None:
            logger.warning("session_marker_corrupt", key=self.key)
            self.storage.remove_item(self.key)
        return identity

    def has_marker(self) -> bool:
        """Whether a usable session marker exists right now."""
        return self.read() is not None

    def write(self, identity: SessionIdentity) -> None:
        """Persist the identity, replacing any previous marker."""
        self.storage.set_item(self.key, json.dumps(identity.to_record()))
        logger.info("session_marker_written", user_id=identity.user_id)

    def clear(self) -> None:
        """Remove the marker."""
        self.storage.remove_item(self.key)
        logger.info("session_marker_cleared")


# Global session store instance
_session_store: SessionStore | None = None


def get_session_store() -> SessionStore:
    """
    Get or create the process-wide session store.

    Returns:
        Session store backed by SESSION_STORAGE_PATH, or memory when unset
    """
    global _session_store

    if _session_store is None:
        if settings.session_storage_path:
            storage: SessionStorage = FileStorage(settings.session_storage_path)
        else:
            storage = MemoryStorage()
        _session_store = SessionStore(storage)

    return _session_store


def reset_session_store() -> None:
    """Drop the process-wide store so the next call rebuilds it."""
    global _session_store
    _session_store = None
