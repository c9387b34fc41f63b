"""Persisted session: a token and a user record stored under two keys.

The ``SessionStore`` is the single owner of that pair. Login writes both,
logout clears both, and a storage holding only one of them reads as logged
out. Views and the API client receive the store explicitly and may subscribe
to be told when the session changes.
"""
from __future__ import annotations

import fcntl
import json
import threading
from collections.abc import MutableMapping
from pathlib import Path
from typing import Callable, Protocol

from portal.log import get_logger
from portal.models import ROLES, Session, User

log = get_logger(__name__)

TOKEN_KEY = "token"
USER_KEY = "user"

Listener = Callable[[Session | None], None]


class Storage(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    """Key/value storage over a dict (or any mutable mapping, e.g. st.session_state)."""

    def __init__(self, backing: MutableMapping | None = None, prefix: str = "portal.") -> None:
        self._data = backing if backing is not None else {}
        self._prefix = prefix

    def get_item(self, key: str) -> str | None:
        return self._data.get(self._prefix + key)

    def set_item(self, key: str, value: str) -> None:
        self._data[self._prefix + key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(self._prefix + key, None)


def _lock(f, exclusive: bool = True) -> None:
    """Advisory file lock (Unix fcntl)."""
    try:
        op = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
        fcntl.flock(f.fileno(), op)
    except (OSError, AttributeError):
        pass


def _unlock(f) -> None:
    try:
        fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    except (OSError, AttributeError):
        pass


class FileStorage:
    """One file per key inside ``directory``."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def _path(self, key: str) -> Path:
        return self.directory / key

    def get_item(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        with open(path, "r", encoding="utf-8") as f:
            _lock(f, exclusive=False)
            value = f.read()
            _unlock(f)
        return value

    def set_item(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        with open(self._path(key), "w", encoding="utf-8") as f:
            _lock(f)
            f.write(value)
            _unlock(f)
        try:
            self._path(key).chmod(0o600)
        except OSError:
            pass

    def remove_item(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class SessionStore:
    def __init__(self, storage: Storage) -> None:
        self.storage = storage
        self._listeners: list[Listener] = []
        self._lock = threading.Lock()

    def get_token(self) -> str | None:
        session = self.get_session()
        return session.token if session else None

    def get_session(self) -> Session | None:
        token = self.storage.get_item(TOKEN_KEY)
        raw_user = self.storage.get_item(USER_KEY)
        if not token and not raw_user:
            return None
        if not token or not raw_user:
            log.warning("Stored session is incomplete (token=%s, user=%s) — treating as logged out",
                        bool(token), bool(raw_user))
            return None
        try:
            data = json.loads(raw_user)
        except ValueError:
            log.warning("Stored user record is not valid JSON — treating as logged out")
            return None
        if not isinstance(data, dict):
            log.warning("Stored user record is not an object — treating as logged out")
            return None
        user = User.from_api(data)
        if user.role not in ROLES:
            log.warning("Stored user has unknown role %r — treating as logged out", user.role)
            return None
        return Session(token=token, user=user)

    def save(self, session: Session) -> None:
        with self._lock:
            self.storage.set_item(TOKEN_KEY, session.token)
            self.storage.set_item(USER_KEY, json.dumps(session.user.to_dict()))
        log.info("Session started for %s (%s)", session.user.email, session.role)
        self._notify(session)

    def clear(self) -> None:
        with self._lock:
            self.storage.remove_item(TOKEN_KEY)
            self.storage.remove_item(USER_KEY)
        log.info("Session cleared")
        self._notify(None)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, session: Session | None) -> None:
        for listener in list(self._listeners):
            listener(session)


def make_store(backend: str, directory: Path, backing: MutableMapping | None = None) -> SessionStore:
    if backend == "memory":
        return SessionStore(MemoryStorage(backing))
    return SessionStore(FileStorage(directory))
