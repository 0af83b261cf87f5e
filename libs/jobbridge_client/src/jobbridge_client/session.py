from __future__ import annotations

import json
import logging
import os
import sqlite3
import tempfile
import threading
from pathlib import Path
from typing import Protocol

from common.utils import now_utc_iso

from jobbridge_client.models import LoginResponse, StoredProfile

DEFAULT_SESSION_DB_PATH = os.path.join(tempfile.gettempdir(), "jobbridge", "session.sqlite3")

TOKEN_KEY = "authToken"
USER_NAME_KEY = "userName"
USER_EMAIL_KEY = "userEmail"
USER_TYPE_KEY = "userType"
PROFILE_KEYS = (USER_NAME_KEY, USER_EMAIL_KEY, USER_TYPE_KEY)

LOGGER = logging.getLogger("jobbridge.session")


class KeyValueBackend(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class InMemoryBackend:
    def __init__(self) -> None:
        self._values: dict[str, str] = {}
        self._lock = threading.RLock()

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value

    def remove(self, key: str) -> None:
        with self._lock:
            self._values.pop(key, None)


class SqliteBackend:
    """Key-value slots in a SQLite file; values survive a process restart."""

    def __init__(self, database_path: str) -> None:
        self.database_path = Path(database_path)
        self._connection: sqlite3.Connection | None = None
        self._lock = threading.RLock()

    @property
    def connection(self) -> sqlite3.Connection:
        if self._connection is None:
            raise RuntimeError("Session database connection is not initialized")
        return self._connection

    def connect(self) -> None:
        with self._lock:
            if self._connection is not None:
                return
            self.database_path.parent.mkdir(parents=True, exist_ok=True)
            self._connection = sqlite3.connect(self.database_path, check_same_thread=False)
            self._connection.row_factory = sqlite3.Row
            self._connection.executescript(
                """
                CREATE TABLE IF NOT EXISTS session_values (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );
                """
            )
            self._connection.commit()

    def close(self) -> None:
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None

    def get(self, key: str) -> str | None:
        with self._lock:
            row = self.connection.execute(
                "SELECT value FROM session_values WHERE key = ?",
                (key,),
            ).fetchone()
        return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self.connection.execute(
                """
                INSERT INTO session_values (key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, value, now_utc_iso()),
            )
            self.connection.commit()

    def remove(self, key: str) -> None:
        with self._lock:
            self.connection.execute("DELETE FROM session_values WHERE key = ?", (key,))
            self.connection.commit()


class SessionStore:
    """Holds the auth token in an ephemeral slot or a durable backend, never both.

    The ephemeral slot lives only as long as this object. The durable slot is
    whatever backend was injected. Reads prefer the ephemeral value. All
    access goes through one lock so a login racing a logout cannot leave both
    tiers populated.
    """

    def __init__(self, durable: KeyValueBackend | None = None) -> None:
        self.durable: KeyValueBackend = durable if durable is not None else InMemoryBackend()
        self._ephemeral: str | None = None
        self._lock = threading.RLock()

    def get(self) -> str | None:
        with self._lock:
            if self._ephemeral is not None:
                return self._ephemeral
            return self.durable.get(TOKEN_KEY)

    def set(self, token: str, *, durable: bool) -> None:
        if not token:
            raise ValueError("Token must be a non-empty string.")
        with self._lock:
            if durable:
                self.durable.set(TOKEN_KEY, token)
                self._ephemeral = None
            else:
                self.durable.remove(TOKEN_KEY)
                self._ephemeral = token
        LOGGER.info(json.dumps({"event": "session_updated", "tier": "durable" if durable else "ephemeral"}))

    def clear(self) -> None:
        with self._lock:
            self._ephemeral = None
            self.durable.remove(TOKEN_KEY)
            for key in PROFILE_KEYS:
                self.durable.remove(key)
        LOGGER.info(json.dumps({"event": "session_updated", "tier": None}))

    def has_durable_session(self) -> bool:
        with self._lock:
            return self.durable.get(TOKEN_KEY) is not None

    def save_profile(self, login: LoginResponse) -> None:
        with self._lock:
            self.durable.set(USER_NAME_KEY, login.name)
            self.durable.set(USER_EMAIL_KEY, login.email)
            self.durable.set(USER_TYPE_KEY, login.user_type)

    def load_profile(self) -> StoredProfile | None:
        with self._lock:
            name = self.durable.get(USER_NAME_KEY) or ""
            email = self.durable.get(USER_EMAIL_KEY) or ""
            user_type = self.durable.get(USER_TYPE_KEY) or ""
        if not (name and email and user_type):
            return None
        return StoredProfile(name=name, email=email, user_type=user_type)
