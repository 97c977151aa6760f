# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import copy
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List

from nexus.core.errors import ConflictError, NotFoundError
from nexus.core.models import UserRecord
from nexus.core.utils import canon_email

# Fields a partial update may touch (record attribute names).
UPDATABLE_FIELDS = ("first_name", "last_name", "phone", "address", "password_hash", "role", "active")


class UserStore(ABC):
    """Storage seam for user records. Handlers only talk to this interface."""

    @abstractmethod
    def create(self, record: UserRecord) -> None: ...

    @abstractmethod
    def get(self, email: str) -> UserRecord: ...

    @abstractmethod
    def update(self, email: str, fields: Dict[str, Any]) -> None: ...

    @abstractmethod
    def list(self) -> List[UserRecord]: ...

    @abstractmethod
    def exists(self, email: str) -> bool: ...

    @abstractmethod
    def locked(self, email: str):
        """Context manager yielding the live record under its exclusive lock."""


class InMemoryUserStore(UserStore):
    """Process-lifetime user map with one lock per record.

    ``get``/``list`` hand out deep copies taken under the record lock, so a
    reader never observes a half-applied mutation.
    """

    def __init__(self) -> None:
        self._users: Dict[str, UserRecord] = {}
        self._locks: Dict[str, threading.RLock] = {}
        self._lock = threading.Lock()

    def _entry(self, email: str):
        key = canon_email(email)
        with self._lock:
            rec = self._users.get(key)
            lock = self._locks.get(key)
        if rec is None or lock is None:
            raise NotFoundError("User not found")
        return rec, lock

    def create(self, record: UserRecord) -> None:
        key = canon_email(record.email)
        with self._lock:
            if key in self._users:
                raise ConflictError("User already exists")
            record.email = key
            self._users[key] = record
            self._locks[key] = threading.RLock()

    def get(self, email: str) -> UserRecord:
        rec, lock = self._entry(email)
        with lock:
            return copy.deepcopy(rec)

    def update(self, email: str, fields: Dict[str, Any]) -> None:
        unknown = [k for k in fields if k not in UPDATABLE_FIELDS]
        if unknown:
            raise ValueError(f"Fields not updatable: {', '.join(unknown)}")
        with self.locked(email) as rec:
            for k, v in fields.items():
                setattr(rec, k, v)

    def list(self) -> List[UserRecord]:
        with self._lock:
            keys = list(self._users)
        out = []
        for key in keys:
            try:
                out.append(self.get(key))
            except NotFoundError:
                continue
        return out

    def exists(self, email: str) -> bool:
        with self._lock:
            return canon_email(email) in self._users

    @contextmanager
    def locked(self, email: str) -> Iterator[UserRecord]:
        rec, lock = self._entry(email)
        with lock:
            yield rec

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)
