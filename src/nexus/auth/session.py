# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import os
import secrets
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from itsdangerous import BadData, URLSafeTimedSerializer

logger = logging.getLogger(__name__)

COOKIE_NAME = os.getenv("NEXUS_COOKIE_NAME", "nexus_session")
DEFAULT_MAX_AGE_SECONDS = int(os.getenv("NEXUS_SESSION_MAX_AGE", "1800"))  # 30 minutes

# Used only when no key is configured; sessions are in-memory anyway.
_FALLBACK_SECRET = secrets.token_hex(32)


def _serializer() -> URLSafeTimedSerializer:
    secret = os.getenv("NEXUS_SECRET_KEY") or os.getenv("SECRET_KEY") or _FALLBACK_SECRET
    salt = os.getenv("NEXUS_SESSION_SALT", "nexus.session.v1")
    return URLSafeTimedSerializer(secret_key=secret, salt=salt)


def sign_session(session_id: str) -> str:
    s = _serializer()
    return s.dumps({"sid": session_id})


def verify_session(token: str, *, max_age: int = DEFAULT_MAX_AGE_SECONDS) -> Optional[str]:
    """Return the session id carried by a cookie value, or None."""
    if not token:
        return None
    s = _serializer()
    try:
        data = s.loads(token, max_age=max_age)
    except BadData:
        return None
    sid = str((data or {}).get("sid") or "").strip() if isinstance(data, dict) else ""
    return sid or None


@dataclass
class Session:
    id: str
    email: str
    created_at: float
    last_access: float


class SessionStore:
    """In-memory session table with a fixed (non-sliding) time-to-live.

    Expired entries are dropped lazily when they are looked up.
    """

    def __init__(self, ttl_seconds: int = DEFAULT_MAX_AGE_SECONDS, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()

    def create(self, email: str) -> Session:
        now = self._clock()
        sess = Session(id=secrets.token_urlsafe(32), email=email, created_at=now, last_access=now)
        with self._lock:
            self._sessions[sess.id] = sess
        return sess

    def resolve(self, session_id: str) -> Optional[Session]:
        if not session_id:
            return None
        now = self._clock()
        with self._lock:
            sess = self._sessions.get(session_id)
            if sess is None:
                return None
            if now - sess.created_at >= self.ttl_seconds:
                del self._sessions[session_id]
                logger.debug("Session for %s expired", sess.email)
                return None
            sess.last_access = now
            return sess

    def destroy(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
