# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from nexus.auth.session import COOKIE_NAME, verify_session
from nexus.auth.users import get_user
from nexus.core.errors import AuthenticationError, AuthorizationError
from nexus.core.models import ROLE_ADMIN


@dataclass(frozen=True)
class CurrentUser:
    email: str
    role: str
    session_id: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


def load_user_from_request(request: Request) -> Optional[CurrentUser]:
    token = request.cookies.get(COOKIE_NAME, "")
    sid = verify_session(token)
    if not sid:
        return None
    sess = request.app.state.sessions.resolve(sid)
    if not sess:
        return None
    u = get_user(request.app.state.users, sess.email)
    if u is None:
        # Handlers answer 404 for a session whose user has gone away.
        return CurrentUser(email=sess.email, role="", session_id=sess.id)
    if not u.active:
        return None
    return CurrentUser(email=u.email, role=u.role, session_id=sess.id)


def current_user_optional(request: Request) -> Optional[CurrentUser]:
    u = getattr(request.state, "user", None)
    if u is not None:
        return u
    return load_user_from_request(request)


def require_user(request: Request) -> CurrentUser:
    u = current_user_optional(request)
    if u:
        return u
    raise AuthenticationError("Not authenticated")


def require_admin(request: Request) -> CurrentUser:
    u = current_user_optional(request)
    if not u or not u.is_admin:
        raise AuthorizationError("Unauthorized")
    return u


def is_development() -> bool:
    return os.getenv("NEXUS_ENV", "development").strip().lower() == "development"


def cookie_settings() -> dict:
    return {"httponly": True, "samesite": "lax", "secure": not is_development()}
