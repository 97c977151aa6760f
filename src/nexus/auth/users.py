# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from typing import Optional

from nexus.auth.passwords import verify_password
from nexus.core.errors import NotFoundError
from nexus.core.models import UserRecord
from nexus.infra.user_repo import UserStore


def get_user(store: UserStore, email: str) -> Optional[UserRecord]:
    if not (email or "").strip():
        return None
    try:
        return store.get(email)
    except NotFoundError:
        return None


def authenticate(store: UserStore, username: str, password: str) -> Optional[UserRecord]:
    """Return the record for valid credentials, else None.

    Unknown user, inactive user and wrong password are indistinguishable.
    """
    u = get_user(store, username)
    if not u or not u.active:
        return None
    if not verify_password(u.password_hash, password):
        return None
    return u
