# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from nexus.auth.passwords import hash_password, verify_password
from nexus.auth.session import Session, SessionStore
from nexus.auth.users import authenticate
from nexus.core.errors import AuthenticationError, ValidationError
from nexus.core.models import ROLE_CUSTOMER, UserRecord
from nexus.core.utils import canon_email, is_blank, utc_now_iso, valid_email, valid_password
from nexus.infra.seed import DemoSeed
from nexus.infra.user_repo import UserStore

logger = logging.getLogger(__name__)

REGISTRATION_FIELDS = ("first_name", "last_name", "email", "phone", "address", "password", "confirm_password")
PROFILE_FIELDS = ("first_name", "last_name", "phone", "address")


def register(*, store: UserStore, seed: DemoSeed, fields: Dict[str, Any]) -> UserRecord:
    """Validate a registration and create the user with the demo accounts.

    Checks run in a fixed order so each failure has its own message. No
    session is created; the caller logs in afterwards.
    """
    if any(is_blank(fields.get(k)) for k in REGISTRATION_FIELDS):
        raise ValidationError("All fields are required")

    email = canon_email(fields["email"])
    password = fields["password"]

    if not valid_email(email):
        raise ValidationError("Invalid email format")
    if not valid_password(password):
        raise ValidationError("Password must be at least 8 characters long")
    if password != fields["confirm_password"]:
        raise ValidationError("Passwords do not match")

    record = UserRecord(
        email=email,
        first_name=str(fields["first_name"]).strip(),
        last_name=str(fields["last_name"]).strip(),
        phone=str(fields["phone"]).strip(),
        address=str(fields["address"]).strip(),
        password_hash=hash_password(password),
        created_at=utc_now_iso(),
        role=ROLE_CUSTOMER,
        accounts=seed.new_accounts(),
        transactions=seed.new_transactions(),
    )
    # The store is the authority on duplicates (raises ConflictError).
    store.create(record)
    logger.info("Registered user %s", email)
    return record


def login(*, store: UserStore, sessions: SessionStore, username: Optional[str], password: Optional[str]) -> Tuple[UserRecord, Session]:
    if is_blank(username) or is_blank(password):
        raise ValidationError("Username and password are required")
    user = authenticate(store, str(username), str(password))
    if not user:
        logger.info("Failed login for %s", canon_email(str(username)))
        raise AuthenticationError("Invalid credentials")
    sess = sessions.create(user.email)
    logger.info("User %s logged in", user.email)
    return user, sess


def logout(*, sessions: SessionStore, session_id: str) -> None:
    if sessions.destroy(session_id):
        logger.info("Session closed")


def get_profile(*, store: UserStore, email: str) -> Dict[str, Any]:
    return store.get(email).to_public()


def update_profile(*, store: UserStore, email: str, fields: Dict[str, Any]) -> None:
    """Overwrite the given non-blank profile fields; anything else is left as is."""
    changes = {k: str(fields[k]).strip() for k in PROFILE_FIELDS if not is_blank(fields.get(k))}
    # Still resolves the record so a vanished user is reported.
    store.update(email, changes)
    if changes:
        logger.info("Updated profile fields %s for %s", sorted(changes), email)


def change_password(
    *,
    store: UserStore,
    email: str,
    current_password: Optional[str],
    new_password: Optional[str],
    confirm_password: Optional[str],
) -> None:
    with store.locked(email) as rec:
        if not verify_password(rec.password_hash, current_password or ""):
            raise ValidationError("Current password is incorrect")
        if not valid_password(new_password or ""):
            raise ValidationError("New password must be at least 8 characters long")
        if new_password != confirm_password:
            raise ValidationError("New passwords do not match")
        rec.password_hash = hash_password(new_password)
    logger.info("Password changed for %s", email)


def list_users(*, store: UserStore) -> List[Dict[str, Any]]:
    return [u.to_public() for u in store.list()]
