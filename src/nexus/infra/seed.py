# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import yaml

from nexus.auth.passwords import hash_password
from nexus.core.errors import ConflictError
from nexus.core.models import ROLE_ADMIN, ROLE_CUSTOMER, Account, Transaction, UserRecord
from nexus.core.utils import canon_email, utc_now_iso
from nexus.infra.user_repo import UserStore

logger = logging.getLogger(__name__)

# Anchored to the package so it works from any working directory.
BASE_DIR = Path(__file__).resolve().parents[1]
DEFAULT_SEED_PATH = Path(os.getenv("NEXUS_SEED_PATH", str(BASE_DIR / "data" / "seed.yml"))).resolve()

DEFAULT_ADMIN_PASSWORD = "Admin123!"


@dataclass(frozen=True)
class DemoSeed:
    accounts: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    transactions: List[Dict[str, Any]] = field(default_factory=list)
    admin: Dict[str, Any] = field(default_factory=dict)
    users: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def new_accounts(self) -> Dict[str, Account]:
        return {k: Account.from_dict(v or {}) for k, v in self.accounts.items()}

    def new_transactions(self) -> List[Transaction]:
        return [Transaction.from_dict(t) for t in self.transactions if isinstance(t, dict) and t.get("id")]


def load_seed(path: Path = DEFAULT_SEED_PATH) -> DemoSeed:
    if not path.exists():
        logger.warning("Seed file %s not found, starting with empty demo data", path)
        return DemoSeed()
    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        return DemoSeed()
    demo = raw.get("demo") or {}
    return DemoSeed(
        accounts=dict(demo.get("accounts") or {}),
        transactions=list(demo.get("transactions") or []),
        admin=dict(raw.get("admin") or {}),
        users=dict(raw.get("users") or {}),
    )


def _record_from_seed(email: str, data: Dict[str, Any], seed: DemoSeed, *, password_hash: str, role: str) -> UserRecord:
    return UserRecord(
        email=canon_email(email),
        first_name=str(data.get("first_name") or ""),
        last_name=str(data.get("last_name") or ""),
        phone=str(data.get("phone") or ""),
        address=str(data.get("address") or ""),
        password_hash=password_hash,
        created_at=utc_now_iso(),
        role=role,
        active=bool(data.get("active", True)),
        accounts=seed.new_accounts(),
        transactions=seed.new_transactions(),
    )


def bootstrap_store(store: UserStore, seed: DemoSeed) -> int:
    """Create the admin account and any pre-provisioned users. Returns how many were added."""
    added = 0

    admin = seed.admin
    admin_email = canon_email(str(admin.get("email") or ""))
    if admin_email:
        password = os.getenv("NEXUS_ADMIN_PASSWORD") or DEFAULT_ADMIN_PASSWORD
        rec = _record_from_seed(admin_email, admin, seed, password_hash=hash_password(password), role=ROLE_ADMIN)
        try:
            store.create(rec)
            added += 1
            logger.info("Bootstrapped admin account %s", admin_email)
        except ConflictError:
            pass

    for uname, udata in seed.users.items():
        if not isinstance(udata, dict):
            continue
        email = canon_email(str(uname))
        ph = str(udata.get("password_hash") or "").strip()
        if not email or not ph:
            logger.warning("Skipping seeded user %r without email or password_hash", uname)
            continue
        role = str(udata.get("role") or ROLE_CUSTOMER).strip().lower()
        try:
            store.create(_record_from_seed(email, udata, seed, password_hash=ph, role=role))
            added += 1
        except ConflictError:
            logger.warning("Seeded user %s already exists", email)

    return added
