#!/usr/bin/env python3
"""Add a pre-provisioned user to the seed file loaded at startup."""
from __future__ import annotations

from getpass import getpass

import yaml

from nexus.auth.passwords import hash_password
from nexus.core.utils import canon_email, valid_email, valid_password
from nexus.infra.seed import DEFAULT_SEED_PATH

SEED_PATH = DEFAULT_SEED_PATH


def main() -> None:
    SEED_PATH.parent.mkdir(parents=True, exist_ok=True)
    if SEED_PATH.exists():
        raw = yaml.safe_load(SEED_PATH.read_text(encoding="utf-8")) or {}
    else:
        raw = {"version": 1, "users": {}}

    if "users" not in raw or not isinstance(raw["users"], dict):
        raw["users"] = {}

    email = canon_email(input("Email: "))
    if not valid_email(email):
        raise SystemExit("Invalid email format")
    first_name = input("First name: ").strip()
    last_name = input("Last name: ").strip()
    phone = input("Phone: ").strip()
    address = input("Address: ").strip()
    role = (input("Role [customer/admin]: ").strip().lower() or "customer")
    active_in = input("Active? [Y/n]: ").strip().lower()
    active = (active_in != "n")

    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")
    if pw1 != pw2:
        raise SystemExit("Passwords do not match")
    if not valid_password(pw1):
        raise SystemExit("Password must be at least 8 characters long")

    raw["users"][email] = {
        "first_name": first_name,
        "last_name": last_name,
        "phone": phone,
        "address": address,
        "role": role,
        "active": active,
        "password_hash": hash_password(pw1),
    }

    SEED_PATH.write_text(yaml.safe_dump(raw, sort_keys=False, allow_unicode=True), encoding="utf-8")
    print(f"OK -> {SEED_PATH}")


if __name__ == "__main__":
    main()
