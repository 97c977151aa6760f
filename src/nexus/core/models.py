# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from nexus.core.utils import money_json, to_money

ROLE_CUSTOMER = "customer"
ROLE_ADMIN = "admin"


@dataclass
class Account:
    balance: Decimal
    number: str
    type: str

    def to_public(self) -> Dict[str, Any]:
        return {"balance": money_json(self.balance), "number": self.number, "type": self.type}

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Account":
        return cls(
            balance=to_money(raw.get("balance", 0)),
            number=str(raw.get("number") or ""),
            type=str(raw.get("type") or ""),
        )


@dataclass(frozen=True)
class Transaction:
    id: str
    date: str
    description: str
    amount: Decimal
    type: str
    status: str
    reference: Optional[str] = None

    def to_public(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "date": self.date,
            "description": self.description,
            "amount": money_json(self.amount),
            "type": self.type,
            "status": self.status,
        }
        if self.reference:
            out["reference"] = self.reference
        return out

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Transaction":
        return cls(
            id=str(raw["id"]),
            date=str(raw.get("date") or ""),
            description=str(raw.get("description") or ""),
            amount=to_money(raw.get("amount", 0)),
            type=str(raw.get("type") or ""),
            status=str(raw.get("status") or ""),
            reference=raw.get("reference") or None,
        )


@dataclass
class UserRecord:
    email: str
    first_name: str
    last_name: str
    phone: str
    address: str
    password_hash: str
    created_at: str
    role: str = ROLE_CUSTOMER
    active: bool = True
    accounts: Dict[str, Account] = field(default_factory=dict)
    # Most recent first.
    transactions: List[Transaction] = field(default_factory=list)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def total_balance(self) -> Decimal:
        return sum((a.balance for a in self.accounts.values()), Decimal("0.00"))

    def to_public(self) -> Dict[str, Any]:
        """JSON projection without the password digest."""
        return {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "createdAt": self.created_at,
            "role": self.role,
            "active": self.active,
            "accounts": {k: a.to_public() for k, a in self.accounts.items()},
            "transactions": [t.to_public() for t in self.transactions],
        }

    def to_summary(self) -> Dict[str, str]:
        return {"firstName": self.first_name, "lastName": self.last_name, "email": self.email}
