# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Optional

import pandas as pd

from nexus.core.errors import NotFoundError, ValidationError
from nexus.core.models import Transaction
from nexus.core.utils import SubCentError, is_blank, money_json, to_money, utc_today
from nexus.infra.user_repo import UserStore

logger = logging.getLogger(__name__)

TRANSFER_ACCOUNT = "checking"
EXPORT_COLUMNS = ["id", "date", "description", "amount", "type", "status", "reference"]


def account_summary(*, store: UserStore, email: str) -> Dict[str, Any]:
    """Accounts plus a total computed from the current balances."""
    u = store.get(email)
    return {
        "accounts": {k: a.to_public() for k, a in u.accounts.items()},
        "totalBalance": money_json(u.total_balance()),
    }


def _filtered(transactions: List[Transaction], tx_type: str, search: str) -> List[Transaction]:
    tx_type = (tx_type or "").strip()
    needle = (search or "").strip().lower()
    out = transactions
    if tx_type and tx_type != "all":
        out = [t for t in out if t.type == tx_type]
    if needle:
        out = [t for t in out if needle in t.description.lower()]
    return out


def list_transactions(*, store: UserStore, email: str, tx_type: str = "", search: str = "") -> List[Dict[str, Any]]:
    """Transactions, most recent first.

    - tx_type: exact match on the type tag ("all" or empty disables it)
    - search: case-insensitive substring of the description
    Both filters apply together.
    """
    u = store.get(email)
    return [t.to_public() for t in _filtered(u.transactions, tx_type, search)]


def transactions_frame(*, store: UserStore, email: str, tx_type: str = "", search: str = "") -> pd.DataFrame:
    rows = list_transactions(store=store, email=email, tx_type=tx_type, search=search)
    df = pd.DataFrame(rows)
    return df.reindex(columns=EXPORT_COLUMNS).fillna("")


def transfer(
    *,
    store: UserStore,
    email: str,
    recipient_name: Optional[str],
    bank_name: Optional[str],
    account_number: Optional[str],
    amount: Any,
    description: Optional[str] = None,
) -> Dict[str, Any]:
    """Move money out of the checking account to an external recipient.

    The funds check, the debit and the new transaction happen under the
    record lock, so concurrent transfers can never overdraw the account.
    """
    if any(is_blank(v) for v in (recipient_name, bank_name, account_number, amount)):
        raise ValidationError("All fields are required")
    try:
        value = to_money(amount, exact=True)
    except SubCentError:
        raise ValidationError("Amount cannot have more than 2 decimal places") from None
    except ValueError:
        raise ValidationError("Amount must be a valid number") from None
    if value <= 0:
        raise ValidationError("Amount must be greater than 0")

    recipient = str(recipient_name).strip()
    label = f"Transfer to {recipient}"
    if not is_blank(description):
        label = f"{label} - {str(description).strip()}"

    with store.locked(email) as rec:
        account = rec.accounts.get(TRANSFER_ACCOUNT)
        if account is None:
            raise NotFoundError("Checking account not found")
        if account.balance < value:
            raise ValidationError("Insufficient funds")

        tx = Transaction(
            id=f"T{uuid.uuid4().hex.upper()}",
            date=utc_today(),
            description=label,
            amount=-value,
            type="transfer",
            status="completed",
            reference=f"TRX-{uuid.uuid4().hex[:16].upper()}",
        )
        account.balance -= value
        rec.transactions.insert(0, tx)
        new_balance = account.balance

    logger.info("Transfer %s of %s from %s to %s (%s)", tx.reference, value, email, recipient, str(bank_name).strip())
    return {"transaction": tx.to_public(), "newBalance": money_json(new_balance)}
