# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import io
import re
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext

import pandas as pd
from fastapi.responses import StreamingResponse

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 8

_CENT = Decimal("0.01")


def canon_email(s: str) -> str:
    """Canonicalise an email used as a store key (trim + lower)."""
    return (s or "").strip().lower()


def is_blank(v: object) -> bool:
    return v is None or (isinstance(v, str) and not v.strip())


def valid_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email or ""))


def valid_password(password: str) -> bool:
    return len(password or "") >= MIN_PASSWORD_LENGTH


class SubCentError(ValueError):
    """Amount has more than two decimal places."""


def to_money(value: object, *, exact: bool = False) -> Decimal:
    """Parse a number or numeric string into a 2-place Decimal.

    Raises ValueError for anything that is not a finite number. With
    ``exact`` the value is never rounded: more than two decimal places
    raises SubCentError instead.
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    try:
        d = Decimal(str(value).strip())
    except (InvalidOperation, TypeError):
        raise ValueError(f"Not a number: {value!r}") from None
    if not d.is_finite():
        raise ValueError(f"Not a number: {value!r}")
    _, digits, exponent = d.as_tuple()
    if exponent >= -2:
        # Already whole cents. Huge values are left unscaled.
        return d if d.adjusted() >= 26 else d.quantize(_CENT)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, len(digits) + 3)
        cents = d.quantize(_CENT, rounding=ROUND_HALF_UP)
    if exact and cents != d:
        raise SubCentError(f"More than 2 decimal places: {value!r}")
    return cents


def money_json(d: Decimal) -> float:
    return float(d.quantize(_CENT, rounding=ROUND_HALF_UP))


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def utc_today() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def df_to_csv_stream(df: pd.DataFrame, filename: str = "") -> StreamingResponse:
    """Stream a dataframe as CSV without writing to disk."""
    buf = io.StringIO()
    df.to_csv(buf, index=False)
    buf.seek(0)
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'} if filename else None
    return StreamingResponse(iter([buf.getvalue()]), media_type="text/csv", headers=headers)
