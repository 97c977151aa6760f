# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy shared by services and the HTTP layer.

Every error carries a short human-readable message and the HTTP status the
API answers with. The app turns them into ``{"success": false, "message": ...}``.
"""

from __future__ import annotations


class BankError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BankError):
    status_code = 400


class AuthenticationError(BankError):
    status_code = 401


class AuthorizationError(BankError):
    status_code = 403


class NotFoundError(BankError):
    status_code = 404


class ConflictError(BankError):
    # Duplicate registration answers 400, not 409.
    status_code = 400


class InternalError(BankError):
    status_code = 500
