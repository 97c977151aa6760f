# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from pathlib import Path

from fastapi import Depends, FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.exceptions import HTTPException as StarletteHTTPException

from nexus.auth.session import COOKIE_NAME, SessionStore, sign_session
from nexus.core.errors import BankError, InternalError
from nexus.core.utils import df_to_csv_stream, utc_now_iso
from nexus.infra.seed import bootstrap_store, load_seed
from nexus.infra.user_repo import InMemoryUserStore
from nexus.permissions import CurrentUser, cookie_settings, current_user_optional, require_admin, require_user
from nexus.schemas import LoginBody, PasswordBody, ProfileBody, RegisterBody, TransferBody
from nexus.services.banking_service import account_summary, list_transactions, transactions_frame, transfer
from nexus.services.user_service import (
    change_password,
    get_profile,
    list_users,
    login,
    logout,
    register,
    update_profile,
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Nexus Bank")


@app.middleware("http")
async def _auth_middleware(request: Request, call_next):
    request.state.user = current_user_optional(request)
    return await call_next(request)

BASE_DIR = Path(__file__).resolve().parent

app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))

STARTED_AT = time.monotonic()

SEED = load_seed()
USERS = InMemoryUserStore()
SESSIONS = SessionStore()
bootstrap_store(USERS, SEED)

app.state.users = USERS
app.state.sessions = SESSIONS


def _is_api(request: Request) -> bool:
    return request.url.path.startswith("/api/")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"success": False, "message": message}, status_code=status_code)


def _render(request: Request, template_name: str, ctx: dict | None = None, status_code: int = 200):
    """TemplateResponse wrapper injecting the signed-in user."""
    base_ctx = {"current_user": getattr(request.state, "user", None)}
    merged = {**base_ctx, **(ctx or {})}
    return templates.TemplateResponse(request, template_name, merged, status_code=status_code)


@contextmanager
def _api_errors(message: str):
    """Let domain errors through; anything else becomes a 500 with `message`."""
    try:
        yield
    except BankError:
        raise
    except Exception:
        logger.exception(message)
        raise InternalError(message) from None


# ------------------ Error handlers ------------------


@app.exception_handler(BankError)
async def _bank_error_handler(request: Request, exc: BankError):
    return _error(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def _request_validation_handler(request: Request, exc: RequestValidationError):
    return _error(400, "Invalid request body")


@app.exception_handler(StarletteHTTPException)
async def _http_error_handler(request: Request, exc: StarletteHTTPException):
    if _is_api(request):
        return _error(exc.status_code, "Not found" if exc.status_code == 404 else str(exc.detail))
    if exc.status_code == 404:
        return _render(request, "404.html", status_code=404)
    return await http_exception_handler(request, exc)


@app.exception_handler(Exception)
async def _unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    if _is_api(request):
        return _error(500, "Internal server error")
    return _render(request, "500.html", status_code=500)


# ------------------ API: auth ------------------


@app.post("/api/register")
def api_register(body: RegisterBody):
    with _api_errors("Server error during registration"):
        register(store=USERS, seed=SEED, fields=body.model_dump())
    return {"success": True, "message": "Registration successful! Please login."}


@app.post("/api/login")
def api_login(request: Request, body: LoginBody):
    with _api_errors("Server error during login"):
        user, sess = login(store=USERS, sessions=SESSIONS, username=body.username, password=body.password)
        previous = getattr(request.state, "user", None)
        if previous is not None:
            SESSIONS.destroy(previous.session_id)

    resp = JSONResponse({"success": True, "message": "Login successful", "user": user.to_summary()})
    resp.set_cookie(
        COOKIE_NAME,
        sign_session(sess.id),
        max_age=SESSIONS.ttl_seconds,
        **cookie_settings(),
    )
    return resp


@app.post("/api/logout")
def api_logout(user: CurrentUser = Depends(require_user)):
    with _api_errors("Error logging out"):
        logout(sessions=SESSIONS, session_id=user.session_id)
    resp = JSONResponse({"success": True, "message": "Logged out successfully"})
    resp.delete_cookie(COOKIE_NAME, **cookie_settings())
    return resp


# ------------------ API: profile ------------------


@app.get("/api/user/profile")
def api_get_profile(user: CurrentUser = Depends(require_user)):
    with _api_errors("Error loading profile"):
        data = get_profile(store=USERS, email=user.email)
    return {"success": True, "data": data}


@app.put("/api/user/profile")
def api_update_profile(body: ProfileBody, user: CurrentUser = Depends(require_user)):
    with _api_errors("Error updating profile"):
        update_profile(store=USERS, email=user.email, fields=body.model_dump())
    return {"success": True, "message": "Profile updated successfully"}


@app.put("/api/user/password")
def api_change_password(body: PasswordBody, user: CurrentUser = Depends(require_user)):
    with _api_errors("Error changing password"):
        change_password(
            store=USERS,
            email=user.email,
            current_password=body.current_password,
            new_password=body.new_password,
            confirm_password=body.confirm_password,
        )
    return {"success": True, "message": "Password changed successfully"}


# ------------------ API: banking ------------------


@app.get("/api/accounts/summary")
def api_account_summary(user: CurrentUser = Depends(require_user)):
    with _api_errors("Error loading accounts"):
        data = account_summary(store=USERS, email=user.email)
    return {"success": True, "data": data}


@app.get("/api/transactions")
def api_transactions(filter: str = "", search: str = "", user: CurrentUser = Depends(require_user)):
    with _api_errors("Error loading transactions"):
        data = list_transactions(store=USERS, email=user.email, tx_type=filter, search=search)
    return {"success": True, "data": data}


@app.get("/api/transactions/export.csv")
def api_export_transactions(filter: str = "", search: str = "", user: CurrentUser = Depends(require_user)):
    with _api_errors("Error exporting transactions"):
        df = transactions_frame(store=USERS, email=user.email, tx_type=filter, search=search)
    return df_to_csv_stream(df, filename="transactions.csv")


@app.post("/api/transfer")
def api_transfer(body: TransferBody, user: CurrentUser = Depends(require_user)):
    with _api_errors("Error processing transfer"):
        data = transfer(
            store=USERS,
            email=user.email,
            recipient_name=body.recipient_name,
            bank_name=body.bank_name,
            account_number=body.account_number,
            amount=body.amount,
            description=body.description,
        )
    return {"success": True, "message": "Transfer completed successfully", "data": data}


# ------------------ API: admin / ops ------------------


@app.get("/api/admin/users")
def api_admin_users(user: CurrentUser = Depends(require_admin)):
    with _api_errors("Error loading users"):
        data = list_users(store=USERS)
    return {"success": True, "data": data}


@app.get("/api/health")
def api_health():
    return {"status": "OK", "timestamp": utc_now_iso(), "uptime": round(time.monotonic() - STARTED_AT, 3)}


# ------------------ Pages ------------------


def _member_page(request: Request, template_name: str):
    if not getattr(request.state, "user", None):
        return RedirectResponse(url="/login", status_code=303)
    return _render(request, template_name)


@app.get("/", response_class=HTMLResponse)
def index_page(request: Request):
    return _render(request, "index.html")


@app.get("/login", response_class=HTMLResponse)
def login_page(request: Request):
    return _render(request, "login.html")


@app.get("/register", response_class=HTMLResponse)
def register_page(request: Request):
    return _render(request, "register.html")


@app.get("/dashboard", response_class=HTMLResponse)
def dashboard_page(request: Request):
    return _member_page(request, "dashboard.html")


@app.get("/transfer", response_class=HTMLResponse)
def transfer_page(request: Request):
    return _member_page(request, "transfer.html")


@app.get("/transactions", response_class=HTMLResponse)
def transactions_page(request: Request):
    return _member_page(request, "transactions.html")


@app.get("/settings", response_class=HTMLResponse)
def settings_page(request: Request):
    return _member_page(request, "settings.html")


@app.get("/admin", response_class=HTMLResponse)
def admin_page(request: Request):
    u = getattr(request.state, "user", None)
    if not u or not u.is_admin:
        return RedirectResponse(url="/dashboard", status_code=303)
    return _render(request, "admin.html")
