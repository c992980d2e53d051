"""Accounts - user account lifecycle and credential recovery service."""

import logging
import time

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from accounts.config import get_settings
from accounts.exceptions import (
    AccountConsistencyError,
    AccountError,
    EmailConflict,
    InvalidCredential,
    LoginConflict,
    NotFound,
)
from accounts.routers import account_router

# Logging
logger = logging.getLogger("accounts")
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI(title="Accounts", version="0.1.0")

for warning in get_settings().validate():
    logger.warning(warning)


# --- Security headers middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Cache-Control"] = "no-store"
        return response


# --- Audit logging middleware ---
class AuditLogMiddleware(BaseHTTPMiddleware):
    AUDIT_PATHS = {"/api/register", "/api/activate", "/api/account"}

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.time()
        response = await call_next(request)
        duration_ms = (time.time() - start) * 1000

        # Log lifecycle operations, never their bodies
        path = request.url.path
        method = request.method
        if method in ("POST", "GET") and any(path.startswith(p) for p in self.AUDIT_PATHS):
            logger.info(
                "AUDIT %s %s -> %d (%.0fms) from %s",
                method,
                path,
                response.status_code,
                duration_ms,
                request.client.host if request.client else "unknown",
            )

        return response


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(AuditLogMiddleware)

app.include_router(account_router)


# --- Account error handler ---
ERROR_STATUS = {
    InvalidCredential: 400,
    LoginConflict: 400,
    EmailConflict: 400,
    NotFound: 400,
    AccountConsistencyError: 500,
}

ERROR_KEYS = {
    InvalidCredential: "invalidpassword",
    LoginConflict: "userexists",
    EmailConflict: "emailexists",
    NotFound: "notfound",
    AccountConsistencyError: "internal",
}


@app.exception_handler(AccountError)
async def account_error_handler(request: Request, exc: AccountError) -> JSONResponse:
    """Map lifecycle errors to JSON responses."""
    status_code = ERROR_STATUS.get(type(exc), 500)
    if status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "errorKey": ERROR_KEYS.get(type(exc), "internal")},
    )


# --- Health check ---
@app.get("/api/health")
def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok", "app": "accounts", "version": "0.1.0"}
