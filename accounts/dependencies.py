"""Caller identity dependencies for FastAPI routes."""

from fastapi import HTTPException, Request

from accounts.services.jwt import get_jwt_service


def get_optional_login(request: Request) -> str | None:
    """Login from a valid Bearer token, or None if absent or invalid."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return get_jwt_service().login_from_token(auth_header[7:])


def get_current_login(request: Request) -> str:
    """Login of the authenticated caller. Raises 401 if there is none."""
    login = get_optional_login(request)
    if not login:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return login


async def read_text_body(request: Request) -> str:
    """Raw ``text/plain`` request body. Undecodable bytes are replaced, not rejected."""
    return (await request.body()).decode("utf-8", errors="replace").strip()
