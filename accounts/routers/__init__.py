"""API routers."""

from accounts.routers.account import router as account_router

__all__ = ["account_router"]
