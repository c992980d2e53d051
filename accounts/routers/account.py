"""Account lifecycle API endpoints."""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends
from fastapi.responses import PlainTextResponse, Response
from sqlalchemy.orm import Session

from accounts.database import get_db
from accounts.dependencies import get_current_login, get_optional_login, read_text_body
from accounts.schemas.account import (
    AccountResponse,
    KeyAndPasswordRequest,
    PasswordChangeRequest,
    ProfileUpdate,
    RegisterRequest,
)
from accounts.services.account import AccountProfile, AccountService, get_account_service

logger = logging.getLogger("accounts")

router = APIRouter(prefix="/api", tags=["Account"])


@router.get("/account", response_model=AccountResponse)
def get_account(
    login: str = Depends(get_current_login),
    db: Session = Depends(get_db),
    service: AccountService = Depends(get_account_service),
) -> AccountResponse:
    """Return the current user's account."""
    return AccountResponse.from_view(service.get_account(db, login))


@router.post("/account")
def save_account(
    body: ProfileUpdate,
    login: str = Depends(get_current_login),
    db: Session = Depends(get_db),
    service: AccountService = Depends(get_account_service),
) -> Response:
    """Update the current user's profile."""
    profile = AccountProfile(
        login=login,
        email=body.email,
        first_name=body.first_name,
        last_name=body.last_name,
        lang_key=body.lang_key,
        image_url=body.image_url,
    )
    service.update_profile(db, login, profile)
    return Response(status_code=200)


@router.post("/register", status_code=201, response_model=AccountResponse)
def register_account(
    body: RegisterRequest,
    tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    service: AccountService = Depends(get_account_service),
) -> AccountResponse:
    """Register a new account and send its activation email."""
    profile = AccountProfile(
        login=body.login,
        email=body.email,
        first_name=body.first_name,
        last_name=body.last_name,
        lang_key=body.lang_key,
        image_url=body.image_url,
    )
    account = service.register(db, profile, body.password, tasks)
    return AccountResponse.from_view(account)


@router.get("/activate")
def activate_account(
    key: str = "",
    db: Session = Depends(get_db),
    service: AccountService = Depends(get_account_service),
) -> Response:
    """Activate the account registered with this key."""
    service.activate(db, key)
    return Response(status_code=200)


@router.get("/authenticate", response_class=PlainTextResponse)
def is_authenticated(login: str | None = Depends(get_optional_login)) -> str:
    """Return the caller's login, or an empty string when unauthenticated."""
    logger.debug("REST request to check if the current user is authenticated")
    return login or ""


@router.post("/account/change-password")
def change_password(
    body: PasswordChangeRequest,
    login: str = Depends(get_current_login),
    db: Session = Depends(get_db),
    service: AccountService = Depends(get_account_service),
) -> Response:
    """Change the current user's password."""
    service.change_password(db, login, body.current_password, body.new_password)
    return Response(status_code=200)


@router.post("/account/reset-password/init")
def request_password_reset(
    tasks: BackgroundTasks,
    mail: str = Depends(read_text_body),
    db: Session = Depends(get_db),
    service: AccountService = Depends(get_account_service),
) -> Response:
    """Email a reset key. Answers identically whether or not the email is registered."""
    service.request_password_reset(db, mail, tasks)
    return Response(status_code=200)


@router.post("/account/reset-password/finish")
def finish_password_reset(
    body: KeyAndPasswordRequest,
    db: Session = Depends(get_db),
    service: AccountService = Depends(get_account_service),
) -> Response:
    """Set a new password using a reset key."""
    service.complete_password_reset(db, body.new_password, body.key)
    return Response(status_code=200)
