"""Account lifecycle: registration, activation, profile and password management."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from fastapi import BackgroundTasks
from sqlalchemy.orm import Session

from accounts.exceptions import AccountConsistencyError, InvalidCredential, NotFound
from accounts.models.account import Account, Authority
from accounts.services.hashing import PasswordHasher
from accounts.services.mail import MailService, Recipient, get_mail_service
from accounts.services.password_policy import PasswordPolicy
from accounts.services.tokens import TokenIssuer, utcnow
from accounts.services.uniqueness import UniquenessGuard, normalize

logger = logging.getLogger("accounts")

DEFAULT_AUTHORITY = "ROLE_USER"
DEFAULT_LANG_KEY = "en"


@dataclass
class AccountProfile:
    """User-editable account fields."""

    login: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    lang_key: str | None = None
    image_url: str | None = None


@dataclass(frozen=True)
class AccountView:
    """Account as seen outside the service: no password hash and no keys."""

    id: int
    login: str
    email: str
    activated: bool
    first_name: str | None = None
    last_name: str | None = None
    lang_key: str | None = None
    image_url: str | None = None
    authorities: list[str] = field(default_factory=list)
    created_at: datetime | None = None
    last_modified_at: datetime | None = None

    @classmethod
    def from_account(cls, account: Account) -> "AccountView":
        return cls(
            id=account.id,
            login=account.login,
            email=account.email,
            activated=account.activated,
            first_name=account.first_name,
            last_name=account.last_name,
            lang_key=account.lang_key,
            image_url=account.image_url,
            authorities=account.authority_names,
            created_at=account.created_at,
            last_modified_at=account.last_modified_at,
        )


class AccountService:
    """Drives an account from registration through activation and password recovery.

    Every mutation commits before any mail is dispatched, and mail failures
    never undo or fail the mutation.
    """

    def __init__(
        self,
        mail: MailService | None = None,
        policy: PasswordPolicy | None = None,
        tokens: TokenIssuer | None = None,
        hasher: PasswordHasher | None = None,
        guard: UniquenessGuard | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.mail = mail or get_mail_service()
        self.policy = policy or PasswordPolicy()
        self.tokens = tokens or TokenIssuer()
        self.hasher = hasher or PasswordHasher()
        self.guard = guard or UniquenessGuard()
        self.clock = clock

    # --- lookups ---

    def find_by_login(self, db: Session, login: str) -> Account | None:
        return db.query(Account).filter(Account.login == normalize(login)).first()

    def _current(self, db: Session, login: str) -> Account:
        """Record of the authenticated caller."""
        account = self.find_by_login(db, login)
        if account is None:
            logger.error("No account for authenticated login %s", login)
            raise AccountConsistencyError()
        return account

    def get_account(self, db: Session, login: str) -> AccountView:
        """Account of the authenticated caller."""
        return AccountView.from_account(self._current(db, login))

    def check_credentials(self, db: Session, login: str, password: str) -> bool:
        """Return True if ``password`` verifies against the stored hash for ``login``."""
        account = self.find_by_login(db, login)
        if account is None:
            return False
        return self.hasher.verify(password, account.password_hash)

    # --- registration ---

    def register(
        self,
        db: Session,
        profile: AccountProfile,
        password: str,
        tasks: BackgroundTasks | None = None,
    ) -> AccountView:
        """Create a pending account and send its activation key."""
        if not self.policy.is_acceptable(password):
            raise InvalidCredential()

        login = normalize(profile.login)
        email = normalize(profile.email)
        self.guard.check(db, login, email)

        account = Account(
            login=login,
            email=email,
            password_hash=self.hasher.hash(password),
            first_name=profile.first_name,
            last_name=profile.last_name,
            image_url=profile.image_url,
            lang_key=profile.lang_key or DEFAULT_LANG_KEY,
            activated=False,
            activation_key=self.tokens.issue(),
            created_at=self.clock(),
        )
        account.authorities = [self._authority(db, DEFAULT_AUTHORITY)]
        db.add(account)
        self.guard.commit(db, login, email)
        db.refresh(account)
        logger.info("Registered account %s (pending activation)", account.login)

        self._dispatch(tasks, self.mail.send_activation_email, Recipient.from_account(account), account.activation_key)
        return AccountView.from_account(account)

    def _authority(self, db: Session, name: str) -> Authority:
        authority = db.get(Authority, name)
        if authority is None:
            authority = Authority(name=name)
            db.add(authority)
        return authority

    def activate(self, db: Session, key: str) -> AccountView:
        """Redeem an activation key. The key is cleared, so a replay finds nothing."""
        not_found = NotFound("No user was found for this activation key")
        if not key:
            raise not_found

        account = (
            db.query(Account).filter(Account.activation_key == key, Account.activated.is_(False)).first()
        )
        if account is None or not self.tokens.matches(account.activation_key, key):
            raise not_found

        claimed = (
            db.query(Account)
            .filter(Account.id == account.id, Account.activation_key == key, Account.activated.is_(False))
            .update(
                {Account.activated: True, Account.activation_key: None, Account.last_modified_at: self.clock()},
                synchronize_session=False,
            )
        )
        if claimed != 1:
            db.rollback()
            raise not_found
        db.commit()
        db.refresh(account)
        logger.info("Activated account %s", account.login)
        return AccountView.from_account(account)

    # --- profile ---

    def update_profile(self, db: Session, current_login: str, profile: AccountProfile) -> AccountView:
        """Overwrite the caller's profile fields. The login never changes."""
        email = normalize(profile.email)
        account = self.find_by_login(db, current_login)
        # email collision is reported ahead of a missing caller record
        self.guard.check_email(db, email, account.id if account is not None else None)
        if account is None:
            logger.error("No account for authenticated login %s", current_login)
            raise AccountConsistencyError()

        account.first_name = profile.first_name
        account.last_name = profile.last_name
        account.email = email
        account.lang_key = profile.lang_key
        account.image_url = profile.image_url
        account.last_modified_at = self.clock()
        self.guard.commit(db, None, email, account_id=account.id)
        db.refresh(account)
        logger.info("Updated profile for %s", account.login)
        return AccountView.from_account(account)

    # --- passwords ---

    def change_password(self, db: Session, current_login: str, current_password: str, new_password: str) -> None:
        """Replace the credential after verifying the current one."""
        if not self.policy.is_acceptable(new_password):
            raise InvalidCredential()

        account = self._current(db, current_login)
        old_hash = account.password_hash
        if not self.hasher.verify(current_password, old_hash):
            raise InvalidCredential()

        swapped = (
            db.query(Account)
            .filter(Account.id == account.id, Account.password_hash == old_hash)
            .update(
                {Account.password_hash: self.hasher.hash(new_password), Account.last_modified_at: self.clock()},
                synchronize_session=False,
            )
        )
        if swapped != 1:
            # changed concurrently; the current password no longer matches
            db.rollback()
            raise InvalidCredential()
        db.commit()
        logger.info("Changed password for %s", account.login)

    def request_password_reset(self, db: Session, email: str, tasks: BackgroundTasks | None = None) -> None:
        """Issue a reset key for an activated account with this email.

        Unknown or unactivated emails are not reported to the caller.
        """
        account = (
            db.query(Account).filter(Account.email == normalize(email), Account.activated.is_(True)).first()
        )
        if account is None:
            logger.warning("Password reset requested for non existing mail")
            return

        account.reset_key = self.tokens.issue()
        account.reset_date = self.clock()
        db.commit()
        db.refresh(account)
        logger.info("Issued password reset key for %s", account.login)

        self._dispatch(tasks, self.mail.send_password_reset_email, Recipient.from_account(account), account.reset_key)

    def complete_password_reset(self, db: Session, new_password: str, key: str) -> AccountView:
        """Set a new password using an unexpired reset key."""
        if not self.policy.is_acceptable(new_password):
            raise InvalidCredential()

        not_found = NotFound("No user was found for this reset key")
        if not key:
            raise not_found

        now = self.clock()
        account = db.query(Account).filter(Account.reset_key == key).first()
        if account is None or not self.tokens.matches(account.reset_key, key):
            raise not_found

        query = db.query(Account).filter(Account.id == account.id, Account.reset_key == key)
        if self.tokens.is_expired(account.reset_date, now):
            query.update({Account.reset_key: None, Account.reset_date: None}, synchronize_session=False)
            db.commit()
            logger.info("Discarded expired reset key for %s", account.login)
            raise not_found

        claimed = query.update(
            {
                Account.password_hash: self.hasher.hash(new_password),
                Account.reset_key: None,
                Account.reset_date: None,
                Account.last_modified_at: now,
            },
            synchronize_session=False,
        )
        if claimed != 1:
            db.rollback()
            raise not_found
        db.commit()
        db.refresh(account)
        logger.info("Completed password reset for %s", account.login)
        return AccountView.from_account(account)

    # --- notification ---

    @staticmethod
    def _dispatch(tasks: BackgroundTasks | None, send: Callable[..., Any], *args: Any) -> None:
        """Queue mail after the response, or send inline when there is no request."""
        if tasks is not None:
            tasks.add_task(_send_quietly, send, *args)
        else:
            _send_quietly(send, *args)


def _send_quietly(send: Callable[..., Any], *args: Any) -> None:
    """Run a notifier call; its failure is logged and never reaches the committed mutation."""
    try:
        send(*args)
    except Exception:
        logger.exception("Notification %s failed", getattr(send, "__name__", send))


_account_service: AccountService | None = None


def get_account_service() -> AccountService:
    """Get singleton account service instance."""
    global _account_service
    if _account_service is None:
        _account_service = AccountService()
    return _account_service
