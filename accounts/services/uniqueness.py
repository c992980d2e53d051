"""Login and email uniqueness enforcement."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from accounts.exceptions import EmailConflict, LoginConflict
from accounts.models.account import Account

logger = logging.getLogger("accounts")


def normalize(value: str) -> str:
    """Canonical form used for storage and comparison."""
    return value.strip().lower()


class UniquenessGuard:
    """Rejects a login or email already held by a different account.

    The up-front queries give a precise error in the common case. The
    unique indexes on ``account.login`` and ``account.email`` settle races:
    :meth:`commit` turns the resulting ``IntegrityError`` back into the
    matching conflict after rolling the transaction back.
    """

    def _holder(self, db: Session, column, value: str) -> Account | None:
        return db.query(Account).filter(column == normalize(value)).first()

    def check(self, db: Session, login: str, email: str, account_id: int | None = None) -> None:
        """Raise LoginConflict or EmailConflict; login is checked first."""
        holder = self._holder(db, Account.login, login)
        if holder is not None and holder.id != account_id:
            raise LoginConflict()
        self.check_email(db, email, account_id)

    def check_email(self, db: Session, email: str, account_id: int | None = None) -> None:
        holder = self._holder(db, Account.email, email)
        if holder is not None and holder.id != account_id:
            raise EmailConflict()

    def commit(self, db: Session, login: str | None, email: str, account_id: int | None = None) -> None:
        """Commit pending writes, mapping unique-index violations to conflicts."""
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.info("Uniqueness violation on commit for login=%s email=%s", login, email)
            if login is not None:
                self.check(db, login, email, account_id)
            else:
                self.check_email(db, email, account_id)
            raise
