"""Errors raised by account lifecycle operations."""


class AccountError(Exception):
    """Base class for account lifecycle failures."""

    default_message = "Account operation failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidCredential(AccountError):
    """Password rejected by policy, or current password did not verify."""

    default_message = "Incorrect password"


class LoginConflict(AccountError):
    default_message = "Login name already used!"


class EmailConflict(AccountError):
    default_message = "Email is already in use!"


class NotFound(AccountError):
    """An activation key, reset key, or account could not be resolved."""

    default_message = "No user was found"


class AccountConsistencyError(AccountError):
    """The authenticated caller has no account record.

    Session handling should make this unreachable; seeing it means a bug.
    """

    default_message = "User could not be found"
