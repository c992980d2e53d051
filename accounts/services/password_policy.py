"""Password length policy."""

from accounts.config import get_settings


class PasswordPolicy:
    """Accepts passwords whose length lies within ``[min_length, max_length]``."""

    def __init__(self, min_length: int | None = None, max_length: int | None = None) -> None:
        settings = get_settings()
        self.min_length = settings.PASSWORD_MIN_LENGTH if min_length is None else min_length
        self.max_length = settings.PASSWORD_MAX_LENGTH if max_length is None else max_length
        if self.min_length < 1 or self.min_length > self.max_length:
            raise ValueError(f"Invalid password length bounds [{self.min_length}, {self.max_length}]")

    def is_acceptable(self, candidate: str | None) -> bool:
        """Return True if the candidate may be used as a password."""
        if not candidate:
            return False
        return self.min_length <= len(candidate) <= self.max_length
