"""Activation and reset key issuance."""

import secrets
from datetime import datetime, timedelta, timezone

from accounts.config import get_settings


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TokenIssuer:
    """Issues single-use keys for activation and password reset.

    Keys come from the ``secrets`` CSPRNG and never encode account data.
    Only reset keys expire; activation keys stay valid until redeemed.
    """

    def __init__(self, nbytes: int | None = None, reset_validity: timedelta | None = None) -> None:
        settings = get_settings()
        self.nbytes = nbytes or settings.KEY_BYTES
        self.reset_validity = reset_validity or timedelta(hours=settings.RESET_KEY_VALIDITY_HOURS)

    def issue(self) -> str:
        """Return a fresh URL-safe key."""
        return secrets.token_urlsafe(self.nbytes)

    def expiry_for(self, issued_at: datetime) -> datetime:
        """Deadline for a reset key issued at ``issued_at``."""
        return issued_at + self.reset_validity

    def is_expired(self, issued_at: datetime | None, now: datetime) -> bool:
        if issued_at is None:
            return True
        return self.expiry_for(issued_at) < now

    @staticmethod
    def matches(expected: str | None, candidate: str | None) -> bool:
        """Constant-time key comparison."""
        if not expected or not candidate:
            return False
        return secrets.compare_digest(expected.encode("utf-8"), candidate.encode("utf-8"))
