"""Password hashing with bcrypt."""

import base64
import hashlib

import bcrypt


class PasswordHasher:
    """bcrypt wrapper.

    bcrypt reads at most 72 bytes, so the password is first reduced to a
    base64 SHA-256 digest (44 bytes) and every character stays significant.
    """

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    @staticmethod
    def _prepare(raw: str) -> bytes:
        return base64.b64encode(hashlib.sha256(raw.encode("utf-8")).digest())

    def hash(self, raw: str) -> str:
        return bcrypt.hashpw(self._prepare(raw), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, raw: str, hashed: str | None) -> bool:
        if not raw or not hashed:
            return False
        try:
            return bcrypt.checkpw(self._prepare(raw), hashed.encode("utf-8"))
        except ValueError:
            # malformed stored hash
            return False
