"""Bearer token verification."""

from typing import Any

from jose import JWTError, jwt

from accounts.config import get_settings


class JWTService:
    """Validates JWTs issued by the identity provider. The subject is the caller's login."""

    def __init__(self) -> None:
        settings = get_settings()
        self.secret_key = settings.JWT_SECRET_KEY
        self.algorithm = settings.JWT_ALGORITHM

    def decode_token(self, token: str) -> dict[str, Any] | None:
        """Decode and validate a JWT token. Returns None if invalid."""
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            return None

    def login_from_token(self, token: str) -> str | None:
        payload = self.decode_token(token)
        if not payload or not payload.get("sub"):
            return None
        return str(payload["sub"])


_jwt_service: JWTService | None = None


def get_jwt_service() -> JWTService:
    """Get singleton JWT service instance."""
    global _jwt_service
    if _jwt_service is None:
        _jwt_service = JWTService()
    return _jwt_service
