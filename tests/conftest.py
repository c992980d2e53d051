"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from accounts.config import get_settings
from accounts.database import Base, get_db, init_db
from accounts.models.account import Account, Authority  # noqa: F401
from accounts.services.account import AccountProfile, AccountService, get_account_service
from accounts.services.hashing import PasswordHasher
from accounts.services.password_policy import PasswordPolicy
from accounts.services.tokens import TokenIssuer, utcnow


class RecordingMailer:
    """Collects outgoing messages instead of sending them."""

    def __init__(self) -> None:
        self.activations: list[tuple[str, str]] = []
        self.resets: list[tuple[str, str]] = []

    def send_activation_email(self, recipient, key: str) -> bool:
        self.activations.append((recipient.email, key))
        return True

    def send_password_reset_email(self, recipient, key: str) -> bool:
        self.resets.append((recipient.email, key))
        return True


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or utcnow()

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


def bearer(login: str) -> dict[str, str]:
    """Authorization header for a token whose subject is ``login``."""
    settings = get_settings()
    token = jwt.encode({"sub": login}, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    return {"Authorization": f"Bearer {token}"}


def alice_profile(**overrides) -> AccountProfile:
    fields = {"login": "alice", "email": "a@x.com", "first_name": "Alice", "last_name": "Liddell"}
    fields.update(overrides)
    return AccountProfile(**fields)


@pytest.fixture(name="db_session")
def db_session_fixture():
    """Create an in-memory SQLite database for tests."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    testing_session_local = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="mailer")
def mailer_fixture() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture(name="clock")
def clock_fixture() -> FrozenClock:
    return FrozenClock()


@pytest.fixture(name="service")
def service_fixture(mailer: RecordingMailer, clock: FrozenClock) -> AccountService:
    """Account service with a recording mailer, cheap hashing and a frozen clock."""
    return AccountService(
        mail=mailer,
        policy=PasswordPolicy(min_length=4, max_length=100),
        tokens=TokenIssuer(nbytes=32, reset_validity=timedelta(hours=24)),
        hasher=PasswordHasher(rounds=4),
        clock=clock,
    )


@pytest.fixture(name="client")
def client_fixture(db_session: Session, service: AccountService):
    """Create a test client with overridden DB and service dependencies."""
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_account_service] = lambda: service
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(name="alice")
def alice_fixture(db_session: Session, service: AccountService, mailer: RecordingMailer) -> dict:
    """Register and activate alice with password 'secret1'."""
    account = service.register(db_session, alice_profile(), "secret1")
    _, key = mailer.activations[-1]
    service.activate(db_session, key)
    return {"id": account.id, "login": "alice", "email": "a@x.com", "password": "secret1"}
