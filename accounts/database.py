"""Database engine, sessions and schema bootstrap."""

from collections.abc import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from accounts.config import get_settings

DEFAULT_AUTHORITIES = ("ROLE_ADMIN", "ROLE_USER")

settings = get_settings()
engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    connect_args={"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {},
)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    """SQLite ignores FOREIGN KEY clauses unless asked per connection."""
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def init_db(bind: Engine | None = None) -> None:
    """Create missing tables and the default authorities (development without Alembic)."""
    from accounts.models.account import Authority

    bind = bind or engine
    Base.metadata.create_all(bind=bind)
    with Session(bind) as db:
        existing = {name for (name,) in db.query(Authority.name)}
        db.add_all(Authority(name=name) for name in DEFAULT_AUTHORITIES if name not in existing)
        db.commit()


def get_db() -> Generator[Session, None, None]:
    """Yield a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
