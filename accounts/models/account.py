"""Account and authority models."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Table
from sqlalchemy.orm import relationship

from accounts.database import Base
from accounts.services.tokens import utcnow

account_authority = Table(
    "account_authority",
    Base.metadata,
    Column("account_id", Integer, ForeignKey("account.id", ondelete="CASCADE"), primary_key=True),
    Column("authority_name", String(50), ForeignKey("authority.name"), primary_key=True),
)


class Authority(Base):
    """Role identifier granted to accounts."""

    __tablename__ = "authority"

    name = Column(String(50), primary_key=True)


class Account(Base):
    """Registered user account.

    ``login`` and ``email`` are stored lower-cased; their unique indexes
    therefore enforce case-insensitive uniqueness.
    """

    __tablename__ = "account"

    id = Column(Integer, primary_key=True, autoincrement=True)
    login = Column(String(50), unique=True, nullable=False, index=True)
    password_hash = Column(String(256), nullable=False)
    first_name = Column(String(50), nullable=True)
    last_name = Column(String(50), nullable=True)
    email = Column(String(254), unique=True, nullable=False, index=True)
    image_url = Column(String(256), nullable=True)
    activated = Column(Boolean, nullable=False, default=False)
    lang_key = Column(String(10), nullable=True)
    activation_key = Column(String(256), nullable=True, index=True)
    reset_key = Column(String(256), nullable=True, index=True)
    reset_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    last_modified_at = Column(DateTime, nullable=True)

    authorities = relationship("Authority", secondary=account_authority, lazy="selectin")

    @property
    def authority_names(self) -> list[str]:
        return sorted(a.name for a in self.authorities)
