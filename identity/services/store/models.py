"""Account database models."""

from datetime import datetime

from pytz import UTC
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _now() -> datetime:
    return datetime.now(tz=UTC)


class DBCompany(Base):  # type: ignore
    """
    Company accounts.

    +--------------+--------------+------+-----+
    | Field        | Type         | Null | Key |
    +--------------+--------------+------+-----+
    | company_id   | varchar(36)  | NO   | PRI |
    | email        | varchar(255) | NO   | UNI |
    | name         | varchar(255) | NO   |     |
    | password_enc | varchar(255) | NO   |     |
    | bio          | text         | YES  |     |
    | picture      | varchar(255) | NO   |     |
    | created      | datetime     | NO   |     |
    | updated      | datetime     | NO   |     |
    +--------------+--------------+------+-----+
    """

    __tablename__ = 'companies'

    company_id = Column(String(36), primary_key=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    password_enc = Column(String(255), nullable=False)
    bio = Column(Text, nullable=True)
    picture = Column(String(255), nullable=False)
    created = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated = Column(DateTime(timezone=True), nullable=False, default=_now,
                     onupdate=_now)


class DBUser(Base):  # type: ignore
    """
    Individual user accounts.

    ``company_id`` is a weak reference; removing a company does not remove
    its users.
    """

    __tablename__ = 'users'

    user_id = Column(String(36), primary_key=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    username = Column(String(16), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    password_enc = Column(String(255), nullable=False)
    age = Column(Integer, nullable=True)
    bio = Column(Text, nullable=True)
    picture = Column(String(255), nullable=False)
    company_id = Column(ForeignKey('companies.company_id'), nullable=True,
                        index=True)
    created = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated = Column(DateTime(timezone=True), nullable=False, default=_now,
                     onupdate=_now)
