"""
Integration with the accounts database.

Users and companies live in separate tables. E-mail addresses are unique
within each table (but not across them), and usernames are unique among
users. Lookups that find nothing return ``None``; only I/O failures and
uniqueness violations are raised.
"""

import logging
import uuid
from datetime import datetime
from contextlib import contextmanager
from typing import Any, Generator, List, Optional

from flask import Flask, current_app
from pytz import UTC
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session
from sqlalchemy.pool import StaticPool

from ... import domain
from ...exceptions import AlreadyExists, NoSuchAccount, StoreUnavailable
from .models import Base, DBCompany, DBUser

logger = logging.getLogger(__name__)

IN_MEMORY = ('sqlite://', 'sqlite:///:memory:')


def get_engine(database_uri: str) -> Engine:
    """Get a new :class:`.Engine` for the accounts database."""
    params: dict = {}
    if database_uri.startswith('sqlite'):
        params['connect_args'] = {'check_same_thread': False}
        if database_uri in IN_MEMORY:
            # Every session must see the same in-memory database.
            params['poolclass'] = StaticPool
    return create_engine(database_uri, **params)


class AccountStore(object):
    """
    Provides access to user and company records.

    The engine and session factory are thread safe; each call opens its own
    session, so instances may be shared freely between requests.
    """

    def __init__(self, database_uri: str) -> None:
        """Set up the engine for ``database_uri``."""
        logger.debug('New account store at %s', database_uri)
        self.engine = get_engine(database_uri)
        self._sessions = sessionmaker(bind=self.engine,
                                      expire_on_commit=False)

    @contextmanager
    def transaction(self) -> Generator[Session, None, None]:
        """Context manager for database transaction."""
        session = self._sessions()
        try:
            yield session
            if session.new or session.dirty or session.deleted:
                session.commit()
        except IntegrityError as e:
            session.rollback()
            raise AlreadyExists(str(e.orig)) from e
        except OperationalError as e:
            session.rollback()
            logger.error('Encountered an error talking to database: %s', e)
            raise StoreUnavailable('Database is temporarily unavailable') \
                from e
        except Exception as e:
            logger.error('Commit failed, rolling back: %s', str(e))
            session.rollback()
            raise
        finally:
            session.close()

    def create_all(self) -> None:
        """Create all tables in the database."""
        Base.metadata.create_all(self.engine)

    def drop_all(self) -> None:
        """Drop all tables in the database."""
        Base.metadata.drop_all(self.engine)

    # Users.

    def find_user_by_email(self, email: str, with_company: bool = False) \
            -> Optional[domain.User]:
        """Get a user by e-mail address, optionally with their company."""
        return self._find_user(DBUser.email == email, with_company)

    def find_user_by_username(self, username: str) -> Optional[domain.User]:
        """Get a user by username."""
        return self._find_user(DBUser.username == username)

    def find_user_by_id(self, user_id: str, with_company: bool = False) \
            -> Optional[domain.User]:
        """Get a user by identifier."""
        return self._find_user(DBUser.user_id == user_id, with_company)

    def list_users_by_company(self, company_id: str) -> List[domain.User]:
        """Get all of the users that reference the company ``company_id``."""
        with self.transaction() as session:
            db_company = session.get(DBCompany, company_id)
            company = _company_to_domain(db_company) if db_company else None
            db_users = session.query(DBUser) \
                .filter(DBUser.company_id == company_id) \
                .order_by(DBUser.created) \
                .all()
            return [_user_to_domain(db_user, company) for db_user in db_users]

    def create_user(self, email: str, name: str, password: str,
                    username: str, age: Optional[int] = None,
                    company_id: Optional[str] = None,
                    picture: str = domain.DEFAULT_PICTURE) -> domain.User:
        """
        Add a new user to the database.

        ``password`` must already be hashed. Raises :class:`.AlreadyExists`
        if the e-mail address or username is in use.
        """
        with self.transaction() as session:
            db_user = DBUser(
                user_id=str(uuid.uuid4()),
                email=email,
                name=name,
                password_enc=password,
                username=username,
                age=age,
                picture=picture,
                company_id=company_id
            )
            session.add(db_user)
            session.commit()
            logger.debug('Created user %s', db_user.user_id)
            return _user_to_domain(db_user)

    def save_user(self, user: domain.User) -> domain.User:
        """Persist changes to an existing user, all fields at once."""
        with self.transaction() as session:
            db_user = session.get(DBUser, user.account_id)
            if db_user is None:
                raise NoSuchAccount('User does not exist')
            _update_field_if_changed(db_user, 'email', user.email)
            _update_field_if_changed(db_user, 'name', user.name)
            _update_field_if_changed(db_user, 'password_enc', user.password)
            _update_field_if_changed(db_user, 'username', user.username)
            _update_field_if_changed(db_user, 'age', user.age)
            _update_field_if_changed(db_user, 'bio', user.bio)
            _update_field_if_changed(db_user, 'picture', user.picture)
            _update_field_if_changed(db_user, 'company_id', user.company_id)
            session.commit()
            return _user_to_domain(db_user)

    # Companies.

    def find_company_by_email(self, email: str) -> Optional[domain.Company]:
        """Get a company by e-mail address."""
        return self._find_company(DBCompany.email == email)

    def find_company_by_id(self, company_id: str) \
            -> Optional[domain.Company]:
        """Get a company by identifier."""
        return self._find_company(DBCompany.company_id == company_id)

    def list_companies(self) -> List[domain.Company]:
        """Get all of the companies."""
        with self.transaction() as session:
            db_companies = session.query(DBCompany) \
                .order_by(DBCompany.created) \
                .all()
            return [_company_to_domain(db_company)
                    for db_company in db_companies]

    def create_company(self, email: str, name: str, password: str,
                       picture: str = domain.DEFAULT_PICTURE) \
            -> domain.Company:
        """
        Add a new company to the database.

        ``password`` must already be hashed. Raises :class:`.AlreadyExists`
        if the e-mail address is in use.
        """
        with self.transaction() as session:
            db_company = DBCompany(
                company_id=str(uuid.uuid4()),
                email=email,
                name=name,
                password_enc=password,
                picture=picture
            )
            session.add(db_company)
            session.commit()
            logger.debug('Created company %s', db_company.company_id)
            return _company_to_domain(db_company)

    def save_company(self, company: domain.Company) -> domain.Company:
        """Persist changes to an existing company, all fields at once."""
        with self.transaction() as session:
            db_company = session.get(DBCompany, company.account_id)
            if db_company is None:
                raise NoSuchAccount('Company does not exist')
            _update_field_if_changed(db_company, 'email', company.email)
            _update_field_if_changed(db_company, 'name', company.name)
            _update_field_if_changed(db_company, 'password_enc',
                                     company.password)
            _update_field_if_changed(db_company, 'bio', company.bio)
            _update_field_if_changed(db_company, 'picture', company.picture)
            session.commit()
            return _company_to_domain(db_company)

    def _find_user(self, criterion: Any, with_company: bool = False) \
            -> Optional[domain.User]:
        with self.transaction() as session:
            db_user = session.query(DBUser).filter(criterion).first()
            if db_user is None:
                return None
            company = None
            if with_company and db_user.company_id is not None:
                db_company = session.get(DBCompany, db_user.company_id)
                if db_company is not None:
                    company = _company_to_domain(db_company)
            return _user_to_domain(db_user, company)

    def _find_company(self, criterion: Any) -> Optional[domain.Company]:
        with self.transaction() as session:
            db_company = session.query(DBCompany).filter(criterion).first()
            if db_company is None:
                return None
            return _company_to_domain(db_company)


def _update_field_if_changed(obj: Any, field: str, update_with: Any) -> None:
    if getattr(obj, field) != update_with:
        setattr(obj, field, update_with)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes, even though we store UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _user_to_domain(db_user: DBUser,
                    company: Optional[domain.Company] = None) -> domain.User:
    return domain.User(
        account_id=db_user.user_id,
        email=db_user.email,
        name=db_user.name,
        password=db_user.password_enc,
        username=db_user.username,
        created=_as_utc(db_user.created),
        updated=_as_utc(db_user.updated),
        age=db_user.age,
        bio=db_user.bio,
        picture=db_user.picture,
        company_id=db_user.company_id,
        company=company
    )


def _company_to_domain(db_company: DBCompany) -> domain.Company:
    return domain.Company(
        account_id=db_company.company_id,
        email=db_company.email,
        name=db_company.name,
        password=db_company.password_enc,
        created=_as_utc(db_company.created),
        updated=_as_utc(db_company.updated),
        bio=db_company.bio,
        picture=db_company.picture
    )


def init_app(app: Flask) -> None:
    """Set configuration defaults and attach a store to the application."""
    app.config.setdefault('DATABASE_URI', 'sqlite://')
    app.extensions['account_store'] = AccountStore(app.config['DATABASE_URI'])


def current_store() -> AccountStore:
    """Get the :class:`.AccountStore` for the current application."""
    store: AccountStore = current_app.extensions['account_store']
    return store
