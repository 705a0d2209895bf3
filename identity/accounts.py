"""
Registration, authentication, and profile management for accounts.

Every user belongs to a company. Users who register on their own are
attached to the sentinel ``NONE`` company, which is created the first time
it is needed. Two first-time registrations racing each other must still end
up with one sentinel company: concurrent bootstraps in this process wait on
a single-flight lock, and the unique constraint on company e-mail catches
anyone else (the loser re-reads the winner's record).
"""

import logging
import threading
from contextlib import contextmanager
from typing import Callable, Dict, Generator, List, Optional, Tuple, Union

from flask import Flask, current_app

from . import domain, passwords, tokens
from .exceptions import AlreadyExists, EmailTaken, InternalError, \
    InvalidCredentials, InvalidUpdate, NoSuchAccount, UsernameTaken
from .services.store import AccountStore

logger = logging.getLogger(__name__)

SUCCESS = 'success'
"""Returned by :meth:`.IdentityService.register_user`."""

USER_UPDATE_FIELDS = ('name', 'email', 'age', 'username', 'bio')
COMPANY_UPDATE_FIELDS = ('name', 'email', 'bio')


class IdentityService(object):
    """Orchestrates the account store, password hashing and tokens."""

    def __init__(self, store: AccountStore, secret: str,
                 sentinel_password: str, expires: Optional[int] = None,
                 iterations: int = passwords.ITERATIONS) -> None:
        """
        Configure the service.

        Parameters
        ----------
        store : :class:`.AccountStore`
        secret : str
            Secret used to sign bearer tokens.
        sentinel_password : str
            Password for the sentinel ``NONE`` company, if we create it.
        expires : int
            Lifetime of bearer tokens in seconds.
        iterations : int
            Work factor for password hashing.

        """
        self.store = store
        self._secret = secret
        self._sentinel_password = sentinel_password
        self._expires = expires
        self._iterations = iterations
        self._flights: Dict[str, threading.Lock] = {}
        self._flights_guard = threading.Lock()
        # Checked when there is no account, so that a missing account costs
        # as much as a wrong password.
        self._decoy = passwords.hash_password('', iterations)

    @contextmanager
    def _single_flight(self, key: str) -> Generator[None, None, None]:
        with self._flights_guard:
            lock = self._flights.setdefault(key, threading.Lock())
        with lock:
            yield

    def _hash(self, password: str) -> str:
        return passwords.hash_password(password, self._iterations)

    def _check(self, password: str, encrypted: str) -> bool:
        return passwords.check_password(password, encrypted,
                                        self._iterations)

    def register_user(self, name: str, email: str, password: str,
                      username: str, age: Optional[int] = None) -> str:
        """
        Create a new user account.

        Returns
        -------
        str
            The success marker, ``'success'``. The new user is not logged in.

        Raises
        ------
        :class:`.UsernameTaken`
        :class:`.EmailTaken`

        """
        if self.store.find_user_by_username(username) is not None:
            raise UsernameTaken('This username is already taken!')
        if self.store.find_user_by_email(email) is not None:
            raise EmailTaken('This mail is taken, please sign in!')

        company = self.get_or_create_sentinel_company()
        try:
            user = self.store.create_user(
                email=email,
                name=name,
                password=self._hash(password),
                username=username,
                age=age,
                company_id=company.account_id,
                picture=domain.DEFAULT_PICTURE
            )
        except AlreadyExists as e:
            # Someone else registered between our checks and the insert.
            raise self._user_conflict(email, username) from e
        logger.debug('Registered user %s', user.account_id)
        return SUCCESS

    def register_company(self, name: str, email: str,
                         password: str) -> domain.Company:
        """
        Create a new company account.

        Raises
        ------
        :class:`.EmailTaken`

        """
        if self.store.find_company_by_email(email) is not None:
            raise EmailTaken('This company is already registered. Please'
                             ' contact your account manager.')
        try:
            company = self.store.create_company(
                email=email,
                name=name,
                password=self._hash(password),
                picture=domain.DEFAULT_PICTURE
            )
        except AlreadyExists as e:
            raise EmailTaken('This company is already registered.') from e
        logger.debug('Registered company %s', company.account_id)
        return company

    def get_or_create_sentinel_company(self) -> domain.Company:
        """Get the ``NONE`` company, creating it if it does not exist."""
        email = domain.SENTINEL_COMPANY_EMAIL
        company = self.store.find_company_by_email(email)
        if company is not None:
            return company
        with self._single_flight(email):
            company = self.store.find_company_by_email(email)
            if company is not None:
                return company
            try:
                company = self.register_company(
                    name=domain.SENTINEL_COMPANY_NAME,
                    email=email,
                    password=self._sentinel_password
                )
            except EmailTaken:
                logger.debug('Sentinel company was created elsewhere')
                company = self.store.find_company_by_email(email)
                if company is None:
                    raise InternalError('Sentinel company vanished')
        return company

    def sign_in(self, email: str, password: str, is_company: bool) \
            -> Tuple[str, domain.Account]:
        """
        Verify credentials and issue a bearer token.

        Returns
        -------
        str
            Bearer token bound to the account's e-mail address.
        :class:`.User` or :class:`.Company`
            The authenticated account. Users are loaded with their company.

        Raises
        ------
        :class:`.InvalidCredentials`
            The account does not exist or the password is wrong. Callers
            cannot tell these apart.

        """
        account: Optional[domain.Account]
        if is_company:
            account = self.store.find_company_by_email(email)
        else:
            account = self.store.find_user_by_email(email, with_company=True)

        if account is None:
            self._check(password, self._decoy)
            logger.debug('Sign-in failed: no such account')
            raise InvalidCredentials('The password or username is incorrect!')
        if not self._check(password, account.password):
            logger.debug('Sign-in failed: bad password for %s',
                         account.account_id)
            raise InvalidCredentials('The password or username is incorrect!')
        return self.issue_token(account), account

    def issue_token(self, account: domain.Account) -> str:
        """Sign a bearer token for ``account``."""
        claims = {'sub': account.email, 'id': account.account_id,
                  'kind': account.KIND.value}
        return tokens.encode(claims, self._secret, self._expires)

    def fetch_profile(self, requester: domain.Account) -> domain.Account:
        """Reload the requesting account; users come with their company."""
        account: Optional[domain.Account]
        if requester.KIND is domain.AccountKind.USER:
            account = self.store.find_user_by_email(requester.email,
                                                    with_company=True)
        elif requester.KIND is domain.AccountKind.COMPANY:
            account = self.store.find_company_by_email(requester.email)
        else:
            raise InternalError('Unknown account kind')
        if account is None:
            raise NoSuchAccount('Account does not exist')
        return account

    def list_companies(self) -> List[domain.Company]:
        """Get all of the companies."""
        return self.store.list_companies()

    def list_employees(self, company: domain.Company) -> List[domain.User]:
        """Get the users affiliated with ``company``."""
        return self.store.list_users_by_company(company.account_id)

    def update_profile(self, update: domain.ProfileUpdate,
                       target: domain.Account) -> domain.Account:
        """
        Apply the non-empty fields of ``update`` to ``target`` and save.

        The record is reloaded by its identifier, since the e-mail address
        may be among the fields being changed.

        Raises
        ------
        :class:`.InternalError`
            ``target`` is not an account.
        :class:`.NoSuchAccount`
        :class:`.UsernameTaken`
        :class:`.EmailTaken`
        :class:`.InvalidUpdate`

        """
        handlers: Dict[domain.AccountKind, Callable] = {
            domain.AccountKind.USER: self._update_user,
            domain.AccountKind.COMPANY: self._update_company,
        }
        handler = handlers.get(getattr(target, 'KIND', None))
        if handler is None:
            raise InternalError("Something went wrong we're working on it!")
        account: domain.Account = handler(update, target)
        return account

    def _update_user(self, update: domain.ProfileUpdate,
                     target: domain.User) -> domain.User:
        current = self.store.find_user_by_id(target.account_id)
        if current is None:
            raise NoSuchAccount('User does not exist')
        changes = update.supplied(USER_UPDATE_FIELDS)
        if 'age' in changes:
            changes['age'] = _parse_age(changes['age'])
        if changes.get('username', current.username) != current.username:
            other = self.store.find_user_by_username(changes['username'])
            if other is not None:
                raise UsernameTaken('This username is already taken!')
        if changes.get('email', current.email) != current.email:
            if self.store.find_user_by_email(changes['email']) is not None:
                raise EmailTaken('This mail is taken!')
        try:
            user = self.store.save_user(current._replace(**changes))
        except AlreadyExists as e:
            username = changes.get('username', current.username)
            raise self._user_conflict(
                changes.get('email', ''),
                username if username != current.username else ''
            ) from e
        logger.debug('Updated user %s: %s', user.account_id,
                     ', '.join(sorted(changes)))
        return user

    def _update_company(self, update: domain.ProfileUpdate,
                        target: domain.Company) -> domain.Company:
        current = self.store.find_company_by_id(target.account_id)
        if current is None:
            raise NoSuchAccount('Company does not exist')
        changes = update.supplied(COMPANY_UPDATE_FIELDS)
        if changes.get('email', current.email) != current.email:
            if self.store.find_company_by_email(changes['email']) is not None:
                raise EmailTaken('This company is already registered.')
        try:
            company = self.store.save_company(current._replace(**changes))
        except AlreadyExists as e:
            raise EmailTaken('This company is already registered.') from e
        logger.debug('Updated company %s: %s', company.account_id,
                     ', '.join(sorted(changes)))
        return company

    def _user_conflict(self, email: str, username: str) \
            -> Union[UsernameTaken, EmailTaken]:
        if username and self.store.find_user_by_username(username):
            return UsernameTaken('This username is already taken!')
        return EmailTaken('This mail is taken, please sign in!')


def _parse_age(value: Union[str, int]) -> int:
    try:
        age = int(str(value).strip())
    except ValueError as e:
        raise InvalidUpdate(f'Age must be a whole number: {value}') from e
    if age < 0:
        raise InvalidUpdate('Age must not be negative')
    return age


def init_app(app: Flask) -> None:
    """Attach an :class:`.IdentityService` to the application."""
    config = app.config
    app.extensions['identity'] = IdentityService(
        app.extensions['account_store'],
        secret=config['JWT_SECRET'],
        sentinel_password=config['SENTINEL_COMPANY_PASSWORD'],
        expires=int(config.get('JWT_EXPIRES', 0)) or None,
        iterations=int(config.get('PASSWORD_HASH_ITERATIONS',
                                  passwords.ITERATIONS))
    )


def current_service() -> IdentityService:
    """Get the :class:`.IdentityService` for the current application."""
    service: IdentityService = current_app.extensions['identity']
    return service
