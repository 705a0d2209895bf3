"""Defines account concepts for use in the identity service."""

from typing import Any, NamedTuple, Optional, Union, Iterable
from datetime import datetime
from enum import Enum


SENTINEL_COMPANY_NAME = 'NONE'
SENTINEL_COMPANY_EMAIL = 'NONE@NONE.com'
"""Users that register without a company are attached to this company."""

DEFAULT_PICTURE = 'cat'
"""Placeholder picture for new accounts."""

PRIVATE_FIELDS = ('password',)
"""Fields that must never leave the service."""


class AccountKind(Enum):
    """Discriminates the account variants."""

    USER = 'user'
    COMPANY = 'company'


class Company(NamedTuple):
    """Represents a company account."""

    KIND = AccountKind.COMPANY  # type: ignore

    account_id: str
    """Unique identifier for the company."""

    email: str
    """Primary e-mail address; unique among companies."""

    name: str
    """Display name."""

    password: str
    """Hashed password. Never plaintext."""

    created: Optional[datetime] = None
    updated: Optional[datetime] = None

    bio: Optional[str] = None
    """Free-text description of the company."""

    picture: str = DEFAULT_PICTURE

    @property
    def account_type(self) -> str:
        """Distinguishes companies from users in shared views."""
        return self.KIND.value


class User(NamedTuple):
    """Represents an individual user account."""

    KIND = AccountKind.USER  # type: ignore

    account_id: str
    """Unique identifier for the user."""

    email: str
    """Primary e-mail address; unique among users."""

    name: str
    """Display name."""

    password: str
    """Hashed password. Never plaintext."""

    username: str
    """Slug-like username; unique among users."""

    created: Optional[datetime] = None
    updated: Optional[datetime] = None

    age: Optional[int] = None
    bio: Optional[str] = None
    picture: str = DEFAULT_PICTURE

    company_id: Optional[str] = None
    """
    The company with which this user is affiliated.

    This is a weak reference: many users may point at the same company, and
    the company does not own them.
    """

    company: Optional[Company] = None
    """The resolved company, when loaded alongside the user."""

    @property
    def account_type(self) -> str:
        """Distinguishes users from companies in shared views."""
        return self.KIND.value


Account = Union[User, Company]


class ProfileUpdate(NamedTuple):
    """
    Fields that may be changed on an existing account.

    Only fields that are present and non-empty are applied. ``age`` arrives
    as supplied by the client and is parsed to an integer when applied.
    """

    name: Optional[str] = None
    email: Optional[str] = None
    age: Optional[Union[str, int]] = None
    username: Optional[str] = None
    bio: Optional[str] = None

    def supplied(self, fields: Iterable[str]) -> dict:
        """Get the non-empty values among ``fields``."""
        return {field: getattr(self, field) for field in fields
                if getattr(self, field) not in (None, '')}


def to_dict(obj: tuple, exclude: Iterable[str] = PRIVATE_FIELDS) -> dict:
    """
    Generate a dict representation of a NamedTuple instance.

    This just uses the built-in ``_asdict`` method on the instance, but also
    calls this on any child NamedTuple instances (recursively) so that the
    entire tree is cast to ``dict``. Fields named in ``exclude`` are dropped
    at every level.

    Parameters
    ----------
    obj : tuple
        A NamedTuple instance.
    exclude : iterable
        Names of fields to leave out.

    Returns
    -------
    dict

    """
    if not hasattr(obj, '_asdict'):  # NamedTuple-generated classes have this.
        return {}
    exclude = tuple(exclude)

    def _cast(value: Any) -> Any:
        if hasattr(value, '_asdict'):
            value = to_dict(value, exclude)
        elif isinstance(value, datetime):
            value = value.isoformat()
        elif isinstance(value, Enum):
            value = value.value
        elif isinstance(value, list):
            value = [_cast(o) for o in value]
        return value

    return {key: _cast(value) for key, value in obj._asdict().items()
            if key not in exclude}
