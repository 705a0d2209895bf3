"""Functions for working with bearer tokens on account requests."""

from typing import Optional
from datetime import datetime, timedelta

import jwt
from pytz import UTC

from . import exceptions

ALGORITHM = 'HS256'


def encode(claims: dict, secret: str, expires: Optional[int] = None) -> str:
    """
    Sign ``claims`` as a JWT.

    Parameters
    ----------
    claims : dict
        Should include ``sub``, the e-mail address of the account.
    secret : str
        Process-wide signing secret.
    expires : int
        Lifetime of the token in seconds. If ``None`` or ``0``, the token
        carries no expiry.

    Returns
    -------
    str

    """
    now = datetime.now(tz=UTC)
    payload = dict(claims, iat=now)
    if expires:
        payload['exp'] = now + timedelta(seconds=expires)
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def decode(token: str, secret: str) -> dict:
    """Decode a bearer token and check its signature and expiry."""
    try:
        data: dict = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except jwt.exceptions.ExpiredSignatureError as e:
        raise exceptions.InvalidToken('Token has expired') from e
    except jwt.exceptions.InvalidTokenError as e:
        raise exceptions.InvalidToken('Not a valid token') from e
    if 'sub' not in data:
        raise exceptions.InvalidToken('Token has no subject')
    return data
