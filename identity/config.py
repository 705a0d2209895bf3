"""Flask configuration."""
import secrets
import os

#################### General config for app ####################
PORT = int(os.environ.get('PORT', '5000'))
"""Port on which the development server listens."""

CORS_ORIGIN = os.environ.get('CORS_ORIGIN', 'https://weeee.vercel.app')
"""The one frontend origin allowed to make credentialed requests."""

LOGLEVEL = os.environ.get('LOGLEVEL', 'INFO')

#################### Database ####################
DATABASE_URI = os.environ.get('DATABASE_URI', 'sqlite:///identity.db')

CREATE_DB = bool(int(os.environ.get('CREATE_DB', '0')))
"""Create the account tables when the application starts."""

#################### Tokens and passwords ####################
JWT_SECRET = os.environ.get('JWT_SECRET', secrets.token_urlsafe(16))
"""Secret used to sign bearer tokens. Set this in any real deployment."""

JWT_EXPIRES = int(os.environ.get('JWT_EXPIRES', '3600'))
"""Bearer token lifetime in seconds; 0 issues tokens that do not expire."""

PASSWORD_HASH_ITERATIONS = int(os.environ.get('PASSWORD_HASH_ITERATIONS',
                                              '260000'))

SENTINEL_COMPANY_PASSWORD = os.environ.get('SENTINEL_COMPANY_PASSWORD',
                                           '.E*4UJzhQ-d(Ff@')
"""Password for the ``NONE`` company that company-less users belong to."""
