"""
Account identity service.

Individuals register user accounts and organisations register company
accounts. Both can sign in with an e-mail address and password to receive a
bearer token, view their profile, and update it. Every user is affiliated
with a company; users who register on their own are attached to the
placeholder ``NONE`` company until they join a real one.

The service exposes a small JSON API (see :mod:`identity.routes.api`); the
business rules live in :mod:`identity.accounts`, and persistence in
:mod:`identity.services.store`.
"""
