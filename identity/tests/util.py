"""Testing helpers."""

import shutil
import tempfile
from contextlib import contextmanager
from typing import Generator, Tuple

from ..accounts import IdentityService
from ..services.store import AccountStore

ITERATIONS = 1000
"""Keep password hashing cheap in tests."""

SECRET = 'foosecret'
SENTINEL_PASSWORD = 'N0ne-company!'


@contextmanager
def temporary_store() -> Generator[AccountStore, None, None]:
    """Provide a file-backed sqlite account store in a temporary directory."""
    db_path = tempfile.mkdtemp()
    store = AccountStore(f'sqlite:///{db_path}/test.db')
    store.create_all()
    try:
        yield store
    finally:
        store.drop_all()
        store.engine.dispose()
        shutil.rmtree(db_path)


@contextmanager
def temporary_service(expires: int = 3600) \
        -> Generator[Tuple[IdentityService, AccountStore], None, None]:
    """Provide an :class:`.IdentityService` over a temporary store."""
    with temporary_store() as store:
        yield IdentityService(store, SECRET, SENTINEL_PASSWORD,
                              expires=expires, iterations=ITERATIONS), store
