import shutil
import tempfile

import pytest

from identity.factory import create_web_app


@pytest.fixture()
def app():
    db_path = tempfile.mkdtemp()
    app = create_web_app({
        'DATABASE_URI': f'sqlite:///{db_path}/test.db',
        'JWT_SECRET': 'foosecret',
        'JWT_EXPIRES': 3600,
        'PASSWORD_HASH_ITERATIONS': 1000,
        'CREATE_DB': True,
        'LOGLEVEL': 'DEBUG',
        'TESTING': True,
    })
    yield app
    app.extensions['account_store'].engine.dispose()
    shutil.rmtree(db_path)


@pytest.fixture()
def client(app):
    return app.test_client()
