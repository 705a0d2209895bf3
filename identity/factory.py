"""Application factory for the identity service."""

import logging
from typing import Optional

from flask import Flask

from . import accounts
from .app_logging import setup_logger
from .routes import api
from .services import store

logger = logging.getLogger(__name__)


def create_web_app(config: Optional[dict] = None) -> Flask:
    """
    Initialize and configure the identity application.

    Parameters
    ----------
    config : dict
        Overrides for the settings in :mod:`identity.config`; mostly useful
        for testing.

    """
    app = Flask('identity')
    app.config.from_pyfile('config.py')
    if config:
        app.config.update(config)
    setup_logger(app.config['LOGLEVEL'])

    store.init_app(app)
    accounts.init_app(app)
    app.register_blueprint(api.blueprint)

    if app.config['CREATE_DB']:
        logger.info('Creating account tables')
        with app.app_context():
            store.current_store().create_all()

    return app
