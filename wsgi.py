"""Web Server Gateway Interface entry-point."""

import os

from identity.factory import create_web_app

__flask_app__ = None


def application(environ, start_response):    # type: ignore
    """WSGI application."""
    for key, value in environ.items():
        # Keep ``SERVER_NAME`` as configured, not as passed by the server.
        if key == 'SERVER_NAME':
            continue
        if isinstance(value, str):
            os.environ[key] = value

    global __flask_app__
    if __flask_app__ is None:
        __flask_app__ = create_web_app()
    return __flask_app__(environ, start_response)


if __name__ == '__main__':
    app = create_web_app()
    app.run(port=app.config['PORT'])
