"""
Request controllers for the identity API.

Controllers validate request parameters, call the identity service, and
return a ``(data, status code, headers)`` tuple. Service exceptions are
translated into :mod:`werkzeug.exceptions` here, so that routes stay thin.
"""
