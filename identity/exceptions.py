"""Exceptions."""


class RegistrationFailed(RuntimeError):
    """Could not register a new account."""


class UsernameTaken(RegistrationFailed):
    """A user with the requested username already exists."""


class EmailTaken(RegistrationFailed):
    """An account with the requested e-mail address already exists."""


class InvalidCredentials(RuntimeError):
    """Failed to authenticate account with provided credentials."""


class InvalidToken(RuntimeError):
    """Token is malformed, expired, or was not signed by us."""


class InvalidUpdate(ValueError):
    """An update contains a value that cannot be applied."""


class NoSuchAccount(RuntimeError):
    """Account does not exist."""


class InternalError(RuntimeError):
    """The service reached a state that it should not have reached."""


class StoreUnavailable(RuntimeError):
    """The account database is temporarily unavailable."""


class AlreadyExists(RuntimeError):
    """A uniqueness constraint rejected the write."""
