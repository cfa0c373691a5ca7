"""
Exception types raised by the core services.

Web routes translate identity errors into JSON error responses; RetrievalError
is left to Flask's default error handling.
"""


class HostInfoError(Exception):
    """Base class for application errors."""


class RetrievalError(HostInfoError):
    """Reading operating system, process or environment facts failed."""

    def __init__(self, source, message):
        self.source = source
        super().__init__(f"Unable to retrieve {source}: {message}")


class NotFoundError(HostInfoError):
    """Requested entity does not exist."""

    def __init__(self, entity, key):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} '{key}' was not found")


class UserExistsError(HostInfoError):
    """A user with the same user name is already registered."""


class InvalidCredentialsError(HostInfoError):
    """Supplied password does not match the stored credential."""
