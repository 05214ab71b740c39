"""Errors raised while encoding and decoding session tokens."""


class SessionError(Exception):
    """Base class for every session failure.

    Callers should treat any SessionError raised while reading a session as
    an unauthenticated request. The subclasses exist for logging.
    """


class NotFoundError(SessionError):
    """No session cookie or credential was present."""


class InvalidTokenError(SessionError):
    """The token could not be authenticated under any configured key."""


class ExpiredError(SessionError):
    """The token authenticated but its embedded expiry has passed."""


class DeserializationError(SessionError):
    """The payload did not parse into the requested type."""


class EncodingError(SessionError):
    """The session value could not be serialized."""


class EncryptionError(SessionError):
    """The sealer failed to protect the envelope."""


class TooLongError(SessionError):
    """The Set-Cookie header would exceed what browsers accept."""
