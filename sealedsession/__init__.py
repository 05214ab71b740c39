"""Encrypted, authenticated session tokens for cookies and bearer credentials."""
from .codec import decode, encode
from .config import (
    DEFAULT_COOKIE,
    MAX_COOKIE_SIZE,
    CookieConfig,
    SessionConfig,
    Settings,
    get_session_config,
    get_settings,
)
from .cookies import (
    bearer_token,
    clear_session,
    get_bearer_session,
    get_session,
    render_cookie,
    set_session,
)
from .dependencies import session_dependency
from .errors import (
    DeserializationError,
    EncodingError,
    EncryptionError,
    ExpiredError,
    InvalidTokenError,
    NotFoundError,
    SessionError,
    TooLongError,
)
from .security import FernetSealer, SignedSealer, generate_key, make_sealer

__all__ = [
    "DEFAULT_COOKIE",
    "MAX_COOKIE_SIZE",
    "CookieConfig",
    "SessionConfig",
    "Settings",
    "get_settings",
    "get_session_config",
    "encode",
    "decode",
    "set_session",
    "get_session",
    "get_bearer_session",
    "clear_session",
    "bearer_token",
    "render_cookie",
    "session_dependency",
    "FernetSealer",
    "SignedSealer",
    "generate_key",
    "make_sealer",
    "SessionError",
    "NotFoundError",
    "InvalidTokenError",
    "ExpiredError",
    "DeserializationError",
    "EncodingError",
    "EncryptionError",
    "TooLongError",
]
