"""Token sealing with cryptography's Fernet or itsdangerous signatures."""
import base64
import binascii
import hashlib
from functools import lru_cache
from typing import Protocol, Sequence

from cryptography.fernet import Fernet, InvalidToken, MultiFernet
from itsdangerous import BadData, Signer

from .config import SessionConfig
from .errors import InvalidTokenError


class Sealer(Protocol):
    def seal(self, data: bytes) -> str: ...

    def open(self, token: str) -> bytes: ...


def generate_key() -> str:
    """Return a new random key suitable for SessionConfig.keys."""
    return Fernet.generate_key().decode("ascii")


def _b64encode(data: bytes) -> bytes:
    return base64.urlsafe_b64encode(data).rstrip(b"=")


def _b64decode(segment: bytes) -> bytes:
    """Strictly decode unpadded url-safe base64.

    Only the canonical encoding of a byte string is accepted, so no two
    distinct token texts open to the same plaintext.
    """
    try:
        data = base64.b64decode(
            segment + b"=" * (-len(segment) % 4), altchars=b"-_", validate=True
        )
    except (binascii.Error, ValueError):
        raise InvalidTokenError("malformed token") from None
    if _b64encode(data) != segment:
        raise InvalidTokenError("malformed token")
    return data


def _ascii(token: str) -> bytes:
    try:
        return token.encode("ascii")
    except UnicodeEncodeError:
        raise InvalidTokenError("malformed token") from None


class FernetSealer:
    """Authenticated encryption with Fernet (AES-128-CBC and HMAC-SHA256).

    Tokens are sealed with keys[0] and opened with whichever key matches.
    """

    def __init__(self, keys: Sequence[str]):
        self._fernet = MultiFernet([Fernet(key) for key in keys])

    def seal(self, data: bytes) -> str:
        return self._fernet.encrypt(data).rstrip(b"=").decode("ascii")

    def open(self, token: str) -> bytes:
        raw = _b64decode(_ascii(token))
        try:
            return self._fernet.decrypt(base64.urlsafe_b64encode(raw))
        except InvalidToken:
            raise InvalidTokenError("token did not authenticate") from None


class SignedSealer:
    """HMAC-SHA256 signatures with itsdangerous.

    The payload is only signed, not encrypted: clients can read it but not
    change it. Use this only for sessions that hold nothing secret.
    """

    def __init__(self, keys: Sequence[str], salt: str):
        # itsdangerous signs with the last key and verifies with all of them
        self._signer = Signer(
            list(reversed(keys)), salt=salt, digest_method=hashlib.sha256
        )

    def seal(self, data: bytes) -> str:
        return self._signer.sign(_b64encode(data)).decode("ascii")

    def open(self, token: str) -> bytes:
        raw = _ascii(token)
        value, sep, sig = raw.rpartition(b".")
        if not sep:
            raise InvalidTokenError("malformed token")
        _b64decode(sig)
        try:
            self._signer.unsign(raw)
        except BadData:
            raise InvalidTokenError("token did not authenticate") from None
        return _b64decode(value)


@lru_cache(maxsize=32)
def _cached_sealer(keys: tuple[str, ...], scheme: str, salt: str) -> Sealer:
    if scheme == "signed":
        return SignedSealer(keys, salt)
    return FernetSealer(keys)


def make_sealer(config: SessionConfig) -> Sealer:
    """Return the sealer for config, shared between equal configurations."""
    return _cached_sealer(config.keys, config.scheme, config.salt)
