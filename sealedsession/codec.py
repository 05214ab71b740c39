"""Encoding and decoding of sealed session tokens.

A token is the sealed form of an envelope: an 8-byte big-endian Unix
timestamp at which the token expires, followed by the JSON encoding of the
session value. The expiry is sealed together with the value, so it cannot be
changed without invalidating the token.
"""
import logging
import struct
import time
from typing import Any

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError, from_json, to_json

from .config import SessionConfig
from .errors import (
    DeserializationError,
    EncodingError,
    EncryptionError,
    ExpiredError,
    InvalidTokenError,
)
from .security import make_sealer

logger = logging.getLogger(__name__)

_EXPIRY = struct.Struct(">q")


def _now() -> int:
    return int(time.time())


def encode(value: Any, config: SessionConfig, *, now: int | None = None) -> str:
    """Seal value into a token that expires config.ttl seconds from now.

    Args:
        value: Any value pydantic can serialize to JSON
        config: Keys and cookie settings; the token is sealed with keys[0]
        now: Unix time to count the expiry from (defaults to the clock)

    Returns:
        The token as url-safe text

    Raises:
        EncodingError: if value cannot be serialized
        EncryptionError: if sealing fails
    """
    if now is None:
        now = _now()
    try:
        body = to_json(value)
    except (PydanticSerializationError, TypeError, ValueError) as exc:
        raise EncodingError(f"cannot serialize session value: {exc}") from exc

    try:
        envelope = _EXPIRY.pack(now + config.ttl) + body
    except struct.error as exc:
        raise EncodingError(f"cannot encode expiry: {exc}") from exc
    try:
        return make_sealer(config).seal(envelope)
    except (TypeError, ValueError) as exc:
        raise EncryptionError(f"cannot seal session: {exc}") from exc


def decode(
    token: str,
    config: SessionConfig,
    model: Any = None,
    *,
    now: int | None = None,
) -> Any:
    """Open a token produced by encode and return the session value.

    Every key in config.keys is tried. If model is given the value is
    validated into that type, otherwise plain JSON values are returned.

    Raises:
        InvalidTokenError: if no key authenticates the token
        ExpiredError: if the embedded expiry is in the past
        DeserializationError: if the value does not parse into model
    """
    if now is None:
        now = _now()
    envelope = make_sealer(config).open(token)
    if len(envelope) < _EXPIRY.size:
        raise InvalidTokenError("truncated envelope")

    (expires,) = _EXPIRY.unpack_from(envelope)
    if now > expires:
        logger.debug("Session token expired %d seconds ago", now - expires)
        raise ExpiredError(f"session expired at {expires}")

    body = envelope[_EXPIRY.size:]
    try:
        if model is None:
            return from_json(body)
        return TypeAdapter(model).validate_json(body)
    except (ValidationError, ValueError) as exc:
        raise DeserializationError(f"cannot parse session value: {exc}") from exc
