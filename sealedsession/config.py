"""Configuration for session cookies and the keys that protect them."""
from functools import lru_cache
from typing import Literal

from cryptography.fernet import Fernet
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings

# Longest Set-Cookie value browsers are known to accept
MAX_COOKIE_SIZE = 4093

HUNDRED_YEARS = 100 * 365 * 24 * 60 * 60


class CookieConfig(BaseModel):
    """Attributes of the session cookie. The value is supplied at set time.

    max_age is also the lifetime of the token inside the cookie.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field("session", min_length=1)
    path: str = "/"
    domain: str | None = None
    max_age: int = Field(HUNDRED_YEARS, gt=0)
    secure: bool = True
    http_only: bool = True
    same_site: Literal["lax", "strict", "none"] = "lax"


# Used whenever SessionConfig.cookie is None.
DEFAULT_COOKIE = CookieConfig()


class SessionConfig(BaseModel):
    """Keys and cookie settings used to encode and decode sessions.

    keys[0] seals new tokens. Every key is tried when opening a token, so a
    retired key can stay in the list until the tokens sealed with it expire.
    """

    model_config = ConfigDict(frozen=True)

    keys: tuple[str, ...] = Field(min_length=1)
    cookie: CookieConfig | None = None
    scheme: Literal["fernet", "signed"] = "fernet"
    salt: str = "sealedsession"

    @model_validator(mode="after")
    def check_keys(self) -> "SessionConfig":
        for key in self.keys:
            if not key:
                raise ValueError("session keys must not be empty")
            if self.scheme == "fernet":
                # Raises ValueError for anything but 32 url-safe base64 bytes
                Fernet(key)
        return self

    @property
    def resolved_cookie(self) -> CookieConfig:
        if self.cookie is None:
            return DEFAULT_COOKIE
        return self.cookie

    @property
    def ttl(self) -> int:
        return self.resolved_cookie.max_age


class Settings(BaseSettings):
    """Session settings loaded from environment variables."""

    # Comma separated, newest key first
    keys: str = ""
    scheme: Literal["fernet", "signed"] = "fernet"
    salt: str = "sealedsession"

    # Cookie attributes
    cookie_name: str = DEFAULT_COOKIE.name
    cookie_path: str = DEFAULT_COOKIE.path
    cookie_domain: str | None = None
    cookie_max_age: int = DEFAULT_COOKIE.max_age
    cookie_secure: bool = DEFAULT_COOKIE.secure
    cookie_http_only: bool = DEFAULT_COOKIE.http_only
    cookie_same_site: Literal["lax", "strict", "none"] = DEFAULT_COOKIE.same_site

    class Config:
        env_prefix = "SESSION_"
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def key_list(self) -> list[str]:
        return [key.strip() for key in self.keys.split(",") if key.strip()]

    def session_config(self) -> SessionConfig:
        """Build the immutable SessionConfig these settings describe.

        Raises:
            pydantic.ValidationError: if no keys are set or a key is malformed
        """
        return SessionConfig(
            keys=self.key_list,
            scheme=self.scheme,
            salt=self.salt,
            cookie=CookieConfig(
                name=self.cookie_name,
                path=self.cookie_path,
                domain=self.cookie_domain,
                max_age=self.cookie_max_age,
                secure=self.cookie_secure,
                http_only=self.cookie_http_only,
                same_site=self.cookie_same_site,
            ),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


@lru_cache(maxsize=1)
def get_session_config() -> SessionConfig:
    """The SessionConfig described by the environment, built once."""
    return get_settings().session_config()
