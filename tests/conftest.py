import logging
from typing import Annotated, Any

import pytest
from fastapi import Depends, FastAPI, Response
from fastapi.testclient import TestClient
from pydantic import BaseModel

from sealedsession import (
    CookieConfig,
    SessionConfig,
    clear_session,
    generate_key,
    session_dependency,
    set_session,
)


class User(BaseModel):
    user_id: int
    name: str


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """Configure logging for tests."""
    logging.basicConfig(level=logging.DEBUG)


@pytest.fixture
def key():
    return generate_key()


@pytest.fixture
def other_key():
    return generate_key()


@pytest.fixture
def config(key):
    return SessionConfig(keys=[key], cookie=CookieConfig(max_age=3600))


@pytest.fixture
def signed_config():
    return SessionConfig(
        keys=["old-signing-secret", "new-signing-secret"],
        scheme="signed",
        cookie=CookieConfig(max_age=3600),
    )


@pytest.fixture
def app(config):
    """A small service that logs users in with a sealed session cookie."""
    app = FastAPI()
    current_user = session_dependency(config, User)
    bearer_user = session_dependency(config, User, bearer=True)

    @app.post("/auth/login")
    async def login(user: User, response: Response):
        set_session(response, user, config)
        return {"success": True}

    @app.post("/auth/logout")
    async def logout(response: Response):
        clear_session(response, config)
        return {"success": True}

    @app.get("/auth/me")
    async def me(user: Annotated[User, Depends(current_user)]):
        return user

    @app.get("/api/me")
    async def api_me(user: Annotated[User, Depends(bearer_user)]):
        return user

    @app.get("/raw")
    async def raw(session: Annotated[Any, Depends(session_dependency(config))]):
        return {"session": session}

    return app


@pytest.fixture
def client(app):
    return TestClient(app, base_url="https://testserver")
