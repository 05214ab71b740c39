import base64
from typing import Annotated, Any

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from sealedsession import (
    encode,
    generate_key,
    get_session_config,
    get_settings,
    session_dependency,
)


def session_cookie(response):
    [header] = [
        h for h in response.headers.get_list("set-cookie") if h.startswith("session=")
    ]
    return header.split(";", 1)[0].split("=", 1)[1]


def test_login_then_me(client):
    response = client.post("/auth/login", json={"user_id": 5, "name": "ada"})
    assert response.status_code == 200

    token = session_cookie(response)
    me = client.get("/auth/me", headers={"Cookie": f"session={token}"})
    assert me.status_code == 200
    assert me.json() == {"user_id": 5, "name": "ada"}


def test_me_without_cookie(client):
    response = client.get("/auth/me")
    assert response.status_code == 401
    assert response.json()["detail"] == "Not authenticated"


def test_me_with_bad_cookie(client):
    response = client.get("/auth/me", headers={"Cookie": "session=forged"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid or expired session"


def test_expired_and_forged_look_the_same(client, config):
    expired = encode({"user_id": 1, "name": "x"}, config, now=0)
    a = client.get("/auth/me", headers={"Cookie": f"session={expired}"})
    b = client.get("/auth/me", headers={"Cookie": "session=forged"})
    assert a.status_code == b.status_code == 401
    assert a.json() == b.json()


def test_wrong_shape_is_unauthenticated(client, config):
    token = encode({"something": "else"}, config)
    response = client.get("/auth/me", headers={"Cookie": f"session={token}"})
    assert response.status_code == 401


def test_untyped_dependency(client, config):
    token = encode({"cart": [1, 2]}, config)
    response = client.get("/raw", headers={"Cookie": f"session={token}"})
    assert response.json() == {"session": {"cart": [1, 2]}}


def test_bearer_dependency(client, config):
    token = encode({"user_id": 2, "name": "bob"}, config)
    basic = base64.b64encode(f"{token}:".encode()).decode()

    response = client.get("/api/me", headers={"Authorization": f"Basic {basic}"})
    assert response.status_code == 200
    assert response.json()["name"] == "bob"

    response = client.get("/api/me", headers={"Authorization": f"Bearer {token}"})
    assert response.json()["user_id"] == 2

    assert client.get("/api/me").status_code == 401


def test_logout_clears_cookie(client):
    response = client.post("/auth/logout")
    [header] = response.headers.get_list("set-cookie")
    assert "Max-Age=0" in header


@pytest.fixture
def env_config(monkeypatch):
    monkeypatch.setenv("SESSION_KEYS", generate_key())
    get_settings.cache_clear()
    get_session_config.cache_clear()
    yield
    get_settings.cache_clear()
    get_session_config.cache_clear()


def test_config_from_environment_is_built_once(env_config):
    app = FastAPI()

    @app.get("/me")
    async def me(session: Annotated[Any, Depends(session_dependency())]):
        return session

    client = TestClient(app, base_url="https://testserver")
    token = encode({"user_id": 4}, get_session_config())
    for _ in range(3):
        response = client.get("/me", headers={"Cookie": f"session={token}"})
        assert response.json() == {"user_id": 4}
    assert get_session_config.cache_info().misses == 1
