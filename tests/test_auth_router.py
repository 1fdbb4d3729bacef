"""Integration tests for registration and login."""

from datetime import timedelta
from unittest.mock import patch

import pytest

from fxrates.config import settings
from fxrates.models.user import User
from fxrates.services.auth_service import AuthService


def _register(client, username="alice", password="Secure-pass-123"):
    return client.post("/register", json={"username": username, "password": password})


def _login(client, username="alice", password="Secure-pass-123"):
    return client.post("/login", json={"username": username, "password": password})


def test_register_success(client, db):
    response = _register(client)

    assert response.status_code == 200
    assert "message" in response.json()
    user = db.query(User).filter(User.username == "alice").first()
    assert user is not None
    assert user.password_hash != "Secure-pass-123"
    assert AuthService.verify_password("Secure-pass-123", user.password_hash)


def test_register_duplicate_username(client):
    _register(client)

    response = _register(client, password="Different-456")

    assert response.status_code == 400


def test_register_usernames_are_case_sensitive(client):
    _register(client, username="alice")

    assert _register(client, username="Alice").status_code == 200


def test_register_race_maps_to_conflict(client):
    _register(client)

    # Simulate a concurrent registration that passed the existence check
    with patch("fxrates.routers.auth.UserRepository.find_by_username", return_value=None):
        response = _register(client)

    assert response.status_code == 409


@pytest.mark.parametrize(
    "payload",
    [
        {"username": "alice", "password": "short"},
        {"username": "al", "password": "Secure-pass-123"},
        {"username": "alice", "password": "é" * 40},
        {"username": "alice"},
    ],
)
def test_register_validation(client, payload):
    assert client.post("/register", json=payload).status_code == 422


def test_login_success_returns_token(client):
    _register(client)

    response = _login(client)

    assert response.status_code == 200
    data = response.json()
    assert data["tokenType"] == "bearer"
    assert data["expiresIn"] == 3600
    payload = AuthService.decode_access_token(data["token"])
    assert payload["sub"] == "alice"
    assert payload["iss"] == settings.jwt_issuer
    assert payload["aud"] == settings.jwt_audience
    assert payload["exp"] - payload["iat"] == int(timedelta(hours=1).total_seconds())


def test_login_failures_are_indistinguishable(client):
    _register(client)

    unknown_user = _login(client, username="mallory")
    wrong_password = _login(client, password="Wrong-pass-123")

    assert unknown_user.status_code == wrong_password.status_code == 401
    assert unknown_user.json() == wrong_password.json()


def test_login_is_rate_limited(client):
    for _ in range(5):
        _login(client, username="mallory")

    response = _login(client, username="mallory")

    assert response.status_code == 429


def test_registered_user_can_use_rates(client):
    _register(client)
    token = _login(client).json()["token"]

    response = client.get("/rates", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
