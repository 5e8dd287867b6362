"""Shared fixtures for web API tests."""

import asyncio
import os
from unittest.mock import patch

import pytest
from cryptography.fernet import Fernet
from fastapi.testclient import TestClient
from jose import jwt

from web.store import EncryptedTokenStore, InMemoryStore


@pytest.fixture
def secret_key():
    return Fernet.generate_key().decode()


@pytest.fixture
def jwt_secret():
    return "test-jwt-secret"


def _make_auth_token(jwt_secret, user_id, github_id, login):
    return jwt.encode(
        {"sub": user_id, "github_id": github_id, "login": login},
        jwt_secret,
        algorithm="HS256",
    )


@pytest.fixture
def auth_token(jwt_secret):
    return _make_auth_token(jwt_secret, "1001", 1001, "octo")


@pytest.fixture
def auth_headers(auth_token):
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def auth_headers_b(jwt_secret):
    """Second user for isolation tests."""
    return {"Authorization": f"Bearer {_make_auth_token(jwt_secret, '2002', 2002, 'hubot')}"}


@pytest.fixture
def stores(secret_key):
    """Fresh in-memory stores per test."""
    return {
        "users": InMemoryStore(),
        "analyses": InMemoryStore(),
        "tokens": EncryptedTokenStore(InMemoryStore(), secret_key),
    }


@pytest.fixture
def store_token(stores):
    """Seed an encrypted GitHub token for a user id."""

    def _store(user_id="1001", token="gho_usertoken"):
        asyncio.run(stores["tokens"].set(user_id, token))

    return _store


@pytest.fixture
def client_tokens():
    """Tokens the GitHub client factory was called with."""
    return []


@pytest.fixture
def client(jwt_secret, secret_key, stores, mock_github, client_tokens):
    """Test client with in-memory stores and a mocked GitHub client."""
    env = {
        "JWT_SECRET": jwt_secret,
        "SECRET_KEY": secret_key,
        "GH_CLIENT_ID": "test-client-id",
        "GH_CLIENT_SECRET": "test-client-secret",
        "SERVICE_URL": "http://localhost:5173",
    }

    def factory(token):
        client_tokens.append(token)
        return mock_github

    with patch.dict(os.environ, env):
        from web import deps
        from web.app import app

        app.dependency_overrides[deps.get_client_factory] = lambda: factory
        app.dependency_overrides[deps.get_user_store] = lambda: stores["users"]
        app.dependency_overrides[deps.get_analysis_store] = lambda: stores["analyses"]
        app.dependency_overrides[deps.get_token_store] = lambda: stores["tokens"]

        yield TestClient(app)

        app.dependency_overrides.clear()
