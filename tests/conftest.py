"""
Pytest configuration and shared fixtures for token endpoint tests.

This module provides common test fixtures, configuration, and utilities
used across all test modules.
"""

import pytest
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Tuple
from unittest.mock import MagicMock
from urllib.parse import urlencode

from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.shared.oauth_models import AccessTokenResult, ClientIdentity, GrantType, TokenType
from src.token_endpoint.config import DEFAULT_TOKEN_ENDPOINT_URI
from src.token_endpoint.identity import IdentityResolver
from src.token_endpoint.middleware import OAuth2TokenEndpointMiddleware

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


@pytest.fixture
def registered_client() -> ClientIdentity:
    """Client registered for the authorization code grant."""
    return ClientIdentity(
        client_id="client-1",
        scopes=frozenset({"scope1", "scope2"}),
        redirect_uris=("https://example.com/callback", "https://example.com/other"),
        grant_types=frozenset({GrantType.AUTHORIZATION_CODE})
    )


@pytest.fixture
def registered_client2() -> ClientIdentity:
    """Client registered for the client credentials grant."""
    return ClientIdentity(
        client_id="client-2",
        scopes=frozenset({"scope1", "scope2"}),
        grant_types=frozenset({GrantType.CLIENT_CREDENTIALS})
    )


@pytest.fixture
def access_token() -> AccessTokenResult:
    """One-hour bearer token for scope1 and scope2."""
    issued_at = datetime.now(timezone.utc)
    return AccessTokenResult(
        token_type=TokenType.BEARER,
        token_value="token",
        issued_at=issued_at,
        expires_at=issued_at + timedelta(hours=1),
        scopes=frozenset({"scope1", "scope2"})
    )


@pytest.fixture
def mock_authority(access_token) -> MagicMock:
    """Authentication authority returning ``access_token``."""
    authority = MagicMock()
    authority.verify.return_value = access_token
    return authority


@pytest.fixture
def make_client() -> Callable[..., TestClient]:
    """
    Build a test client for an app with the token endpoint middleware.

    The app also serves ``GET <token path>`` and ``POST /path`` so requests
    the middleware forwards can be observed. ``identity_resolver`` replaces
    the resolver that returns ``identity``.
    """
    def _make_client(authority,
                     identity: Optional[ClientIdentity] = None,
                     token_endpoint_uri: str = DEFAULT_TOKEN_ENDPOINT_URI,
                     identity_resolver: Optional[IdentityResolver] = None) -> TestClient:
        app = FastAPI()

        @app.get(token_endpoint_uri)
        async def token_get():
            return {"forwarded": True}

        @app.post("/path")
        async def other_path():
            return {"forwarded": True}

        app.add_middleware(
            OAuth2TokenEndpointMiddleware,
            authentication_authority=authority,
            token_endpoint_uri=token_endpoint_uri,
            identity_resolver=identity_resolver or (lambda request: identity)
        )
        return TestClient(app)

    return _make_client


def authorization_code_params(client: ClientIdentity) -> List[Tuple[str, str]]:
    """Form parameters of a valid authorization code token request."""
    return [
        ("grant_type", GrantType.AUTHORIZATION_CODE.value),
        ("code", "code"),
        ("redirect_uri", client.redirect_uris[0]),
    ]


def client_credentials_params(client: ClientIdentity) -> List[Tuple[str, str]]:
    """Form parameters of a valid client credentials token request."""
    return [
        ("grant_type", GrantType.CLIENT_CREDENTIALS.value),
        ("scope", " ".join(sorted(client.scopes))),
    ]


def post_form(client: TestClient,
              params: List[Tuple[str, str]],
              path: str = DEFAULT_TOKEN_ENDPOINT_URI,
              headers: Optional[dict] = None):
    """POST form parameters, keeping repeated parameters repeated."""
    request_headers = {"content-type": FORM_CONTENT_TYPE}
    if headers:
        request_headers.update(headers)
    return client.post(path, content=urlencode(params), headers=request_headers)


@pytest.fixture(autouse=True)
def disable_logging():
    """Disable logging during tests to reduce noise."""
    import logging
    logging.disable(logging.CRITICAL)
    yield
    logging.disable(logging.NOTSET)


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "security: marks tests as security-focused tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers automatically."""
    for item in items:
        if "integration" in item.nodeid:
            item.add_marker(pytest.mark.integration)
        elif "error" in item.nodeid:
            item.add_marker(pytest.mark.security)
        else:
            item.add_marker(pytest.mark.unit)


# Custom assertions for token endpoint testing
def assert_oauth_error_response(response, error_code: str, description: Optional[str] = None):
    """Assert that a response is a 400 OAuth error with the given code."""
    assert response.status_code == 400
    data = response.json()
    assert data["error"] == error_code
    if description is not None:
        assert data["error_description"] == description
    assert response.headers["cache-control"] == "no-store"


def assert_valid_token_response(response_data: dict):
    """Assert that a response contains a valid OAuth token format."""
    assert isinstance(response_data, dict)
    assert response_data["token_type"].lower() == "bearer"
    assert isinstance(response_data["access_token"], str)
    assert len(response_data["access_token"]) > 0
    assert isinstance(response_data["expires_in"], int)
    assert response_data["expires_in"] > 0


# Make custom assertions available to all tests
pytest.assert_oauth_error_response = assert_oauth_error_response
pytest.assert_valid_token_response = assert_valid_token_response
