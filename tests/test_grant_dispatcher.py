"""
Unit tests for grant dispatch.

Tests construction of grant-specific authentication requests and the single
call made to the authentication authority.
"""

import pytest
from unittest.mock import MagicMock

from src.shared.errors import OAuth2AuthenticationError
from src.shared.oauth_models import (
    AuthorizationCodeGrantRequest,
    ClientCredentialsGrantRequest,
    GrantType,
    OAuthErrorCode,
    TokenRequest,
)
from src.token_endpoint.authority import InMemoryAuthenticationAuthority
from src.token_endpoint.dispatcher import (
    AuthenticationAuthority,
    build_grant_request,
    dispatch,
    parse_scopes,
)
from src.token_endpoint.storage import AuthorizationCodeStore


class TestParseScopes:
    """Scope parameter splitting."""

    def test_none(self):
        assert parse_scopes(None) == frozenset()

    def test_blank(self):
        assert parse_scopes("   ") == frozenset()

    def test_whitespace_separated(self):
        assert parse_scopes("read  write\tadmin read") == frozenset({"read", "write", "admin"})


class TestBuildGrantRequest:
    """One variant per grant type."""

    def test_authorization_code(self, registered_client):
        token_request = TokenRequest(
            grant_type=GrantType.AUTHORIZATION_CODE,
            code="code",
            redirect_uri="https://example.com/callback"
        )

        grant_request = build_grant_request(token_request, registered_client)

        assert isinstance(grant_request, AuthorizationCodeGrantRequest)
        assert grant_request.grant_type == GrantType.AUTHORIZATION_CODE
        assert grant_request.code == "code"
        assert grant_request.redirect_uri == "https://example.com/callback"
        assert grant_request.client == registered_client

    def test_authorization_code_empty_redirect_uri_is_not_none(self, registered_client):
        token_request = TokenRequest(grant_type=GrantType.AUTHORIZATION_CODE, code="code", redirect_uri="")

        assert build_grant_request(token_request, registered_client).redirect_uri == ""

    def test_client_credentials(self, registered_client2):
        token_request = TokenRequest(grant_type=GrantType.CLIENT_CREDENTIALS, scope="scope1 scope2")

        grant_request = build_grant_request(token_request, registered_client2)

        assert isinstance(grant_request, ClientCredentialsGrantRequest)
        assert grant_request.scopes == frozenset({"scope1", "scope2"})
        assert grant_request.client == registered_client2

    def test_client_credentials_without_scope(self, registered_client2):
        token_request = TokenRequest(grant_type=GrantType.CLIENT_CREDENTIALS)

        assert build_grant_request(token_request, registered_client2).scopes == frozenset()


class TestDispatch:
    """Calling the authority."""

    def test_returns_authority_result(self, registered_client, mock_authority, access_token):
        token_request = TokenRequest(grant_type=GrantType.AUTHORIZATION_CODE, code="code")

        result = dispatch(token_request, registered_client, mock_authority)

        assert result == access_token
        mock_authority.verify.assert_called_once()

    def test_authority_failure_propagates(self, registered_client):
        authority = MagicMock()
        authority.verify.side_effect = OAuth2AuthenticationError(OAuthErrorCode.INVALID_CLIENT, "Unknown client")
        token_request = TokenRequest(grant_type=GrantType.AUTHORIZATION_CODE, code="code")

        with pytest.raises(OAuth2AuthenticationError) as exc_info:
            dispatch(token_request, registered_client, authority)

        assert exc_info.value.error_code == OAuthErrorCode.INVALID_CLIENT
        authority.verify.assert_called_once()

    def test_non_token_result_raises_type_error(self, registered_client):
        authority = MagicMock()
        authority.verify.return_value = None
        token_request = TokenRequest(grant_type=GrantType.CLIENT_CREDENTIALS)

        with pytest.raises(TypeError):
            dispatch(token_request, registered_client, authority)

    def test_in_memory_authority_satisfies_protocol(self):
        authority = InMemoryAuthenticationAuthority(AuthorizationCodeStore())

        assert isinstance(authority, AuthenticationAuthority)
