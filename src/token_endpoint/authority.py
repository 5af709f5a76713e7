"""
In-memory authentication authority.

Verifies authorization codes against ``AuthorizationCodeStore`` and client
credentials grants against the client's registered scopes, then issues
opaque bearer tokens.
"""

from datetime import datetime, timedelta, timezone
from typing import FrozenSet

from ..shared.errors import OAuth2AuthenticationError
from ..shared.logging_utils import ComponentType, MessageType, OAuthLogger
from ..shared.oauth_models import (
    AccessTokenResult,
    AuthorizationCodeGrantRequest,
    ClientCredentialsGrantRequest,
    ClientIdentity,
    GrantAuthenticationRequest,
    GrantType,
    OAuthErrorCode,
    TokenType,
)
from ..shared.security import TokenGenerator
from .storage import AuthorizationCodeStore

logger = OAuthLogger(ComponentType.AUTH_AUTHORITY.value)


class InMemoryAuthenticationAuthority:
    """Authentication authority backed by the in-memory stores."""

    def __init__(self, code_store: AuthorizationCodeStore, access_token_ttl_seconds: int = 3600):
        self.code_store = code_store
        self.access_token_ttl = timedelta(seconds=access_token_ttl_seconds)

    def verify(self, grant_request: GrantAuthenticationRequest) -> AccessTokenResult:
        match grant_request:
            case AuthorizationCodeGrantRequest():
                return self._verify_authorization_code(grant_request)
            case ClientCredentialsGrantRequest():
                return self._verify_client_credentials(grant_request)
            case _:
                raise OAuth2AuthenticationError(
                    OAuthErrorCode.UNSUPPORTED_GRANT_TYPE,
                    f"Unsupported grant request: {type(grant_request).__name__}"
                )

    def _reject(self, client: ClientIdentity, error_code: OAuthErrorCode, description: str):
        logger.log_oauth_message(
            ComponentType.AUTH_AUTHORITY.value, ComponentType.TOKEN_ENDPOINT.value,
            MessageType.GRANT_REJECTED.value,
            {
                "client_id": client.client_id,
                "error": error_code.value,
                "description": description
            },
            success=False
        )
        return OAuth2AuthenticationError(error_code, description)

    def _require_grant_type(self, client: ClientIdentity, grant_type: GrantType) -> None:
        if grant_type not in client.grant_types:
            raise self._reject(
                client, OAuthErrorCode.UNAUTHORIZED_CLIENT,
                f"Client is not authorized for the {grant_type.value} grant"
            )

    def _verify_authorization_code(self, grant_request: AuthorizationCodeGrantRequest) -> AccessTokenResult:
        client = grant_request.client
        self._require_grant_type(client, GrantType.AUTHORIZATION_CODE)

        record = self.code_store.consume_code(grant_request.code)
        if record is None:
            raise self._reject(client, OAuthErrorCode.INVALID_GRANT, "Invalid authorization code")

        if record.client_id != client.client_id:
            raise self._reject(
                client, OAuthErrorCode.INVALID_GRANT,
                "Authorization code was not issued to this client"
            )

        # A code issued with a redirect URI must be redeemed with the same one
        if record.redirect_uri is not None and record.redirect_uri != grant_request.redirect_uri:
            raise self._reject(client, OAuthErrorCode.INVALID_GRANT, "Redirect URI mismatch")

        return self._issue(client, record.scopes)

    def _verify_client_credentials(self, grant_request: ClientCredentialsGrantRequest) -> AccessTokenResult:
        client = grant_request.client
        self._require_grant_type(client, GrantType.CLIENT_CREDENTIALS)

        scopes = grant_request.scopes or client.scopes
        unregistered = scopes - client.scopes
        if unregistered:
            raise self._reject(
                client, OAuthErrorCode.INVALID_SCOPE,
                f"Scope not registered for this client: {' '.join(sorted(unregistered))}"
            )

        return self._issue(client, scopes)

    def _issue(self, client: ClientIdentity, scopes: FrozenSet[str]) -> AccessTokenResult:
        issued_at = datetime.now(timezone.utc)
        result = AccessTokenResult(
            token_type=TokenType.BEARER,
            token_value=TokenGenerator.generate_access_token(),
            issued_at=issued_at,
            expires_at=issued_at + self.access_token_ttl,
            scopes=scopes
        )

        logger.log_oauth_message(
            ComponentType.AUTH_AUTHORITY.value, ComponentType.TOKEN_ENDPOINT.value,
            MessageType.TOKEN_ISSUED.value,
            {
                "client_id": client.client_id,
                "access_token": result.token_value,
                "scope": " ".join(sorted(scopes)),
                "expires_in": result.expires_in
            }
        )
        return result
