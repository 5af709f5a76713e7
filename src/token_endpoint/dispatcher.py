"""
Grant dispatch.

Builds the grant-specific authentication request for a validated token
request and hands it to the authentication authority.
"""

from typing import FrozenSet, Optional, Protocol, runtime_checkable

from ..shared.errors import UnsupportedGrantTypeError
from ..shared.logging_utils import ComponentType, MessageType, OAuthLogger
from ..shared.oauth_models import (
    AccessTokenResult,
    AuthorizationCodeGrantRequest,
    ClientCredentialsGrantRequest,
    ClientIdentity,
    GrantAuthenticationRequest,
    GrantType,
    TokenRequest,
)

logger = OAuthLogger(ComponentType.TOKEN_ENDPOINT.value)


@runtime_checkable
class AuthenticationAuthority(Protocol):
    """
    Verifies grant credentials and issues access tokens.

    ``verify`` either returns the issued token or raises
    ``OAuth2AuthenticationError`` carrying the error code to report.
    """

    def verify(self, grant_request: GrantAuthenticationRequest) -> AccessTokenResult:
        ...


def parse_scopes(scope: Optional[str]) -> FrozenSet[str]:
    """Split a space-delimited scope parameter; blank or absent yields an empty set."""
    if not scope:
        return frozenset()
    return frozenset(scope.split())


def build_grant_request(token_request: TokenRequest, client: ClientIdentity) -> GrantAuthenticationRequest:
    """
    Build the authentication request for the requested grant.

    Args:
        token_request: Validated token request
        client: Authenticated client, resolved once for this request

    Returns:
        GrantAuthenticationRequest: Exactly one grant variant
    """
    match token_request.grant_type:
        case GrantType.AUTHORIZATION_CODE:
            return AuthorizationCodeGrantRequest(
                code=token_request.code,
                redirect_uri=token_request.redirect_uri,
                client=client
            )
        case GrantType.CLIENT_CREDENTIALS:
            return ClientCredentialsGrantRequest(
                scopes=parse_scopes(token_request.scope),
                client=client
            )
        case _:
            raise UnsupportedGrantTypeError(token_request.grant_type)


def dispatch(token_request: TokenRequest,
             client: ClientIdentity,
             authority: AuthenticationAuthority) -> AccessTokenResult:
    """
    Authenticate a validated token request with the authority.

    The authority is called exactly once. Its failures propagate unchanged.

    Raises:
        TypeError: If the authority returns something other than an
            ``AccessTokenResult``
    """
    grant_request = build_grant_request(token_request, client)

    logger.log_oauth_message(
        ComponentType.TOKEN_ENDPOINT.value, ComponentType.AUTH_AUTHORITY.value,
        MessageType.GRANT_DISPATCH.value,
        {
            "grant_type": grant_request.grant_type.value,
            "client_id": client.client_id
        }
    )

    result = authority.verify(grant_request)
    if not isinstance(result, AccessTokenResult):
        raise TypeError(
            f"Authentication authority returned {type(result).__name__}, expected AccessTokenResult"
        )
    return result
