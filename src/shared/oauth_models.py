"""
OAuth 2.0 Pydantic models for the token endpoint.

This module defines the data models that flow through the token endpoint:
the validated token request, the pre-authenticated client identity, the
grant-specific authentication requests handed to the authentication
authority, the access token it returns, and the success and error bodies
written back to the client.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, FrozenSet, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class GrantType(str, Enum):
    """OAuth 2.0 grant types supported by the token endpoint."""
    AUTHORIZATION_CODE = "authorization_code"
    CLIENT_CREDENTIALS = "client_credentials"


class TokenType(str, Enum):
    """OAuth token types."""
    BEARER = "Bearer"


class OAuthErrorCode(str, Enum):
    """Token endpoint error codes as defined in RFC 6749 section 5.2."""
    INVALID_REQUEST = "invalid_request"
    INVALID_CLIENT = "invalid_client"
    INVALID_GRANT = "invalid_grant"
    UNAUTHORIZED_CLIENT = "unauthorized_client"
    UNSUPPORTED_GRANT_TYPE = "unsupported_grant_type"
    INVALID_SCOPE = "invalid_scope"
    SERVER_ERROR = "server_error"


class OAuth2ParameterNames:
    """Token request parameter names."""
    GRANT_TYPE = "grant_type"
    CODE = "code"
    REDIRECT_URI = "redirect_uri"
    SCOPE = "scope"
    CLIENT_ID = "client_id"


class TokenRequest(BaseModel):
    """
    Validated OAuth 2.0 token request.

    Every field holds the single value of its form parameter. Fields that do
    not apply to the requested grant type stay None.
    """
    model_config = ConfigDict(frozen=True)

    grant_type: GrantType = Field(..., description="OAuth grant type")
    code: Optional[str] = Field(default=None, description="Authorization code")
    redirect_uri: Optional[str] = Field(default=None, description="Client redirect URI")
    scope: Optional[str] = Field(default=None, description="Space-delimited requested scope")
    client_id: Optional[str] = Field(default=None, description="OAuth client identifier")

    @model_validator(mode="after")
    def validate_grant_fields(self):
        """An authorization code request always carries a code."""
        if self.grant_type == GrantType.AUTHORIZATION_CODE and not self.code:
            raise ValueError("code is required for the authorization_code grant")
        return self

    def to_parameters(self) -> Dict[str, List[str]]:
        """Render the request back into raw multi-valued form parameters."""
        return {
            name: [value]
            for name, value in self.model_dump(mode="json", exclude_none=True).items()
        }


class ClientIdentity(BaseModel):
    """
    Pre-authenticated OAuth client.

    Supplied by whatever layer authenticated the client before the token
    endpoint runs. The endpoint never inspects it; it is handed to the
    authentication authority together with the grant.
    """
    model_config = ConfigDict(frozen=True)

    client_id: str = Field(..., min_length=1, description="OAuth client identifier")
    scopes: FrozenSet[str] = Field(
        default_factory=frozenset,
        description="Registered scopes, used when a request names none"
    )
    redirect_uris: Tuple[str, ...] = Field(default=(), description="Registered redirect URIs")
    grant_types: FrozenSet[GrantType] = Field(
        default=frozenset({GrantType.AUTHORIZATION_CODE, GrantType.CLIENT_CREDENTIALS}),
        description="Grant types the client may use"
    )


class AuthorizationCodeGrantRequest(BaseModel):
    """Authentication request for the authorization code grant."""
    model_config = ConfigDict(frozen=True)

    grant_type: Literal[GrantType.AUTHORIZATION_CODE] = GrantType.AUTHORIZATION_CODE
    code: str = Field(..., min_length=1, description="Authorization code")
    redirect_uri: Optional[str] = Field(
        default=None,
        description="Redirect URI from the request, None when it was not supplied"
    )
    client: ClientIdentity


class ClientCredentialsGrantRequest(BaseModel):
    """Authentication request for the client credentials grant."""
    model_config = ConfigDict(frozen=True)

    grant_type: Literal[GrantType.CLIENT_CREDENTIALS] = GrantType.CLIENT_CREDENTIALS
    scopes: FrozenSet[str] = Field(
        default_factory=frozenset,
        description="Requested scopes, empty to use the registered default"
    )
    client: ClientIdentity


GrantAuthenticationRequest = Annotated[
    Union[AuthorizationCodeGrantRequest, ClientCredentialsGrantRequest],
    Field(discriminator="grant_type"),
]


class AccessTokenResult(BaseModel):
    """
    Access token issued by an authentication authority.

    Immutable once returned. ``additional_parameters`` holds issuer-specific
    fields that are copied into the token response verbatim.
    """
    model_config = ConfigDict(frozen=True)

    token_type: TokenType = Field(default=TokenType.BEARER, description="Token type")
    token_value: str = Field(..., min_length=1, description="Opaque access token")
    issued_at: datetime
    expires_at: datetime
    scopes: FrozenSet[str] = Field(default_factory=frozenset, description="Granted scopes")
    additional_parameters: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def validate_lifetime(self):
        """Reject tokens that expire before they are issued."""
        if self.expires_at <= self.issued_at:
            raise ValueError("expires_at must be after issued_at")
        return self

    @property
    def expires_in(self) -> int:
        """Token lifetime in whole seconds."""
        return int((self.expires_at - self.issued_at).total_seconds())


class TokenResponse(BaseModel):
    """
    OAuth 2.0 token response body.

    Extra fields are allowed so issuer-specific parameters pass through.
    """
    model_config = ConfigDict(extra="allow")

    access_token: str = Field(..., min_length=1, description="OAuth access token")
    token_type: TokenType = Field(default=TokenType.BEARER, description="Token type")
    expires_in: int = Field(..., ge=0, description="Token lifetime in seconds")
    scope: Optional[str] = Field(default=None, description="Granted scope")


class OAuthError(BaseModel):
    """
    OAuth 2.0 error response model.

    Standard error response format as defined in RFC 6749.
    """
    model_config = ConfigDict(frozen=True)

    error: OAuthErrorCode = Field(..., description="Error code")
    error_description: Optional[str] = Field(
        default=None,
        description="Human-readable error description"
    )
    error_uri: Optional[str] = Field(
        default=None,
        description="URI with error information"
    )
