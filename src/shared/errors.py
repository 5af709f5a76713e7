"""
Exceptions raised while processing a token request.

Every failure the token endpoint reports to a client is an ``OAuth2Error``
carrying its RFC 6749 error code. Anything else that escapes the pipeline is
treated as an unexpected internal failure.
"""

from typing import Optional

from .oauth_models import OAuth2ParameterNames, OAuthError, OAuthErrorCode

PARAMETER_DESCRIPTION_PREFIX = "OAuth 2.0 Parameter: "


class OAuth2Error(Exception):
    """Base exception for failures that map to an OAuth 2.0 error response."""

    def __init__(self,
                 error_code: OAuthErrorCode,
                 description: Optional[str] = None,
                 error_uri: Optional[str] = None):
        self.error_code = OAuthErrorCode(error_code)
        self.description = description
        self.error_uri = error_uri
        super().__init__(description or self.error_code.value)

    def to_protocol_error(self) -> OAuthError:
        """Build the error body reported to the client."""
        return OAuthError(
            error=self.error_code,
            error_description=self.description,
            error_uri=self.error_uri
        )


class InvalidRequestParameterError(OAuth2Error):
    """A token request parameter is missing, repeated, or not acceptable."""

    def __init__(self,
                 parameter_name: str,
                 error_code: OAuthErrorCode = OAuthErrorCode.INVALID_REQUEST):
        self.parameter_name = parameter_name
        super().__init__(error_code, PARAMETER_DESCRIPTION_PREFIX + parameter_name)


class UnsupportedGrantTypeError(InvalidRequestParameterError):
    """The grant_type parameter names a grant this endpoint does not handle."""

    def __init__(self, grant_type: Optional[str]):
        self.grant_type = grant_type
        super().__init__(OAuth2ParameterNames.GRANT_TYPE, OAuthErrorCode.UNSUPPORTED_GRANT_TYPE)


class OAuth2AuthenticationError(OAuth2Error):
    """Raised by an authentication authority when it rejects a grant."""


class ClientIdentityMissingError(OAuth2Error):
    """No authenticated client was available for the request."""

    def __init__(self):
        super().__init__(OAuthErrorCode.INVALID_CLIENT, "Client authentication required")
