"""
Token endpoint response serialization.

Successful authentications become a 200 access token response; protocol
errors become a 400 error response. No other status codes are produced.
"""

from typing import Any, Dict

from fastapi.responses import JSONResponse

from ..shared.oauth_models import AccessTokenResult, OAuthError, TokenResponse
from ..shared.security import SecurityHeaders


def token_response_body(result: AccessTokenResult) -> Dict[str, Any]:
    """
    Build the JSON body of an access token response.

    ``scope`` is omitted when no scopes were granted. Issuer-specific
    parameters are copied verbatim but never replace a standard field.
    """
    extensions = {
        name: value
        for name, value in result.additional_parameters.items()
        if name not in TokenResponse.model_fields
    }

    response = TokenResponse(
        access_token=result.token_value,
        token_type=result.token_type,
        expires_in=result.expires_in,
        scope=" ".join(sorted(result.scopes)) or None,
        **extensions
    )
    return response.model_dump(mode="json", exclude_none=True)


def error_response_body(error: OAuthError) -> Dict[str, Any]:
    """Build the JSON body of an error response, omitting absent fields."""
    return error.model_dump(mode="json", exclude_none=True)


def token_response(result: AccessTokenResult) -> JSONResponse:
    """Serialize an issued access token as a 200 response."""
    return JSONResponse(
        status_code=200,
        content=token_response_body(result),
        headers=SecurityHeaders.get_token_response_headers()
    )


def error_response(error: OAuthError) -> JSONResponse:
    """Serialize a protocol error as a 400 response."""
    return JSONResponse(
        status_code=400,
        content=error_response_body(error),
        headers=SecurityHeaders.get_token_response_headers()
    )
