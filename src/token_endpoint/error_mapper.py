"""
Mapping of token request failures to OAuth 2.0 protocol errors.

Validation and authentication failures already carry their error code and
are reported as-is. Anything else is an internal failure and is reported as
``server_error`` without exposing its details.
"""

from ..shared.errors import OAuth2Error
from ..shared.logging_utils import ComponentType, OAuthLogger
from ..shared.oauth_models import OAuthError, OAuthErrorCode

GENERIC_SERVER_ERROR_DESCRIPTION = "An unexpected error occurred while processing the token request"

logger = OAuthLogger(ComponentType.TOKEN_ENDPOINT.value)


def to_protocol_error(exc: Exception) -> OAuthError:
    """
    Translate a failure into the error reported to the client.

    Args:
        exc: Failure raised while validating or authenticating the request

    Returns:
        OAuthError: The failure's own classification, or server_error
    """
    if isinstance(exc, OAuth2Error):
        return exc.to_protocol_error()

    logger.log_error(
        "unexpected_failure",
        "Unclassified failure while processing token request",
        {
            "exception_type": type(exc).__name__,
            "exception": str(exc)
        }
    )

    return OAuthError(
        error=OAuthErrorCode.SERVER_ERROR,
        error_description=GENERIC_SERVER_ERROR_DESCRIPTION
    )
