"""
OAuth 2.0 Token Endpoint Middleware

Intercepts ``POST <token_endpoint_uri>`` requests and runs them through the
token pipeline: parameter validation, client identity resolution, grant
dispatch to the authentication authority, and response serialization.
Every other request is passed to the next application untouched.
"""

from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import ClientDisconnect, Request
from starlette.responses import Response
from starlette.types import ASGIApp

from ..shared.errors import ClientIdentityMissingError, InvalidRequestParameterError
from ..shared.logging_utils import ComponentType, MessageType, OAuthLogger
from .config import DEFAULT_TOKEN_ENDPOINT_URI
from .dispatcher import AuthenticationAuthority, dispatch
from .error_mapper import to_protocol_error
from .identity import IdentityResolver, client_identity_from_state
from .serializer import error_response, token_response
from .validation import validate_token_request

# Initialize logger
logger = OAuthLogger(ComponentType.TOKEN_ENDPOINT.value)


class OAuth2TokenEndpointMiddleware(BaseHTTPMiddleware):
    """
    Terminal handler for OAuth 2.0 token requests.

    Args:
        app: Next ASGI application
        authentication_authority: Verifies grants and issues tokens
        token_endpoint_uri: Path of the token endpoint
        identity_resolver: Reads the pre-authenticated client from a request

    Raises:
        ValueError: If the authority is None or the endpoint path is empty
    """

    def __init__(self,
                 app: ASGIApp,
                 authentication_authority: AuthenticationAuthority,
                 token_endpoint_uri: str = DEFAULT_TOKEN_ENDPOINT_URI,
                 identity_resolver: IdentityResolver = client_identity_from_state):
        if authentication_authority is None:
            raise ValueError("authentication_authority cannot be None")
        if not token_endpoint_uri:
            raise ValueError("token_endpoint_uri cannot be empty")

        super().__init__(app)
        self.authentication_authority = authentication_authority
        self.token_endpoint_uri = token_endpoint_uri
        self.identity_resolver = identity_resolver

    def matches(self, request: Request) -> bool:
        """Whether the request targets the token endpoint."""
        return request.method == "POST" and request.url.path == self.token_endpoint_uri

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not self.matches(request):
            return await call_next(request)

        try:
            form = await request.form()

            logger.log_http_request(
                request.method,
                request.url.path,
                params={key: form.getlist(key) for key in form.keys()}
            )

            token_request = validate_token_request(form)

            # Resolved once; the same identity is used for the whole request
            client = self.identity_resolver(request)
            if client is None:
                raise ClientIdentityMissingError()

            result = await run_in_threadpool(
                dispatch, token_request, client, self.authentication_authority
            )
        except ClientDisconnect:
            logger.log_info("Client disconnected before the token request was read")
            raise
        except Exception as exc:
            error = to_protocol_error(exc)
            if isinstance(exc, InvalidRequestParameterError):
                message_type = MessageType.VALIDATION_FAILURE.value
            else:
                message_type = "Token Request Rejected"

            logger.log_oauth_message(
                ComponentType.TOKEN_ENDPOINT.value, ComponentType.CLIENT.value,
                message_type,
                {
                    "error": error.error.value,
                    "error_description": error.error_description
                },
                success=False
            )
            return error_response(error)

        logger.log_oauth_message(
            ComponentType.TOKEN_ENDPOINT.value, ComponentType.CLIENT.value,
            "Access Token Response",
            {
                "client_id": client.client_id,
                "token_type": result.token_type.value,
                "expires_in": result.expires_in,
                "scope": " ".join(sorted(result.scopes))
            }
        )
        return token_response(result)
