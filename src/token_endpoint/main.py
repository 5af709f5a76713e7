"""
OAuth 2.0 Token Endpoint Server

This FastAPI application hosts the OAuth 2.0 token endpoint. Token requests
are handled by ``OAuth2TokenEndpointMiddleware``; the application itself only
serves health and service information endpoints.

Key Features:
- authorization_code and client_credentials grants
- Strict single-value parameter validation with RFC 6749 error codes
- Pluggable authentication authority (in-memory authority by default)
- Client identity supplied by an upstream authentication layer
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..shared.logging_utils import ComponentType, OAuthLogger, configure_logging
from ..shared.security import SecurityHeaders
from .authority import InMemoryAuthenticationAuthority
from .config import Settings, get_settings
from .dispatcher import AuthenticationAuthority
from .identity import IdentityResolver, client_identity_from_header, client_identity_from_state
from .middleware import OAuth2TokenEndpointMiddleware
from .storage import AuthorizationCodeStore, RegisteredClientStore

# Initialize logger
logger = OAuthLogger(ComponentType.TOKEN_ENDPOINT.value)


def create_app(authority: Optional[AuthenticationAuthority] = None,
               identity_resolver: Optional[IdentityResolver] = None,
               settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the token endpoint application.

    Args:
        authority: Authentication authority; defaults to the in-memory authority
        identity_resolver: Client identity resolver; defaults to the identity
            an upstream authentication layer stored on ``request.state``, or
            to the client_id in ``settings.identity_header`` when
            ``settings.trust_identity_header`` is set
        settings: Application settings; defaults to ``get_settings()``

    Returns:
        FastAPI: Configured application. The in-memory stores are exposed as
        ``app.state.client_store`` and ``app.state.code_store``.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    client_store = RegisteredClientStore()
    code_store = AuthorizationCodeStore(settings.authorization_code_ttl_seconds)

    if authority is None:
        authority = InMemoryAuthenticationAuthority(code_store, settings.access_token_ttl_seconds)
    if identity_resolver is None:
        if settings.trust_identity_header:
            identity_resolver = client_identity_from_header(client_store, settings.identity_header)
        else:
            identity_resolver = client_identity_from_state

    app = FastAPI(
        title="OAuth 2.0 Token Endpoint",
        description="OAuth 2.0 token endpoint supporting authorization_code and client_credentials grants.",
        version="1.0.0",
    )
    app.state.settings = settings
    app.state.client_store = client_store
    app.state.code_store = code_store

    app.add_middleware(
        OAuth2TokenEndpointMiddleware,
        authentication_authority=authority,
        token_endpoint_uri=settings.token_endpoint_uri,
        identity_resolver=identity_resolver,
    )

    # Security headers middleware for web protection
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        """Add standard security headers to every response."""
        response = await call_next(request)
        for header_name, header_value in SecurityHeaders.get_oauth_security_headers().items():
            response.headers.setdefault(header_name, header_value)
        return response

    @app.get("/health")
    async def health_check():
        """Health check endpoint for monitoring server status."""
        return JSONResponse(
            status_code=200,
            content={
                "status": "healthy",
                "service": "OAuth 2.0 Token Endpoint",
                "version": "1.0.0",
                "endpoints": {
                    "token": settings.token_endpoint_uri,
                    "health": "/health"
                }
            }
        )

    @app.get("/")
    async def root():
        """Service information and supported grant types."""
        return JSONResponse(
            content={
                "service": "OAuth 2.0 Token Endpoint",
                "version": "1.0.0",
                "supported_grant_types": ["authorization_code", "client_credentials"],
                "endpoints": {
                    "token": {
                        "url": settings.token_endpoint_uri,
                        "method": "POST",
                        "content_type": "application/x-www-form-urlencoded"
                    },
                    "health": {
                        "url": "/health",
                        "method": "GET"
                    }
                }
            }
        )

    return app


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    logger.log_startup(settings.port, {"token_endpoint": settings.token_endpoint_uri})
    uvicorn.run(create_app(settings=settings), host=settings.host, port=settings.port)
