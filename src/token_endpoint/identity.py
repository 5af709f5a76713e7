"""
Resolution of the client already authenticated for a request.

Client authentication happens upstream of the token endpoint. A resolver
reads the resulting identity from the request; the middleware calls it once
per request and passes the identity explicitly from then on.
"""

from typing import Callable, Optional

from starlette.requests import Request

from ..shared.oauth_models import ClientIdentity
from .storage import RegisteredClientStore

IdentityResolver = Callable[[Request], Optional[ClientIdentity]]

CLIENT_IDENTITY_STATE_KEY = "client_identity"


def client_identity_from_state(request: Request) -> Optional[ClientIdentity]:
    """Read the identity an upstream middleware stored on ``request.state``."""
    return getattr(request.state, CLIENT_IDENTITY_STATE_KEY, None)


def client_identity_from_header(client_store: RegisteredClientStore, header_name: str) -> IdentityResolver:
    """
    Build a resolver for deployments behind an authenticating proxy.

    The proxy authenticates the client and forwards its client_id in
    ``header_name``; the resolver looks the client up in ``client_store``.
    Only use this when the header cannot be set by the caller directly.
    """
    def resolve(request: Request) -> Optional[ClientIdentity]:
        client_id = request.headers.get(header_name)
        if not client_id:
            return None
        return client_store.get_client(client_id)

    return resolve
