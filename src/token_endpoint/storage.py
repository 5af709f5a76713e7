"""
In-memory storage for registered clients and authorization codes.

These stores back the in-memory authentication authority and the proxy
header identity resolver. The token endpoint itself never touches them.

Note: In production systems, these would be replaced with persistent
storage shared by every instance of the authorization server.
"""

import threading
from datetime import datetime, timedelta, timezone
from typing import Dict, FrozenSet, Iterable, Optional

from pydantic import BaseModel, Field

from ..shared.logging_utils import ComponentType, OAuthLogger
from ..shared.oauth_models import ClientIdentity, GrantType
from ..shared.security import TokenGenerator

# Initialize logger for storage operations
logger = OAuthLogger(ComponentType.AUTH_STORAGE.value)

DEMO_CLIENTS = (
    ClientIdentity(
        client_id="demo-client",
        scopes=frozenset({"read", "write"}),
        redirect_uris=("http://localhost:8080/callback",),
        grant_types=frozenset({GrantType.AUTHORIZATION_CODE})
    ),
    ClientIdentity(
        client_id="service-client",
        scopes=frozenset({"read", "metrics"}),
        grant_types=frozenset({GrantType.CLIENT_CREDENTIALS})
    ),
)


class RegisteredClientStore:
    """
    In-memory registry of OAuth clients.

    Holds the registered scopes, redirect URIs and permitted grant types of
    each client. Seeded with demo clients unless explicit clients are given.
    """

    def __init__(self, clients: Optional[Iterable[ClientIdentity]] = None):
        # Read-only after construction
        self._clients: Dict[str, ClientIdentity] = {
            client.client_id: client
            for client in (DEMO_CLIENTS if clients is None else clients)
        }

        logger.log_oauth_message(
            ComponentType.SYSTEM.value, ComponentType.AUTH_STORAGE.value,
            "Registered Client Store Initialized",
            {"clients": sorted(self._clients)}
        )

    def get_client(self, client_id: str) -> Optional[ClientIdentity]:
        """Look up a registered client by identifier."""
        return self._clients.get(client_id)


class AuthorizationCodeRecord(BaseModel):
    """Metadata bound to an issued authorization code."""
    code: str
    client_id: str
    scopes: FrozenSet[str] = Field(default_factory=frozenset)
    redirect_uri: Optional[str] = None
    created_at: datetime
    expires_at: datetime


class AuthorizationCodeStore:
    """
    In-memory storage for OAuth 2.0 authorization codes.

    Codes are short-lived and single use. A code is bound to the client it
    was issued to and to the redirect URI of the authorization request.
    Redeemed codes are removed immediately and expired codes are pruned
    whenever a new code is issued, so storage only holds live codes.
    """

    def __init__(self, code_ttl_seconds: int = 600):
        """Initialize authorization code store with empty storage."""
        self._lock = threading.Lock()
        self._codes: Dict[str, AuthorizationCodeRecord] = {}
        self.code_ttl = timedelta(seconds=code_ttl_seconds)

        logger.log_oauth_message(
            ComponentType.SYSTEM.value, ComponentType.AUTH_STORAGE.value,
            "Authorization Code Store Initialized",
            {
                "expiration_seconds": code_ttl_seconds,
                "security_features": ["one_time_use", "client_binding", "redirect_uri_binding"]
            }
        )

    def store_code(self,
                   client_id: str,
                   scopes: Iterable[str],
                   redirect_uri: Optional[str] = None) -> str:
        """
        Issue and store an authorization code.

        Args:
            client_id: Client the code is issued to
            scopes: Scopes approved for the code
            redirect_uri: Redirect URI of the authorization request, if any

        Returns:
            str: Generated authorization code
        """
        self.cleanup_expired_codes()

        code = TokenGenerator.generate_authorization_code()
        created_at = datetime.now(timezone.utc)
        record = AuthorizationCodeRecord(
            code=code,
            client_id=client_id,
            scopes=frozenset(scopes),
            redirect_uri=redirect_uri,
            created_at=created_at,
            expires_at=created_at + self.code_ttl
        )

        with self._lock:
            self._codes[code] = record

        logger.log_oauth_message(
            ComponentType.AUTH_STORAGE.value, ComponentType.AUTH_AUTHORITY.value,
            "Authorization Code Stored",
            {
                "code": code,
                "client_id": client_id,
                "scope": " ".join(sorted(record.scopes)),
                "expires_at": record.expires_at.isoformat()
            }
        )

        return code

    def consume_code(self, code: str) -> Optional[AuthorizationCodeRecord]:
        """
        Remove an authorization code from storage and return it.

        Returns None when the code is unknown (never issued or already
        redeemed) or expired.
        """
        now = datetime.now(timezone.utc)

        with self._lock:
            record = self._codes.pop(code, None)

        if record is None or now > record.expires_at:
            logger.log_oauth_message(
                ComponentType.AUTH_STORAGE.value, ComponentType.AUTH_AUTHORITY.value,
                "Authorization Code Rejected",
                {"code": code, "reason": "code_not_exists" if record is None else "code_expired"},
                success=False
            )
            return None

        logger.log_oauth_message(
            ComponentType.AUTH_STORAGE.value, ComponentType.AUTH_AUTHORITY.value,
            "Authorization Code Consumed",
            {
                "code": code,
                "client_id": record.client_id,
                "age_seconds": (now - record.created_at).total_seconds()
            }
        )
        return record

    def cleanup_expired_codes(self) -> int:
        """
        Remove expired authorization codes from storage.

        Returns:
            int: Number of expired codes removed
        """
        now = datetime.now(timezone.utc)
        with self._lock:
            expired_codes = [
                code for code, record in self._codes.items()
                if now > record.expires_at
            ]
            for code in expired_codes:
                del self._codes[code]

        if expired_codes:
            logger.log_info("Expired codes removed", {"codes_removed": len(expired_codes)})

        return len(expired_codes)
