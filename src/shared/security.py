"""
Security utilities for the OAuth 2.0 token endpoint.

Random values for authorization codes and access tokens issued by the
in-memory authority, and the HTTP headers attached to responses.
"""

import secrets
from typing import Dict

AUTHORIZATION_CODE_BYTES = 32
ACCESS_TOKEN_BYTES = 48


class TokenGenerator:
    """Unguessable, URL-safe values for codes and tokens."""

    @staticmethod
    def generate_authorization_code() -> str:
        return secrets.token_urlsafe(AUTHORIZATION_CODE_BYTES)

    @staticmethod
    def generate_access_token() -> str:
        """
        Generate an opaque bearer token value.

        Returns:
            str: URL-safe token, longer than an authorization code
        """
        return secrets.token_urlsafe(ACCESS_TOKEN_BYTES)


class SecurityHeaders:
    """Header sets applied by the token endpoint application."""

    @staticmethod
    def get_oauth_security_headers() -> Dict[str, str]:
        """Headers added to every response the application serves."""
        return {
            'X-Content-Type-Options': 'nosniff',
            'X-Frame-Options': 'DENY',
            'Strict-Transport-Security': 'max-age=31536000; includeSubDomains'
        }

    @staticmethod
    def get_token_response_headers() -> Dict[str, str]:
        """
        Caching headers required on every token endpoint response,
        successful or not (RFC 6749 section 5.1).
        """
        return {
            'Cache-Control': 'no-store',
            'Pragma': 'no-cache'
        }
