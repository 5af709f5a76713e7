"""Token endpoint settings, read from the environment or a .env file."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TOKEN_ENDPOINT_URI = "/oauth2/token"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="TOKEN_ENDPOINT_", env_file=".env", extra="ignore")

    token_endpoint_uri: str = Field(default=DEFAULT_TOKEN_ENDPOINT_URI, min_length=1)
    access_token_ttl_seconds: int = Field(default=3600, ge=1)
    authorization_code_ttl_seconds: int = Field(default=600, ge=1)
    identity_header: str = "X-Authenticated-Client-Id"
    # Only enable behind a proxy that authenticates clients and strips this header from callers
    trust_identity_header: bool = False
    host: str = "0.0.0.0"
    port: int = 8081
    log_level: str = "INFO"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
