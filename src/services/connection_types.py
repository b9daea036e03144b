"""Shared types for MCP endpoint connection configuration.

Neutral module with no service-layer imports. Used by the session
manager, the OAuth2 token provider and the CLI config loader.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TransportKind(str, Enum):
    """Wire framing of the remote MCP endpoint."""

    HTTP = "http"  # streamable HTTP (request/response multiplexed)
    SSE = "sse"  # server-sent events


class CredentialSource(str, Enum):
    """Where the session's credential comes from."""

    DIRECT_TOKEN = "direct_token"
    OAUTH2 = "oauth2"
    API_KEY = "api_key"
    NONE = "none"


class ConnectionSettings(BaseModel):
    """Endpoint location and framing."""

    model_config = ConfigDict(frozen=True)

    type: TransportKind = TransportKind.HTTP
    url: str


class CredentialsConfig(BaseModel):
    """Static credentials. At most one may be set."""

    model_config = ConfigDict(frozen=True)

    oauth_token: str | None = None
    api_key: str | None = None


class OAuth2Config(BaseModel):
    """OAuth2 client-credentials grant settings."""

    model_config = ConfigDict(frozen=True)

    token_url: str
    client_id: str
    client_secret: str
    scopes: list[str] = Field(default_factory=list)


class ClientIdentity(BaseModel):
    """Name/version the MCP client announces during initialization."""

    model_config = ConfigDict(frozen=True)

    name: str = "mcp-datastore"
    version: str = "1.0.0"


class ConnectionConfig(BaseModel):
    """Immutable connection configuration for one remote endpoint."""

    model_config = ConfigDict(frozen=True)

    connection: ConnectionSettings
    credentials: CredentialsConfig = CredentialsConfig()
    oauth2: OAuth2Config | None = None
    client: ClientIdentity = ClientIdentity()

    @model_validator(mode="after")
    def at_most_one_credential(self) -> "ConnectionConfig":
        """Ensure at most one credential source is populated."""
        set_fields = sum(
            1 for v in (self.credentials.oauth_token, self.credentials.api_key, self.oauth2)
            if v
        )
        if set_fields > 1:
            raise ValueError(
                "Only one of credentials.oauth_token, credentials.api_key or oauth2 may be set"
            )
        return self

    @property
    def credential_source(self) -> CredentialSource:
        """Credential source derived from the populated fields."""
        if self.credentials.oauth_token:
            return CredentialSource.DIRECT_TOKEN
        if self.oauth2 is not None:
            return CredentialSource.OAUTH2
        if self.credentials.api_key:
            return CredentialSource.API_KEY
        return CredentialSource.NONE
