"""Service layer for mcp-datastore.

Provides the MCP transport client, the shared authenticated session and
the datastore provider that maps storage operations onto remote tools.
"""

from src.services.datastore_provider import DatastoreProvider
from src.services.mcp_client import MCPClient
from src.services.oauth2 import OAuth2ClientCredentialsProvider, StaticTokenProvider
from src.services.session_manager import MCPSessionManager

__all__ = [
    "DatastoreProvider",
    "MCPClient",
    "MCPSessionManager",
    "OAuth2ClientCredentialsProvider",
    "StaticTokenProvider",
]
