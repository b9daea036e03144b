"""Root-level pytest fixtures for all tests.

Provides shared fixtures for:
- Model descriptors (a small Widgets model and a model with every kind)
- Fake model instances implementing ``get_model``/``to_obj``
- A mock datastore endpoint and session
- Connection configurations per credential source
"""

from typing import Any

import pytest

from src.models.descriptors import ModelDescriptor, PropertyDescriptor, PropertyKind
from src.services.connection_types import (
    ConnectionConfig,
    ConnectionSettings,
    CredentialsConfig,
    OAuth2Config,
)
from tests.helpers.mock_datastore_mcp import MockDatastoreEndpoint, MockSession

ENDPOINT_URL = "https://tools.example.com/mcp"


# ============================================================================
# Pytest Markers
# ============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests requiring a live MCP endpoint"
    )


# ============================================================================
# Model Fixtures
# ============================================================================


@pytest.fixture
def widgets_model() -> ModelDescriptor:
    """acct/Widgets with one required and one optional property."""
    return ModelDescriptor(
        namespace="acct",
        plural_name="Widgets",
        properties={
            "name": PropertyDescriptor(kind=PropertyKind.TEXT, required=True),
            "qty": PropertyDescriptor(kind=PropertyKind.INTEGER),
        },
    )


@pytest.fixture
def all_kinds_model() -> ModelDescriptor:
    """Model with one property per supported kind, none required."""
    return ModelDescriptor(
        namespace="test",
        plural_name="Everything",
        properties={
            kind.value.lower(): PropertyDescriptor(kind=kind) for kind in PropertyKind
        },
    )


class FakeInstance:
    """Minimal ModelInstance: returns a fixed projection."""

    def __init__(self, model: ModelDescriptor, data: dict[str, Any]) -> None:
        self._model = model
        self._data = data

    def get_model(self) -> ModelDescriptor:
        return self._model

    async def to_obj(self) -> dict[str, Any]:
        return dict(self._data)


@pytest.fixture
def make_instance():
    """Factory for FakeInstance objects."""
    def _make(model: ModelDescriptor, data: dict[str, Any]) -> FakeInstance:
        return FakeInstance(model, data)
    return _make


# ============================================================================
# Mock Endpoint Fixtures
# ============================================================================


@pytest.fixture
def endpoint() -> MockDatastoreEndpoint:
    return MockDatastoreEndpoint()


@pytest.fixture
def mock_session(endpoint) -> MockSession:
    return MockSession(endpoint)


# ============================================================================
# Connection Fixtures
# ============================================================================


@pytest.fixture
def connection_settings() -> ConnectionSettings:
    return ConnectionSettings(type="http", url=ENDPOINT_URL)


@pytest.fixture
def direct_token_config(connection_settings) -> ConnectionConfig:
    return ConnectionConfig(
        connection=connection_settings,
        credentials=CredentialsConfig(oauth_token="direct-abc"),
    )


@pytest.fixture
def api_key_config(connection_settings) -> ConnectionConfig:
    return ConnectionConfig(
        connection=connection_settings,
        credentials=CredentialsConfig(api_key="key-123"),
    )


@pytest.fixture
def oauth2_config(connection_settings) -> ConnectionConfig:
    return ConnectionConfig(
        connection=connection_settings,
        oauth2=OAuth2Config(
            token_url="https://auth.example.com/oauth/token",
            client_id="client-x",
            client_secret="secret-y",
            scopes=["records", "admin"],
        ),
    )
