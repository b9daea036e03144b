"""YAML configuration loader with env var resolution and Pydantic validation.

Loads config from (priority order):
1. --config <path> CLI flag
2. ./mcp-datastore.yaml (working directory)
3. ~/.mcp-datastore/config.yaml (user home)

Environment variables override YAML: MCP_DATASTORE_<SECTION>_<KEY>.
${VAR} references in YAML values resolve from environment at load time.

Example mcp-datastore.yaml:

    connection:
      type: http
      url: https://tools.example.com/mcp
    oauth2:
      token_url: https://auth.example.com/oauth/token
      client_id: ${DATASTORE_CLIENT_ID}
      client_secret: ${DATASTORE_CLIENT_SECRET}
      scopes: [records]
    models:
      - namespace: acct
        plural_name: Widgets
        properties:
          name: {kind: Text, required: true}
"""

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel

from src.models.descriptors import ModelDescriptor
from src.services.connection_types import (
    ClientIdentity,
    ConnectionConfig,
    ConnectionSettings,
    CredentialsConfig,
    OAuth2Config,
)

logger = logging.getLogger(__name__)

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")

ENV_PREFIX = "MCP_DATASTORE_"


def resolve_env_vars(value: str) -> str:
    """Resolve ${VAR} references in a string from environment variables.

    Args:
        value: String potentially containing ${VAR} references.

    Returns:
        String with all ${VAR} references replaced by their env values.
        Missing env vars resolve to empty string.
    """
    def _replace(match: re.Match) -> str:
        return os.environ.get(match.group(1), "")

    return _ENV_VAR_PATTERN.sub(_replace, value)


def _resolve_env_vars_recursive(data: Any) -> Any:
    """Recursively resolve ${VAR} references in a nested data structure."""
    if isinstance(data, str):
        return resolve_env_vars(data)
    elif isinstance(data, dict):
        return {k: _resolve_env_vars_recursive(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_resolve_env_vars_recursive(item) for item in data]
    return data


class LoggingConfig(BaseModel):
    """Log level and format for the CLI process."""

    level: str = "info"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class DatastoreConfig(BaseModel):
    """Top-level configuration for mcp-datastore."""

    connection: ConnectionSettings | None = None
    credentials: CredentialsConfig = CredentialsConfig()
    oauth2: OAuth2Config | None = None
    client: ClientIdentity = ClientIdentity()
    logging: LoggingConfig = LoggingConfig()
    models: list[ModelDescriptor] = []

    def to_connection_config(self) -> ConnectionConfig:
        """Build the immutable ConnectionConfig for the session manager.

        Raises:
            ValueError: No ``connection`` section configured, or more than
                one credential source set.
        """
        if self.connection is None:
            raise ValueError("No 'connection' section configured")
        return ConnectionConfig(
            connection=self.connection,
            credentials=self.credentials,
            oauth2=self.oauth2,
            client=self.client,
        )

    def find_model(self, key: str) -> ModelDescriptor | None:
        """Find a configured model by ``namespace/PluralName`` (case-insensitive)."""
        wanted = key.lower()
        for model in self.models:
            if model.key.lower() == wanted:
                return model
        return None


def _find_config_file() -> Path | None:
    """Search for config file in standard locations.

    Returns:
        Path to config file if found, None otherwise.
    """
    candidates = [
        Path.cwd() / "mcp-datastore.yaml",
        Path.cwd() / "mcp-datastore.yml",
        Path.home() / ".mcp-datastore" / "config.yaml",
        Path.home() / ".mcp-datastore" / "config.yml",
    ]
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Apply MCP_DATASTORE_<SECTION>_<KEY> env var overrides to config data.

    Matches section names by longest prefix. For example,
    ``MCP_DATASTORE_OAUTH2_CLIENT_SECRET`` maps to section ``oauth2``,
    field ``client_secret``. List sections (``models``) are not
    overridable. ``true``/``false`` become booleans; everything else
    stays a string.

    Args:
        data: Parsed YAML config dict.

    Returns:
        Config dict with env var overrides applied.
    """
    known_sections = sorted(
        (
            name for name in DatastoreConfig.model_fields
            if name != "models"
        ),
        key=len,
        reverse=True,
    )
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        suffix = key[len(ENV_PREFIX):].lower()  # e.g. "oauth2_client_secret"
        matched_section = None
        matched_field = None
        for section in known_sections:
            section_prefix = section + "_"
            if suffix.startswith(section_prefix):
                matched_section = section
                matched_field = suffix[len(section_prefix):]
                break
        if matched_section is None or not matched_field:
            continue
        if data.get(matched_section) is None:
            data[matched_section] = {}
        if isinstance(data[matched_section], dict):
            if value.lower() in ("true", "false"):
                data[matched_section][matched_field] = value.lower() == "true"
            else:
                data[matched_section][matched_field] = value
    return data


def load_config(config_path: str | None = None) -> DatastoreConfig | None:
    """Load mcp-datastore configuration from YAML file with env var resolution.

    Args:
        config_path: Explicit path to config file. If None, searches
            standard locations (cwd, then ~/.mcp-datastore/).

    Returns:
        Parsed and validated DatastoreConfig, or None if no config found.

    Raises:
        FileNotFoundError: Explicit ``config_path`` does not exist.
        ValueError: Config root is not a mapping.
    """
    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        path = _find_config_file()
        if path is None:
            return None

    logger.info("Loading config from %s", path)

    with open(path, encoding="utf-8") as f:
        raw_data = yaml.safe_load(f) or {}
    if not isinstance(raw_data, dict):
        raise ValueError(f"Config root must be a mapping, got {type(raw_data).__name__}")

    data = _resolve_env_vars_recursive(raw_data)
    data = _apply_env_overrides(data)

    return DatastoreConfig(**data)
