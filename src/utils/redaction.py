"""Credential masking for config dumps and remote error text.

Secrets reach two surfaces: the resolved datastore config (direct bearer
token, API key, OAuth2 client secret) and text echoed back by the token
endpoint or the MCP endpoint. Both are masked here before they are logged,
printed or copied into an exception.
"""

import re
from typing import Any, Mapping

MASK = "***REDACTED***"

# Config field names holding a credential, wherever they are nested.
_SECRET_FIELD = re.compile(r"secret|token|password|api[_-]?key|authorization", re.IGNORECASE)

_BEARER = re.compile(r"\bBearer\s+[^\s\"',;]+", re.IGNORECASE)
# "client_secret=...", "x-api-key: ...", "\"access_token\": \"...\""
_CREDENTIAL_PAIR = re.compile(
    r"(\"?[\w-]*(?:secret|token|password|api[_-]?key)\"?\s*[:=]\s*)"
    r"(\"[^\"]*\"|[^\s&,;}]+)",
    re.IGNORECASE,
)


def mask_config(data: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of a config dump with every credential value masked.

    Fields whose name looks like a credential are masked at any depth and a
    ``headers`` mapping is masked whole. Unset (None) fields stay None so the
    output still shows which credential source is in use.
    """
    return {key: _mask_field(key, value) for key, value in data.items()}


def _mask_field(key: str, value: Any) -> Any:
    if value is None:
        return None
    if key.lower() == "headers" or _SECRET_FIELD.search(key):
        return MASK
    if isinstance(value, Mapping):
        return mask_config(value)
    if isinstance(value, list):
        return [mask_config(item) if isinstance(item, Mapping) else item for item in value]
    return value


def scrub_credentials(text: str | None, limit: int = 500) -> str | None:
    """Mask bearer tokens and credential pairs in remote text, then truncate.

    Key names are kept so the message stays readable; only values go.

    Args:
        text: Response body or error payload (None passes through).
        limit: Maximum length of the returned text.
    """
    if text is None:
        return None
    scrubbed = _BEARER.sub(f"Bearer {MASK}", text)
    scrubbed = _CREDENTIAL_PAIR.sub(lambda m: m.group(1) + MASK, scrubbed)
    if len(scrubbed) > limit:
        scrubbed = scrubbed[:limit - 3] + "..."
    return scrubbed
