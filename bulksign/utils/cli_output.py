"""CLI JSON output wrapper with schema metadata.

Wraps machine-readable CLI output with ``schema_id``, ``schema_version``,
``producer`` and ``produced_at`` so pipeline steps can parse it safely.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

from bulksign import __version__


def json_response(
    schema_id: str,
    schema_version: int,
    **data: Any,
) -> str:
    """Create schema-wrapped JSON response for CLI output.

    Args:
        schema_id: Identifier for the output type (e.g., "signing_run").
        schema_version: Integer version for backward compatibility.
        **data: Payload data to include in the response.

    Returns:
        JSON string with schema metadata and payload.
    """
    wrapped = {
        "schema_id": schema_id,
        "schema_version": schema_version,
        "producer": f"bulksign-{__version__}",
        "produced_at": datetime.now(UTC).isoformat(),
        **data,
    }
    return json.dumps(wrapped, indent=2, default=str)
