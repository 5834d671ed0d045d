"""
JSON output formatting for workon commands.

Every document carries a schema_version so scripts can detect format changes.
"""

import json
from typing import Any, Dict

# Schema version for JSON output (follows semantic versioning)
SCHEMA_VERSION = "1.0.0"


def with_schema_version(data: Dict[str, Any]) -> Dict[str, Any]:
    return {"schema_version": SCHEMA_VERSION, **data}


def output_json(data: Dict[str, Any], indent: int = 2) -> str:
    """
    Serialize a response dict to JSON.

    Args:
        data: JSON-compatible dict (usually from a to_dict() method)
        indent: Indentation level

    Returns:
        JSON string with schema_version as the first key
    """
    return json.dumps(with_schema_version(data), indent=indent, ensure_ascii=False, default=str)
