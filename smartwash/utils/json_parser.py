# smartwash/utils/json_parser.py
"""Helpers for picking fields out of loosely-structured JSON responses."""

import json
from typing import Optional, Any, Union


def safe_parse_json(raw: Union[str, bytes]) -> Optional[Any]:
    """Parse JSON text or bytes safely. Returns None on error."""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return None


def get_nested(data: Any, *keys: Union[str, int], default: Any = None) -> Any:
    """
    Safely navigate nested dict keys and list indexes.
    Returns default if any step is missing.
    """
    current = data
    for key in keys:
        if isinstance(key, int):
            if not isinstance(current, list) or not -len(current) <= key < len(current):
                return default
            current = current[key]
        else:
            if not isinstance(current, dict) or key not in current:
                return default
            current = current[key]
    return current
