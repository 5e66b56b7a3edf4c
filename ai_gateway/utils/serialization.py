"""Deterministic JSON serialization shared by key generation and size estimates.

``stable_serialize`` always sorts mapping keys, so two parameter mappings
that are deeply equal produce the same string no matter what order their
keys were inserted in.  Pydantic models, enums, sets and datetimes are
normalised first so services can pass their domain objects straight in.
"""

from __future__ import annotations

import json
from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel


def _to_jsonable(obj: Any) -> Any:
    """``json.dumps`` hook for the non-JSON types the services pass around."""
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (set, frozenset)):
        # Sort on the serialized form so mixed-type sets still order stably.
        return sorted(obj, key=lambda item: json.dumps(item, sort_keys=True, default=_to_jsonable))
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    raise TypeError(f"Object of type {type(obj).__name__} is not serializable")


def stable_serialize(value: Any) -> str:
    """Serialize *value* to compact JSON with sorted keys.

    Raises
    ------
    TypeError
        If *value* contains an object with no JSON representation.
    """
    return json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=_to_jsonable,
    )


def estimate_size(value: Any) -> int:
    """Approximate the in-memory cost of *value* in bytes.

    Heuristic: serialized length x 2, i.e. two bytes per character.  Good
    enough to bound cache growth, not an accounting method.  Values that
    cannot be serialized fall back to their ``repr``.
    """
    try:
        serialized = stable_serialize(value)
    except (TypeError, ValueError):
        serialized = repr(value)
    return len(serialized) * 2
