"""Cache-key generation for AI generation calls.

A key is ``<operation>_<base36 hash>`` where the hash is a 32-bit
``h = h * 31 + ord(c)`` string hash over the key-sorted JSON of the params.
It is fast and non-cryptographic: collisions are possible but rare at the
cache sizes involved, and the operation prefix keeps them within one
operation.

Tenant-scoped callers must put the tenant identifier (``user_id`` /
``project_id``) into *params*; the cache itself is not partitioned.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ai_gateway.utils.serialization import stable_serialize

_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def string_hash(text: str) -> int:
    """Return the signed 32-bit ``((h << 5) - h) + ord(c)`` hash of *text*."""
    value = 0
    for char in text:
        value = ((value << 5) - value + ord(char)) & 0xFFFFFFFF
    if value & 0x80000000:
        value -= 1 << 32
    return value


def to_base36(number: int) -> str:
    """Render a non-negative integer in lowercase base 36."""
    if number < 0:
        raise ValueError("to_base36 expects a non-negative integer")
    if number == 0:
        return "0"
    digits: list[str] = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def generate_cache_key(operation: str, params: Mapping[str, Any]) -> str:
    """Build a deterministic cache key from an operation name and its params.

    Parameters
    ----------
    operation:
        Logical operation name, e.g. ``"generateInsights"``.
    params:
        Explicit mapping of normalized parameters.  Key order never affects
        the result.

    Raises
    ------
    TypeError
        If *params* is not a mapping or contains unserializable values.
    """
    if not isinstance(params, Mapping):
        raise TypeError(
            f"Cache key params must be a mapping, got {type(params).__name__}"
        )
    serialized = stable_serialize(dict(params))
    return f"{operation}_{to_base36(abs(string_hash(serialized)))}"


def time_bucket(now_ms: float, bucket_ms: int) -> int:
    """Return the index of the *bucket_ms*-wide window containing *now_ms*.

    Putting the bucket into key params makes otherwise identical requests
    regenerate once per window even when their TTL would allow a hit.
    """
    return int(now_ms // bucket_ms)
