"""Deterministic cache keys for oversized change-mode responses.

A fingerprint is the first ``FINGERPRINT_LENGTH`` hex characters of the SHA-256
digest of a canonical JSON document holding the original request text and the
request parameters that affect the response. It depends on nothing else, so a
retried request in a new process maps to the same key. Hex output is safe as a
file name on every platform.
"""

import hashlib
import json
from collections.abc import Mapping
from typing import Any

# 128 bits of SHA-256
FINGERPRINT_LENGTH = 32


def fingerprint(original_input: str, params: Mapping[str, Any] | None = None) -> str:
    """Return the cache key for a request."""
    payload = json.dumps(
        {"input": original_input, "params": dict(params or {})},
        sort_keys=True,
        separators=(",", ":"),
        default=str,
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]


def is_valid_fingerprint(value: str) -> bool:
    if len(value) != FINGERPRINT_LENGTH:
        return False
    return all(char in "0123456789abcdef" for char in value)
