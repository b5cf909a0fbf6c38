"""SHA-256 content hashing for block list change detection"""

import hashlib
import json
from typing import Any


def sha256(content: str) -> str:
    """Return hex-encoded SHA-256 hash of content (64 chars, matches String(64) column)."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def records_hash(records: list[dict[str, Any]]) -> str:
    """Hash of a block record list in canonical JSON form (sorted keys, no whitespace)."""
    return sha256(json.dumps(records, sort_keys=True, separators=(",", ":"), ensure_ascii=False))
