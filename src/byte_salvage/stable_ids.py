# byte_salvage/stable_ids.py
from __future__ import annotations

import hashlib
import json
from typing import Any, Sequence


def _sha256_hex(s: str) -> str:
    return hashlib.sha256(s.encode("utf-8")).hexdigest()


def _canon(obj: Any) -> str:
    """
    Canonical JSON string (stable across runs) for hashing.
    """
    return json.dumps(obj, sort_keys=True, ensure_ascii=False, separators=(",", ":"))


def derive_evidence_id(
    *,
    ingested: bytes,
    safe: bytes,
    garbage: bytes,
    spans: Sequence[tuple[int, int, int]],
) -> str:
    """
    Deterministic id for one evidence state.

    Two decoders fed the same bytes through different chunkings may disagree on
    their bookkeeping, so the id covers the salvage outcome and the absolute
    span layout, not just the input bytes.
    """
    key_obj = {
        "ingested": ingested.hex(),
        "safe": safe.hex(),
        "garbage": garbage.hex(),
        "spans": [list(span) for span in spans],
    }
    return "evd_" + _sha256_hex(_canon(key_obj))
