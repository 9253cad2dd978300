"""
byte_salvage: recover UTF-8 text from untrusted bytes without losing the rest.

Protocol fields typed "string" or "boolean" rarely say what to do with bytes
outside the allowed range, and whatever a parser quietly drops or coerces is a
channel someone can smuggle data through. Everything here keeps those bytes as
inspectable evidence instead.
"""

from byte_salvage.contracts import (
    EvidenceReport,
    GarbageSpan,
    RecoveredRun,
    ReportPayloadValidationError,
    VerdictStatus,
)
from byte_salvage.decoder import ByteEvidence, RecoveryHook
from byte_salvage.errors import (
    EvidenceCorruptionError,
    HexParseError,
    InvalidUtf8Error,
    SalvageError,
    UnsafeStringError,
    VerdictError,
)
from byte_salvage.hexcodec import from_hex, to_hex
from byte_salvage.interop import (
    SourceKind,
    from_byte_values,
    from_chunks,
    from_source,
    from_stream,
    to_fs_bytes,
    to_path,
    to_text,
)
from byte_salvage.sboolean import SBoolean, classify
from byte_salvage.verdict import best_effort, classify_verdict, summarize, verdict

__all__ = [
    "ByteEvidence",
    "EvidenceCorruptionError",
    "EvidenceReport",
    "GarbageSpan",
    "HexParseError",
    "InvalidUtf8Error",
    "RecoveredRun",
    "RecoveryHook",
    "ReportPayloadValidationError",
    "SBoolean",
    "SalvageError",
    "SourceKind",
    "UnsafeStringError",
    "VerdictError",
    "VerdictStatus",
    "best_effort",
    "classify",
    "classify_verdict",
    "from_byte_values",
    "from_chunks",
    "from_hex",
    "from_source",
    "from_stream",
    "summarize",
    "to_fs_bytes",
    "to_hex",
    "to_path",
    "to_text",
    "verdict",
]
