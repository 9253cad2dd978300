# byte_salvage/errors.py
from __future__ import annotations

import errno
from typing import Sequence


class SalvageError(ValueError):
    """Base class for every error raised by byte_salvage on bad input."""


class HexParseError(SalvageError):
    """Raised when hex text is empty or contains a non-hex character."""

    def __init__(self, message: str, *, position: int | None = None, character: str | None = None) -> None:
        super().__init__(message)
        self.position = position
        self.character = character


class VerdictError(SalvageError):
    """
    A strict conversion of ingested bytes to text was refused.

    Carries enough evidence to diagnose the refusal without re-running the
    decoder. ``to_io_error`` adapts it for protocol layers that only speak
    ``OSError``.
    """

    def to_io_error(self) -> OSError:
        return OSError(errno.EILSEQ, str(self))


class UnsafeStringError(VerdictError):
    """Some ingested bytes were not valid UTF-8 and were set aside as garbage."""

    def __init__(self, safe_bytes: bytes, garbage_bytes: bytes) -> None:
        from byte_salvage.hexcodec import to_hex

        self.safe_bytes = safe_bytes
        self.garbage_bytes = garbage_bytes
        super().__init__(
            f"unsafe conversion of byte-sequence {to_hex(safe_bytes)!r} to string: "
            f"contains garbage {to_hex(garbage_bytes)!r}"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UnsafeStringError):
            return NotImplemented
        return (self.safe_bytes, self.garbage_bytes) == (other.safe_bytes, other.garbage_bytes)

    __hash__ = None  # type: ignore[assignment]


class InvalidUtf8Error(VerdictError):
    """
    The whole ingested buffer failed UTF-8 validation although no garbage was
    recorded. Only reachable when the incremental bookkeeping and the
    whole-buffer check disagree (unflushed tail, recovered text).
    """

    def __init__(
        self,
        cause: UnicodeDecodeError,
        garbage: bytes,
        spans: Sequence[tuple[int, int]],
        ingested: bytes,
        safe: bytes,
    ) -> None:
        from byte_salvage.hexcodec import to_hex

        self.cause = cause
        self.garbage = garbage
        self.spans = tuple(spans)
        self.ingested = ingested
        self.safe = safe
        facets = ", ".join(f"{start}-{end}" for start, end in self.spans)
        super().__init__(
            f"unsafe byte array conversion to string `{cause.reason}' at byte {cause.start}: "
            f"garbage {to_hex(garbage)} at locations {{{facets}}}"
        )


class EvidenceCorruptionError(AssertionError):
    """Safe bytes stopped being valid UTF-8. Always a defect in the decoder."""


__all__ = [
    "EvidenceCorruptionError",
    "HexParseError",
    "InvalidUtf8Error",
    "SalvageError",
    "UnsafeStringError",
    "VerdictError",
]
