# byte_salvage/interop.py
"""
Conversions between ByteEvidence and the string-ish types callers hold.

Every supported source goes through ``source_bytes``; the set of sources is
closed (see ``SourceKind``) rather than open to arbitrary objects.
"""
from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any, BinaryIO, Iterable, Union, cast

from byte_salvage._compat import StrEnum
from byte_salvage.decoder import ByteEvidence

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 8192

BytesLike = Union[bytes, bytearray, memoryview]
Source = Union[str, BytesLike, os.PathLike, ByteEvidence]


class SourceKind(StrEnum):
    TEXT = "text"
    BYTES = "bytes"
    PATH = "path"
    EVIDENCE = "evidence"


def source_kind(value: object) -> SourceKind:
    if isinstance(value, ByteEvidence):
        return SourceKind.EVIDENCE
    if isinstance(value, str):
        return SourceKind.TEXT
    if isinstance(value, (bytes, bytearray, memoryview)):
        return SourceKind.BYTES
    if isinstance(value, os.PathLike):
        return SourceKind.PATH
    raise TypeError(f"cannot salvage bytes from {type(value).__name__}")


# lone surrogates that surrogateescape cannot map back to a byte
_UNESCAPABLE_SURROGATES = re.compile("([\ud800-\udc7f\udd00-\udfff]+)")


def _text_bytes(text: str) -> bytes:
    """
    Encode text back to the bytes it came from.

    Escaped bytes (U+DC80..U+DCFF, as produced by ``os.fsdecode`` and the
    ``surrogateescape`` handler) become the original raw byte. Every other lone
    surrogate is kept as its 3-byte encoding, which the decoder then records as
    garbage.
    """
    try:
        return text.encode("utf-8", "surrogateescape")
    except UnicodeEncodeError:
        pass
    parts = _UNESCAPABLE_SURROGATES.split(text)
    # split() with a group alternates plain segments and surrogate runs
    return b"".join(
        part.encode("utf-8", "surrogatepass" if index % 2 else "surrogateescape")
        for index, part in enumerate(parts)
    )


def source_bytes(value: Source) -> bytes:
    kind = source_kind(value)
    if kind is SourceKind.EVIDENCE:
        return cast(ByteEvidence, value).ingested
    if kind is SourceKind.TEXT:
        return _text_bytes(cast(str, value))
    if kind is SourceKind.PATH:
        return os.fsencode(cast("os.PathLike[Any]", value))
    return bytes(cast(BytesLike, value))


def from_source(value: Source) -> ByteEvidence:
    if isinstance(value, ByteEvidence):
        return value.copy()
    return ByteEvidence.new(source_bytes(value))


def from_chunks(chunks: Iterable[Source]) -> ByteEvidence:
    """Feed each chunk incrementally; characters split across chunks are reassembled."""
    evidence = ByteEvidence.empty()
    for chunk in chunks:
        evidence.extend(source_bytes(chunk))
    evidence.finish()
    return evidence


def from_byte_values(values: Iterable[int]) -> ByteEvidence:
    return ByteEvidence.new(bytes(values))


def _stream_continues(stream: BinaryIO) -> bool:
    peek = getattr(stream, "peek", None)
    if peek is not None:
        return bool(peek(1))
    return bool(stream.read(1))


def from_stream(
    stream: BinaryIO,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    limit: int | None = None,
) -> ByteEvidence:
    """
    Salvage a binary stream chunk by chunk.

    ``limit`` caps the number of bytes read; the decoder itself imposes none.
    When the cap is hit, a warning is logged only if the stream still has data.
    Streams with ``peek`` are checked without consuming anything; for others
    the check reads, and discards, one byte past the limit.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")

    evidence = ByteEvidence.empty()
    remaining = limit
    while remaining is None or remaining > 0:
        size = chunk_size if remaining is None else min(chunk_size, remaining)
        chunk = stream.read(size)
        if not chunk:
            break
        evidence.extend(chunk)
        if remaining is not None:
            remaining -= len(chunk)
    else:
        if _stream_continues(stream):
            logger.warning("stopped reading after %d bytes (limit reached, stream continues)", limit)
    evidence.finish()
    return evidence


def to_text(evidence: ByteEvidence) -> str:
    return evidence.unchecked_safe()


def to_path(evidence: ByteEvidence) -> Path:
    return Path(evidence.unchecked_safe())


def to_fs_bytes(evidence: ByteEvidence) -> bytes:
    return os.fsencode(evidence.unchecked_safe())


__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "SourceKind",
    "from_byte_values",
    "from_chunks",
    "from_source",
    "from_stream",
    "source_bytes",
    "source_kind",
    "to_fs_bytes",
    "to_path",
    "to_text",
]
