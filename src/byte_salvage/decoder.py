# byte_salvage/decoder.py
"""
Incremental UTF-8 salvage decoding.

``ByteEvidence`` walks untrusted bytes once, keeping every maximal valid UTF-8
run as safe text and every invalid run as garbage with its exact offsets. Bytes
are never repaired, reordered or dropped: whatever is not safe is either
garbage, a tail still waiting for the rest of its character, or a run a
recovery hook explicitly replaced (and that run is kept too).
"""
from __future__ import annotations

import codecs
import logging
from collections import deque
from typing import TYPE_CHECKING, Iterator, Protocol

from byte_salvage.contracts import GarbageSpan, RecoveredRun
from byte_salvage.hexcodec import to_hex

if TYPE_CHECKING:
    from byte_salvage.contracts import EvidenceReport, VerdictStatus
    from byte_salvage.invariants import InvariantOutcome

logger = logging.getLogger(__name__)

# Largest slice handed to the codec per call. Bounds the copy CPython makes into
# each UnicodeDecodeError, which keeps all-garbage input linear.
SCAN_BLOCK_BYTES = 4 * 1024


class RecoveryHook(Protocol):
    """
    Offered the unconsumed bytes (valid prefix included) and the codec error.

    Return substitute text to replace those bytes, or ``None`` (or re-raise the
    error) to let them be recorded as garbage.
    """

    def __call__(self, remaining: bytes, error: UnicodeDecodeError) -> str | None: ...


def _valid_run(view: memoryview, pos: int, final: bool) -> tuple[int, UnicodeDecodeError | None]:
    """
    Find where the valid UTF-8 run starting at ``pos`` ends.

    Returns ``(end, fault)``. ``fault`` is the codec error with offsets relative
    to ``end`` (``fault.end - fault.start`` is the invalid run length), or
    ``None`` when the run reaches the end of the view or, for a non-final view,
    stops at a truncated trailing sequence.
    """
    stop_at = len(view)
    while pos < stop_at:
        stop = min(pos + SCAN_BLOCK_BYTES, stop_at)
        last_block = stop == stop_at
        try:
            _, consumed = codecs.utf_8_decode(view[pos:stop], "strict", final and last_block)
        except UnicodeDecodeError as exc:
            return pos + exc.start, exc
        pos += consumed
        if last_block or consumed == 0:
            break
    return pos, None


class ByteEvidence:
    """
    Accumulated salvage state for one byte stream.

    Build it with ``ByteEvidence.new(raw)`` for a complete buffer, or start
    empty and call ``extend`` per chunk followed by ``finish``.
    """

    def __init__(self) -> None:
        self._ingested = bytearray()
        self._safe = bytearray()
        self._garbage = bytearray()
        self._spans: deque[GarbageSpan] = deque()
        self._recovered: list[RecoveredRun] = []
        self._pending = bytearray()
        self._pending_base = 0

    # ------------------------------------------------------------------
    # construction
    # ------------------------------------------------------------------

    @classmethod
    def empty(cls) -> ByteEvidence:
        return cls()

    @classmethod
    def new(cls, raw: bytes | bytearray | memoryview, on_utf8_error: RecoveryHook | None = None) -> ByteEvidence:
        evidence = cls()
        evidence.extend(raw, on_utf8_error, final=True)
        return evidence

    def copy(self) -> ByteEvidence:
        twin = type(self)()
        twin._ingested = bytearray(self._ingested)
        twin._safe = bytearray(self._safe)
        twin._garbage = bytearray(self._garbage)
        twin._spans = deque(self._spans)
        twin._recovered = list(self._recovered)
        twin._pending = bytearray(self._pending)
        twin._pending_base = self._pending_base
        return twin

    # ------------------------------------------------------------------
    # mutation
    # ------------------------------------------------------------------

    def extend(
        self,
        chunk: bytes | bytearray | memoryview,
        on_utf8_error: RecoveryHook | None = None,
        *,
        final: bool = False,
    ) -> None:
        """
        Scan ``chunk`` and fold it into the evidence.

        A multi-byte sequence cut off at the end of a non-final chunk is held in
        ``pending`` and retried with the next chunk. With ``final=True`` such a
        tail is recorded as garbage instead.
        """
        data = bytes(chunk)
        if self._pending:
            base = self._pending_base
            window = bytes(self._pending) + data
            self._pending.clear()
        else:
            base = len(self._ingested)
            window = data
        self._ingested += data
        if window:
            self._scan(window, base, on_utf8_error, final)

    def finish(self, on_utf8_error: RecoveryHook | None = None) -> None:
        """Flush a carried tail; no more bytes will complete it."""
        self.extend(b"", on_utf8_error, final=True)

    def append(self, byte: int, on_utf8_error: RecoveryHook | None = None) -> None:
        self.extend(bytes((byte,)), on_utf8_error)

    def push(self, byte: int) -> None:
        self.append(byte)

    def _scan(self, window: bytes, base: int, on_utf8_error: RecoveryHook | None, final: bool) -> None:
        view = memoryview(window)
        pos = 0
        while pos < len(view):
            valid_end, fault = _valid_run(view, pos, final)

            if fault is not None:
                run_end = valid_end + (fault.end - fault.start)
                if on_utf8_error is not None:
                    remaining = bytes(view[pos:])
                    error = UnicodeDecodeError(
                        "utf-8", remaining, valid_end - pos, run_end - pos, fault.reason
                    )
                    text = _offer(on_utf8_error, remaining, error)
                    if text is not None:
                        self._safe += text.encode("utf-8")
                        self._recovered.append(
                            RecoveredRun(start=pos, end=len(view), base=base, raw_hex=to_hex(remaining), text=text)
                        )
                        return

            self._safe += view[pos:valid_end]

            if fault is None:
                if valid_end < len(view):
                    self._pending = bytearray(view[valid_end:])
                    self._pending_base = base + valid_end
                    logger.debug(
                        "holding truncated tail %s at offset %d for the next chunk",
                        to_hex(self._pending),
                        self._pending_base,
                    )
                return

            self._record_garbage(view, base, valid_end, run_end, fault.reason)
            pos = run_end

    def _record_garbage(self, view: memoryview, base: int, start: int, end: int, reason: str) -> None:
        raw = bytes(view[start:end])
        self._spans.appendleft(GarbageSpan.from_run(start=start, end=end, base=base, raw=raw))
        self._garbage += raw
        logger.debug("garbage %s at %d-%d (base %d): %s", to_hex(raw), start, end, base, reason)

    # ------------------------------------------------------------------
    # accessors
    # ------------------------------------------------------------------

    @property
    def ingested(self) -> bytes:
        return bytes(self._ingested)

    @property
    def safe_bytes(self) -> bytes:
        return bytes(self._safe)

    @property
    def garbage(self) -> bytes:
        return bytes(self._garbage)

    @property
    def pending(self) -> bytes:
        return bytes(self._pending)

    @property
    def spans(self) -> tuple[tuple[int, int], ...]:
        """Half-open ``(start, end)`` of each invalid run, most recent first."""
        return tuple(span.as_tuple() for span in self._spans)

    @property
    def garbage_spans(self) -> tuple[GarbageSpan, ...]:
        return tuple(self._spans)

    @property
    def recovered(self) -> tuple[RecoveredRun, ...]:
        return tuple(self._recovered)

    @property
    def has_garbage(self) -> bool:
        return bool(self._garbage)

    @property
    def garbage_len(self) -> int:
        return len(self._garbage)

    @property
    def safe_len(self) -> int:
        return len(self._safe)

    def __len__(self) -> int:
        return len(self._ingested)

    def iter_garbage_runs(self) -> Iterator[bytes]:
        """Garbage runs in input order."""
        for span in reversed(self._spans):
            yield span.raw

    # ------------------------------------------------------------------
    # verdicts
    # ------------------------------------------------------------------

    def safe(self) -> str:
        from byte_salvage.verdict import verdict

        return verdict(self)

    def unchecked_safe(self) -> str:
        from byte_salvage.verdict import best_effort

        return best_effort(self)

    def status(self) -> VerdictStatus:
        from byte_salvage.verdict import classify_verdict

        return classify_verdict(self)

    def report(self) -> EvidenceReport:
        from byte_salvage.verdict import summarize

        return summarize(self)

    def audit(self) -> list[InvariantOutcome]:
        from byte_salvage.invariants import default_check_context, run_checkers

        return run_checkers(default_check_context(self))

    def __str__(self) -> str:
        return self.unchecked_safe()

    def __repr__(self) -> str:
        return (
            f"ByteEvidence(ingested={len(self._ingested)}, safe={len(self._safe)}, "
            f"garbage={len(self._garbage)}, spans={len(self._spans)}, pending={len(self._pending)})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ByteEvidence):
            return NotImplemented
        return (
            self._ingested == other._ingested
            and self._safe == other._safe
            and self._garbage == other._garbage
            and list(self._spans) == list(other._spans)
            and self._recovered == other._recovered
            and self._pending == other._pending
        )

    __hash__ = None  # type: ignore[assignment]


def _offer(hook: RecoveryHook, remaining: bytes, error: UnicodeDecodeError) -> str | None:
    try:
        text = hook(remaining, error)
    except UnicodeDecodeError:
        return None
    if text is None:
        return None
    if not isinstance(text, str):
        raise TypeError(f"recovery hook must return str or None, got {type(text).__name__}")
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        logger.warning("recovery hook returned text that is not UTF-8 encodable; keeping bytes as garbage")
        return None
    return text


__all__ = ["SCAN_BLOCK_BYTES", "ByteEvidence", "RecoveryHook"]
