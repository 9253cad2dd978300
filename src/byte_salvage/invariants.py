from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Iterable, Mapping, Optional, Protocol, Sequence

from byte_salvage.contracts import GarbageSpan, RecoveredRun
from byte_salvage.hexcodec import to_hex

if TYPE_CHECKING:
    from byte_salvage.decoder import ByteEvidence


class InvariantId(str, Enum):
    BYTE_PARTITION = "byte_partition.v1"
    SAFE_BYTES_UTF8 = "safe_bytes_utf8.v1"
    SPAN_GARBAGE_COVERAGE = "span_garbage_coverage.v1"
    VERDICT_AGREEMENT = "verdict_agreement.v1"


class Flow(str, Enum):
    CONTINUE = "continue"
    STOP = "stop"


class Validity(str, Enum):
    VALID = "valid"
    DEGRADED = "degraded"
    INVALID = "invalid"


@dataclass(frozen=True)
class InvariantOutcome:
    invariant_id: InvariantId
    passed: bool
    reason: str
    flow: Flow
    validity: Validity
    code: str
    evidence: Sequence[Mapping[str, Any]] = field(default_factory=tuple)
    details: Mapping[str, Any] = field(default_factory=dict)


class CheckContext(Protocol):
    ingested: bytes
    safe: bytes
    garbage: bytes
    pending: bytes
    spans: Sequence[GarbageSpan]
    recovered: Sequence[RecoveredRun]


@dataclass(frozen=True)
class EvidenceCheckContext:
    ingested: bytes
    safe: bytes
    garbage: bytes
    pending: bytes = b""
    spans: Sequence[GarbageSpan] = field(default_factory=tuple)
    recovered: Sequence[RecoveredRun] = field(default_factory=tuple)


Checker = Callable[[CheckContext], InvariantOutcome]


def _ok(invariant_id: InvariantId, code: str, details: Optional[Mapping[str, Any]] = None) -> InvariantOutcome:
    detail_map = dict(details or {})
    reason = str(detail_map.get("message") or code)
    return InvariantOutcome(
        invariant_id=invariant_id,
        passed=True,
        reason=reason,
        flow=Flow.CONTINUE,
        validity=Validity.VALID,
        code=code,
        details=detail_map,
    )


def _is_utf8(data: bytes) -> bool:
    try:
        data.decode("utf-8")
    except UnicodeDecodeError:
        return False
    return True


def check_byte_partition(ctx: CheckContext) -> InvariantOutcome:
    # recovered text stands in for its raw bytes inside `safe`
    recovery_delta = sum(len(run.raw) - len(run.text_bytes) for run in ctx.recovered)
    accounted = len(ctx.safe) + len(ctx.garbage) + len(ctx.pending) + recovery_delta
    details = {
        "ingested": len(ctx.ingested),
        "safe": len(ctx.safe),
        "garbage": len(ctx.garbage),
        "pending": len(ctx.pending),
        "recovery_delta": recovery_delta,
    }
    if accounted == len(ctx.ingested):
        return _ok(InvariantId.BYTE_PARTITION, "bytes_partitioned", details)

    return InvariantOutcome(
        invariant_id=InvariantId.BYTE_PARTITION,
        passed=False,
        reason="Ingested bytes are not fully accounted for by safe, garbage and pending bytes.",
        flow=Flow.STOP,
        validity=Validity.INVALID,
        code="bytes_unaccounted",
        evidence=({"kind": "ingested", "value": to_hex(ctx.ingested)},),
        details={"message": "Ingested bytes are not fully accounted for.", **details},
    )


def check_safe_bytes_utf8(ctx: CheckContext) -> InvariantOutcome:
    if _is_utf8(ctx.safe):
        return _ok(InvariantId.SAFE_BYTES_UTF8, "safe_bytes_valid")

    return InvariantOutcome(
        invariant_id=InvariantId.SAFE_BYTES_UTF8,
        passed=False,
        reason="Safe bytes failed UTF-8 validation.",
        flow=Flow.STOP,
        validity=Validity.INVALID,
        code="safe_bytes_corrupted",
        evidence=({"kind": "safe", "value": to_hex(ctx.safe)},),
        details={"message": "Safe bytes failed UTF-8 validation."},
    )


def check_span_garbage_coverage(ctx: CheckContext) -> InvariantOutcome:
    # spans are most-recent-first; garbage is in input order
    span_bytes = b"".join(span.raw for span in reversed(list(ctx.spans)))
    if span_bytes == ctx.garbage:
        return _ok(InvariantId.SPAN_GARBAGE_COVERAGE, "spans_cover_garbage", {"spans": len(ctx.spans)})

    return InvariantOutcome(
        invariant_id=InvariantId.SPAN_GARBAGE_COVERAGE,
        passed=False,
        reason="Recorded spans do not reproduce the garbage bytes.",
        flow=Flow.STOP,
        validity=Validity.INVALID,
        code="span_garbage_mismatch",
        evidence=(
            {"kind": "garbage", "value": to_hex(ctx.garbage)},
            {"kind": "spans", "value": to_hex(span_bytes)},
        ),
        details={"message": "Recorded spans do not reproduce the garbage bytes."},
    )


def check_verdict_agreement(ctx: CheckContext) -> InvariantOutcome:
    whole_valid = _is_utf8(ctx.ingested)
    bookkeeping_clean = not ctx.garbage and not ctx.pending and not ctx.recovered
    details = {"whole_buffer_valid": whole_valid, "bookkeeping_clean": bookkeeping_clean}
    if whole_valid == bookkeeping_clean:
        return _ok(InvariantId.VERDICT_AGREEMENT, "verdict_agrees", details)

    return InvariantOutcome(
        invariant_id=InvariantId.VERDICT_AGREEMENT,
        passed=False,
        reason="Whole-buffer validation disagrees with incremental bookkeeping.",
        flow=Flow.CONTINUE,
        validity=Validity.DEGRADED,
        code="verdict_bookkeeping_divergence",
        evidence=(
            {"kind": "garbage", "value": to_hex(ctx.garbage)},
            {"kind": "pending", "value": to_hex(ctx.pending)},
        ),
        details={"message": "Whole-buffer validation disagrees with incremental bookkeeping.", **details},
    )


REGISTRY: dict[InvariantId, Checker] = {
    InvariantId.BYTE_PARTITION: check_byte_partition,
    InvariantId.SAFE_BYTES_UTF8: check_safe_bytes_utf8,
    InvariantId.SPAN_GARBAGE_COVERAGE: check_span_garbage_coverage,
    InvariantId.VERDICT_AGREEMENT: check_verdict_agreement,
}


def default_check_context(evidence: ByteEvidence) -> EvidenceCheckContext:
    return EvidenceCheckContext(
        ingested=evidence.ingested,
        safe=evidence.safe_bytes,
        garbage=evidence.garbage,
        pending=evidence.pending,
        spans=evidence.garbage_spans,
        recovered=evidence.recovered,
    )


def run_checkers(
    ctx: CheckContext,
    invariant_ids: Optional[Iterable[InvariantId]] = None,
) -> list[InvariantOutcome]:
    selected = tuple(invariant_ids) if invariant_ids is not None else tuple(REGISTRY)
    return [REGISTRY[invariant_id](ctx) for invariant_id in selected]
