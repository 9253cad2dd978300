# byte_salvage/verdict.py
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from byte_salvage.contracts import EvidenceReport, VerdictStatus
from byte_salvage.errors import EvidenceCorruptionError, InvalidUtf8Error, UnsafeStringError, VerdictError
from byte_salvage.hexcodec import to_hex
from byte_salvage.stable_ids import derive_evidence_id

if TYPE_CHECKING:
    from byte_salvage.decoder import ByteEvidence

logger = logging.getLogger(__name__)


def verdict(evidence: ByteEvidence) -> str:
    """
    Strict conversion: the whole ingested buffer as text, or a VerdictError.

    The ingested bytes are re-validated as one unit, independently of what the
    incremental scan recorded. When the two disagree (the buffer is invalid yet
    nothing was set aside as garbage) the result is ``InvalidUtf8Error`` with
    every evidence sequence attached.
    """
    ingested = evidence.ingested
    try:
        return ingested.decode("utf-8")
    except UnicodeDecodeError as exc:
        if evidence.has_garbage:
            raise UnsafeStringError(evidence.safe_bytes, evidence.garbage) from exc
        logger.warning(
            "whole-buffer validation failed at byte %d but no garbage was recorded "
            "(pending=%s, recovered runs=%d)",
            exc.start,
            to_hex(evidence.pending),
            len(evidence.recovered),
        )
        raise InvalidUtf8Error(
            exc,
            evidence.garbage,
            evidence.spans,
            ingested,
            evidence.safe_bytes,
        ) from exc


def best_effort(evidence: ByteEvidence) -> str:
    """Every salvaged valid run, concatenated. Never fails on any input."""
    try:
        return evidence.safe_bytes.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise EvidenceCorruptionError(
            f"safe bytes are not valid UTF-8 at byte {exc.start}: {to_hex(evidence.safe_bytes)}"
        ) from exc


def classify_verdict(evidence: ByteEvidence) -> VerdictStatus:
    try:
        verdict(evidence)
    except UnsafeStringError:
        return VerdictStatus.UNSAFE_STRING
    except InvalidUtf8Error:
        return VerdictStatus.INVALID_UTF8
    return VerdictStatus.SAFE


def summarize(evidence: ByteEvidence) -> EvidenceReport:
    """Freeze the evidence into a persistable forensic report."""
    status = VerdictStatus.SAFE
    message: str | None = None
    try:
        verdict(evidence)
    except VerdictError as exc:
        status = VerdictStatus.UNSAFE_STRING if isinstance(exc, UnsafeStringError) else VerdictStatus.INVALID_UTF8
        message = str(exc)

    spans = evidence.garbage_spans
    return EvidenceReport(
        evidence_id=derive_evidence_id(
            ingested=evidence.ingested,
            safe=evidence.safe_bytes,
            garbage=evidence.garbage,
            spans=[(span.base, span.start, span.end) for span in spans],
        ),
        verdict=status,
        message=message,
        safe_text=best_effort(evidence),
        ingested_hex=to_hex(evidence.ingested),
        safe_hex=to_hex(evidence.safe_bytes),
        garbage_hex=to_hex(evidence.garbage),
        pending_hex=to_hex(evidence.pending),
        spans=list(spans),
        recovered=list(evidence.recovered),
        invariant_checks=[
            {
                "invariant_id": outcome.invariant_id.value,
                "passed": outcome.passed,
                "validity": outcome.validity.value,
                "code": outcome.code,
            }
            for outcome in evidence.audit()
        ],
    )


__all__ = ["best_effort", "classify_verdict", "summarize", "verdict"]
